from deferref.collaborator import Collaborator
from deferref.exceptions import (
    DeferRefAsyncCollaboratorInSyncContextError,
    DeferRefBootstrapError,
    DeferRefCircularResolutionError,
    DeferRefCollaboratorUnavailableError,
    DeferRefError,
    DeferRefInvalidBindingError,
    DeferRefInvalidValueError,
    DeferRefSerializationError,
    DeferRefUnboundLocatorKeyError,
    DeferRefUpstreamComputationFailedError,
)
from deferref.locator import (
    CallableLocator,
    CollaboratorLocator,
    LocatorContext,
    RegistryLocator,
    locator_context,
)
from deferref.registry import CollaboratorRegistry, registry
from deferref.value import UNRESOLVED, DeferredValue

__all__ = [
    "UNRESOLVED",
    "CallableLocator",
    "Collaborator",
    "CollaboratorLocator",
    "CollaboratorRegistry",
    "DeferRefAsyncCollaboratorInSyncContextError",
    "DeferRefBootstrapError",
    "DeferRefCircularResolutionError",
    "DeferRefCollaboratorUnavailableError",
    "DeferRefError",
    "DeferRefInvalidBindingError",
    "DeferRefInvalidValueError",
    "DeferRefSerializationError",
    "DeferRefUnboundLocatorKeyError",
    "DeferRefUpstreamComputationFailedError",
    "DeferredValue",
    "LocatorContext",
    "RegistryLocator",
    "locator_context",
    "registry",
]

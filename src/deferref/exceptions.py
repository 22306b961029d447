from __future__ import annotations

from typing import Any


class DeferRefError(Exception):
    """Represent a base class for all deferref-specific failures.

    Catch this type when you want to handle any deferref error path without
    matching each concrete exception class individually.
    """


class DeferRefInvalidValueError(DeferRefError):
    """Signal an invalid ``DeferredValue`` construction.

    Raised when a value is built with a ``locator_key`` that is not a
    non-empty string.

    Typical fix is passing the name of a registered binding, for example
    ``User(id=1, name="ann", locator_key="photos")``.
    """


class DeferRefInvalidBindingError(DeferRefError):
    """Signal invalid arguments to a registry binding operation.

    Raised by ``CollaboratorRegistry.bind`` and ``CollaboratorRegistry.swap``
    when the locator key is empty or not a string, or when the collaborator is
    ``None``. Use ``unbind`` to remove a binding instead of binding ``None``.
    """


class DeferRefCollaboratorUnavailableError(DeferRefError):
    """Signal that no collaborator could be obtained for a deferred value.

    Raised by ``DeferredValue.resolve``/``aresolve`` when the active locator
    returns ``None`` for the value's ``locator_key``. Catch this type to handle
    every "collaborator missing" path, including the registry's
    ``DeferRefUnboundLocatorKeyError``. Nothing is cached on the value.
    """

    def __init__(self, locator_key: Any, message: str | None = None) -> None:
        self.locator_key = locator_key
        super().__init__(
            message or f"Locator returned no collaborator for locator key {locator_key!r}.",
        )


class DeferRefUnboundLocatorKeyError(DeferRefCollaboratorUnavailableError):
    """Signal that a locator key has no collaborator bound.

    Raised by ``CollaboratorRegistry.get`` and surfaced unchanged by
    ``DeferredValue.resolve``/``aresolve``. Nothing is cached on the value, so
    the intended recovery is binding the key and calling again.

    Typical fix is calling ``registry.bind(key, collaborator)`` during
    application startup, or running ``bootstrap_registry()``.
    """

    def __init__(self, locator_key: Any) -> None:
        super().__init__(
            locator_key,
            f"No collaborator is bound for locator key {locator_key!r}. "
            f"Call registry.bind({locator_key!r}, collaborator) before resolving.",
        )


class DeferRefUpstreamComputationFailedError(DeferRefError):
    """Signal that a collaborator failed while computing a deferred field.

    The original exception is kept as ``error`` and as ``__cause__``. The
    value stays unresolved, so a later call retries the computation.
    """

    def __init__(self, *, locator_key: str, identity: Any, error: BaseException) -> None:
        self.locator_key = locator_key
        self.identity = identity
        self.error = error
        super().__init__(
            f"Collaborator bound to {locator_key!r} failed for identity {identity!r}: "
            f"{type(error).__name__}: {error}",
        )


class DeferRefAsyncCollaboratorInSyncContextError(DeferRefError):
    """Signal sync resolution against a collaborator that returned an awaitable.

    Raised by ``DeferredValue.resolve`` when the computation is asynchronous.
    The awaitable is closed and nothing is cached.

    Typical fix is switching to ``await value.aresolve()``.
    """


class DeferRefCircularResolutionError(DeferRefError):
    """Signal that a value was resolved again from inside its own computation.

    Waiting for the in-flight computation from the thread that runs it would
    never finish, so this error is raised instead.
    """


class DeferRefBootstrapError(DeferRefError):
    """Signal that a configured binding target cannot be loaded.

    Raised by ``bootstrap_registry`` for malformed ``"module:attribute"`` paths,
    missing modules or attributes, and failing collaborator factories.
    """


class DeferRefSerializationError(DeferRefError):
    """Signal that a value would not survive a JSON round trip unchanged.

    Raised by ``dumps`` and ``to_payload`` when loading the produced data back
    gives a value unequal to the original. The usual cause is a field typed
    ``Any`` holding a non-JSON type, such as a tuple ``id`` that would come
    back as a list.

    Typical fix is re-annotating the field on the subclass, for example
    ``id: tuple[int, str]``, so validation restores the declared type.
    """

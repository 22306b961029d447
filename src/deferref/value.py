from __future__ import annotations

import dataclasses
import inspect
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, ClassVar, Final, Self

from deferref._internal.single_flight import SingleFlight
from deferref.exceptions import (
    DeferRefAsyncCollaboratorInSyncContextError,
    DeferRefCollaboratorUnavailableError,
    DeferRefInvalidValueError,
    DeferRefUpstreamComputationFailedError,
)
from deferref.locator import CollaboratorLocator, locator_context


class _Unresolved(Enum):
    UNRESOLVED = "unresolved"

    def __repr__(self) -> str:
        return "UNRESOLVED"


UNRESOLVED: Final = _Unresolved.UNRESOLVED
"""Marker stored in ``deferred_field`` until the collaborator result is cached."""

_RESERVED_FIELDS: Final = frozenset({"id", "locator_key", "deferred_field"})

_flights = SingleFlight()


@dataclass(frozen=True, slots=True, kw_only=True)
class DeferredValue:
    """Immutable record with one lazily computed, cached field.

    The value stores the *name* of a collaborator binding (``locator_key``),
    never the collaborator itself. ``resolve`` looks the collaborator up
    through the active locator the first time it is called and caches the
    result on the instance. Because nothing else lives on the instance, pickle
    and the JSON codec in ``deferref.serialization`` handle it without hooks,
    and a deserialized value resolves again through whatever is bound at that
    point.

    ``id`` is typed ``Any``. A composite identity such as a tuple needs
    ``id`` re-annotated on the subclass (``id: tuple[int, str]``) to
    round-trip through ``dumps``/``loads``; otherwise ``dumps`` raises
    ``DeferRefSerializationError``. Deferred results go through JSON as-is
    and must be JSON-native there.

    Subclass it with another frozen keyword-only dataclass to add primary data:

    Examples:
        .. code-block:: python

            @dataclass(frozen=True, slots=True, kw_only=True)
            class User(DeferredValue):
                name: str


            registry.bind("photos", PhotoService())
            user = User(id=1, name="ann", locator_key="photos")
            photo = user.resolve()

    """

    id: Any
    locator_key: str
    deferred_field: Any = field(default=UNRESOLVED, hash=False)

    collaborator_method: ClassVar[str] = "compute"
    """Name of the collaborator method that ``request`` calls with ``id``."""

    def __post_init__(self) -> None:
        if not isinstance(self.locator_key, str) or not self.locator_key:
            msg = f"locator_key must be a non-empty string, got {self.locator_key!r}."
            raise DeferRefInvalidValueError(msg)

    @property
    def is_resolved(self) -> bool:
        return self.deferred_field is not UNRESOLVED

    def primary_data(self) -> dict[str, Any]:
        """Return the fields declared by subclasses, keyed by name."""
        return {
            value_field.name: getattr(self, value_field.name)
            for value_field in dataclasses.fields(self)
            if value_field.name not in _RESERVED_FIELDS
        }

    def with_deferred(self, result: Any) -> Self:
        """Return a copy whose deferred field is already resolved to ``result``.

        Use it when hydrating from a cache that stored the computed result
        next to the record.
        """
        return dataclasses.replace(self, deferred_field=result)

    def request(self, collaborator: Any) -> Any:
        """Ask ``collaborator`` for this value's deferred result.

        Override to call something other than ``collaborator.compute(self.id)``;
        the return value may be an awaitable when resolved with ``aresolve``.
        """
        return getattr(collaborator, self.collaborator_method)(self.id)

    def resolve(self, locator: CollaboratorLocator | None = None) -> Any:
        """Return the deferred field, computing and caching it on first use.

        Args:
            locator: Locator to use instead of ``locator_context.get_current()``.

        Returns:
            The cached or freshly computed result.

        Raises:
            DeferRefCollaboratorUnavailableError: If the locator has no
                collaborator for ``locator_key``; the registry raises the
                ``DeferRefUnboundLocatorKeyError`` subclass.
            DeferRefUpstreamComputationFailedError: If the collaborator raised.
            DeferRefAsyncCollaboratorInSyncContextError: If the collaborator
                returned an awaitable.
            DeferRefCircularResolutionError: If called again from inside its
                own computation.

        Notes:
            Concurrent callers on the same instance share a single upstream
            call. Failures leave the value unresolved, so a later call retries.

        """
        if self.deferred_field is not UNRESOLVED:
            return self.deferred_field
        return _flights.run(self, lambda: self._compute_sync(locator))

    async def aresolve(self, locator: CollaboratorLocator | None = None) -> Any:
        """Async variant of ``resolve`` that awaits awaitable collaborator results.

        Args:
            locator: Locator to use instead of ``locator_context.get_current()``.

        Returns:
            The cached or freshly computed result.

        """
        if self.deferred_field is not UNRESOLVED:
            return self.deferred_field
        active_locator = locator if locator is not None else locator_context.get_current()
        return await _flights.arun(self, lambda: self._compute_async(active_locator))

    def _locate(self, locator: CollaboratorLocator) -> Any:
        collaborator = locator.resolve(self.locator_key)
        if collaborator is None:
            raise DeferRefCollaboratorUnavailableError(self.locator_key)
        return collaborator

    def _compute_sync(self, locator: CollaboratorLocator | None) -> Any:
        if self.deferred_field is not UNRESOLVED:
            return self.deferred_field

        active_locator = locator if locator is not None else locator_context.get_current()
        collaborator = self._locate(active_locator)
        try:
            result = self.request(collaborator)
        except Exception as error:
            raise DeferRefUpstreamComputationFailedError(
                locator_key=self.locator_key,
                identity=self.id,
                error=error,
            ) from error

        if inspect.isawaitable(result):
            close = getattr(result, "close", None)
            if close is not None:
                close()
            msg = (
                f"Collaborator bound to {self.locator_key!r} returned an awaitable; "
                "use 'await value.aresolve()' instead."
            )
            raise DeferRefAsyncCollaboratorInSyncContextError(msg)

        object.__setattr__(self, "deferred_field", result)
        return result

    async def _compute_async(self, locator: CollaboratorLocator) -> Any:
        if self.deferred_field is not UNRESOLVED:
            return self.deferred_field

        collaborator = self._locate(locator)
        try:
            result = self.request(collaborator)
            if inspect.isawaitable(result):
                result = await result
        except Exception as error:
            raise DeferRefUpstreamComputationFailedError(
                locator_key=self.locator_key,
                identity=self.id,
                error=error,
            ) from error

        object.__setattr__(self, "deferred_field", result)
        return result

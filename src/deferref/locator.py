from __future__ import annotations

from collections.abc import Callable, Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Any, Protocol, runtime_checkable

from deferref.registry import CollaboratorRegistry, registry


@runtime_checkable
class CollaboratorLocator(Protocol):
    """Protocol for resolving a locator key to the current collaborator."""

    def resolve(self, locator_key: str) -> Any:
        """Return the collaborator for ``locator_key``.

        Args:
            locator_key: Key stored on the deferred value.

        """


class RegistryLocator:
    """Locator backed by a ``CollaboratorRegistry``."""

    __slots__ = ("_registry",)

    def __init__(self, registry: CollaboratorRegistry) -> None:
        self._registry = registry

    @property
    def registry(self) -> CollaboratorRegistry:
        return self._registry

    def resolve(self, locator_key: str) -> Any:
        return self._registry.get(locator_key)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._registry!r})"


class CallableLocator:
    """Adapt a plain ``func(locator_key) -> collaborator`` into a locator.

    Handy for tests that want to hand out a double for one key without
    building a registry.
    """

    __slots__ = ("_func",)

    def __init__(self, func: Callable[[str], Any]) -> None:
        self._func = func

    def resolve(self, locator_key: str) -> Any:
        return self._func(locator_key)


class LocatorContext:
    """Task/thread-local selection of the active locator.

    ``use`` binds a locator for the current context (thread or asyncio task)
    and restores the previous one on exit. When nothing is bound,
    ``get_current`` returns the fallback locator, which for the module-level
    ``locator_context`` resolves through the process-wide ``registry``.
    """

    __slots__ = ("_current_locator_var", "_fallback")

    def __init__(self, fallback: CollaboratorLocator | None = None) -> None:
        self._current_locator_var: ContextVar[CollaboratorLocator | None] = ContextVar(
            "deferref_locator_context_locator",
            default=None,
        )
        self._fallback: CollaboratorLocator = (
            fallback if fallback is not None else RegistryLocator(registry)
        )

    def get_current(self) -> CollaboratorLocator:
        """Return the context-bound locator, or the fallback when none is bound."""
        bound = self._current_locator_var.get()
        if bound is not None:
            return bound
        return self._fallback

    def set_fallback(self, locator: CollaboratorLocator) -> None:
        """Replace the process-wide fallback locator.

        Context-bound locators always take precedence over this fallback.
        """
        self._fallback = locator

    @contextmanager
    def use(
        self,
        locator: CollaboratorLocator | CollaboratorRegistry,
    ) -> Iterator[CollaboratorLocator]:
        """Bind ``locator`` for the current context.

        A ``CollaboratorRegistry`` is accepted as a shortcut and wrapped in a
        ``RegistryLocator``.

        Examples:
            .. code-block:: python

                test_registry = CollaboratorRegistry({"photos": FakePhotos()})
                with locator_context.use(test_registry):
                    assert user.resolve() == "PHOTO_X"

        """
        if isinstance(locator, CollaboratorRegistry):
            locator = RegistryLocator(locator)
        token = self._current_locator_var.set(locator)
        try:
            yield locator
        finally:
            self._current_locator_var.reset(token)


locator_context = LocatorContext()
"""Default locator context used by ``DeferredValue.resolve``."""

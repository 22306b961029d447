from __future__ import annotations

import logging
import threading
from collections.abc import Iterator, KeysView, Mapping
from contextlib import contextmanager
from types import MappingProxyType
from typing import Any

from deferref.exceptions import DeferRefInvalidBindingError, DeferRefUnboundLocatorKeyError

logger = logging.getLogger(__name__)


class CollaboratorRegistry:
    """Map locator keys to live collaborator instances.

    Reads go through an immutable snapshot that is replaced on every write, so
    ``get`` never takes a lock and never observes a half-applied update. Writes
    are serialized with a ``threading.Lock``.

    The module-level ``registry`` instance is process-global. Tests that need
    isolation either create their own registry and bind it as the active
    locator with ``locator_context.use``, or use ``swap`` to bind temporarily
    and restore the previous binding on exit.
    """

    __slots__ = ("_bindings", "_write_lock")

    def __init__(self, bindings: Mapping[str, Any] | None = None) -> None:
        self._write_lock = threading.Lock()
        self._bindings: Mapping[str, Any] = MappingProxyType({})
        for locator_key, collaborator in (bindings or {}).items():
            self.bind(locator_key, collaborator)

    def bind(self, locator_key: str, collaborator: Any) -> Any | None:
        """Bind ``collaborator`` under ``locator_key``, replacing any previous binding.

        Args:
            locator_key: Name stored on deferred values.
            collaborator: Live collaborator instance.

        Returns:
            The previously bound collaborator, or ``None`` when the key was unbound.

        Raises:
            DeferRefInvalidBindingError: If the key is not a non-empty string or
                the collaborator is ``None``.

        """
        _validate_locator_key(locator_key)
        if collaborator is None:
            msg = f"Cannot bind None to {locator_key!r}; use unbind() to remove a binding."
            raise DeferRefInvalidBindingError(msg)

        with self._write_lock:
            previous = self._bindings.get(locator_key)
            updated = dict(self._bindings)
            updated[locator_key] = collaborator
            self._bindings = MappingProxyType(updated)

        logger.debug(
            "Bound %r to %s (replaced=%s)",
            locator_key,
            type(collaborator).__qualname__,
            previous is not None,
        )
        return previous

    def unbind(self, locator_key: str) -> Any | None:
        """Remove the binding for ``locator_key`` and return it, if any."""
        with self._write_lock:
            if locator_key not in self._bindings:
                return None
            updated = dict(self._bindings)
            previous = updated.pop(locator_key)
            self._bindings = MappingProxyType(updated)

        logger.debug("Unbound %r", locator_key)
        return previous

    def get(self, locator_key: str) -> Any:
        """Return the collaborator bound to ``locator_key``.

        Raises:
            DeferRefUnboundLocatorKeyError: If nothing is bound to the key.

        """
        try:
            return self._bindings[locator_key]
        except KeyError:
            raise DeferRefUnboundLocatorKeyError(locator_key) from None

    @contextmanager
    def swap(self, locator_key: str, collaborator: Any) -> Iterator[Any]:
        """Bind ``collaborator`` for the duration of a ``with`` block.

        The previous binding is restored on exit, including when the block
        raises. If the key was unbound before, it is unbound again.

        Examples:
            .. code-block:: python

                with registry.swap("photos", FakePhotos()) as fake:
                    assert user.resolve() == fake.photo

        """
        previous = self.bind(locator_key, collaborator)
        try:
            yield collaborator
        finally:
            if previous is None:
                self.unbind(locator_key)
            else:
                self.bind(locator_key, previous)
            logger.debug("Restored binding for %r after swap", locator_key)

    def snapshot(self) -> Mapping[str, Any]:
        """Return a read-only view of the bindings at this moment."""
        return self._bindings

    def keys(self) -> KeysView[str]:
        return self._bindings.keys()

    def clear(self) -> None:
        with self._write_lock:
            self._bindings = MappingProxyType({})
        logger.debug("Cleared all bindings")

    def __contains__(self, locator_key: object) -> bool:
        return locator_key in self._bindings

    def __len__(self) -> int:
        return len(self._bindings)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(keys={sorted(self._bindings)!r})"


def _validate_locator_key(locator_key: object) -> None:
    if not isinstance(locator_key, str) or not locator_key:
        msg = f"Locator key must be a non-empty string, got {locator_key!r}."
        raise DeferRefInvalidBindingError(msg)


registry = CollaboratorRegistry()
"""Process-wide registry used by the default locator.

Examples:
    .. code-block:: python

        registry.bind("photos", PhotoService())
"""

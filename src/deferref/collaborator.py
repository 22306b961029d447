from __future__ import annotations

from collections.abc import Awaitable
from typing import Any, Protocol, TypeVar, runtime_checkable

T_co = TypeVar("T_co", covariant=True)


@runtime_checkable
class Collaborator(Protocol[T_co]):
    """Protocol for the external service that computes a deferred field.

    ``compute`` receives the identity of the value being resolved. It may
    return the result directly, or an awaitable when used through
    ``DeferredValue.aresolve``. Any exception it raises is wrapped in
    ``DeferRefUpstreamComputationFailedError``.
    """

    def compute(self, identity: Any) -> T_co | Awaitable[T_co]:
        """Compute the deferred result for ``identity``.

        Args:
            identity: The ``id`` of the value being resolved.

        """

from __future__ import annotations

from collections.abc import Callable, Iterator
from typing import Any

import pytest

from deferref.locator import locator_context
from deferref.registry import CollaboratorRegistry, registry

BindCollaborator = Callable[[str, Any], Any]


@pytest.fixture()
def deferref_registry() -> Iterator[CollaboratorRegistry]:
    """Provide an empty registry that is the active locator for one test.

    Values resolved during the test (without an explicit ``locator``) look
    collaborators up in this registry instead of the process-wide one. The
    previous locator is restored at teardown.

    Yields:
        A fresh ``CollaboratorRegistry``.

    """
    test_registry = CollaboratorRegistry()
    with locator_context.use(test_registry):
        yield test_registry


@pytest.fixture()
def deferref_bind() -> Iterator[BindCollaborator]:
    """Bind collaborators on the process-wide registry for one test.

    Returns a ``bind(locator_key, collaborator)`` callable. Every key it
    touches gets its original binding back (or is unbound again) at teardown,
    in reverse order.

    Yields:
        The bind callable; it returns the collaborator it was given.

    """
    originals: list[tuple[str, Any]] = []

    def bind(locator_key: str, collaborator: Any) -> Any:
        previous = registry.bind(locator_key, collaborator)
        originals.append((locator_key, previous))
        return collaborator

    yield bind

    for locator_key, previous in reversed(originals):
        if previous is None:
            registry.unbind(locator_key)
        else:
            registry.bind(locator_key, previous)

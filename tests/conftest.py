"""Shared pytest fixtures for deferref tests."""

from __future__ import annotations

from collections.abc import Iterator

import pytest

from deferref.locator import locator_context
from deferref.registry import CollaboratorRegistry


@pytest.fixture()
def isolated_registry() -> Iterator[CollaboratorRegistry]:
    """Empty registry bound as the active locator for the test."""
    test_registry = CollaboratorRegistry()
    with locator_context.use(test_registry):
        yield test_registry

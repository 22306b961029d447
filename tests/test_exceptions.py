"""Tests for the exception hierarchy."""

from __future__ import annotations

import pytest

import deferref
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


@pytest.mark.parametrize(
    "error_type",
    [
        DeferRefAsyncCollaboratorInSyncContextError,
        DeferRefBootstrapError,
        DeferRefCircularResolutionError,
        DeferRefCollaboratorUnavailableError,
        DeferRefInvalidBindingError,
        DeferRefInvalidValueError,
        DeferRefSerializationError,
        DeferRefUnboundLocatorKeyError,
        DeferRefUpstreamComputationFailedError,
    ],
)
def test_every_error_derives_from_base_and_is_exported(error_type: type[Exception]) -> None:
    assert issubclass(error_type, DeferRefError)
    assert getattr(deferref, error_type.__name__) is error_type


def test_unbound_locator_key_is_a_collaborator_unavailable_error() -> None:
    error = DeferRefUnboundLocatorKeyError("photos")

    assert isinstance(error, DeferRefCollaboratorUnavailableError)
    assert error.locator_key == "photos"
    assert "'photos'" in str(error)


def test_upstream_failure_message_names_key_identity_and_cause() -> None:
    cause = TimeoutError("slow")

    error = DeferRefUpstreamComputationFailedError(locator_key="photos", identity=7, error=cause)

    assert error.error is cause
    assert str(error) == "Collaborator bound to 'photos' failed for identity 7: TimeoutError: slow"


def test_collaborator_unavailable_error_keeps_locator_key() -> None:
    error = DeferRefCollaboratorUnavailableError("photos")

    assert error.locator_key == "photos"
    assert str(error) == "Locator returned no collaborator for locator key 'photos'."

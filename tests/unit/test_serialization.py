from __future__ import annotations

import json
import pickle

import pytest
from pydantic import ValidationError

from deferref.exceptions import DeferRefInvalidValueError, DeferRefSerializationError
from deferref.registry import CollaboratorRegistry
from deferref.serialization import dumps, from_payload, loads, to_payload
from deferref.value import UNRESOLVED
from tests.helpers import Avatar, FakePhotos, RegionalUser, User


def test_json_payload_omits_unresolved_deferred_field() -> None:
    user = User(id=1, name="ann", locator_key="photos")

    assert json.loads(dumps(user)) == {"id": 1, "locator_key": "photos", "name": "ann"}
    assert to_payload(user) == {"id": 1, "locator_key": "photos", "name": "ann"}


def test_json_payload_includes_resolved_deferred_field() -> None:
    user = User(id=1, name="ann", locator_key="photos", deferred_field="PHOTO_X")

    assert json.loads(dumps(user)) == {
        "id": 1,
        "locator_key": "photos",
        "deferred_field": "PHOTO_X",
        "name": "ann",
    }


def test_json_round_trip_of_unresolved_value() -> None:
    user = User(id=1, name="ann", locator_key="photos")

    restored = loads(User, dumps(user))

    assert restored == user
    assert restored.deferred_field is UNRESOLVED
    assert not restored.is_resolved


def test_json_round_trip_of_resolved_value(isolated_registry: CollaboratorRegistry) -> None:
    isolated_registry.bind("photos", FakePhotos())
    user = User(id=1, name="ann", locator_key="photos")
    user.resolve()

    restored = loads(User, dumps(user))

    assert restored == user
    assert restored.is_resolved
    assert restored.deferred_field == "PHOTO_X"


def test_json_round_trip_keeps_subclass_defaults() -> None:
    avatar = Avatar(id=3, locator_key="avatars", size=256)

    restored = loads(Avatar, dumps(avatar))

    assert restored == avatar
    assert restored.primary_data() == {"size": 256}


def test_payload_round_trip() -> None:
    user = User(id=2, name="bob", locator_key="photos", deferred_field="PHOTO_Y")

    assert from_payload(User, to_payload(user)) == user


def test_dumps_rejects_tuple_id_that_would_load_back_as_list() -> None:
    user = User(id=(1, "eu"), name="ann", locator_key="photos")

    with pytest.raises(DeferRefSerializationError, match=r"\['id'\]"):
        dumps(user)
    with pytest.raises(DeferRefSerializationError, match="tuple"):
        to_payload(user)


def test_dumps_rejects_tuple_result_that_would_load_back_as_list() -> None:
    user = User(id=1, name="ann", locator_key="photos", deferred_field=("a", 1))

    with pytest.raises(DeferRefSerializationError, match="deferred_field"):
        dumps(user)


def test_json_round_trip_of_reannotated_composite_id() -> None:
    user = RegionalUser(id=(1, "eu"), name="ann", locator_key="photos")

    restored = loads(RegionalUser, dumps(user))

    assert restored == user
    assert restored.id == (1, "eu")
    assert hash(restored) == hash(user)
    assert from_payload(RegionalUser, to_payload(user)) == user


def test_loads_rejects_payload_with_invalid_locator_key() -> None:
    with pytest.raises((DeferRefInvalidValueError, ValidationError), match="locator_key"):
        loads(User, b'{"id": 1, "locator_key": "", "name": "ann"}')


@pytest.mark.parametrize("resolved", [False, True])
def test_pickle_round_trip_preserves_deferred_state(resolved: bool) -> None:
    user = User(id=1, name="ann", locator_key="photos")
    if resolved:
        user = user.with_deferred("PHOTO_X")

    restored = pickle.loads(pickle.dumps(user))

    assert restored == user
    assert restored.is_resolved is resolved
    if not resolved:
        assert restored.deferred_field is UNRESOLVED


def test_deserialized_value_resolves_through_current_binding(
    isolated_registry: CollaboratorRegistry,
) -> None:
    payload = pickle.dumps(User(id=1, name="ann", locator_key="photos"))
    photos = FakePhotos({1: "PHOTO_AFTER_LOAD"})
    isolated_registry.bind("photos", photos)

    restored = pickle.loads(payload)

    assert restored.resolve() == "PHOTO_AFTER_LOAD"
    assert photos.calls == [1]


def test_serialized_forms_never_contain_collaborator_state(
    isolated_registry: CollaboratorRegistry,
) -> None:
    photos = FakePhotos()
    isolated_registry.bind("photos", photos)
    user = User(id=1, name="ann", locator_key="photos")
    user.resolve()

    marker = photos.internal_token.encode()

    assert marker not in pickle.dumps(user)
    assert marker not in dumps(user)
    assert b"FakePhotos" not in pickle.dumps(user)

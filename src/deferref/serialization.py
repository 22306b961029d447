from __future__ import annotations

import functools
from collections.abc import Mapping
from typing import Any, TypeVar

from pydantic import TypeAdapter

from deferref.exceptions import DeferRefSerializationError
from deferref.value import UNRESOLVED, DeferredValue

V = TypeVar("V", bound=DeferredValue)

DEFERRED_FIELD_NAME = "deferred_field"


@functools.cache
def _adapter_for(value_type: type[DeferredValue]) -> TypeAdapter[Any]:
    return TypeAdapter(value_type)


def _exclude_for(value: DeferredValue) -> set[str] | None:
    if value.is_resolved:
        return None
    return {DEFERRED_FIELD_NAME}


def _ensure_round_trip(value: DeferredValue, restored: Any) -> None:
    if restored == value:
        return
    changed = [
        name
        for name in ("id", "locator_key", DEFERRED_FIELD_NAME, *value.primary_data())
        if getattr(restored, name, None) != getattr(value, name)
    ]
    msg = (
        f"{type(value).__qualname__} does not survive a JSON round trip; "
        f"field(s) {changed} load back as different values. Re-annotate them on the "
        "subclass with their concrete types, for example 'id: tuple[int, str]'."
    )
    raise DeferRefSerializationError(msg)


def to_payload(value: DeferredValue) -> dict[str, Any]:
    """Return the JSON-compatible field mapping of ``value``.

    The deferred field is omitted while it is unresolved.

    Raises:
        DeferRefSerializationError: If ``from_payload`` would not rebuild an
            equal value from the mapping.

    """
    adapter = _adapter_for(type(value))
    payload = adapter.dump_python(value, mode="json", exclude=_exclude_for(value))
    _ensure_round_trip(value, adapter.validate_python(payload))
    return payload


def from_payload(value_type: type[V], payload: Mapping[str, Any]) -> V:
    """Build a ``value_type`` instance from a mapping produced by ``to_payload``.

    A missing deferred field yields an unresolved value.
    """
    adapter = _adapter_for(value_type)
    return adapter.validate_python(dict(payload))


def dumps(value: DeferredValue) -> bytes:
    """Serialize ``value`` to JSON bytes.

    Raises:
        DeferRefSerializationError: If ``loads`` would not rebuild an equal
            value, for example a tuple ``id`` on a subclass that keeps
            ``id: Any``.

    Examples:
        .. code-block:: python

            data = dumps(User(id=1, name="ann", locator_key="photos"))
            # b'{"id":1,"locator_key":"photos","name":"ann"}'

    """
    adapter = _adapter_for(type(value))
    data = adapter.dump_json(value, exclude=_exclude_for(value))
    _ensure_round_trip(value, adapter.validate_json(data))
    return data


def loads(value_type: type[V], data: str | bytes) -> V:
    """Deserialize JSON produced by ``dumps`` into a ``value_type`` instance."""
    adapter = _adapter_for(value_type)
    value = adapter.validate_json(data)
    if not isinstance(value, value_type):  # pragma: no cover
        msg = f"Expected {value_type.__qualname__}, got {type(value).__qualname__}."
        raise TypeError(msg)
    return value


__all__ = [
    "DEFERRED_FIELD_NAME",
    "UNRESOLVED",
    "dumps",
    "from_payload",
    "loads",
    "to_payload",
]

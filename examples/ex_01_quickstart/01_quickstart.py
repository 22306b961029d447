"""Quickstart: a record that fetches its photo lazily through a named binding.

The user record stores only ``locator_key="photos"``. The photo service is
bound once at startup and looked up the first time ``resolve`` is called;
later calls return the cached photo without touching the service.
"""

from __future__ import annotations

from dataclasses import dataclass

from deferref import DeferredValue, registry


class PhotoService:
    def __init__(self) -> None:
        self.calls = 0

    def compute(self, user_id: int) -> str:
        self.calls += 1
        return f"photo-{user_id}.jpg"


@dataclass(frozen=True, slots=True, kw_only=True)
class User(DeferredValue):
    name: str


def main() -> None:
    service = PhotoService()
    registry.bind("photos", service)

    user = User(id=7, name="ann", locator_key="photos")
    print(f"resolved_before={user.is_resolved}")  # => resolved_before=False

    print(f"photo={user.resolve()}")  # => photo=photo-7.jpg
    print(f"photo_again={user.resolve()}")  # => photo_again=photo-7.jpg
    print(f"service_calls={service.calls}")  # => service_calls=1
    print(f"primary_data={user.primary_data()}")  # => primary_data={'name': 'ann'}


if __name__ == "__main__":
    main()

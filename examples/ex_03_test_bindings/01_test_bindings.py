"""Test bindings: swap a collaborator for a block, or scope a whole registry.

``registry.swap`` rebinds a key on the process-wide registry and restores the
previous binding on exit. ``locator_context.use`` makes another registry the
active locator for the current thread or task only.
"""

from __future__ import annotations

from dataclasses import dataclass

from deferref import (
    CollaboratorRegistry,
    DeferredValue,
    DeferRefUnboundLocatorKeyError,
    locator_context,
    registry,
)


class StaticPhotos:
    def __init__(self, photo: str) -> None:
        self.photo = photo

    def compute(self, _user_id: int) -> str:
        return self.photo


@dataclass(frozen=True, slots=True, kw_only=True)
class User(DeferredValue):
    name: str


def main() -> None:
    registry.bind("photos", StaticPhotos("real.jpg"))

    with registry.swap("photos", StaticPhotos("fake.jpg")):
        print(f"swapped={User(id=1, name='ann', locator_key='photos').resolve()}")  # => swapped=fake.jpg
    print(f"restored={User(id=1, name='ann', locator_key='photos').resolve()}")  # => restored=real.jpg

    scoped = CollaboratorRegistry({"avatars": StaticPhotos("avatar.png")})
    with locator_context.use(scoped):
        print(f"scoped={User(id=2, name='bob', locator_key='avatars').resolve()}")  # => scoped=avatar.png

    try:
        User(id=2, name="bob", locator_key="avatars").resolve()
    except DeferRefUnboundLocatorKeyError as error:
        print(f"outside_scope={type(error).__name__}")  # => outside_scope=DeferRefUnboundLocatorKeyError


if __name__ == "__main__":
    main()

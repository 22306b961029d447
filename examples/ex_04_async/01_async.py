"""Async collaborators: ``aresolve`` awaits the computation once per value.

Concurrent tasks resolving the same value share one upstream call.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass

from deferref import DeferredValue, registry


class AsyncPhotoService:
    def __init__(self) -> None:
        self.calls = 0

    async def compute(self, user_id: int) -> str:
        self.calls += 1
        await asyncio.sleep(0.01)
        return f"photo-{user_id}.jpg"


@dataclass(frozen=True, slots=True, kw_only=True)
class User(DeferredValue):
    name: str


async def main() -> None:
    service = AsyncPhotoService()
    registry.bind("photos", service)

    user = User(id=3, name="cy", locator_key="photos")
    photos = await asyncio.gather(*(user.aresolve() for _ in range(5)))

    print(f"photos={sorted(set(photos))}")  # => photos=['photo-3.jpg']
    print(f"service_calls={service.calls}")  # => service_calls=1


if __name__ == "__main__":
    asyncio.run(main())

from __future__ import annotations

import asyncio
import threading
from dataclasses import dataclass
from typing import Any

from deferref.value import DeferredValue


@dataclass(frozen=True, slots=True, kw_only=True)
class User(DeferredValue):
    name: str


@dataclass(frozen=True, slots=True, kw_only=True)
class Avatar(DeferredValue):
    """Value that calls ``fetch_avatar`` instead of ``compute``."""

    size: int = 64

    def request(self, collaborator: Any) -> Any:
        return collaborator.fetch_avatar(self.id, size=self.size)


@dataclass(frozen=True, slots=True, kw_only=True)
class RegionalUser(DeferredValue):
    """Value with a composite identity that survives JSON."""

    id: tuple[int, str]
    name: str


class FakePhotos:
    """Counting collaborator that returns ``photos[identity]``."""

    def __init__(self, photos: dict[Any, str] | None = None) -> None:
        self.photos = photos if photos is not None else {1: "PHOTO_X"}
        self.calls: list[Any] = []
        self.internal_token = "FAKE-PHOTOS-INTERNAL-STATE-7f3a"

    def compute(self, identity: Any) -> str:
        self.calls.append(identity)
        return self.photos[identity]


class FlakyPhotos:
    """Fails the first ``failures`` calls, then returns ``photo``."""

    def __init__(self, photo: str = "PHOTO_X", failures: int = 1) -> None:
        self.photo = photo
        self.failures = failures
        self.calls = 0

    def compute(self, _identity: Any) -> str:
        self.calls += 1
        if self.calls <= self.failures:
            msg = "upstream timed out"
            raise TimeoutError(msg)
        return self.photo


class SlowPhotos:
    """Blocks inside ``compute`` until ``release`` is set."""

    def __init__(self, photo: str = "PHOTO_SLOW") -> None:
        self.photo = photo
        self.entered = threading.Event()
        self.release = threading.Event()
        self.calls = 0
        self._lock = threading.Lock()

    def compute(self, _identity: Any) -> str:
        with self._lock:
            self.calls += 1
        self.entered.set()
        self.release.wait(timeout=5)
        return self.photo


class AsyncPhotos:
    def __init__(self, photo: str = "PHOTO_ASYNC", delay: float = 0.01) -> None:
        self.photo = photo
        self.delay = delay
        self.calls = 0

    async def compute(self, _identity: Any) -> str:
        self.calls += 1
        await asyncio.sleep(self.delay)
        return self.photo


SHARED_PHOTOS = FakePhotos({1: "SHARED"})


def broken_photos_factory() -> FakePhotos:
    msg = "no credentials"
    raise RuntimeError(msg)

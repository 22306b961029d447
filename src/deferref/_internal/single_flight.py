from __future__ import annotations

import asyncio
import threading
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

from deferref.exceptions import DeferRefCircularResolutionError

T = TypeVar("T")


class _Flight:
    __slots__ = ("done", "error", "loop", "result", "task", "thread_id")

    def __init__(
        self,
        thread_id: int,
        loop: asyncio.AbstractEventLoop | None = None,
    ) -> None:
        self.done = threading.Event()
        self.thread_id = thread_id
        self.loop = loop
        self.task: asyncio.Future[Any] | None = None
        self.result: Any = None
        self.error: BaseException | None = None

    def outcome(self) -> Any:
        if self.error is not None:
            raise self.error
        return self.result


class SingleFlight:
    """Run at most one computation per owner object, sync or async.

    Flights are keyed on ``id(owner)``; the owner is alive for as long as a
    caller holds it, so the key cannot be reused while a flight is running.
    Nothing is stored on the owner itself.

    Sync and async callers share one table. Late callers on the leader's event
    loop await the leader's task (shielded, so cancelling a waiter leaves the
    computation running). Every other late caller blocks on the flight's
    ``threading.Event``; async ones do so through ``asyncio.to_thread`` so
    their own loop keeps running. Waiters receive the leader's result or
    re-raise its error.
    """

    __slots__ = ("_flights", "_lock")

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._flights: dict[int, _Flight] = {}

    def run(self, owner: object, compute: Callable[[], T]) -> T:
        key = id(owner)
        thread_id = threading.get_ident()
        with self._lock:
            flight = self._flights.get(key)
            is_leader = flight is None
            if flight is None:
                flight = _Flight(thread_id)
                self._flights[key] = flight

        if not is_leader:
            if flight.thread_id == thread_id:
                msg = f"{owner!r} is already being resolved by the current thread."
                raise DeferRefCircularResolutionError(msg)
            flight.done.wait()
            return flight.outcome()

        try:
            flight.result = compute()
        except BaseException as error:
            flight.error = error
            raise
        finally:
            self._land(key, flight)
        return flight.result

    async def arun(self, owner: object, compute: Callable[[], Awaitable[T]]) -> T:
        key = id(owner)
        thread_id = threading.get_ident()
        loop = asyncio.get_running_loop()
        with self._lock:
            flight = self._flights.get(key)
            is_leader = flight is None
            if flight is None:
                flight = _Flight(thread_id, loop)
                task = asyncio.ensure_future(compute())
                flight.task = task
                task.add_done_callback(lambda done: self._land_task(key, flight, done))
                self._flights[key] = flight

        if flight.task is not None and flight.loop is loop:
            if not is_leader and flight.task is asyncio.current_task():
                msg = f"{owner!r} is already being resolved by the current task."
                raise DeferRefCircularResolutionError(msg)
            return await asyncio.shield(flight.task)

        if flight.thread_id == thread_id:
            msg = f"{owner!r} is already being resolved by the current thread."
            raise DeferRefCircularResolutionError(msg)
        await asyncio.to_thread(flight.done.wait)
        return flight.outcome()

    def _land_task(self, key: int, flight: _Flight, done: asyncio.Future[Any]) -> None:
        if done.cancelled():
            flight.error = asyncio.CancelledError()
        else:
            # Waiters may all be gone; reading the outcome marks it retrieved.
            flight.error = done.exception()
            if flight.error is None:
                flight.result = done.result()
        self._land(key, flight)

    def _land(self, key: int, flight: _Flight) -> None:
        with self._lock:
            if self._flights.get(key) is flight:
                del self._flights[key]
        flight.done.set()

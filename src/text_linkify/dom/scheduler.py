"""Cooperative single-threaded scheduling.

All document work runs on one thread. Long scans yield between chunks with
``defer`` and bursts of mutations are coalesced with ``call_later``.
"""

import asyncio
import heapq
import itertools
from abc import ABC, abstractmethod
from collections import deque
from collections.abc import Callable
from typing import Protocol


Callback = Callable[[], None]


class TimerHandle(Protocol):
    def cancel(self) -> None: ...


class Scheduler(ABC):
    """Abstract scheduler for deferred document work."""

    @abstractmethod
    def defer(self, callback: Callback) -> None:
        """Run ``callback`` on a later turn."""

    @abstractmethod
    def call_later(self, delay: float, callback: Callback) -> TimerHandle:
        """Run ``callback`` after ``delay`` seconds unless cancelled."""


class AsyncioScheduler(Scheduler):
    """Scheduler backed by the running asyncio event loop."""

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None):
        self._loop = loop or asyncio.get_running_loop()
        self._pending: set[asyncio.Handle] = set()

    def defer(self, callback: Callback) -> None:
        handle: asyncio.Handle

        def run() -> None:
            self._pending.discard(handle)
            callback()

        handle = self._loop.call_soon(run)
        self._pending.add(handle)

    def call_later(self, delay: float, callback: Callback) -> TimerHandle:
        handle: asyncio.TimerHandle

        def run() -> None:
            self._pending.discard(handle)
            callback()

        handle = self._loop.call_later(delay, run)
        self._pending.add(handle)
        return _TrackedHandle(handle, self._pending)

    @property
    def idle(self) -> bool:
        return not self._pending

    async def wait_idle(self, poll_interval: float = 0.01) -> None:
        """Wait until no deferred callback or timer is outstanding."""
        while self._pending:
            await asyncio.sleep(poll_interval)


class _TrackedHandle:
    def __init__(self, handle: asyncio.TimerHandle, pending: set[asyncio.Handle]):
        self._handle = handle
        self._pending = pending

    def cancel(self) -> None:
        self._handle.cancel()
        self._pending.discard(self._handle)


class _ManualTimer:
    def __init__(self, due: float, callback: Callback):
        self.due = due
        self.callback = callback
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class ManualScheduler(Scheduler):
    """Deterministic scheduler with a virtual clock, driven explicitly.

    Nothing runs until ``run_pending``, ``advance`` or ``run_until_idle`` is
    called, which makes chunking and debounce behavior observable step by step.
    """

    def __init__(self) -> None:
        self.now = 0.0
        self._ready: deque[Callback] = deque()
        self._timers: list[tuple[float, int, _ManualTimer]] = []
        self._seq = itertools.count()

    def defer(self, callback: Callback) -> None:
        self._ready.append(callback)

    def call_later(self, delay: float, callback: Callback) -> TimerHandle:
        timer = _ManualTimer(self.now + delay, callback)
        heapq.heappush(self._timers, (timer.due, next(self._seq), timer))
        return timer

    @property
    def pending_turns(self) -> int:
        return len(self._ready)

    @property
    def pending_timers(self) -> int:
        return sum(1 for _, _, t in self._timers if not t.cancelled)

    def run_pending(self) -> int:
        """Run the callbacks queued so far (one turn); return how many ran."""
        batch = list(self._ready)
        self._ready.clear()
        for callback in batch:
            callback()
        return len(batch)

    def advance(self, seconds: float) -> None:
        """Move the clock forward, firing due timers and the turns they queue."""
        target = self.now + seconds
        self._drain_ready()
        while self._timers and self._timers[0][0] <= target:
            due, _, timer = heapq.heappop(self._timers)
            if timer.cancelled:
                continue
            self.now = due
            timer.callback()
            self._drain_ready()
        self.now = target

    def run_until_idle(self, max_turns: int = 10000) -> None:
        """Run every queued turn and timer until nothing is left."""
        turns = 0
        while self._ready or self.pending_timers:
            if self._ready:
                self.run_pending()
            else:
                due = min(t.due for _, _, t in self._timers if not t.cancelled)
                self.advance(max(0.0, due - self.now))
            turns += 1
            if turns > max_turns:
                raise RuntimeError("ManualScheduler did not become idle")

    def _drain_ready(self) -> None:
        while self._ready:
            self.run_pending()

"""Single-threaded timer loop and cancellable polling tasks."""

from __future__ import annotations

import heapq
import itertools
import time
from typing import Any, Callable

PENDING = "pending"
RUNNING = "running"
FOUND = "found"
TIMED_OUT = "timed_out"
CANCELLED = "cancelled"


class TimerHandle:
    def __init__(self, due: float, callback: Callable[[], None]) -> None:
        self.due = due
        self.callback = callback
        self.cancelled = False
        self.fired = False

    @property
    def active(self) -> bool:
        return not self.cancelled and not self.fired

    def cancel(self) -> None:
        self.cancelled = True


class VirtualClock:
    """Manual clock; ``sleep`` advances time instead of blocking."""

    def __init__(self, start: float = 0.0) -> None:
        self.now = float(start)

    def __call__(self) -> float:
        return self.now

    def sleep(self, seconds: float) -> None:
        self.now += max(0.0, float(seconds))


class TimerLoop:
    """Cooperative scheduler: callbacks run one at a time on the calling thread."""

    def __init__(
        self,
        *,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.clock = clock
        self._sleep = sleep
        self._queue: list[tuple[float, int, TimerHandle]] = []
        self._seq = itertools.count()
        self._stopped = False

    def now(self) -> float:
        return float(self.clock())

    def call_later(self, delay: float, callback: Callable[[], None]) -> TimerHandle:
        handle = TimerHandle(self.now() + max(0.0, float(delay)), callback)
        heapq.heappush(self._queue, (handle.due, next(self._seq), handle))
        return handle

    def pending(self) -> int:
        return sum(1 for _, _, handle in self._queue if handle.active)

    def stop(self) -> None:
        self._stopped = True

    @property
    def stopped(self) -> bool:
        return self._stopped

    def run_due(self, now: float | None = None) -> int:
        fired = 0
        if now is None:
            now = self.now()
        while self._queue and self._queue[0][0] <= now:
            _, _, handle = heapq.heappop(self._queue)
            if not handle.active:
                continue
            handle.fired = True
            handle.callback()
            fired += 1
            if self._stopped:
                break
        return fired

    def run(self, *, until: Callable[[], bool] | None = None, max_seconds: float | None = None) -> None:
        deadline = None if max_seconds is None else self.now() + float(max_seconds)
        while not self._stopped:
            if until is not None and until():
                return
            self._drop_cancelled()
            if not self._queue:
                return
            next_due = self._queue[0][0]
            if deadline is not None and next_due > deadline:
                self._sleep(max(0.0, deadline - self.now()))
                return
            wait = next_due - self.now()
            if wait > 0:
                self._sleep(wait)
            self.run_due(max(self.now(), next_due))

    def _drop_cancelled(self) -> None:
        while self._queue and not self._queue[0][2].active:
            heapq.heappop(self._queue)


class PollTask:
    """Sample ``check`` every ``interval`` until it yields a truthy value.

    The first sample runs on ``start()``. With a ``ceiling`` the task gives up
    once that many seconds have passed since the start and reports the
    timeout exactly once.
    """

    def __init__(
        self,
        loop: TimerLoop,
        *,
        check: Callable[[], Any],
        interval: float,
        on_found: Callable[[Any], None],
        on_timeout: Callable[[], None] | None = None,
        ceiling: float | None = None,
        name: str = "poll",
    ) -> None:
        self.loop = loop
        self.check = check
        self.interval = float(interval)
        self.on_found = on_found
        self.on_timeout = on_timeout
        self.ceiling = ceiling
        self.name = name
        self.outcome = PENDING
        self.result: Any = None
        self._started_at = 0.0
        self._handle: TimerHandle | None = None

    @property
    def done(self) -> bool:
        return self.outcome in {FOUND, TIMED_OUT, CANCELLED}

    @property
    def active(self) -> bool:
        return self.outcome == RUNNING

    def start(self) -> "PollTask":
        if self.outcome != PENDING:
            raise RuntimeError(f"{self.name} task already started")
        self.outcome = RUNNING
        self._started_at = self.loop.now()
        self._tick()
        return self

    def cancel(self) -> None:
        if self.done:
            return
        self.outcome = CANCELLED
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def _tick(self) -> None:
        self._handle = None
        if self.outcome != RUNNING:
            return
        value = self.check()
        if self.outcome != RUNNING:
            return
        if value:
            self.outcome = FOUND
            self.result = value
            self.on_found(value)
            return
        if self.ceiling is not None and self.loop.now() - self._started_at >= self.ceiling:
            self.outcome = TIMED_OUT
            if self.on_timeout is not None:
                self.on_timeout()
            return
        self._handle = self.loop.call_later(self.interval, self._tick)


class RepeatingTask:
    """Run ``callback`` every ``interval`` seconds until cancelled."""

    def __init__(
        self,
        loop: TimerLoop,
        *,
        callback: Callable[[], None],
        interval: float,
        name: str = "repeat",
    ) -> None:
        self.loop = loop
        self.callback = callback
        self.interval = float(interval)
        self.name = name
        self.outcome = PENDING
        self._handle: TimerHandle | None = None

    @property
    def done(self) -> bool:
        return self.outcome == CANCELLED

    @property
    def active(self) -> bool:
        return self.outcome == RUNNING

    def start(self) -> "RepeatingTask":
        if self.outcome != PENDING:
            raise RuntimeError(f"{self.name} task already started")
        self.outcome = RUNNING
        self._handle = self.loop.call_later(self.interval, self._tick)
        return self

    def cancel(self) -> None:
        if self.done:
            return
        self.outcome = CANCELLED
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def _tick(self) -> None:
        self._handle = None
        if self.outcome != RUNNING:
            return
        self.callback()
        if self.outcome == RUNNING:
            self._handle = self.loop.call_later(self.interval, self._tick)


class ElementWaitTimeout(TimeoutError):
    def __init__(self, selector: str, timeout: float) -> None:
        super().__init__(f"Element {selector} not found within {int(timeout * 1000)}ms")
        self.selector = selector
        self.timeout = timeout


def wait_for_element(
    loop: TimerLoop,
    *,
    selector: str,
    exists: Callable[[str], bool],
    timeout: float,
    on_found: Callable[[str], None],
    on_timeout: Callable[[ElementWaitTimeout], None],
    interval: float = 0.1,
) -> PollTask:
    """Poll ``exists(selector)`` every ``interval`` up to ``timeout`` seconds."""
    task = PollTask(
        loop,
        check=lambda: selector if exists(selector) else None,
        interval=interval,
        on_found=on_found,
        on_timeout=lambda: on_timeout(ElementWaitTimeout(selector, timeout)),
        ceiling=timeout,
        name=f"wait:{selector}",
    )
    return task.start()

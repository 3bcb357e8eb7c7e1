# scheduler.py
"""
Deferred tasks on the simulation clock.

Work that must happen "a little later" (such as deleting particles once
their removal animation has finished) is scheduled here instead of on a
wall-clock timer. Due tasks run at the start of the next frame whose clock
time has reached them, so a fake clock can fast-forward them in tests.
"""
import heapq
import itertools
import logging
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Protocol

# --- Data Contracts ---
#
# class Clock (protocol):
#   - now() -> float: current time in milliseconds, monotonic.
#   - frame_count: int, incremented once per rendered frame.
#
# class Scheduler:
#   - call_later(delay_ms: float, callback, name: str = "") -> DeferredTask
#     - Side Effects: queues callback to run once clock.now() >= now + delay.
#   - run_due(now: Optional[float] = None) -> int
#     - Outputs: number of callbacks executed.
#     - Invariants: tasks run in due-time order, ties in scheduling order.
#       Cancelled tasks never run.


class Clock(Protocol):
    frame_count: int

    def now(self) -> float:
        ...


@dataclass(order=True)
class DeferredTask:
    due: float
    seq: int
    callback: Callable[[], None] = field(compare=False)
    name: str = field(default="", compare=False)
    cancelled: bool = field(default=False, compare=False)
    done: bool = field(default=False, compare=False)

    def cancel(self) -> None:
        self.cancelled = True


class Scheduler:
    """A min-heap of deferred callbacks keyed by due time."""

    def __init__(self, clock: Clock):
        self.clock = clock
        self._tasks: List[DeferredTask] = []
        self._counter = itertools.count()

    def call_later(self, delay_ms: float, callback: Callable[[], None],
                   name: str = "") -> DeferredTask:
        task = DeferredTask(self.clock.now() + delay_ms, next(self._counter), callback, name)
        heapq.heappush(self._tasks, task)
        logging.debug(f"Scheduled task '{name}' due at {task.due:.0f}ms.")
        return task

    def run_due(self, now: Optional[float] = None) -> int:
        """Runs every task due at or before `now` (defaults to the clock)."""
        if now is None:
            now = self.clock.now()
        executed = 0
        while self._tasks and self._tasks[0].due <= now:
            task = heapq.heappop(self._tasks)
            if task.cancelled:
                continue
            task.callback()
            task.done = True
            executed += 1
        return executed

    def cancel_all(self) -> None:
        for task in self._tasks:
            task.cancel()
        self._tasks.clear()

    @property
    def pending(self) -> int:
        return sum(1 for task in self._tasks if not task.cancelled)

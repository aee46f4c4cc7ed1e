"""Dispatcher: armed timers for scheduled instructions and auto-returns.

Timers are first-class handles kept in a map of ``timer_id -> TimerHandle``,
so disarming is a single lookup. A handle is removed from the map before its
callback runs, which makes each fire happen at most once. Callbacks run
outside the dispatcher lock and are expected to re-check their own state
(the instruction status, the outstanding CUE-OUT) before acting; that check
is the authoritative guard against a cancel racing a fire.

Evaluation via fire_due() or a background daemon thread via start()/stop().
The thread sleeps until the next due time or the sweep interval, whichever
comes first; arm() wakes it so a new earlier timer is not missed.

Lanes: a timer may carry a ``lane`` (the engine uses the stream name). While
the background thread runs, due timers are handed to a worker pool with one
task per lane, so a gateway call stalled on one stream does not hold up
fires on another. Timers of a lane that is still busy stay armed and go out
in due order once it frees. Without the background thread, fire_due() runs
every callback inline on the calling thread.
"""

from __future__ import annotations

import itertools
import threading
from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from datetime import datetime

from ..infra.logging import get_logger
from .clock import Clock, ensure_aware

TimerCallback = Callable[[], None]


@dataclass
class TimerHandle:
    """One armed timer."""

    timer_id: str
    due: datetime
    callback: TimerCallback = field(repr=False)
    kind: str = "timer"
    seq: int = 0
    lane: str | None = None


class Dispatcher:
    """Cooperative timer dispatcher driven by the master clock."""

    def __init__(self, clock: Clock, sweep_interval_seconds: float = 5.0, max_workers: int = 4) -> None:
        if sweep_interval_seconds <= 0:
            raise ValueError("sweep_interval_seconds must be greater than zero")
        if max_workers < 1:
            raise ValueError("max_workers must be at least 1")
        self._clock = clock
        self._sweep_interval_s = sweep_interval_seconds
        self._max_workers = max_workers
        self._timers: dict[str, TimerHandle] = {}
        self._sweep_hooks: list[Callable[[], object]] = []
        self._seq = itertools.count()
        self._cond = threading.Condition()
        self._stop_event = threading.Event()
        self._thread: threading.Thread | None = None
        self._executor: ThreadPoolExecutor | None = None
        self._busy_lanes: set[str] = set()
        self._logger = get_logger(__name__)

    # ------------------------------------------------------------------
    # Arm / disarm
    # ------------------------------------------------------------------

    def arm(
        self,
        timer_id: str,
        due: datetime,
        callback: TimerCallback,
        *,
        kind: str = "timer",
        lane: str | None = None,
    ) -> TimerHandle:
        """Arm (or re-arm) ``timer_id`` to run ``callback`` at ``due``."""
        ensure_aware(due)
        handle = TimerHandle(
            timer_id=timer_id, due=due, callback=callback, kind=kind, seq=next(self._seq), lane=lane
        )
        with self._cond:
            self._timers[timer_id] = handle
            self._cond.notify_all()
        self._logger.debug("timer_armed", timer_id=timer_id, kind=kind, lane=lane, due=due.isoformat())
        return handle

    def disarm(self, timer_id: str) -> bool:
        """Disarm ``timer_id``. Returns False if it was not armed."""
        with self._cond:
            handle = self._timers.pop(timer_id, None)
        if handle is None:
            return False
        self._logger.debug("timer_disarmed", timer_id=timer_id, kind=handle.kind)
        return True

    def add_sweep_hook(self, hook: Callable[[], object]) -> None:
        """Run ``hook`` at the start of every background pass, before firing."""
        self._sweep_hooks.append(hook)

    def is_armed(self, timer_id: str) -> bool:
        with self._cond:
            return timer_id in self._timers

    def armed(self) -> list[TimerHandle]:
        """Return armed handles ordered by due time."""
        with self._cond:
            return sorted(self._timers.values(), key=lambda h: (h.due, h.seq))

    def next_due(self) -> datetime | None:
        with self._cond:
            if not self._timers:
                return None
            return min(h.due for h in self._timers.values())

    # ------------------------------------------------------------------
    # Firing
    # ------------------------------------------------------------------

    def fire_due(self) -> list[str]:
        """Run (or hand to the pool) every timer whose due time has passed.

        Returns the dispatched timer ids in due order. A callback that raises
        is logged and does not stop the remaining fires.
        """
        now = self._clock.now_utc()
        with self._cond:
            due = sorted(
                (h for h in self._timers.values() if h.due <= now and h.lane not in self._busy_lanes),
                key=lambda h: (h.due, h.seq),
            )
            for handle in due:
                del self._timers[handle.timer_id]
            batches = _by_lane(due)
            executor = self._executor
            if executor is not None:
                self._busy_lanes.update(b[0].lane for b in batches if b[0].lane is not None)

        for batch in batches:
            if executor is None:
                self._run_batch(batch, now)
            else:
                executor.submit(self._run_pooled, batch, now)
        return [h.timer_id for h in due]

    def sweep(self) -> list[str]:
        """One full pass: run the sweep hooks, then fire whatever is due."""
        for hook in self._sweep_hooks:
            hook()
        return self.fire_due()

    def _run_batch(self, batch: list[TimerHandle], now: datetime) -> None:
        for handle in batch:
            late_s = (now - handle.due).total_seconds()
            self._logger.info(
                "timer_fired", timer_id=handle.timer_id, kind=handle.kind, lane=handle.lane, late_seconds=late_s
            )
            try:
                handle.callback()
            except Exception:
                self._logger.exception("timer_callback_failed", timer_id=handle.timer_id, kind=handle.kind)

    def _run_pooled(self, batch: list[TimerHandle], now: datetime) -> None:
        try:
            self._run_batch(batch, now)
        finally:
            with self._cond:
                self._busy_lanes.discard(batch[0].lane)
                self._cond.notify_all()

    # ------------------------------------------------------------------
    # Background thread
    # ------------------------------------------------------------------

    @property
    def running(self) -> bool:
        return self._thread is not None

    @property
    def max_workers(self) -> int:
        return self._max_workers

    def start(self) -> None:
        """Start the background dispatch thread and its worker pool."""
        if self._thread is not None:
            return
        self._stop_event.clear()
        with self._cond:
            self._executor = ThreadPoolExecutor(max_workers=self._max_workers, thread_name_prefix="SpliceFire")
        self._thread = threading.Thread(
            target=self._run_loop,
            name="SpliceDispatcher",
            daemon=True,
        )
        self._thread.start()
        self._logger.info(
            "dispatcher_started", sweep_interval_seconds=self._sweep_interval_s, max_workers=self._max_workers
        )

    def stop(self) -> None:
        """Stop the background thread, then wait for in-flight fires."""
        self._stop_event.set()
        with self._cond:
            self._cond.notify_all()
        if self._thread is not None:
            self._thread.join(timeout=self._sweep_interval_s + 5)
            self._thread = None
        with self._cond:
            executor, self._executor = self._executor, None
        if executor is not None:
            executor.shutdown(wait=True)
        self._logger.info("dispatcher_stopped")

    def _run_loop(self) -> None:
        """Background loop: fire → wait for next due or sweep → repeat."""
        while not self._stop_event.is_set():
            try:
                self.sweep()
            except Exception:
                self._logger.exception("dispatcher_sweep_failed")
            with self._cond:
                if self._stop_event.is_set():
                    break
                self._cond.wait(timeout=self._wait_seconds())

    def _wait_seconds(self) -> float:
        # Caller holds self._cond. Busy lanes wake the loop when they free.
        wait = self._sweep_interval_s
        ready = [h.due for h in self._timers.values() if h.lane not in self._busy_lanes]
        if ready:
            until = (min(ready) - self._clock.now_utc()).total_seconds()
            wait = min(wait, max(until, 0.0))
        return wait


def _by_lane(handles: list[TimerHandle]) -> list[list[TimerHandle]]:
    """Group due handles into per-lane batches; lane-less handles run alone."""
    batches: list[list[TimerHandle]] = []
    lanes: dict[str, list[TimerHandle]] = {}
    for handle in handles:
        if handle.lane is None:
            batches.append([handle])
        elif handle.lane in lanes:
            lanes[handle.lane].append(handle)
        else:
            lanes[handle.lane] = [handle]
            batches.append(lanes[handle.lane])
    return batches

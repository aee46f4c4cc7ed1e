"""Master clock abstractions used by the signaling runtime.

Every timestamp the runtime records (cue emission, schedule admission, timer
due times) comes from one injected clock, so tests can drive the whole
lifecycle deterministically with :class:`SteppedMasterClock`.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from threading import Lock
from typing import Protocol, runtime_checkable


@runtime_checkable
class Clock(Protocol):
    """Protocol implemented by master clock providers."""

    def now_utc(self) -> datetime:
        """Return the current time as an aware UTC datetime."""
        ...


class MasterClock:
    """Wall clock providing timezone-aware UTC timestamps."""

    def now_utc(self) -> datetime:
        """Return current UTC time as an aware datetime."""
        return datetime.now(timezone.utc)

    def seconds_until(self, dt: datetime) -> float:
        """Return seconds from now until ``dt`` (negative when ``dt`` is past)."""
        ensure_aware(dt)
        return (dt.astimezone(timezone.utc) - self.now_utc()).total_seconds()


class SteppedMasterClock(MasterClock):
    """Deterministic master clock used for tests.

    Time advances only when :meth:`advance` is called.
    """

    def __init__(self, start: datetime | None = None) -> None:
        if start is None:
            start = datetime(2025, 1, 1, tzinfo=timezone.utc)
        ensure_aware(start)
        self._current = start.astimezone(timezone.utc)
        self._lock = Lock()

    def now_utc(self) -> datetime:
        with self._lock:
            return self._current

    def advance(self, seconds: float) -> datetime:
        """Advance the clock by ``seconds`` (must be non-negative)."""
        if seconds < 0.0:
            raise ValueError("seconds must be non-negative")
        with self._lock:
            self._current += timedelta(seconds=seconds)
            return self._current


def ensure_aware(dt: datetime) -> None:
    if dt.tzinfo is None or dt.tzinfo.utcoffset(dt) is None:
        raise ValueError("Datetime must be timezone-aware")

"""Read-only projections over the event store.

Everything here is a pure function over a snapshot returned by
``EventStore.list()`` / ``EventStore.list_scheduled()``. Filters compose with
AND semantics and keep the snapshot's insertion order; newest-first ordering
is a presentation step applied separately by :func:`newest_first`.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from datetime import datetime, timezone

from ..domain.entities import (
    MAX_SPLICE_EVENT_ID,
    CueAction,
    CueEvent,
    CueStatus,
    InstructionStatus,
    ScheduledInstruction,
)
from ..shared.schemas import EventSummary, ScheduleSummary


@dataclass(frozen=True)
class EventFilter:
    """Event log filter. ``None`` fields do not constrain.

    ``start``/``end`` bound ``timestamp`` as ``start <= timestamp < end``;
    naive bounds are read as UTC. ``text`` is a case-insensitive substring
    matched against the stream name and the message.
    """

    status: CueStatus | None = None
    action: CueAction | None = None
    start: datetime | None = None
    end: datetime | None = None
    text: str | None = None
    stream_name: str | None = None

    def __post_init__(self) -> None:
        # frozen: assign through object.__setattr__
        for name in ("start", "end"):
            value = getattr(self, name)
            if value is not None and (value.tzinfo is None or value.tzinfo.utcoffset(value) is None):
                object.__setattr__(self, name, value.replace(tzinfo=timezone.utc))

    def matches(self, event: CueEvent) -> bool:
        if self.status is not None and event.status != self.status:
            return False
        if self.action is not None and event.action != self.action:
            return False
        if self.stream_name is not None and event.stream_name != self.stream_name:
            return False
        if self.start is not None and event.timestamp < self.start:
            return False
        if self.end is not None and event.timestamp >= self.end:
            return False
        if self.text:
            needle = self.text.lower()
            haystacks = (event.stream_name, event.message or "")
            if not any(needle in h.lower() for h in haystacks):
                return False
        return True


def query_events(events: Iterable[CueEvent], filt: EventFilter | None = None) -> list[CueEvent]:
    """Return the events matching ``filt`` in their original order."""
    if filt is None:
        return list(events)
    return [e for e in events if filt.matches(e)]


def newest_first(events: Iterable[CueEvent]) -> list[CueEvent]:
    """Sort by timestamp descending; ties keep reverse insertion order."""
    return [e for _, e in sorted(enumerate(events), key=lambda p: (p[1].timestamp, p[0]), reverse=True)]


def suggest_next_event_id(
    events: Iterable[CueEvent],
    scheduled: Iterable[ScheduledInstruction] = (),
    default_start: int = 100023,
) -> int:
    """Suggest a splice event id one above the highest known value.

    A convenience for operators, not a uniqueness guarantee. Once the highest
    known id is MAX_SPLICE_EVENT_ID the suggestion wraps to the lowest unused
    id at or above ``default_start``, then to the lowest unused id from 1.
    """
    known = {e.event_id for e in events} | {s.event_id for s in scheduled}
    if not known:
        return default_start
    candidate = max(known) + 1
    if candidate <= MAX_SPLICE_EVENT_ID:
        return candidate
    default_start = min(max(default_start, 1), MAX_SPLICE_EVENT_ID)
    for first, last in ((default_start, MAX_SPLICE_EVENT_ID), (1, default_start - 1)):
        for candidate in range(first, last + 1):
            if candidate not in known:
                return candidate
    raise ValueError("Every splice event id is in use")


def summarize_events(events: Sequence[CueEvent]) -> EventSummary:
    return EventSummary(
        total=len(events),
        cue_out=sum(1 for e in events if e.action == CueAction.CUE_OUT),
        cue_in=sum(1 for e in events if e.action == CueAction.CUE_IN),
        executed=sum(1 for e in events if e.status == CueStatus.EXECUTED),
        failed=sum(1 for e in events if e.status == CueStatus.FAILED),
    )


def summarize_schedule(instructions: Sequence[ScheduledInstruction], now: datetime) -> ScheduleSummary:
    return ScheduleSummary(
        upcoming=sum(
            1
            for s in instructions
            if s.status == InstructionStatus.SCHEDULED and s.scheduled_time > now
        ),
        executed=sum(1 for s in instructions if s.status == InstructionStatus.EXECUTED),
        cancelled=sum(1 for s in instructions if s.status == InstructionStatus.CANCELLED),
    )

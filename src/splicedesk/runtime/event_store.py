"""Event Store: single source of truth for cue events and the schedule.

Insertion-ordered, in-memory, thread-safe. Cue events are append-only;
scheduled instructions are replaced wholesale on every status change, so a
reader holding a snapshot never sees a half-updated record. Journal write
failures are logged and counted, never raised.

Write path (CueLifecycleEngine and the dispatcher fire callback only):
    append(event)
    add_scheduled(instruction)
    update_scheduled(id, **patch)
    remove_scheduled(id)

Read path (query layer, presentation):
    list()
    get(id)
    list_scheduled()
    get_scheduled(id)
"""

from __future__ import annotations

import dataclasses
import threading

from ..domain.entities import CueEvent, ScheduledInstruction
from ..infra.exceptions import NotFoundError
from ..infra.logging import get_logger
from .journal import KIND_EVENT, KIND_SCHEDULED, KIND_SCHEDULED_REMOVED, EventJournal

logger = get_logger(__name__)

# Fields a patch may never touch
_IDENTITY_FIELDS = frozenset({"id", "action", "event_id", "stream_name"})


class EventStore:
    """In-memory log of cue events plus the scheduled-instruction collection."""

    def __init__(self, journal: EventJournal | None = None) -> None:
        self._events: list[CueEvent] = []
        self._event_index: dict[str, CueEvent] = {}
        self._scheduled: dict[str, ScheduledInstruction] = {}
        self._journal = journal
        self._lock = threading.Lock()
        self.journal_failures = 0

    @classmethod
    def from_journal(cls, journal: EventJournal) -> EventStore:
        """Rebuild a store by replaying ``journal``; later writes go back to it."""
        store = cls()
        events = scheduled = 0
        for kind, payload in journal.replay():
            if kind == KIND_EVENT:
                store._append_unlocked(payload)
                events += 1
            elif kind == KIND_SCHEDULED:
                store._scheduled[payload.id] = payload
                scheduled += 1
            elif kind == KIND_SCHEDULED_REMOVED:
                store._scheduled.pop(payload, None)
        store._journal = journal
        logger.info("event_store_replayed", path=str(journal.path), events=events, scheduled=scheduled)
        return store

    # ------------------------------------------------------------------
    # Cue events
    # ------------------------------------------------------------------

    def append(self, event: CueEvent) -> CueEvent:
        with self._lock:
            if event.id in self._event_index:
                raise ValueError(f"Cue event {event.id!r} already recorded")
            self._append_unlocked(event)
            self._journal_write("record_event", event)
        return event

    def list(self) -> list[CueEvent]:
        """Return a snapshot of all cue events in insertion order."""
        with self._lock:
            return list(self._events)

    def get(self, event_id: str) -> CueEvent:
        with self._lock:
            try:
                return self._event_index[event_id]
            except KeyError:
                raise NotFoundError(f"Cue event {event_id!r} not found") from None

    def __len__(self) -> int:
        with self._lock:
            return len(self._events)

    # ------------------------------------------------------------------
    # Scheduled instructions
    # ------------------------------------------------------------------

    def add_scheduled(self, instruction: ScheduledInstruction) -> ScheduledInstruction:
        with self._lock:
            if instruction.id in self._scheduled:
                raise ValueError(f"Scheduled instruction {instruction.id!r} already exists")
            self._scheduled[instruction.id] = instruction
            self._journal_write("record_scheduled", instruction)
        return instruction

    def update_scheduled(self, instruction_id: str, **patch) -> ScheduledInstruction:
        """Replace the instruction with a patched copy and return it."""
        touched = _IDENTITY_FIELDS.intersection(patch)
        if touched:
            raise ValueError(f"Cannot patch identity fields: {sorted(touched)}")
        with self._lock:
            current = self._scheduled.get(instruction_id)
            if current is None:
                raise NotFoundError(f"Scheduled instruction {instruction_id!r} not found")
            updated = dataclasses.replace(current, **patch)
            self._scheduled[instruction_id] = updated
            self._journal_write("record_scheduled", updated)
        return updated

    def remove_scheduled(self, instruction_id: str) -> ScheduledInstruction:
        with self._lock:
            removed = self._scheduled.pop(instruction_id, None)
            if removed is None:
                raise NotFoundError(f"Scheduled instruction {instruction_id!r} not found")
            self._journal_write("record_removed", instruction_id)
        return removed

    def get_scheduled(self, instruction_id: str) -> ScheduledInstruction:
        with self._lock:
            try:
                return self._scheduled[instruction_id]
            except KeyError:
                raise NotFoundError(f"Scheduled instruction {instruction_id!r} not found") from None

    def list_scheduled(self) -> list[ScheduledInstruction]:
        """Return a snapshot of scheduled instructions in admission order."""
        with self._lock:
            return list(self._scheduled.values())

    def _append_unlocked(self, event: CueEvent) -> None:
        self._events.append(event)
        self._event_index[event.id] = event

    def _journal_write(self, method: str, payload) -> None:
        """Persist one mutation. Caller holds ``self._lock``.

        A failed write is logged and the in-memory state stands: the cue may
        already be on the wire, and the engine still has to track it.
        """
        if self._journal is None:
            return
        try:
            getattr(self._journal, method)(payload)
        except OSError:
            self.journal_failures += 1
            logger.exception("journal_write_failed", path=str(self._journal.path), method=method)

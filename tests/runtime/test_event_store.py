"""Tests for EventStore and its JSON-lines journal.

Verifies:
- Events are kept in insertion order and snapshots are copies
- Scheduled instructions are replaced wholesale on update
- Identity fields cannot be patched
- Every mutation is journaled and a replay rebuilds the same store
- A corrupt journal line is reported, not skipped
- A failed journal write is counted and the in-memory state stands
"""

from __future__ import annotations

import json
from dataclasses import replace
from datetime import datetime, timedelta, timezone

import pytest

from splicedesk.domain.entities import (
    CueAction,
    CueEvent,
    CueOrigin,
    CueStatus,
    InstructionStatus,
    ScheduledInstruction,
)
from splicedesk.infra.exceptions import JournalError, NotFoundError
from splicedesk.runtime.event_store import EventStore
from splicedesk.runtime.journal import EventJournal

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

T0 = datetime(2025, 6, 1, 18, 0, tzinfo=timezone.utc)


def _make_event(
    n: int,
    action: CueAction = CueAction.CUE_OUT,
    status: CueStatus = CueStatus.EXECUTED,
    stream: str = "default/app/s1",
) -> CueEvent:
    return CueEvent(
        id=f"evt-{n}",
        action=action,
        event_id=100023 + n,
        stream_name=stream,
        status=status,
        timestamp=T0 + timedelta(seconds=n),
        ad_duration_seconds=30.0 if action == CueAction.CUE_OUT else None,
        origin=CueOrigin.MANUAL,
    )


def _make_instruction(n: int, action: CueAction = CueAction.CUE_OUT) -> ScheduledInstruction:
    return ScheduledInstruction(
        id=f"sched-{n}",
        action=action,
        event_id=200000 + n,
        stream_name="default/app/s1",
        scheduled_time=T0 + timedelta(minutes=n),
        ad_duration_seconds=60.0 if action == CueAction.CUE_OUT else None,
        created_at=T0,
    )


# ---------------------------------------------------------------------------
# Cue events
# ---------------------------------------------------------------------------


class TestEvents:
    def test_empty_store(self):
        store = EventStore()
        assert store.list() == []
        assert len(store) == 0

    def test_append_keeps_insertion_order(self):
        store = EventStore()
        events = [_make_event(3), _make_event(1), _make_event(2)]
        for e in events:
            store.append(e)
        assert [e.id for e in store.list()] == ["evt-3", "evt-1", "evt-2"]
        assert len(store) == 3

    def test_list_is_a_snapshot(self):
        store = EventStore()
        store.append(_make_event(1))
        snapshot = store.list()
        store.append(_make_event(2))
        assert len(snapshot) == 1

    def test_duplicate_id_rejected(self):
        store = EventStore()
        store.append(_make_event(1))
        with pytest.raises(ValueError):
            store.append(_make_event(1))
        assert len(store) == 1

    def test_get(self):
        store = EventStore()
        store.append(_make_event(1))
        assert store.get("evt-1").event_id == 100024
        with pytest.raises(NotFoundError):
            store.get("missing")


# ---------------------------------------------------------------------------
# Scheduled instructions
# ---------------------------------------------------------------------------


class TestScheduled:
    def test_add_and_list_in_admission_order(self):
        store = EventStore()
        store.add_scheduled(_make_instruction(2))
        store.add_scheduled(_make_instruction(1))
        assert [i.id for i in store.list_scheduled()] == ["sched-2", "sched-1"]

    def test_duplicate_rejected(self):
        store = EventStore()
        store.add_scheduled(_make_instruction(1))
        with pytest.raises(ValueError):
            store.add_scheduled(_make_instruction(1))

    def test_update_replaces_record(self):
        store = EventStore()
        original = store.add_scheduled(_make_instruction(1))
        updated = store.update_scheduled(
            "sched-1", status=InstructionStatus.EXECUTED, executed_at=T0, cue_event_id="evt-9"
        )
        assert updated is not original
        assert original.status == InstructionStatus.SCHEDULED
        assert store.get_scheduled("sched-1") == updated
        assert updated.cue_event_id == "evt-9"

    def test_update_rejects_identity_fields(self):
        store = EventStore()
        store.add_scheduled(_make_instruction(1))
        with pytest.raises(ValueError):
            store.update_scheduled("sched-1", event_id=5)
        assert store.get_scheduled("sched-1").event_id == 200001

    def test_update_unknown(self):
        with pytest.raises(NotFoundError):
            EventStore().update_scheduled("nope", status=InstructionStatus.CANCELLED)

    def test_remove(self):
        store = EventStore()
        store.add_scheduled(_make_instruction(1))
        removed = store.remove_scheduled("sched-1")
        assert removed.id == "sched-1"
        assert store.list_scheduled() == []
        with pytest.raises(NotFoundError):
            store.remove_scheduled("sched-1")
        with pytest.raises(NotFoundError):
            store.get_scheduled("sched-1")


# ---------------------------------------------------------------------------
# Journal
# ---------------------------------------------------------------------------


class TestJournal:
    def test_missing_file_replays_empty(self, tmp_path):
        journal = EventJournal(tmp_path / "none.jsonl")
        assert list(journal.replay()) == []
        assert EventStore.from_journal(journal).list() == []

    def test_mutations_are_written_one_line_each(self, tmp_path):
        path = tmp_path / "nested" / "journal.jsonl"
        store = EventStore(journal=EventJournal(path))
        store.append(_make_event(1))
        store.add_scheduled(_make_instruction(1))
        store.update_scheduled("sched-1", status=InstructionStatus.CANCELLED)
        store.remove_scheduled("sched-1")

        lines = [json.loads(line) for line in path.read_text().splitlines()]
        assert [line["kind"] for line in lines] == ["event", "scheduled", "scheduled", "scheduled_removed"]
        assert lines[0]["record"]["action"] == "CUE_OUT"
        assert lines[2]["record"]["status"] == "CANCELLED"
        assert lines[3]["record"] == {"id": "sched-1"}

    def test_replay_rebuilds_store(self, tmp_path):
        path = tmp_path / "journal.jsonl"
        store = EventStore(journal=EventJournal(path))
        store.append(_make_event(1))
        store.append(_make_event(2, action=CueAction.CUE_IN, status=CueStatus.FAILED))
        store.add_scheduled(_make_instruction(1))
        store.add_scheduled(_make_instruction(2, action=CueAction.CUE_IN))
        store.update_scheduled("sched-1", status=InstructionStatus.EXECUTED, executed_at=T0, cue_event_id="evt-1")
        store.update_scheduled("sched-2", status=InstructionStatus.CANCELLED)
        store.remove_scheduled("sched-2")

        rebuilt = EventStore.from_journal(EventJournal(path))
        assert rebuilt.list() == store.list()
        assert rebuilt.list_scheduled() == store.list_scheduled()
        assert rebuilt.get_scheduled("sched-1").status == InstructionStatus.EXECUTED

    def test_replayed_store_keeps_journaling(self, tmp_path):
        path = tmp_path / "journal.jsonl"
        EventStore(journal=EventJournal(path)).append(_make_event(1))

        rebuilt = EventStore.from_journal(EventJournal(path))
        rebuilt.append(_make_event(2))

        again = EventStore.from_journal(EventJournal(path))
        assert [e.id for e in again.list()] == ["evt-1", "evt-2"]

    def test_corrupt_line_raises(self, tmp_path):
        path = tmp_path / "journal.jsonl"
        EventStore(journal=EventJournal(path)).append(_make_event(1))
        with path.open("a") as fh:
            fh.write("{not json\n")
        with pytest.raises(JournalError, match="line 2"):
            EventStore.from_journal(EventJournal(path))

    def test_unknown_kind_raises(self, tmp_path):
        path = tmp_path / "journal.jsonl"
        path.write_text(json.dumps({"kind": "mystery", "record": {}}) + "\n")
        with pytest.raises(JournalError):
            list(EventJournal(path).replay())

    def test_blank_lines_ignored(self, tmp_path):
        path = tmp_path / "journal.jsonl"
        EventStore(journal=EventJournal(path)).append(_make_event(1))
        with path.open("a") as fh:
            fh.write("\n\n")
        assert len(EventStore.from_journal(EventJournal(path))) == 1

    def test_plan_fields_survive_replay(self, tmp_path):
        path = tmp_path / "journal.jsonl"
        planned = replace(_make_instruction(1), plan_id="news-1800", break_name="mid-1", advertiser="Acme")
        EventStore(journal=EventJournal(path)).add_scheduled(planned)

        assert EventStore.from_journal(EventJournal(path)).get_scheduled("sched-1") == planned

    def test_write_failure_is_counted_and_state_kept(self, tmp_path):
        # tmp_path is a directory, so every append fails with an OSError
        store = EventStore(journal=EventJournal(tmp_path))

        store.append(_make_event(1))
        store.add_scheduled(_make_instruction(1))
        store.update_scheduled("sched-1", status=InstructionStatus.CANCELLED)
        store.remove_scheduled("sched-1")

        assert [e.id for e in store.list()] == ["evt-1"]
        assert store.list_scheduled() == []
        assert store.journal_failures == 4

"""Append-only JSON-lines journal for the event store.

Each store mutation is written as one line::

    {"kind": "event", "record": {...CueEventRead...}}
    {"kind": "scheduled", "record": {...ScheduledInstructionRead...}}
    {"kind": "scheduled_removed", "record": {"id": "sched_..."}}

Replaying the lines in order rebuilds the store. Scheduled records are
upserts keyed by ``id``; the last one wins.
"""

from __future__ import annotations

import json
import threading
from collections.abc import Iterator
from pathlib import Path

from ..domain.entities import CueEvent, ScheduledInstruction
from ..infra.exceptions import JournalError
from ..shared.schemas import CueEventRead, ScheduledInstructionRead

KIND_EVENT = "event"
KIND_SCHEDULED = "scheduled"
KIND_SCHEDULED_REMOVED = "scheduled_removed"


class EventJournal:
    """Durable append-only record of cue events and scheduled instructions."""

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)
        self._lock = threading.Lock()

    def record_event(self, event: CueEvent) -> None:
        self._write(KIND_EVENT, CueEventRead.model_validate(event).model_dump(mode="json"))

    def record_scheduled(self, instruction: ScheduledInstruction) -> None:
        self._write(
            KIND_SCHEDULED,
            ScheduledInstructionRead.model_validate(instruction).model_dump(mode="json"),
        )

    def record_removed(self, instruction_id: str) -> None:
        self._write(KIND_SCHEDULED_REMOVED, {"id": instruction_id})

    def replay(self) -> Iterator[tuple[str, CueEvent | ScheduledInstruction | str]]:
        """Yield ``(kind, payload)`` pairs in write order.

        The payload is a CueEvent, a ScheduledInstruction, or the removed
        instruction id. A missing file replays as empty.
        """
        if not self.path.exists():
            return
        with self.path.open("r", encoding="utf-8") as fh:
            for line_no, line in enumerate(fh, start=1):
                line = line.strip()
                if not line:
                    continue
                try:
                    entry = json.loads(line)
                    kind = entry["kind"]
                    record = entry["record"]
                    if kind == KIND_EVENT:
                        yield kind, CueEventRead.model_validate(record).to_entity()
                    elif kind == KIND_SCHEDULED:
                        yield kind, ScheduledInstructionRead.model_validate(record).to_entity()
                    elif kind == KIND_SCHEDULED_REMOVED:
                        yield kind, str(record["id"])
                    else:
                        raise JournalError(f"Unknown journal record kind {kind!r} at line {line_no}")
                except JournalError:
                    raise
                except (ValueError, KeyError, TypeError) as e:
                    raise JournalError(f"Corrupt journal line {line_no} in {self.path}: {e}") from e

    def _write(self, kind: str, record: dict) -> None:
        line = json.dumps({"kind": kind, "record": record}, separators=(",", ":"))
        with self._lock:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with self.path.open("a", encoding="utf-8") as fh:
                fh.write(line + "\n")

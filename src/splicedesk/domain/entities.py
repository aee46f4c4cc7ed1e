"""
Domain entities for SCTE-35 ad-break signaling.

CueEvent records a cue that was actually sent (or attempted) to the media
server. ScheduledInstruction records an operator intent that has not been
sent yet. Both are frozen; the event store replaces instructions wholesale
when their status changes.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import datetime
from enum import Enum

# splice_event_id is a 32-bit field
MAX_SPLICE_EVENT_ID = 0xFFFFFFFF


class CueAction(str, Enum):
    """CUE_OUT leaves program for an ad break, CUE_IN returns to program."""

    CUE_OUT = "CUE_OUT"
    CUE_IN = "CUE_IN"

    @property
    def splice_type(self) -> str:
        """Splice insert direction understood by the media server."""
        return "out" if self is CueAction.CUE_OUT else "in"


class CueStatus(str, Enum):
    SCHEDULED = "SCHEDULED"
    EXECUTED = "EXECUTED"
    CANCELLED = "CANCELLED"
    FAILED = "FAILED"


class InstructionStatus(str, Enum):
    SCHEDULED = "SCHEDULED"
    EXECUTED = "EXECUTED"
    CANCELLED = "CANCELLED"


class CueOrigin(str, Enum):
    """Which path emitted a cue."""

    MANUAL = "MANUAL"
    SCHEDULED = "SCHEDULED"
    AUTO_RETURN = "AUTO_RETURN"
    CRASH_OUT = "CRASH_OUT"


class StreamState(str, Enum):
    IDLE = "IDLE"
    AD_BREAK_ACTIVE = "AD_BREAK_ACTIVE"


def new_event_id() -> str:
    return f"evt_{uuid.uuid4().hex}"


def new_instruction_id() -> str:
    return f"sched_{uuid.uuid4().hex}"


@dataclass(frozen=True)
class CueEvent:
    """Record of an ad-insertion signal sent or attempted."""

    id: str
    action: CueAction
    event_id: int
    stream_name: str
    status: CueStatus
    timestamp: datetime
    ad_duration_seconds: float | None = None
    pre_roll_seconds: float | None = None
    message: str | None = None
    origin: CueOrigin = CueOrigin.MANUAL


@dataclass(frozen=True)
class ScheduledInstruction:
    """A future cue the dispatcher will hand to the engine once due."""

    id: str
    action: CueAction
    event_id: int
    stream_name: str
    scheduled_time: datetime
    status: InstructionStatus = InstructionStatus.SCHEDULED
    ad_duration_seconds: float | None = None
    pre_roll_seconds: float | None = None
    created_at: datetime | None = None
    executed_at: datetime | None = None
    cue_event_id: str | None = None
    plan_id: str | None = None
    break_name: str | None = None
    advertiser: str | None = None
    campaign: str | None = None


@dataclass(frozen=True)
class AdBreak:
    """One break of a program plan, timed from the program start.

    The CUE_OUT goes out ``pre_roll_seconds`` before the break starts and the
    CUE_IN when it ends.
    """

    offset_seconds: float
    duration_seconds: float
    pre_roll_seconds: float = 0.0
    event_id: int | None = None
    name: str | None = None
    advertiser: str | None = None
    campaign: str | None = None

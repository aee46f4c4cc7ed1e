"""
Pydantic schemas for API serialization and the event journal.

This module contains the Pydantic models used to serialize cue events and
scheduled instructions, both for HTTP responses and for journal records.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from ..domain.entities import (
    CueAction,
    CueEvent,
    CueOrigin,
    CueStatus,
    InstructionStatus,
    ScheduledInstruction,
)


class CueEventRead(BaseModel):
    """Schema for reading a cue event."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    action: CueAction
    event_id: int = Field(..., gt=0, description="Splice event id sent to the media server")
    stream_name: str
    status: CueStatus
    timestamp: datetime
    ad_duration_seconds: float | None = Field(None, ge=0)
    pre_roll_seconds: float | None = Field(None, ge=0)
    message: str | None = None
    origin: CueOrigin = CueOrigin.MANUAL

    def to_entity(self) -> CueEvent:
        return CueEvent(**self.model_dump())


class ScheduledInstructionRead(BaseModel):
    """Schema for reading a scheduled instruction."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    action: CueAction
    event_id: int = Field(..., gt=0)
    stream_name: str
    scheduled_time: datetime
    status: InstructionStatus
    ad_duration_seconds: float | None = Field(None, ge=0)
    pre_roll_seconds: float | None = Field(None, ge=0)
    created_at: datetime | None = None
    executed_at: datetime | None = None
    cue_event_id: str | None = None
    plan_id: str | None = None
    break_name: str | None = None
    advertiser: str | None = None
    campaign: str | None = None

    def to_entity(self) -> ScheduledInstruction:
        return ScheduledInstruction(**self.model_dump())


class EventSummary(BaseModel):
    """Counters shown above the event log."""

    total: int
    cue_out: int
    cue_in: int
    executed: int
    failed: int


class ScheduleSummary(BaseModel):
    """Counters shown above the schedule list."""

    upcoming: int
    executed: int
    cancelled: int

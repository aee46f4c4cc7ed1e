"""
REST API endpoints for SCTE-35 signaling.

Provides a frontend-agnostic JSON API over the SignalingService: immediate
cues, the scheduled instruction list, the event log and stream enumeration.
Operator errors are turned into ``{"code", "message"}`` bodies by the app's
exception handler.

Routes are plain ``def`` so FastAPI runs them in its threadpool; every cue
blocks on a gateway round trip.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from fastapi import APIRouter, Depends, Query, Request
from pydantic import BaseModel, Field

from ...domain.entities import AdBreak, CueAction, CueStatus, InstructionStatus
from ...runtime.event_query import EventFilter
from ...runtime.signaling_service import SignalingService
from ...shared.schemas import CueEventRead, ScheduledInstructionRead

router = APIRouter(prefix="/api/scte35", tags=["scte35"])
streams_router = APIRouter(prefix="/api/streams", tags=["streams"])


def get_service(request: Request) -> SignalingService:
    """The service the app was created with."""
    return request.app.state.service


# ============================================================================
# Pydantic Models for Request
# ============================================================================


class CueOutRequest(BaseModel):
    """Request model for an immediate CUE-OUT."""
    stream_name: str = Field(..., description="Stream as [vhost/][app/]stream")
    event_id: int | None = Field(None, description="Splice event id (default: next suggested)")
    ad_duration_seconds: float | None = Field(None, description="Break length; arms the auto-return")
    pre_roll_seconds: float | None = Field(None, description="Lead time before the cue takes effect")


class CueInRequest(BaseModel):
    """Request model for an immediate CUE-IN."""
    stream_name: str = Field(..., description="Stream as [vhost/][app/]stream")
    event_id: int | None = Field(None, description="Break to end (default: oldest open break)")


class CrashOutRequest(BaseModel):
    """Request model for an emergency return to program."""
    stream_name: str = Field(..., description="Stream as [vhost/][app/]stream")


class ScheduleRequest(BaseModel):
    """Request model for a future-dated cue."""
    stream_name: str = Field(..., description="Stream as [vhost/][app/]stream")
    action: str = Field(..., description="CUE_OUT or CUE_IN")
    scheduled_time: datetime = Field(..., description="Timezone-aware due time")
    event_id: int | None = Field(None, description="Splice event id (default: next suggested)")
    ad_duration_seconds: float | None = Field(None, description="CUE_OUT only")
    pre_roll_seconds: float | None = Field(None, description="CUE_OUT only")


class AdBreakSpec(BaseModel):
    """One break of a program plan."""
    offset_seconds: float = Field(..., ge=0, description="Break start, seconds after program start")
    duration_seconds: float = Field(..., gt=0, description="Break length in seconds")
    pre_roll_seconds: float = Field(0.0, ge=0, description="CUE_OUT lead time before the break")
    event_id: int | None = Field(None, description="Splice event id (default: next suggested)")
    name: str | None = None
    advertiser: str | None = None
    campaign: str | None = None


class PlanRequest(BaseModel):
    """Request model for scheduling a whole program's ad breaks."""
    stream_name: str = Field(..., description="Stream as [vhost/][app/]stream")
    plan_id: str = Field(..., description="Group tag shared by every instruction of the plan")
    program_start: datetime = Field(..., description="Timezone-aware program start")
    breaks: list[AdBreakSpec] = Field(..., min_length=1)


def _event_response(event) -> dict[str, Any]:
    status = "ok" if event.status == CueStatus.EXECUTED else "failed"
    return {"status": status, "event": CueEventRead.model_validate(event).model_dump(mode="json")}


def _instruction(instruction) -> dict[str, Any]:
    return ScheduledInstructionRead.model_validate(instruction).model_dump(mode="json")


# ============================================================================
# Immediate cues
# ============================================================================


@router.post("/cue-out")
def cue_out(body: CueOutRequest, service: SignalingService = Depends(get_service)) -> dict[str, Any]:
    """Start an ad break now."""
    event = service.inject_cue_out(
        body.stream_name, body.event_id, body.ad_duration_seconds, body.pre_roll_seconds
    )
    return _event_response(event)


@router.post("/cue-in")
def cue_in(body: CueInRequest, service: SignalingService = Depends(get_service)) -> dict[str, Any]:
    """End an ad break now."""
    return _event_response(service.inject_cue_in(body.stream_name, body.event_id))


@router.post("/crash-out")
def crash_out(body: CrashOutRequest, service: SignalingService = Depends(get_service)) -> dict[str, Any]:
    """Emergency CUE-IN with a fresh event id."""
    return _event_response(service.crash_out(body.stream_name))


# ============================================================================
# Event log
# ============================================================================


@router.get("/events")
def list_events(
    status: CueStatus | None = Query(None, description="Filter by event status"),
    action: CueAction | None = Query(None, description="Filter by cue action"),
    stream: str | None = Query(None, description="Stream as [vhost/][app/]stream"),
    since: datetime | None = Query(None, description="Inclusive lower bound on timestamp"),
    until: datetime | None = Query(None, description="Exclusive upper bound on timestamp"),
    search: str | None = Query(None, description="Text in stream name or message"),
    newest: bool = Query(True, description="Newest first"),
    limit: int | None = Query(None, ge=1),
    service: SignalingService = Depends(get_service),
) -> dict[str, Any]:
    """Query the event log."""
    filt = EventFilter(status=status, action=action, start=since, end=until, text=search, stream_name=stream)
    events = service.query_events(filt, newest=newest)
    if limit is not None:
        events = events[:limit]
    payload = [CueEventRead.model_validate(e).model_dump(mode="json") for e in events]
    return {"status": "ok", "events": payload, "count": len(payload)}


@router.get("/summary")
def summary(service: SignalingService = Depends(get_service)) -> dict[str, Any]:
    """Event and schedule counters plus open breaks."""
    return {"status": "ok", **service.summary()}


@router.get("/next-event-id")
def next_event_id(service: SignalingService = Depends(get_service)) -> dict[str, Any]:
    """Suggested splice event id for the next cue."""
    return {"status": "ok", "event_id": service.suggest_event_id()}


# ============================================================================
# Scheduled instructions
# ============================================================================


@router.get("/schedule")
def list_schedule(
    pending: bool = Query(False, description="Only SCHEDULED instructions"),
    plan_id: str | None = Query(None, description="Only instructions of this plan"),
    service: SignalingService = Depends(get_service),
) -> dict[str, Any]:
    """List scheduled instructions in admission order."""
    instructions = service.list_scheduled(plan_id)
    if pending:
        instructions = [i for i in instructions if i.status == InstructionStatus.SCHEDULED]
    return {"status": "ok", "instructions": [_instruction(i) for i in instructions], "count": len(instructions)}


@router.post("/schedule", status_code=201)
def create_schedule(body: ScheduleRequest, service: SignalingService = Depends(get_service)) -> dict[str, Any]:
    """Queue a future-dated cue."""
    instruction = service.schedule_event(
        body.stream_name,
        body.action,
        body.scheduled_time,
        event_id=body.event_id,
        ad_duration_seconds=body.ad_duration_seconds,
        pre_roll_seconds=body.pre_roll_seconds,
    )
    return {"status": "ok", "instruction": _instruction(instruction)}


@router.post("/schedule/{instruction_id}/cancel")
def cancel_schedule(instruction_id: str, service: SignalingService = Depends(get_service)) -> dict[str, Any]:
    """Cancel a SCHEDULED instruction."""
    return {"status": "ok", "instruction": _instruction(service.cancel_scheduled_event(instruction_id))}


@router.delete("/schedule/{instruction_id}")
def delete_schedule(instruction_id: str, service: SignalingService = Depends(get_service)) -> dict[str, Any]:
    """Remove an EXECUTED or CANCELLED instruction."""
    instruction = service.delete_scheduled_event(instruction_id)
    return {"status": "ok", "deleted": instruction.id}


# ============================================================================
# Program plans
# ============================================================================


@router.post("/plans", status_code=201)
def create_plan(body: PlanRequest, service: SignalingService = Depends(get_service)) -> dict[str, Any]:
    """Schedule a CUE_OUT/CUE_IN pair for every break of a program."""
    breaks = [AdBreak(**b.model_dump()) for b in body.breaks]
    instructions = service.schedule_plan(body.stream_name, body.plan_id, body.program_start, breaks)
    return {
        "status": "ok",
        "plan_id": body.plan_id,
        "instructions": [_instruction(i) for i in instructions],
        "count": len(instructions),
    }


@router.post("/plans/{plan_id}/cancel")
def cancel_plan(plan_id: str, service: SignalingService = Depends(get_service)) -> dict[str, Any]:
    """Cancel every pending instruction of a plan."""
    cancelled = service.cancel_plan(plan_id)
    return {
        "status": "ok",
        "plan_id": plan_id,
        "cancelled": [_instruction(i) for i in cancelled],
        "count": len(cancelled),
    }


# ============================================================================
# Streams
# ============================================================================


@streams_router.get("")
def list_streams(
    vhost: str | None = Query(None),
    app: str | None = Query(None),
    service: SignalingService = Depends(get_service),
) -> dict[str, Any]:
    """Enumerate streams on the media server with their ad-break state."""
    streams = [
        {**s, "state": service.stream_state(s["stream_name"]).value}
        for s in service.list_streams(vhost, app)
    ]
    return {"status": "ok", "streams": streams, "count": len(streams)}


@streams_router.get("/{stream_name:path}/state")
def stream_state(stream_name: str, service: SignalingService = Depends(get_service)) -> dict[str, Any]:
    """Ad-break state of one stream and its open breaks."""
    canonical = service.canonical_stream(stream_name)
    return {
        "status": "ok",
        "stream_name": canonical,
        "state": service.stream_state(canonical).value,
        "outstanding": [
            CueEventRead.model_validate(e).model_dump(mode="json") for e in service.engine.outstanding(canonical)
        ],
    }

"""
Shared plumbing for CLI commands: building the signaling service and
rendering results and errors.
"""

from __future__ import annotations

import json
from datetime import datetime
from typing import Any

import typer

from ..adapters.memory_gateway import InMemorySignalingGateway
from ..adapters.ome_gateway import OMESignalingGateway
from ..domain.entities import CueEvent, CueStatus, ScheduledInstruction
from ..infra.exceptions import SpliceDeskError
from ..infra.settings import settings
from ..runtime.signaling_service import SignalingService
from ..shared.schemas import CueEventRead, ScheduledInstructionRead


def get_service(dry_run: bool = False) -> SignalingService:
    """Build the service from settings; ``dry_run`` swaps in the in-memory gateway."""
    gateway = InMemorySignalingGateway() if dry_run else OMESignalingGateway.from_settings(settings)
    return SignalingService.from_settings(settings, gateway)


def parse_when(value: str) -> datetime:
    """Parse an ISO-8601 timestamp; naive values are taken as local time."""
    try:
        parsed = datetime.fromisoformat(value)
    except ValueError:
        raise typer.BadParameter(f"Invalid timestamp {value!r}; use ISO-8601, e.g. 2025-06-01T18:30:00") from None
    if parsed.tzinfo is None:
        parsed = parsed.astimezone()
    return parsed


def event_payload(event: CueEvent) -> dict[str, Any]:
    return CueEventRead.model_validate(event).model_dump(mode="json")


def instruction_payload(instruction: ScheduledInstruction) -> dict[str, Any]:
    return ScheduledInstructionRead.model_validate(instruction).model_dump(mode="json")


def echo_event(event: CueEvent, json_output: bool) -> None:
    """Print a cue event; exit 1 when it FAILED so scripts notice."""
    if json_output:
        status = "ok" if event.status == CueStatus.EXECUTED else "failed"
        typer.echo(json.dumps({"status": status, "event": event_payload(event)}, indent=2))
    else:
        typer.echo(f"{event.action.value} {event.status.value}")
        typer.echo(f"  ID: {event.id}")
        typer.echo(f"  Stream: {event.stream_name}")
        typer.echo(f"  Event ID: {event.event_id}")
        if event.ad_duration_seconds is not None:
            typer.echo(f"  Duration: {event.ad_duration_seconds:g}s")
        if event.pre_roll_seconds:
            typer.echo(f"  Pre-roll: {event.pre_roll_seconds:g}s")
        typer.echo(f"  Sent: {event.timestamp.isoformat()}")
        if event.message:
            typer.echo(f"  Message: {event.message}")
    if event.status != CueStatus.EXECUTED:
        raise typer.Exit(1)


def fail(error: SpliceDeskError, json_output: bool) -> None:
    """Report an operator error and exit 1."""
    if json_output:
        typer.echo(json.dumps({"status": "error", "code": error.code, "message": error.message}, indent=2))
    else:
        typer.echo(f"Error [{error.code}]: {error.message}", err=True)
    raise typer.Exit(1)

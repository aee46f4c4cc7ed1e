from __future__ import annotations

import json
from datetime import timedelta

import typer

from ...domain.entities import AdBreak, InstructionStatus
from ...infra.exceptions import SpliceDeskError
from ...runtime.event_query import summarize_schedule
from .. import context as _ctx

app = typer.Typer(name="schedule", help="Future-dated SCTE-35 cue instructions")


@app.command("add")
def add_instruction(
    stream: str = typer.Argument(..., help="Stream as [vhost/][app/]stream"),
    action: str = typer.Option("CUE_OUT", "--action", "-a", help="CUE_OUT or CUE_IN"),
    at: str | None = typer.Option(None, "--at", help="Due time, ISO-8601 (naive values are local time)"),
    in_seconds: float | None = typer.Option(None, "--in", help="Due this many seconds from now"),
    event_id: int | None = typer.Option(None, "--event-id", "-e", help="Splice event id (default: next suggested)"),
    duration: float | None = typer.Option(None, "--duration", "-d", help="Ad break length in seconds (CUE_OUT only)"),
    pre_roll: float | None = typer.Option(None, "--pre-roll", help="Lead time in seconds"),
    dry_run: bool = typer.Option(False, "--dry-run", help="Use the in-memory gateway instead of OME"),
    json_output: bool = typer.Option(False, "--json", help="Output in JSON format"),
):
    """Schedule a cue for a future time.

    Examples:
        splicedesk schedule add live/stream1 --at 2025-06-01T18:30:00 --duration 120
        splicedesk schedule add stream1 --in 90 --action CUE_IN --event-id 100023
    """
    if (at is None) == (in_seconds is None):
        raise typer.BadParameter("Give exactly one of --at or --in")

    service = _ctx.get_service(dry_run)
    if at is not None:
        when = _ctx.parse_when(at)
    else:
        when = service.clock.now_utc() + timedelta(seconds=in_seconds)

    try:
        instruction = service.schedule_event(
            stream,
            action,
            when,
            event_id=event_id,
            ad_duration_seconds=duration,
            pre_roll_seconds=pre_roll,
        )
    except SpliceDeskError as e:
        _ctx.fail(e, json_output)
        return

    if json_output:
        typer.echo(json.dumps({"status": "ok", "instruction": _ctx.instruction_payload(instruction)}, indent=2))
    else:
        typer.echo("Cue scheduled:")
        typer.echo(f"  ID: {instruction.id}")
        typer.echo(f"  Stream: {instruction.stream_name}")
        typer.echo(f"  Action: {instruction.action.value}")
        typer.echo(f"  Event ID: {instruction.event_id}")
        typer.echo(f"  Due: {instruction.scheduled_time.isoformat()}")
        if instruction.ad_duration_seconds is not None:
            typer.echo(f"  Duration: {instruction.ad_duration_seconds:g}s")


@app.command("list")
def list_instructions(
    pending_only: bool = typer.Option(False, "--pending", help="Show only SCHEDULED instructions"),
    plan_id: str | None = typer.Option(None, "--plan", help="Show only instructions of this plan"),
    dry_run: bool = typer.Option(False, "--dry-run", help="Use the in-memory gateway instead of OME"),
    json_output: bool = typer.Option(False, "--json", help="Output in JSON format"),
):
    """List scheduled instructions in admission order."""
    service = _ctx.get_service(dry_run)
    instructions = service.list_scheduled(plan_id)
    if pending_only:
        instructions = [i for i in instructions if i.status == InstructionStatus.SCHEDULED]
    summary = summarize_schedule(service.list_scheduled(), service.clock.now_utc())

    if json_output:
        payload = {
            "status": "ok",
            "summary": summary.model_dump(),
            "instructions": [_ctx.instruction_payload(i) for i in instructions],
        }
        typer.echo(json.dumps(payload, indent=2))
        return

    typer.echo(
        f"Upcoming: {summary.upcoming}  Executed: {summary.executed}  Cancelled: {summary.cancelled}"
    )
    if not instructions:
        typer.echo("No scheduled instructions.")
        return
    for i in instructions:
        duration = f"{i.ad_duration_seconds:g}s" if i.ad_duration_seconds is not None else "-"
        typer.echo(
            f"{i.id}  {i.scheduled_time.isoformat()}  {i.stream_name}  {i.action.value}"
            f"  #{i.event_id}  {duration}  {i.status.value}"
        )


@app.command("cancel")
def cancel_instruction(
    instruction_id: str = typer.Argument(..., help="Scheduled instruction id"),
    dry_run: bool = typer.Option(False, "--dry-run", help="Use the in-memory gateway instead of OME"),
    json_output: bool = typer.Option(False, "--json", help="Output in JSON format"),
):
    """Cancel a SCHEDULED instruction before it fires."""
    service = _ctx.get_service(dry_run)
    try:
        instruction = service.cancel_scheduled_event(instruction_id)
    except SpliceDeskError as e:
        _ctx.fail(e, json_output)
        return
    if json_output:
        typer.echo(json.dumps({"status": "ok", "instruction": _ctx.instruction_payload(instruction)}, indent=2))
    else:
        typer.echo(f"Cancelled {instruction.id}")


@app.command("delete")
def delete_instruction(
    instruction_id: str = typer.Argument(..., help="Scheduled instruction id"),
    dry_run: bool = typer.Option(False, "--dry-run", help="Use the in-memory gateway instead of OME"),
    json_output: bool = typer.Option(False, "--json", help="Output in JSON format"),
):
    """Remove an EXECUTED or CANCELLED instruction from the list."""
    service = _ctx.get_service(dry_run)
    try:
        instruction = service.delete_scheduled_event(instruction_id)
    except SpliceDeskError as e:
        _ctx.fail(e, json_output)
        return
    if json_output:
        typer.echo(json.dumps({"status": "ok", "deleted": instruction.id}, indent=2))
    else:
        typer.echo(f"Deleted {instruction.id}")


def _parse_break(spec: str, advertiser: str | None, campaign: str | None) -> AdBreak:
    """``OFFSET:DURATION[:PRE_ROLL]`` in seconds."""
    parts = spec.split(":")
    if len(parts) not in (2, 3):
        raise typer.BadParameter(f"Invalid break {spec!r}; use OFFSET:DURATION[:PRE_ROLL]")
    try:
        values = [float(p) for p in parts]
    except ValueError:
        raise typer.BadParameter(f"Invalid break {spec!r}; seconds must be numbers") from None
    return AdBreak(
        offset_seconds=values[0],
        duration_seconds=values[1],
        pre_roll_seconds=values[2] if len(values) == 3 else 0.0,
        advertiser=advertiser,
        campaign=campaign,
    )


@app.command("plan")
def schedule_plan(
    stream: str = typer.Argument(..., help="Stream as [vhost/][app/]stream"),
    plan_id: str = typer.Option(..., "--plan", "-p", help="Plan id shared by all of its instructions"),
    start: str = typer.Option(..., "--start", help="Program start, ISO-8601 (naive values are local time)"),
    breaks: list[str] = typer.Option(..., "--break", "-b", help="OFFSET:DURATION[:PRE_ROLL] in seconds; repeatable"),
    advertiser: str | None = typer.Option(None, "--advertiser", help="Advertiser recorded on every break"),
    campaign: str | None = typer.Option(None, "--campaign", help="Campaign recorded on every break"),
    dry_run: bool = typer.Option(False, "--dry-run", help="Use the in-memory gateway instead of OME"),
    json_output: bool = typer.Option(False, "--json", help="Output in JSON format"),
):
    """Schedule every ad break of a program as CUE_OUT/CUE_IN pairs.

    Examples:
        splicedesk schedule plan live/stream1 --plan news-1800 --start 2025-06-01T18:00:00 \\
            --break 600:120:5 --break 1500:90
    """
    ad_breaks = [_parse_break(b, advertiser, campaign) for b in breaks]
    service = _ctx.get_service(dry_run)
    try:
        instructions = service.schedule_plan(stream, plan_id, _ctx.parse_when(start), ad_breaks)
    except SpliceDeskError as e:
        _ctx.fail(e, json_output)
        return

    if json_output:
        payload = {
            "status": "ok",
            "plan_id": plan_id,
            "instructions": [_ctx.instruction_payload(i) for i in instructions],
        }
        typer.echo(json.dumps(payload, indent=2))
        return
    typer.echo(f"Plan {plan_id}: {len(ad_breaks)} break(s), {len(instructions)} instruction(s)")
    for i in instructions:
        typer.echo(f"  {i.id}  {i.scheduled_time.isoformat()}  {i.action.value}  #{i.event_id}")


@app.command("cancel-plan")
def cancel_plan(
    plan_id: str = typer.Argument(..., help="Plan id"),
    dry_run: bool = typer.Option(False, "--dry-run", help="Use the in-memory gateway instead of OME"),
    json_output: bool = typer.Option(False, "--json", help="Output in JSON format"),
):
    """Cancel every pending instruction of a plan."""
    service = _ctx.get_service(dry_run)
    try:
        cancelled = service.cancel_plan(plan_id)
    except SpliceDeskError as e:
        _ctx.fail(e, json_output)
        return
    if json_output:
        payload = {"status": "ok", "plan_id": plan_id, "cancelled": [i.id for i in cancelled]}
        typer.echo(json.dumps(payload, indent=2))
    else:
        typer.echo(f"Cancelled {len(cancelled)} instruction(s) of plan {plan_id}")

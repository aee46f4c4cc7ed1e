from __future__ import annotations

import time

import typer

from ...domain.entities import CueStatus
from ...infra.exceptions import SpliceDeskError
from ...runtime.cue_engine import AUTO_RETURN_PREFIX
from .. import context as _ctx

app = typer.Typer(name="cue", help="Immediate SCTE-35 cue injection")


@app.command("out")
def cue_out(
    stream: str = typer.Argument(..., help="Stream as [vhost/][app/]stream"),
    event_id: int | None = typer.Option(None, "--event-id", "-e", help="Splice event id (default: next suggested)"),
    duration: float | None = typer.Option(None, "--duration", "-d", help="Ad break length in seconds; arms the auto-return"),
    pre_roll: float | None = typer.Option(None, "--pre-roll", help="Lead time in seconds before the cue takes effect"),
    wait: bool = typer.Option(False, "--wait", help="Stay running until the auto-return CUE-IN has fired"),
    dry_run: bool = typer.Option(False, "--dry-run", help="Use the in-memory gateway instead of OME"),
    json_output: bool = typer.Option(False, "--json", help="Output in JSON format"),
):
    """Start an ad break (CUE-OUT) now.

    Examples:
        splicedesk cue out live/stream1 --event-id 100023 --duration 600
        splicedesk cue out stream1 -d 30 --wait
    """
    service = _ctx.get_service(dry_run)
    try:
        event = service.inject_cue_out(stream, event_id, duration, pre_roll)
    except SpliceDeskError as e:
        _ctx.fail(e, json_output)
        return

    if wait and event.status == CueStatus.EXECUTED and duration:
        if not json_output:
            typer.echo(f"Waiting {duration:g}s for auto-return...")
        with service:
            while service.dispatcher.is_armed(AUTO_RETURN_PREFIX + event.id):
                time.sleep(0.2)
    _ctx.echo_event(event, json_output)


@app.command("in")
def cue_in(
    stream: str = typer.Argument(..., help="Stream as [vhost/][app/]stream"),
    event_id: int | None = typer.Option(None, "--event-id", "-e", help="Splice event id of the break to end (default: oldest open break)"),
    dry_run: bool = typer.Option(False, "--dry-run", help="Use the in-memory gateway instead of OME"),
    json_output: bool = typer.Option(False, "--json", help="Output in JSON format"),
):
    """End an ad break (CUE-IN) now. Requires an outstanding CUE-OUT on the stream."""
    service = _ctx.get_service(dry_run)
    try:
        event = service.inject_cue_in(stream, event_id)
    except SpliceDeskError as e:
        _ctx.fail(e, json_output)
        return
    _ctx.echo_event(event, json_output)


@app.command("crash-out")
def crash_out(
    stream: str = typer.Argument(..., help="Stream as [vhost/][app/]stream"),
    dry_run: bool = typer.Option(False, "--dry-run", help="Use the in-memory gateway instead of OME"),
    json_output: bool = typer.Option(False, "--json", help="Output in JSON format"),
):
    """Emergency return to program: immediate CUE-IN with a fresh event id."""
    service = _ctx.get_service(dry_run)
    try:
        event = service.crash_out(stream)
    except SpliceDeskError as e:
        _ctx.fail(e, json_output)
        return
    _ctx.echo_event(event, json_output)

from __future__ import annotations

import json

import typer

from ...domain.entities import CueAction, CueStatus
from ...infra.exceptions import SpliceDeskError
from ...runtime.event_query import EventFilter, summarize_events
from .. import context as _ctx

app = typer.Typer(name="events", help="SCTE-35 event log")


def _parse_enum(enum_cls, value: str | None, option: str):
    if value is None:
        return None
    normalized = value.strip().upper().replace("-", "_")
    try:
        return enum_cls(normalized)
    except ValueError:
        choices = ", ".join(m.value for m in enum_cls)
        raise typer.BadParameter(f"{option} must be one of: {choices}") from None


@app.command("list")
def list_events(
    status: str | None = typer.Option(None, "--status", help="EXECUTED, FAILED, SCHEDULED or CANCELLED"),
    action: str | None = typer.Option(None, "--action", help="CUE_OUT or CUE_IN"),
    stream: str | None = typer.Option(None, "--stream", help="Stream as [vhost/][app/]stream"),
    since: str | None = typer.Option(None, "--since", help="Inclusive lower bound, ISO-8601"),
    until: str | None = typer.Option(None, "--until", help="Exclusive upper bound, ISO-8601"),
    search: str | None = typer.Option(None, "--search", "-s", help="Case-insensitive text in stream name or message"),
    limit: int | None = typer.Option(None, "--limit", "-n", min=1, help="Show at most N events"),
    dry_run: bool = typer.Option(False, "--dry-run", help="Use the in-memory gateway instead of OME"),
    json_output: bool = typer.Option(False, "--json", help="Output in JSON format"),
):
    """Show the event log, newest first.

    Examples:
        splicedesk events list --status FAILED
        splicedesk events list --action CUE_OUT --since 2025-06-01T00:00:00 --search live
    """
    filt = EventFilter(
        status=_parse_enum(CueStatus, status, "--status"),
        action=_parse_enum(CueAction, action, "--action"),
        start=_ctx.parse_when(since) if since else None,
        end=_ctx.parse_when(until) if until else None,
        text=search,
        stream_name=stream,
    )
    service = _ctx.get_service(dry_run)
    try:
        events = service.query_events(filt, newest=True)
    except SpliceDeskError as e:
        _ctx.fail(e, json_output)
        return
    if limit is not None:
        events = events[:limit]

    if json_output:
        typer.echo(json.dumps({"status": "ok", "events": [_ctx.event_payload(e) for e in events]}, indent=2))
        return

    if not events:
        typer.echo("No events.")
        return
    for e in events:
        duration = f"{e.ad_duration_seconds:g}s" if e.ad_duration_seconds is not None else "-"
        line = (
            f"{e.timestamp.isoformat()}  {e.stream_name}  {e.action.value:<7}  #{e.event_id}"
            f"  {duration}  {e.status.value}  {e.origin.value}"
        )
        if e.message:
            line += f"  ({e.message})"
        typer.echo(line)


@app.command("stats")
def event_stats(
    dry_run: bool = typer.Option(False, "--dry-run", help="Use the in-memory gateway instead of OME"),
    json_output: bool = typer.Option(False, "--json", help="Output in JSON format"),
):
    """Show event counters, active ad breaks and the next suggested event id."""
    service = _ctx.get_service(dry_run)
    summary = service.summary()
    if json_output:
        typer.echo(json.dumps({"status": "ok", **summary}, indent=2))
        return

    counts = summarize_events(service.store.list())
    typer.echo(f"Total events: {counts.total}")
    typer.echo(f"  CUE-OUT: {counts.cue_out}")
    typer.echo(f"  CUE-IN: {counts.cue_in}")
    typer.echo(f"  Executed: {counts.executed}")
    typer.echo(f"  Failed: {counts.failed}")
    active = summary["active_streams"]
    typer.echo(f"Active ad breaks: {', '.join(active) if active else 'none'}")
    typer.echo(f"Next event id: {summary['next_event_id']}")

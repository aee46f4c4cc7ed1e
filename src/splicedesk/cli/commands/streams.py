from __future__ import annotations

import json

import typer

from ...infra.exceptions import SpliceDeskError
from .. import context as _ctx

app = typer.Typer(name="streams", help="Media server stream enumeration")


@app.command("list")
def list_streams(
    vhost: str | None = typer.Option(None, "--vhost", help="Restrict to one virtual host"),
    app_name: str | None = typer.Option(None, "--app", help="Restrict to one application"),
    dry_run: bool = typer.Option(False, "--dry-run", help="Use the in-memory gateway instead of OME"),
    json_output: bool = typer.Option(False, "--json", help="Output in JSON format"),
):
    """List streams with their ad-break state."""
    service = _ctx.get_service(dry_run)
    try:
        streams = service.list_streams(vhost, app_name)
    except SpliceDeskError as e:
        _ctx.fail(e, json_output)
        return

    rows = [{**s, "state": service.stream_state(s["stream_name"]).value} for s in streams]
    if json_output:
        typer.echo(json.dumps({"status": "ok", "streams": rows}, indent=2))
        return
    if not rows:
        typer.echo("No streams.")
        return
    for row in rows:
        typer.echo(f"{row['stream_name']}  {row['state']}")

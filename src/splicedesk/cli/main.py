"""
Main CLI application using Typer with router-based command dispatch.

This module provides the command-line interface for SpliceDesk, calling the
signaling service and outputting JSON when requested.

All command groups are registered through the CliRouter.
"""

from __future__ import annotations

import typer

from ..infra.logging import configure_logging
from ..infra.settings import settings
from . import context as _ctx
from .commands import cue, events, schedule, streams
from .router import CliRouter

app = typer.Typer(help="SpliceDesk SCTE-35 operator CLI")

router = CliRouter(app)

router.register("cue", cue.app, help_text="Immediate CUE-OUT / CUE-IN / crash-out")
router.register("schedule", schedule.app, help_text="Future-dated cue instructions")
router.register("events", events.app, help_text="Cue event log and statistics")
router.register("streams", streams.app, help_text="Stream enumeration on the media server")


@app.command("serve")
def serve(
    host: str = typer.Option(None, "--host", help="Bind address (default: API_HOST)"),
    port: int = typer.Option(None, "--port", "-p", help="Bind port (default: API_PORT)"),
    dry_run: bool = typer.Option(False, "--dry-run", help="Use the in-memory gateway instead of OME"),
):
    """Run the HTTP API with the dispatcher, so scheduled cues fire."""
    import uvicorn

    from ..web.server import create_app

    service = _ctx.get_service(dry_run)
    uvicorn.run(create_app(service), host=host or settings.api_host, port=port or settings.api_port)


@app.callback()
def main(
    log_level: str = typer.Option(None, "--log-level", help="Override LOG_LEVEL"),
):
    """SpliceDesk - SCTE-35 ad-break signaling for OvenMediaEngine."""
    configure_logging(log_level)


def cli():
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    cli()

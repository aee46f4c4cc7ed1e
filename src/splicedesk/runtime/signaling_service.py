"""Signaling service: the one handle presentation layers hold.

Wires the event store, dispatcher and cue lifecycle engine together and
exposes the operator operations: immediate cues, scheduling, and read-only
queries. The CLI and the HTTP API depend on this class only.
"""

from __future__ import annotations

from dataclasses import replace
from collections.abc import Sequence
from datetime import datetime
from pathlib import Path
from typing import Any

from ..adapters.gateway import SignalingGateway, StreamRef
from ..domain.entities import AdBreak, CueAction, CueEvent, ScheduledInstruction, StreamState
from ..infra.exceptions import ValidationError
from ..infra.settings import Settings
from .clock import Clock, MasterClock
from .cue_engine import CueLifecycleEngine
from .dispatcher import Dispatcher
from .event_query import (
    EventFilter,
    newest_first,
    query_events,
    suggest_next_event_id,
    summarize_events,
    summarize_schedule,
)
from .event_store import EventStore
from .journal import EventJournal


class SignalingService:
    """Facade over the signaling runtime."""

    def __init__(
        self,
        gateway: SignalingGateway,
        *,
        store: EventStore | None = None,
        clock: Clock | None = None,
        dispatcher: Dispatcher | None = None,
        sweep_interval_seconds: float = 5.0,
        dispatch_workers: int = 4,
        event_id_start: int = 100023,
        default_vhost: str = "default",
        default_app: str = "app",
    ) -> None:
        self.clock = clock if clock is not None else MasterClock()
        self.store = store if store is not None else EventStore()
        self.gateway = gateway
        self.dispatcher = dispatcher if dispatcher is not None else Dispatcher(
            self.clock, sweep_interval_seconds, max_workers=dispatch_workers
        )
        self.engine = CueLifecycleEngine(
            self.store,
            gateway,
            self.dispatcher,
            self.clock,
            event_id_start=event_id_start,
        )
        self.dispatcher.add_sweep_hook(self.engine.rearm_overdue)
        self._event_id_start = event_id_start
        self._default_vhost = default_vhost
        self._default_app = default_app

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        gateway: SignalingGateway,
        *,
        clock: Clock | None = None,
    ) -> SignalingService:
        """Build a service, replaying ``settings.journal_path`` when set."""
        store = None
        if settings.journal_path:
            store = EventStore.from_journal(EventJournal(Path(settings.journal_path).expanduser()))
        service = cls(
            gateway,
            store=store,
            clock=clock,
            sweep_interval_seconds=settings.dispatch_sweep_seconds,
            dispatch_workers=settings.dispatch_workers,
            event_id_start=settings.event_id_start,
            default_vhost=settings.ome_vhost,
            default_app=settings.ome_app,
        )
        if store is not None:
            service.engine.restore()
        return service

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start(self) -> None:
        self.dispatcher.start()

    def stop(self) -> None:
        self.dispatcher.stop()

    def __enter__(self) -> SignalingService:
        self.start()
        return self

    def __exit__(self, *exc_info) -> None:
        self.stop()

    # ------------------------------------------------------------------
    # Operator commands
    # ------------------------------------------------------------------

    def inject_cue_out(
        self,
        stream_name: str,
        event_id: int | None = None,
        ad_duration_seconds: float | None = None,
        pre_roll_seconds: float | None = None,
    ) -> CueEvent:
        if event_id is None:
            event_id = self.suggest_event_id()
        return self.engine.inject_cue_out(
            self.canonical_stream(stream_name), event_id, ad_duration_seconds, pre_roll_seconds
        )

    def inject_cue_in(self, stream_name: str, event_id: int | None = None) -> CueEvent:
        """Send a CUE-IN; without ``event_id`` it answers the oldest open break."""
        stream_name = self.canonical_stream(stream_name)
        if event_id is None:
            open_breaks = self.engine.outstanding(stream_name)
            event_id = open_breaks[0].event_id if open_breaks else self.suggest_event_id()
        return self.engine.inject_cue_in(stream_name, event_id)

    def crash_out(self, stream_name: str) -> CueEvent:
        return self.engine.crash_out(self.canonical_stream(stream_name))

    def schedule_event(
        self,
        stream_name: str,
        action: CueAction | str,
        scheduled_time: datetime,
        event_id: int | None = None,
        ad_duration_seconds: float | None = None,
        pre_roll_seconds: float | None = None,
    ) -> ScheduledInstruction:
        return self.engine.schedule_event(
            self.canonical_stream(stream_name),
            action,
            scheduled_time,
            event_id=event_id,
            ad_duration_seconds=ad_duration_seconds,
            pre_roll_seconds=pre_roll_seconds,
        )

    def canonical_stream(self, stream_name: str) -> str:
        """Expand ``stream`` or ``app/stream`` to ``vhost/app/stream``."""
        if not isinstance(stream_name, str) or not stream_name.strip():
            raise ValidationError("stream_name must be a non-empty string", "INVALID_STREAM")
        try:
            ref = StreamRef.parse(stream_name, self._default_vhost, self._default_app)
        except ValueError as e:
            raise ValidationError(str(e), "INVALID_STREAM") from e
        return str(ref)

    def cancel_scheduled_event(self, instruction_id: str) -> ScheduledInstruction:
        return self.engine.cancel_scheduled_event(instruction_id)

    def delete_scheduled_event(self, instruction_id: str) -> ScheduledInstruction:
        return self.engine.delete_scheduled_event(instruction_id)

    def schedule_plan(
        self,
        stream_name: str,
        plan_id: str,
        program_start: datetime,
        breaks: Sequence[AdBreak],
    ) -> list[ScheduledInstruction]:
        """Schedule every break of a program; see CueLifecycleEngine.schedule_plan."""
        return self.engine.schedule_plan(self.canonical_stream(stream_name), plan_id, program_start, breaks)

    def cancel_plan(self, plan_id: str) -> list[ScheduledInstruction]:
        return self.engine.cancel_plan(plan_id)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def query_events(self, filt: EventFilter | None = None, *, newest: bool = False) -> list[CueEvent]:
        if filt is not None and filt.stream_name:
            filt = replace(filt, stream_name=self.canonical_stream(filt.stream_name))
        events = query_events(self.store.list(), filt)
        return newest_first(events) if newest else events

    def list_scheduled(self, plan_id: str | None = None) -> list[ScheduledInstruction]:
        instructions = self.store.list_scheduled()
        if plan_id is not None:
            instructions = [i for i in instructions if i.plan_id == plan_id]
        return instructions

    def suggest_event_id(self) -> int:
        return suggest_next_event_id(self.store.list(), self.store.list_scheduled(), self._event_id_start)

    def stream_state(self, stream_name: str) -> StreamState:
        return self.engine.stream_state(self.canonical_stream(stream_name))

    def summary(self) -> dict[str, Any]:
        return {
            "events": summarize_events(self.store.list()).model_dump(),
            "schedule": summarize_schedule(self.store.list_scheduled(), self.clock.now_utc()).model_dump(),
            "active_streams": self.engine.active_streams(),
            "next_event_id": self.suggest_event_id(),
            "journal_failures": self.store.journal_failures,
        }

    def list_streams(self, vhost: str | None = None, app: str | None = None) -> list[dict[str, Any]]:
        """Enumerate streams for pickers, walking vhosts/apps when not given."""
        vhosts = [vhost] if vhost else self.gateway.list_vhosts()
        streams: list[dict[str, Any]] = []
        for vh in vhosts:
            apps = [app] if app else self.gateway.list_apps(vh)
            for ap in apps:
                for entry in self.gateway.list_streams(vh, ap):
                    ref = StreamRef(vh, ap, entry["name"])
                    streams.append({**entry, "stream_name": str(ref)})
        return streams

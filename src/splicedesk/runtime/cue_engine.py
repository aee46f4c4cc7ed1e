"""Cue Lifecycle Engine: per-stream ad-break state machine.

Pattern: State Machine + Command Recorder

Each stream is either IDLE (no outstanding CUE-OUT) or AD_BREAK_ACTIVE
(a CUE-OUT was sent and its CUE-IN is pending).

    IDLE --inject_cue_out--> AD_BREAK_ACTIVE
    AD_BREAK_ACTIVE --inject_cue_in / auto-return / crash_out--> IDLE

Rules:
- Validation happens before any gateway call; a rejected request leaves
  the store untouched.
- Every gateway call produces exactly one CueEvent, EXECUTED or FAILED.
  Gateway failures are recorded, never retried and never raised.
- An EXECUTED CUE-OUT with a positive duration arms an auto-return timer
  that sends the matching CUE-IN unless the break was closed first.
- A second CUE-OUT while one is outstanding is sent and does not touch the
  first's auto-return. Reusing an outstanding event id is flagged in
  ``message`` only; the media server decides whether to accept it.
- crash_out skips the outstanding check, uses a fresh in-range event id
  and, once sent, closes every outstanding break on the stream.
- A program plan is admitted as CUE_OUT/CUE_IN instruction pairs sharing a
  plan_id, and cancel_plan cancels whatever of it is still pending.

All operations on one stream serialize on that stream's lock, including
dispatcher fires and cancels, and the gateway call happens while the lock
is held. Different streams never wait on each other.
"""

from __future__ import annotations

import math
import threading
from collections.abc import Iterator, Sequence
from contextlib import contextmanager
from datetime import datetime, timedelta
from functools import partial

from ..adapters.gateway import CueRequest, SignalingGateway
from ..domain.entities import (
    MAX_SPLICE_EVENT_ID,
    AdBreak,
    CueAction,
    CueEvent,
    CueOrigin,
    CueStatus,
    InstructionStatus,
    ScheduledInstruction,
    StreamState,
    new_event_id,
    new_instruction_id,
)
from ..infra.exceptions import GatewayError, NotFoundError, StateConflictError, ValidationError
from ..infra.logging import get_logger
from .clock import Clock
from .dispatcher import Dispatcher
from .event_query import suggest_next_event_id
from .event_store import EventStore

AUTO_RETURN_PREFIX = "auto_return:"


class CueLifecycleEngine:
    """Turns operator intents into gateway calls and event store records."""

    def __init__(
        self,
        store: EventStore,
        gateway: SignalingGateway,
        dispatcher: Dispatcher,
        clock: Clock,
        *,
        event_id_start: int = 100023,
    ) -> None:
        self._store = store
        self._gateway = gateway
        self._dispatcher = dispatcher
        self._clock = clock
        self._event_id_start = event_id_start
        self._logger = get_logger(__name__)

        # stream_name -> {cue_out CueEvent.id -> CueEvent}, oldest first
        self._outstanding: dict[str, dict[str, CueEvent]] = {}
        self._stream_locks: dict[str, threading.Lock] = {}
        self._locks_guard = threading.Lock()

    # ------------------------------------------------------------------
    # Immediate cues
    # ------------------------------------------------------------------

    def inject_cue_out(
        self,
        stream_name: str,
        event_id: int,
        ad_duration_seconds: float | None = None,
        pre_roll_seconds: float | None = None,
    ) -> CueEvent:
        """Start an ad break now."""
        _validate_stream_name(stream_name)
        _validate_event_id(event_id)
        _validate_seconds(ad_duration_seconds, "ad_duration_seconds", "INVALID_DURATION")
        _validate_seconds(pre_roll_seconds, "pre_roll_seconds", "INVALID_PRE_ROLL")
        with self._locked(stream_name):
            return self._emit_cue_out(
                stream_name, event_id, ad_duration_seconds, pre_roll_seconds, CueOrigin.MANUAL
            )

    def inject_cue_in(self, stream_name: str, event_id: int) -> CueEvent:
        """End an ad break now.

        Raises:
            StateConflictError: NO_OUTSTANDING_CUE_OUT when the stream is idle
        """
        _validate_stream_name(stream_name)
        _validate_event_id(event_id)
        with self._locked(stream_name):
            return self._emit_cue_in(stream_name, event_id, CueOrigin.MANUAL)

    def crash_out(self, stream_name: str) -> CueEvent:
        """Return to program immediately, whatever the stream's state."""
        _validate_stream_name(stream_name)
        with self._locked(stream_name):
            event_id = self._suggest_event_id()
            event = self._send(
                stream_name,
                CueAction.CUE_IN,
                event_id,
                origin=CueOrigin.CRASH_OUT,
            )
            if event.status == CueStatus.EXECUTED:
                with self._locks_guard:
                    closed = self._outstanding.pop(stream_name, {})
                for cue_out in closed.values():
                    self._dispatcher.disarm(AUTO_RETURN_PREFIX + cue_out.id)
                self._logger.warning(
                    "crash_out_executed", stream=stream_name, event_id=event_id, closed_breaks=len(closed)
                )
            return event

    # ------------------------------------------------------------------
    # Scheduling
    # ------------------------------------------------------------------

    def schedule_event(
        self,
        stream_name: str,
        action: CueAction | str,
        scheduled_time: datetime,
        event_id: int | None = None,
        ad_duration_seconds: float | None = None,
        pre_roll_seconds: float | None = None,
    ) -> ScheduledInstruction:
        """Admit a future cue. Does not touch the gateway.

        Raises:
            ValidationError: INVALID_SCHEDULE when ``scheduled_time`` is not in the future
        """
        _validate_stream_name(stream_name)
        action = _coerce_action(action)
        if event_id is not None:
            _validate_event_id(event_id)
        _validate_seconds(ad_duration_seconds, "ad_duration_seconds", "INVALID_DURATION")
        _validate_seconds(pre_roll_seconds, "pre_roll_seconds", "INVALID_PRE_ROLL")
        if action == CueAction.CUE_IN and ad_duration_seconds is not None:
            raise ValidationError("ad_duration_seconds only applies to CUE_OUT", "INVALID_DURATION")
        if scheduled_time.tzinfo is None or scheduled_time.tzinfo.utcoffset(scheduled_time) is None:
            raise ValidationError("scheduled_time must be timezone-aware", "INVALID_SCHEDULE")

        now = self._clock.now_utc()
        if scheduled_time <= now:
            raise ValidationError(
                f"scheduled_time {scheduled_time.isoformat()} is not in the future", "INVALID_SCHEDULE"
            )
        if event_id is None:
            event_id = self._suggest_event_id()

        instruction = ScheduledInstruction(
            id=new_instruction_id(),
            action=action,
            event_id=event_id,
            stream_name=stream_name,
            scheduled_time=scheduled_time,
            ad_duration_seconds=ad_duration_seconds,
            pre_roll_seconds=pre_roll_seconds,
            created_at=now,
        )
        self._store.add_scheduled(instruction)
        self._arm_instruction(instruction)
        self._logger.info(
            "cue_scheduled",
            instruction_id=instruction.id,
            stream=stream_name,
            action=action.value,
            event_id=event_id,
            scheduled_time=scheduled_time.isoformat(),
        )
        return instruction

    def cancel_scheduled_event(self, instruction_id: str) -> ScheduledInstruction:
        """Cancel a pending instruction.

        Raises:
            NotFoundError: Unknown ``instruction_id``
            StateConflictError: NOT_CANCELLABLE when already EXECUTED or CANCELLED
        """
        instruction = self._store.get_scheduled(instruction_id)
        with self._locked(instruction.stream_name):
            current = self._store.get_scheduled(instruction_id)
            if current.status != InstructionStatus.SCHEDULED:
                raise StateConflictError(
                    f"Instruction {instruction_id} is {current.status.value} and cannot be cancelled",
                    "NOT_CANCELLABLE",
                )
            self._dispatcher.disarm(instruction_id)
            cancelled = self._store.update_scheduled(instruction_id, status=InstructionStatus.CANCELLED)
        self._logger.info("cue_schedule_cancelled", instruction_id=instruction_id, stream=current.stream_name)
        return cancelled

    def delete_scheduled_event(self, instruction_id: str) -> ScheduledInstruction:
        """Drop an EXECUTED or CANCELLED instruction from the schedule list.

        Raises:
            NotFoundError: Unknown ``instruction_id``
            StateConflictError: NOT_DELETABLE while still SCHEDULED
        """
        instruction = self._store.get_scheduled(instruction_id)
        with self._locked(instruction.stream_name):
            current = self._store.get_scheduled(instruction_id)
            if current.status == InstructionStatus.SCHEDULED:
                raise StateConflictError(
                    f"Instruction {instruction_id} is still scheduled; cancel it first",
                    "NOT_DELETABLE",
                )
            return self._store.remove_scheduled(instruction_id)

    # ------------------------------------------------------------------
    # Program plans
    # ------------------------------------------------------------------

    def schedule_plan(
        self,
        stream_name: str,
        plan_id: str,
        program_start: datetime,
        breaks: Sequence[AdBreak],
    ) -> list[ScheduledInstruction]:
        """Admit every break of a program as a CUE_OUT/CUE_IN instruction pair.

        Each CUE_OUT is due at ``program_start + offset - pre_roll`` and its
        CUE_IN at ``program_start + offset + duration``. The CUE_OUT carries no
        duration, so no auto-return races the planned CUE_IN. All breaks are
        validated before any is admitted.

        Raises:
            ValidationError: INVALID_PLAN for an empty or overlapping plan,
                INVALID_SCHEDULE when a cue would be due in the past
            StateConflictError: PLAN_ACTIVE while ``plan_id`` has pending instructions
        """
        _validate_stream_name(stream_name)
        if not isinstance(plan_id, str) or not plan_id.strip():
            raise ValidationError("plan_id must be a non-empty string", "INVALID_PLAN")
        if program_start.tzinfo is None or program_start.tzinfo.utcoffset(program_start) is None:
            raise ValidationError("program_start must be timezone-aware", "INVALID_SCHEDULE")
        if not breaks:
            raise ValidationError(f"Plan {plan_id} has no ad breaks", "INVALID_PLAN")

        windows: list[tuple[AdBreak, datetime, datetime, datetime]] = []
        for ad_break in sorted(breaks, key=lambda b: b.offset_seconds):
            _validate_seconds(ad_break.offset_seconds, "offset_seconds", "INVALID_PLAN")
            _validate_seconds(ad_break.duration_seconds, "duration_seconds", "INVALID_DURATION")
            _validate_seconds(ad_break.pre_roll_seconds, "pre_roll_seconds", "INVALID_PRE_ROLL")
            if not ad_break.duration_seconds:
                raise ValidationError("duration_seconds must be greater than zero", "INVALID_DURATION")
            if ad_break.event_id is not None:
                _validate_event_id(ad_break.event_id)
            start = program_start + timedelta(seconds=ad_break.offset_seconds)
            cue_out_at = start - timedelta(seconds=ad_break.pre_roll_seconds or 0)
            cue_in_at = start + timedelta(seconds=ad_break.duration_seconds)
            if windows and cue_out_at < windows[-1][3]:
                raise ValidationError(
                    f"Break at offset {ad_break.offset_seconds:g}s overlaps the previous break", "INVALID_PLAN"
                )
            windows.append((ad_break, cue_out_at, start, cue_in_at))

        now = self._clock.now_utc()
        if windows[0][1] <= now:
            raise ValidationError(
                f"First CUE_OUT of plan {plan_id} at {windows[0][1].isoformat()} is not in the future",
                "INVALID_SCHEDULE",
            )

        with self._locked(stream_name):
            if any(
                s.plan_id == plan_id and s.status == InstructionStatus.SCHEDULED
                for s in self._store.list_scheduled()
            ):
                raise StateConflictError(f"Plan {plan_id} already has pending instructions", "PLAN_ACTIVE")

            admitted: list[ScheduledInstruction] = []
            for ad_break, cue_out_at, _start, cue_in_at in windows:
                event_id = ad_break.event_id
                if event_id is None:
                    event_id = self._suggest_event_id(admitted)
                common = dict(
                    event_id=event_id,
                    stream_name=stream_name,
                    created_at=now,
                    plan_id=plan_id,
                    break_name=ad_break.name,
                    advertiser=ad_break.advertiser,
                    campaign=ad_break.campaign,
                )
                admitted.append(
                    ScheduledInstruction(
                        id=new_instruction_id(),
                        action=CueAction.CUE_OUT,
                        scheduled_time=cue_out_at,
                        pre_roll_seconds=ad_break.pre_roll_seconds or None,
                        **common,
                    )
                )
                admitted.append(
                    ScheduledInstruction(
                        id=new_instruction_id(), action=CueAction.CUE_IN, scheduled_time=cue_in_at, **common
                    )
                )

            for instruction in admitted:
                self._store.add_scheduled(instruction)
                self._arm_instruction(instruction)

        self._logger.info(
            "plan_scheduled",
            plan_id=plan_id,
            stream=stream_name,
            breaks=len(windows),
            instructions=len(admitted),
            first_cue_out=windows[0][1].isoformat(),
        )
        return admitted

    def cancel_plan(self, plan_id: str) -> list[ScheduledInstruction]:
        """Cancel every pending instruction of ``plan_id``.

        Instructions that already fired are left alone. Returns the ones
        cancelled, possibly none.

        Raises:
            NotFoundError: No instruction carries ``plan_id``
        """
        members = [s for s in self._store.list_scheduled() if s.plan_id == plan_id]
        if not members:
            raise NotFoundError(f"Plan {plan_id!r} not found")

        cancelled: list[ScheduledInstruction] = []
        for stream_name in dict.fromkeys(s.stream_name for s in members):
            with self._locked(stream_name):
                for instruction in members:
                    if instruction.stream_name != stream_name:
                        continue
                    try:
                        current = self._store.get_scheduled(instruction.id)
                    except NotFoundError:
                        continue
                    if current.status != InstructionStatus.SCHEDULED:
                        continue
                    self._dispatcher.disarm(current.id)
                    cancelled.append(
                        self._store.update_scheduled(current.id, status=InstructionStatus.CANCELLED)
                    )
        self._logger.info("plan_cancelled", plan_id=plan_id, cancelled=len(cancelled), members=len(members))
        return cancelled

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    def stream_state(self, stream_name: str) -> StreamState:
        with self._locks_guard:
            active = bool(self._outstanding.get(stream_name))
        return StreamState.AD_BREAK_ACTIVE if active else StreamState.IDLE

    def outstanding(self, stream_name: str) -> list[CueEvent]:
        """Return the stream's unanswered CUE-OUTs, oldest first."""
        with self._locks_guard:
            return list(self._outstanding.get(stream_name, {}).values())

    def active_streams(self) -> list[str]:
        with self._locks_guard:
            return sorted(s for s, breaks in self._outstanding.items() if breaks)

    def restore(self) -> None:
        """Rebuild outstanding breaks from the store and re-arm pending timers.

        Used after replaying a journal. Timers already past due fire on the
        dispatcher's next pass.
        """
        outstanding: dict[str, dict[str, CueEvent]] = {}
        for event in self._store.list():
            if event.status != CueStatus.EXECUTED:
                continue
            breaks = outstanding.setdefault(event.stream_name, {})
            if event.action == CueAction.CUE_OUT:
                breaks[event.id] = event
            elif event.origin == CueOrigin.CRASH_OUT:
                breaks.clear()
            else:
                for key in [k for k, e in breaks.items() if e.event_id == event.event_id]:
                    del breaks[key]

        with self._locks_guard:
            self._outstanding = {s: b for s, b in outstanding.items() if b}
        rearmed = 0
        for breaks in outstanding.values():
            for cue_out in breaks.values():
                if cue_out.ad_duration_seconds:
                    self._arm_auto_return(cue_out)
                    rearmed += 1
        pending = [
            s for s in self._store.list_scheduled() if s.status == InstructionStatus.SCHEDULED
        ]
        for instruction in pending:
            self._arm_instruction(instruction)
        self._logger.info(
            "engine_restored",
            active_streams=len(self._outstanding),
            auto_returns=rearmed,
            scheduled=len(pending),
        )

    def rearm_overdue(self) -> int:
        """Re-arm SCHEDULED instructions that are past due but have no timer.

        Registered as a dispatcher sweep hook so a lost fire is retried on
        the next pass. The fire's own status check keeps this at most once.
        """
        now = self._clock.now_utc()
        count = 0
        for instruction in self._store.list_scheduled():
            if (
                instruction.status == InstructionStatus.SCHEDULED
                and instruction.scheduled_time <= now
                and not self._dispatcher.is_armed(instruction.id)
            ):
                self._arm_instruction(instruction)
                count += 1
        if count:
            self._logger.warning("overdue_instructions_rearmed", count=count)
        return count

    # ------------------------------------------------------------------
    # Timer callbacks
    # ------------------------------------------------------------------

    def _fire_scheduled(self, instruction_id: str) -> None:
        try:
            instruction = self._store.get_scheduled(instruction_id)
        except NotFoundError:
            return
        with self._locked(instruction.stream_name):
            try:
                current = self._store.get_scheduled(instruction_id)
            except NotFoundError:
                return
            if current.status != InstructionStatus.SCHEDULED:
                self._logger.info("scheduled_fire_skipped", instruction_id=instruction_id, status=current.status.value)
                return

            if current.action == CueAction.CUE_OUT:
                event = self._emit_cue_out(
                    current.stream_name,
                    current.event_id,
                    current.ad_duration_seconds,
                    current.pre_roll_seconds,
                    CueOrigin.SCHEDULED,
                )
            elif not self._outstanding.get(current.stream_name):
                event = self._record(
                    current.stream_name,
                    CueAction.CUE_IN,
                    current.event_id,
                    CueStatus.FAILED,
                    self._clock.now_utc(),
                    origin=CueOrigin.SCHEDULED,
                    pre_roll_seconds=current.pre_roll_seconds,
                    message=f"No outstanding CUE_OUT on {current.stream_name}; CUE_IN not sent",
                )
            else:
                event = self._emit_cue_in(
                    current.stream_name,
                    current.event_id,
                    CueOrigin.SCHEDULED,
                    pre_roll_seconds=current.pre_roll_seconds,
                )

            self._store.update_scheduled(
                instruction_id,
                status=InstructionStatus.EXECUTED,
                executed_at=event.timestamp,
                cue_event_id=event.id,
            )

    def _auto_return(self, stream_name: str, cue_out_id: str) -> None:
        with self._locked(stream_name):
            cue_out = self._outstanding.get(stream_name, {}).get(cue_out_id)
            if cue_out is None:
                # Closed by a manual CUE-IN or crash-out while the fire was in flight
                return
            self._emit_cue_in(stream_name, cue_out.event_id, CueOrigin.AUTO_RETURN)

    # ------------------------------------------------------------------
    # Internal (caller holds the stream lock)
    # ------------------------------------------------------------------

    def _emit_cue_out(
        self,
        stream_name: str,
        event_id: int,
        ad_duration_seconds: float | None,
        pre_roll_seconds: float | None,
        origin: CueOrigin,
    ) -> CueEvent:
        warning = None
        if any(e.event_id == event_id for e in self._outstanding.get(stream_name, {}).values()):
            warning = f"eventId {event_id} already has an outstanding CUE_OUT on {stream_name}"
        event = self._send(
            stream_name,
            CueAction.CUE_OUT,
            event_id,
            origin=origin,
            ad_duration_seconds=ad_duration_seconds,
            pre_roll_seconds=pre_roll_seconds,
            warning=warning,
        )
        if event.status == CueStatus.EXECUTED:
            with self._locks_guard:
                self._outstanding.setdefault(stream_name, {})[event.id] = event
            if ad_duration_seconds:
                self._arm_auto_return(event)
        return event

    def _emit_cue_in(
        self,
        stream_name: str,
        event_id: int,
        origin: CueOrigin,
        pre_roll_seconds: float | None = None,
    ) -> CueEvent:
        breaks = self._outstanding.get(stream_name)
        if not breaks:
            raise StateConflictError(
                f"No outstanding CUE_OUT on {stream_name}; use crash-out to force a return",
                "NO_OUTSTANDING_CUE_OUT",
            )
        matches = [e for e in breaks.values() if e.event_id == event_id]
        warning = None
        if not matches:
            warning = f"eventId {event_id} matches no outstanding CUE_OUT on {stream_name}"

        event = self._send(
            stream_name,
            CueAction.CUE_IN,
            event_id,
            origin=origin,
            pre_roll_seconds=pre_roll_seconds,
            warning=warning,
        )
        if event.status == CueStatus.EXECUTED:
            with self._locks_guard:
                for cue_out in matches:
                    del breaks[cue_out.id]
                if not breaks:
                    self._outstanding.pop(stream_name, None)
            for cue_out in matches:
                self._dispatcher.disarm(AUTO_RETURN_PREFIX + cue_out.id)
        return event

    def _send(
        self,
        stream_name: str,
        action: CueAction,
        event_id: int,
        *,
        origin: CueOrigin,
        ad_duration_seconds: float | None = None,
        pre_roll_seconds: float | None = None,
        warning: str | None = None,
    ) -> CueEvent:
        """Make the one gateway call and record its outcome."""
        duration_ms = None
        if action == CueAction.CUE_OUT and ad_duration_seconds is not None:
            duration_ms = int(round(ad_duration_seconds * 1000))
        request = CueRequest(event_id=event_id, type=action.splice_type, duration_ms=duration_ms)

        sent_at = self._clock.now_utc()
        failure = None
        try:
            result = self._gateway.send_cue(stream_name, request)
        except GatewayError as e:
            failure = str(e) or "gateway error"
        except Exception as e:
            self._logger.exception("gateway_call_crashed", stream=stream_name, event_id=event_id)
            failure = f"{type(e).__name__}: {e}"
        else:
            if not result.accepted:
                failure = result.detail or "rejected by gateway"

        status = CueStatus.FAILED if failure else CueStatus.EXECUTED
        message = "; ".join(m for m in (failure, warning) if m) or None
        return self._record(
            stream_name,
            action,
            event_id,
            status,
            sent_at,
            origin=origin,
            ad_duration_seconds=ad_duration_seconds,
            pre_roll_seconds=pre_roll_seconds,
            message=message,
        )

    def _record(
        self,
        stream_name: str,
        action: CueAction,
        event_id: int,
        status: CueStatus,
        timestamp: datetime,
        *,
        origin: CueOrigin,
        ad_duration_seconds: float | None = None,
        pre_roll_seconds: float | None = None,
        message: str | None = None,
    ) -> CueEvent:
        event = CueEvent(
            id=new_event_id(),
            action=action,
            event_id=event_id,
            stream_name=stream_name,
            status=status,
            timestamp=timestamp,
            ad_duration_seconds=ad_duration_seconds,
            pre_roll_seconds=pre_roll_seconds,
            message=message,
            origin=origin,
        )
        self._store.append(event)
        log = self._logger.info if status == CueStatus.EXECUTED else self._logger.error
        log(
            "cue_sent" if status == CueStatus.EXECUTED else "cue_failed",
            stream=stream_name,
            action=action.value,
            event_id=event_id,
            origin=origin.value,
            cue_event_id=event.id,
            detail=message,
        )
        return event

    def _suggest_event_id(self, pending: Sequence[ScheduledInstruction] = ()) -> int:
        """Next suggested splice id, counting ``pending`` instructions as taken."""
        try:
            event_id = suggest_next_event_id(
                self._store.list(), [*self._store.list_scheduled(), *pending], self._event_id_start
            )
        except ValueError as e:
            raise StateConflictError(str(e), "EVENT_IDS_EXHAUSTED") from e
        _validate_event_id(event_id)
        return event_id

    def _arm_auto_return(self, cue_out: CueEvent) -> None:
        due = cue_out.timestamp + timedelta(seconds=cue_out.ad_duration_seconds or 0)
        self._dispatcher.arm(
            AUTO_RETURN_PREFIX + cue_out.id,
            due,
            partial(self._auto_return, cue_out.stream_name, cue_out.id),
            kind="auto_return",
            lane=cue_out.stream_name,
        )

    def _arm_instruction(self, instruction: ScheduledInstruction) -> None:
        self._dispatcher.arm(
            instruction.id,
            instruction.scheduled_time,
            partial(self._fire_scheduled, instruction.id),
            kind="scheduled",
            lane=instruction.stream_name,
        )

    @contextmanager
    def _locked(self, stream_name: str) -> Iterator[None]:
        with self._locks_guard:
            lock = self._stream_locks.setdefault(stream_name, threading.Lock())
        with lock:
            yield


def _coerce_action(action: CueAction | str) -> CueAction:
    if isinstance(action, CueAction):
        return action
    normalized = str(action).strip().upper().replace("-", "_")
    try:
        return CueAction(normalized)
    except ValueError:
        raise ValidationError(f"Unknown cue action {action!r}", "INVALID_ACTION") from None


def _validate_stream_name(stream_name: str) -> None:
    if not isinstance(stream_name, str) or not stream_name.strip():
        raise ValidationError("stream_name must be a non-empty string", "INVALID_STREAM")


def _validate_event_id(event_id: int) -> None:
    if isinstance(event_id, bool) or not isinstance(event_id, int):
        raise ValidationError(f"eventId must be an integer, got {event_id!r}", "INVALID_EVENT_ID")
    if not 0 < event_id <= MAX_SPLICE_EVENT_ID:
        raise ValidationError(
            f"eventId must be between 1 and {MAX_SPLICE_EVENT_ID}, got {event_id}", "INVALID_EVENT_ID"
        )


def _validate_seconds(value: float | None, name: str, code: str) -> None:
    if value is None:
        return
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValidationError(f"{name} must be a number, got {value!r}", code)
    if not math.isfinite(value) or value < 0:
        raise ValidationError(f"{name} must be >= 0, got {value}", code)

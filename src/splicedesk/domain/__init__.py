"""
Domain layer - cue events, scheduled instructions and their enums.
"""

from .entities import (
    CueAction,
    CueEvent,
    CueOrigin,
    CueStatus,
    InstructionStatus,
    ScheduledInstruction,
    StreamState,
)

__all__ = [
    "CueAction",
    "CueEvent",
    "CueOrigin",
    "CueStatus",
    "InstructionStatus",
    "ScheduledInstruction",
    "StreamState",
]

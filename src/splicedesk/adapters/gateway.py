"""
Signaling gateway contract.

The engine depends only on :class:`SignalingGateway`. Concrete adapters
wrap the OvenMediaEngine REST API (or an in-process fake) behind it.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Literal, Protocol, runtime_checkable

SpliceType = Literal["out", "in"]


@dataclass(frozen=True)
class CueRequest:
    """One splice insert as the gateway receives it."""

    event_id: int
    type: SpliceType
    duration_ms: int | None = None


@dataclass(frozen=True)
class GatewayResult:
    """Outcome reported by the gateway. Anything but ``accepted`` is a failure."""

    accepted: bool
    detail: str | None = None


@dataclass(frozen=True)
class StreamRef:
    """Fully qualified stream address on the media server."""

    vhost: str
    app: str
    stream: str

    @classmethod
    def parse(cls, stream_name: str, default_vhost: str, default_app: str) -> StreamRef:
        """Parse ``stream``, ``app/stream`` or ``vhost/app/stream``."""
        parts = [p for p in stream_name.strip().strip("/").split("/") if p]
        if len(parts) == 1:
            return cls(default_vhost, default_app, parts[0])
        if len(parts) == 2:
            return cls(default_vhost, parts[0], parts[1])
        if len(parts) == 3:
            return cls(parts[0], parts[1], parts[2])
        raise ValueError(f"Invalid stream name {stream_name!r}; expected [vhost/][app/]stream")

    def __str__(self) -> str:
        return f"{self.vhost}/{self.app}/{self.stream}"


@runtime_checkable
class SignalingGateway(Protocol):
    """What the cue lifecycle engine needs from the media server."""

    def send_cue(self, stream_name: str, request: CueRequest) -> GatewayResult:
        """Emit one cue. May raise GatewayError on transport failure."""
        ...

    def list_vhosts(self) -> list[str]:
        ...

    def list_apps(self, vhost: str) -> list[str]:
        ...

    def list_streams(self, vhost: str, app: str) -> list[dict[str, Any]]:
        ...

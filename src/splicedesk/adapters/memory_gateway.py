"""In-process signaling gateway.

Accepts every cue and remembers it. Used by ``--dry-run`` and by tests.
Set ``fail_next`` to raise a GatewayError on the next send, or
``reject_next`` to have the next send come back not accepted.
"""

from __future__ import annotations

import threading
from collections.abc import Callable
from typing import Any

from ..infra.exceptions import GatewayError
from .gateway import CueRequest, GatewayResult, StreamRef


class InMemorySignalingGateway:
    """Thread-safe fake of the media server's signaling API."""

    def __init__(
        self,
        streams: list[str] | None = None,
        *,
        on_send: Callable[[str, CueRequest], None] | None = None,
    ) -> None:
        self.sent: list[tuple[str, CueRequest]] = []
        self.fail_next: str | None = None
        self.reject_next: str | None = None
        self.on_send = on_send
        self._streams = [StreamRef.parse(s, "default", "app") for s in (streams or [])]
        self._lock = threading.Lock()

    def send_cue(self, stream_name: str, request: CueRequest) -> GatewayResult:
        if self.on_send is not None:
            self.on_send(stream_name, request)
        with self._lock:
            if self.fail_next is not None:
                reason, self.fail_next = self.fail_next, None
                raise GatewayError(reason)
            if self.reject_next is not None:
                reason, self.reject_next = self.reject_next, None
                return GatewayResult(accepted=False, detail=reason)
            self.sent.append((stream_name, request))
            return GatewayResult(accepted=True, detail="OK")

    def list_vhosts(self) -> list[str]:
        return sorted({ref.vhost for ref in self._streams})

    def list_apps(self, vhost: str) -> list[str]:
        return sorted({ref.app for ref in self._streams if ref.vhost == vhost})

    def list_streams(self, vhost: str, app: str) -> list[dict[str, Any]]:
        return [
            {"vhost": ref.vhost, "app": ref.app, "name": ref.stream}
            for ref in self._streams
            if ref.vhost == vhost and ref.app == app
        ]

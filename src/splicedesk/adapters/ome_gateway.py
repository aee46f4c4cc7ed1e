"""
OvenMediaEngine signaling gateway.

Talks to the OME REST API (``/v1``) to inject SCTE-35 splice inserts with
``sendEvent`` and to enumerate virtual hosts, applications and streams for
the stream pickers.
"""

from __future__ import annotations

import logging
from typing import Any

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from ..infra.exceptions import GatewayError
from ..infra.settings import Settings
from .gateway import CueRequest, GatewayResult, StreamRef

logger = logging.getLogger(__name__)


class OMESignalingGateway:
    """HTTP client for the OvenMediaEngine control API."""

    def __init__(
        self,
        base_url: str,
        access_token: str = "",
        *,
        default_vhost: str = "default",
        default_app: str = "app",
        timeout: float = 8.0,
        session: requests.Session | None = None,
    ):
        """
        Initialize the OME client.

        Args:
            base_url: API base URL including the version prefix (e.g., "http://127.0.0.1:8081/v1")
            access_token: OME access token, either ``token`` or ``user:password``
            default_vhost: Virtual host used when a stream name omits it
            default_app: Application used when a stream name omits it
            timeout: Per-request timeout in seconds
        """
        self.base_url = base_url.strip().rstrip("/")
        self.default_vhost = default_vhost
        self.default_app = default_app
        self.timeout = timeout
        self.session = session or self._create_session(access_token.strip())

    @classmethod
    def from_settings(cls, settings: Settings) -> OMESignalingGateway:
        return cls(
            settings.ome_base_url,
            settings.ome_access_token,
            default_vhost=settings.ome_vhost,
            default_app=settings.ome_app,
            timeout=settings.gateway_timeout_seconds,
        )

    def _create_session(self, access_token: str) -> requests.Session:
        """Create a requests session with read-only retry logic and basic auth."""
        session = requests.Session()

        # Only idempotent reads are retried; a splice insert is sent once.
        retry_strategy = Retry(
            total=2,
            connect=0,
            read=0,
            status=2,
            backoff_factor=0.5,
            status_forcelist=[502, 503, 504],
            allowed_methods=frozenset({"GET"}),
            raise_on_status=False,
        )

        adapter = HTTPAdapter(max_retries=retry_strategy)
        session.mount("http://", adapter)
        session.mount("https://", adapter)
        session.headers.update({"Content-Type": "application/json", "Accept": "application/json"})

        if access_token:
            user, _, password = access_token.partition(":")
            session.auth = (user, password)

        return session

    # ------------------------------------------------------------------
    # Signaling
    # ------------------------------------------------------------------

    def send_cue(self, stream_name: str, request: CueRequest) -> GatewayResult:
        """
        Inject one SCTE-35 splice insert into a stream.

        Returns:
            GatewayResult with ``accepted`` False when OME answers with an
            error envelope or a non-2xx status.

        Raises:
            GatewayError: On transport failure or timeout
        """
        try:
            ref = StreamRef.parse(stream_name, self.default_vhost, self.default_app)
        except ValueError as e:
            raise GatewayError(str(e)) from e

        payload = {
            "eventFormat": "scte35",
            "events": [
                {
                    "spliceCommand": "spliceInsert",
                    "id": request.event_id,
                    "type": request.type,
                    "duration": request.duration_ms or 0,
                    "autoReturn": False,
                }
            ],
        }
        url = f"{self.base_url}/vhosts/{ref.vhost}/apps/{ref.app}/streams/{ref.stream}/sendEvent"

        try:
            response = self.session.post(url, json=payload, timeout=self.timeout)
        except requests.Timeout as e:
            raise GatewayError(f"Timed out after {self.timeout}s sending cue to {ref}") from e
        except requests.RequestException as e:
            raise GatewayError(f"Failed to send cue to {ref}: {e}") from e

        body = _json_or_none(response)
        status_code = response.status_code
        if isinstance(body, dict) and isinstance(body.get("statusCode"), int):
            status_code = body["statusCode"]

        if 200 <= response.status_code < 300 and 200 <= status_code < 300:
            return GatewayResult(accepted=True, detail=_envelope_message(body))

        detail = _envelope_message(body) or response.reason or "rejected"
        logger.warning("OME rejected cue for %s: HTTP %s %s", ref, status_code, detail)
        return GatewayResult(accepted=False, detail=f"HTTP {status_code}: {detail}")

    # ------------------------------------------------------------------
    # Enumeration
    # ------------------------------------------------------------------

    def list_vhosts(self) -> list[str]:
        return [str(v) for v in self._get("/vhosts")]

    def list_apps(self, vhost: str) -> list[str]:
        return [str(a) for a in self._get(f"/vhosts/{vhost}/apps")]

    def list_streams(self, vhost: str, app: str) -> list[dict[str, Any]]:
        names = self._get(f"/vhosts/{vhost}/apps/{app}/streams")
        return [{"vhost": vhost, "app": app, "name": str(name)} for name in names]

    def _get(self, path: str) -> Any:
        url = f"{self.base_url}{path}"
        try:
            response = self.session.get(url, timeout=self.timeout)
            response.raise_for_status()
        except requests.RequestException as e:
            raise GatewayError(f"Failed to fetch {path}: {e}") from e
        body = _json_or_none(response)
        if isinstance(body, dict) and "response" in body:
            return body["response"] or []
        if body is None:
            raise GatewayError(f"Unexpected non-JSON response from {path}")
        return body


def _json_or_none(response: requests.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return None


def _envelope_message(body: Any) -> str | None:
    if isinstance(body, dict):
        message = body.get("message")
        return str(message) if message is not None else None
    return None

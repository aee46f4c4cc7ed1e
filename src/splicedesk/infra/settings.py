"""
Application settings for SpliceDesk.

This module defines all configuration settings for SpliceDesk using Pydantic BaseSettings.
"""

from __future__ import annotations

import os
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Main application settings using Pydantic BaseSettings."""

    # OvenMediaEngine REST API
    ome_host: str = Field(default="localhost", alias="OME_HOST")
    ome_port: int = Field(default=8081, alias="OME_PORT")
    ome_access_token: str = Field(default="", alias="OME_ACCESS_TOKEN")
    ome_vhost: str = Field(default="default", alias="OME_VHOST")
    ome_app: str = Field(default="app", alias="OME_APP")
    gateway_timeout_seconds: float = Field(default=8.0, gt=0, alias="GATEWAY_TIMEOUT_SECONDS")

    # Signaling runtime
    dispatch_sweep_seconds: float = Field(default=5.0, gt=0, alias="DISPATCH_SWEEP_SECONDS")
    dispatch_workers: int = Field(default=4, ge=1, alias="DISPATCH_WORKERS")
    event_id_start: int = Field(default=100023, gt=0, le=0xFFFFFFFF, alias="EVENT_ID_START")
    journal_path: str | None = Field(default=None, alias="JOURNAL_PATH")

    # HTTP API
    api_host: str = Field(default="127.0.0.1", alias="API_HOST")
    api_port: int = Field(default=8700, alias="API_PORT")

    log_level: str = Field(default="INFO", alias="LOG_LEVEL")
    env: str = Field(default="dev", alias="ENV")  # dev|prod|test

    model_config: SettingsConfigDict = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )

    @property
    def ome_base_url(self) -> str:
        return f"http://{self.ome_host}:{self.ome_port}/v1"


def _resolve_env_file() -> str | None:
    # 1) Explicit override
    explicit = os.getenv("SPLICEDESK_ENV_FILE")
    if explicit and Path(explicit).is_file():
        return explicit

    # 2) CWD .env
    cwd_env = Path.cwd() / ".env"
    if cwd_env.is_file():
        return str(cwd_env)

    # 3) Walk up from this file to find nearest .env
    here = Path(__file__).resolve()
    for parent in here.parents:
        candidate = parent / ".env"
        if candidate.is_file():
            return str(candidate)
    return None


# Global settings instance (load from best-effort .env discovery)
_env_file = _resolve_env_file()
settings = Settings(_env_file=_env_file) if _env_file else Settings()  # type: ignore[call-arg]

"""
Global test configuration for SpliceDesk.

This module provides global pytest configuration and fixtures.
"""

import sys
from datetime import datetime, timezone
from pathlib import Path

import pytest

# Ensure the project src directory is importable without relying on external environment.
PROJECT_ROOT = Path(__file__).resolve().parents[1]
SRC_PATH = PROJECT_ROOT / "src"
if str(SRC_PATH) not in sys.path:
    sys.path.insert(0, str(SRC_PATH))

from splicedesk.adapters.memory_gateway import InMemorySignalingGateway  # noqa: E402
from splicedesk.runtime.clock import SteppedMasterClock  # noqa: E402
from splicedesk.runtime.signaling_service import SignalingService  # noqa: E402

T0 = datetime(2025, 6, 1, 18, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def clock() -> SteppedMasterClock:
    """Deterministic master clock starting at T0."""
    return SteppedMasterClock(T0)


@pytest.fixture
def gateway() -> InMemorySignalingGateway:
    return InMemorySignalingGateway(streams=["live/s1", "live/s2", "other/app/s3"])


@pytest.fixture
def service(gateway, clock) -> SignalingService:
    """Service with the in-memory gateway; timers are driven by the test."""
    return SignalingService(gateway, clock=clock, default_vhost="default", default_app="app")

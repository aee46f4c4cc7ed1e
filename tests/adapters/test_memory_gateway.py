"""Tests for the in-process signaling gateway."""

from __future__ import annotations

import pytest

from splicedesk.adapters.gateway import CueRequest, SignalingGateway, StreamRef
from splicedesk.adapters.memory_gateway import InMemorySignalingGateway
from splicedesk.infra.exceptions import GatewayError


def test_records_accepted_cues():
    gateway = InMemorySignalingGateway()
    result = gateway.send_cue("s1", CueRequest(event_id=1, type="out", duration_ms=1000))
    assert result.accepted
    assert gateway.sent == [("s1", CueRequest(event_id=1, type="out", duration_ms=1000))]


def test_fail_and_reject_apply_once():
    gateway = InMemorySignalingGateway()
    gateway.fail_next = "down"
    with pytest.raises(GatewayError, match="down"):
        gateway.send_cue("s1", CueRequest(event_id=1, type="out"))

    gateway.reject_next = "nope"
    result = gateway.send_cue("s1", CueRequest(event_id=1, type="out"))
    assert (result.accepted, result.detail) == (False, "nope")

    assert gateway.send_cue("s1", CueRequest(event_id=1, type="out")).accepted
    assert len(gateway.sent) == 1


def test_enumeration():
    gateway = InMemorySignalingGateway(["s1", "live/s2", "vh/live/s3"])
    assert gateway.list_vhosts() == ["default", "vh"]
    assert gateway.list_apps("default") == ["app", "live"]
    assert gateway.list_streams("vh", "live") == [{"vhost": "vh", "app": "live", "name": "s3"}]
    assert isinstance(gateway, SignalingGateway)


class TestStreamRef:
    def test_parse_forms(self):
        assert StreamRef.parse("s", "d", "a") == StreamRef("d", "a", "s")
        assert StreamRef.parse("x/s", "d", "a") == StreamRef("d", "x", "s")
        assert str(StreamRef.parse("v/x/s", "d", "a")) == "v/x/s"

    @pytest.mark.parametrize("bad", ["", "/", "a/b/c/d"])
    def test_parse_rejects(self, bad):
        with pytest.raises(ValueError):
            StreamRef.parse(bad, "d", "a")

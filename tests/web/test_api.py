"""Tests for the SCTE-35 HTTP API using FastAPI's TestClient.

The dispatcher is not started; tests drive timers through the stepped clock.
"""

from __future__ import annotations

from datetime import timedelta

import pytest
from fastapi.testclient import TestClient

from splicedesk.domain.entities import CueAction, StreamState
from splicedesk.infra.exceptions import GatewayError
from splicedesk.web.server import create_app


@pytest.fixture
def client(service) -> TestClient:
    return TestClient(create_app(service, run_dispatcher=False))


class TestImmediateCues:
    def test_cue_out(self, client, service, gateway):
        response = client.post(
            "/api/scte35/cue-out",
            json={"stream_name": "live/s1", "event_id": 100023, "ad_duration_seconds": 600, "pre_roll_seconds": 0},
        )

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "ok"
        assert body["event"]["event_id"] == 100023
        assert body["event"]["stream_name"] == "default/live/s1"
        assert service.stream_state("live/s1") == StreamState.AD_BREAK_ACTIVE
        assert gateway.sent[0][1].duration_ms == 600000

    def test_failed_cue_is_returned_not_raised(self, client, gateway):
        gateway.reject_next = "HTTP 404: no such stream"
        response = client.post("/api/scte35/cue-out", json={"stream_name": "s1"})
        assert response.status_code == 200
        assert response.json()["status"] == "failed"
        assert response.json()["event"]["message"] == "HTTP 404: no such stream"

    def test_validation_error_is_422_with_code(self, client, service):
        response = client.post("/api/scte35/cue-out", json={"stream_name": "s1", "event_id": 0})
        assert response.status_code == 422
        assert response.json()["code"] == "INVALID_EVENT_ID"
        assert len(service.store) == 0

    def test_cue_in_without_break_is_409(self, client):
        response = client.post("/api/scte35/cue-in", json={"stream_name": "s1"})
        assert response.status_code == 409
        assert response.json()["code"] == "NO_OUTSTANDING_CUE_OUT"

    def test_cue_in_defaults_to_open_break(self, client, service):
        service.inject_cue_out("s1", 77, 60)
        response = client.post("/api/scte35/cue-in", json={"stream_name": "s1"})
        assert response.status_code == 200
        assert response.json()["event"]["event_id"] == 77

    def test_crash_out(self, client, service):
        service.inject_cue_out("s1", 77, 60)
        response = client.post("/api/scte35/crash-out", json={"stream_name": "s1"})
        assert response.status_code == 200
        assert response.json()["event"]["origin"] == "CRASH_OUT"
        assert service.stream_state("s1") == StreamState.IDLE


class TestSchedule:
    def test_create_list_cancel_delete(self, client, service, clock):
        due = (clock.now_utc() + timedelta(minutes=10)).isoformat()
        created = client.post(
            "/api/scte35/schedule",
            json={"stream_name": "s1", "action": "CUE_OUT", "scheduled_time": due, "event_id": 5, "ad_duration_seconds": 30},
        )
        assert created.status_code == 201
        instruction_id = created.json()["instruction"]["id"]

        listed = client.get("/api/scte35/schedule").json()
        assert [i["id"] for i in listed["instructions"]] == [instruction_id]

        assert client.delete(f"/api/scte35/schedule/{instruction_id}").status_code == 409

        cancelled = client.post(f"/api/scte35/schedule/{instruction_id}/cancel")
        assert cancelled.status_code == 200
        assert cancelled.json()["instruction"]["status"] == "CANCELLED"
        assert client.post(f"/api/scte35/schedule/{instruction_id}/cancel").json()["code"] == "NOT_CANCELLABLE"
        assert client.get("/api/scte35/schedule", params={"pending": True}).json()["count"] == 0

        deleted = client.delete(f"/api/scte35/schedule/{instruction_id}")
        assert deleted.json() == {"status": "ok", "deleted": instruction_id}
        assert service.list_scheduled() == []

    def test_naive_time_rejected(self, client):
        response = client.post(
            "/api/scte35/schedule",
            json={"stream_name": "s1", "action": "CUE_OUT", "scheduled_time": "2030-01-01T00:00:00"},
        )
        assert response.status_code == 422
        assert response.json()["code"] == "INVALID_SCHEDULE"

    def test_bad_action_rejected(self, client, clock):
        due = (clock.now_utc() + timedelta(minutes=1)).isoformat()
        response = client.post(
            "/api/scte35/schedule", json={"stream_name": "s1", "action": "PAUSE", "scheduled_time": due}
        )
        assert response.status_code == 422
        assert response.json()["code"] == "INVALID_ACTION"

    def test_unknown_instruction_is_404(self, client):
        response = client.post("/api/scte35/schedule/nonexistent-id/cancel")
        assert response.status_code == 404
        assert response.json()["code"] == "NOT_FOUND"

    def test_fired_instruction_shows_executed(self, client, service, clock):
        instruction = service.schedule_event("s1", CueAction.CUE_OUT, clock.now_utc() + timedelta(seconds=2), 42, 5)
        clock.advance(2)
        service.dispatcher.fire_due()

        listed = client.get("/api/scte35/schedule").json()["instructions"]
        assert listed[0]["id"] == instruction.id
        assert listed[0]["status"] == "EXECUTED"
        assert listed[0]["cue_event_id"] is not None


class TestPlans:
    def _plan(self, clock, plan_id="news-1800"):
        return {
            "stream_name": "live/s1",
            "plan_id": plan_id,
            "program_start": (clock.now_utc() + timedelta(minutes=10)).isoformat(),
            "breaks": [
                {"offset_seconds": 60, "duration_seconds": 30, "pre_roll_seconds": 5, "advertiser": "Acme"},
                {"offset_seconds": 300, "duration_seconds": 60},
            ],
        }

    def test_create_list_and_cancel(self, client, service, clock):
        created = client.post("/api/scte35/plans", json=self._plan(clock))
        assert created.status_code == 201
        body = created.json()
        assert body["count"] == 4
        assert [i["action"] for i in body["instructions"]] == ["CUE_OUT", "CUE_IN", "CUE_OUT", "CUE_IN"]
        assert body["instructions"][0]["stream_name"] == "default/live/s1"
        assert body["instructions"][0]["advertiser"] == "Acme"
        assert body["instructions"][0]["plan_id"] == "news-1800"

        service.schedule_event("s2", CueAction.CUE_OUT, clock.now_utc() + timedelta(minutes=1), 9)
        by_plan = client.get("/api/scte35/schedule", params={"plan_id": "news-1800"}).json()
        assert by_plan["count"] == 4

        cancelled = client.post("/api/scte35/plans/news-1800/cancel")
        assert cancelled.status_code == 200
        assert cancelled.json()["count"] == 4
        assert all(i["status"] == "CANCELLED" for i in cancelled.json()["cancelled"])
        assert client.get("/api/scte35/schedule", params={"pending": True}).json()["count"] == 1

    def test_active_plan_conflicts(self, client, clock):
        assert client.post("/api/scte35/plans", json=self._plan(clock)).status_code == 201
        again = client.post("/api/scte35/plans", json=self._plan(clock))
        assert again.status_code == 409
        assert again.json()["code"] == "PLAN_ACTIVE"

    def test_overlap_is_422(self, client, clock):
        plan = self._plan(clock)
        plan["breaks"][1]["offset_seconds"] = 70
        response = client.post("/api/scte35/plans", json=plan)
        assert response.status_code == 422
        assert response.json()["code"] == "INVALID_PLAN"

    def test_unknown_plan_cancel_is_404(self, client):
        assert client.post("/api/scte35/plans/missing/cancel").status_code == 404


class TestEvents:
    def test_filters_and_order(self, client, service, clock, gateway):
        service.inject_cue_out("s1", 1)
        clock.advance(1)
        gateway.fail_next = "down"
        service.inject_cue_out("s2", 2)
        clock.advance(1)
        service.inject_cue_in("s1", 1)

        body = client.get("/api/scte35/events").json()
        assert body["count"] == 3
        assert [e["event_id"] for e in body["events"]] == [1, 2, 1]

        oldest_first = client.get("/api/scte35/events", params={"newest": False}).json()
        assert oldest_first["events"][0]["action"] == "CUE_OUT"

        failed = client.get("/api/scte35/events", params={"status": "FAILED"}).json()
        assert [e["event_id"] for e in failed["events"]] == [2]

        s1_outs = client.get("/api/scte35/events", params={"stream": "s1", "action": "CUE_OUT"}).json()
        assert [e["event_id"] for e in s1_outs["events"]] == [1]

        searched = client.get("/api/scte35/events", params={"search": "DOWN"}).json()
        assert searched["count"] == 1

    def test_naive_time_bounds_are_utc(self, client, service, clock):
        service.inject_cue_out("s1", 1)
        clock.advance(1)
        service.inject_cue_out("s2", 2)
        clock.advance(1)
        service.inject_cue_in("s1", 1)

        since = client.get("/api/scte35/events", params={"since": "2025-06-01T18:00:01"})
        assert since.status_code == 200
        assert [e["event_id"] for e in since.json()["events"]] == [1, 2]

        until = client.get("/api/scte35/events", params={"until": "2025-06-01T18:00:01", "newest": False})
        assert [e["event_id"] for e in until.json()["events"]] == [1]

        aware = client.get("/api/scte35/events", params={"since": "2025-06-01T20:00:01+02:00"}).json()
        assert aware["count"] == 2

    def test_invalid_status_is_422(self, client):
        assert client.get("/api/scte35/events", params={"status": "MAYBE"}).status_code == 422

    def test_summary_and_next_event_id(self, client, service):
        service.inject_cue_out("s1", 100050, 30)
        summary = client.get("/api/scte35/summary").json()
        assert summary["events"]["total"] == 1
        assert summary["active_streams"] == ["default/app/s1"]
        assert client.get("/api/scte35/next-event-id").json()["event_id"] == 100051


class TestStreams:
    def test_list_with_state(self, client, service):
        service.inject_cue_out("live/s1", 1)
        body = client.get("/api/streams").json()
        states = {s["stream_name"]: s["state"] for s in body["streams"]}
        assert states["default/live/s1"] == "AD_BREAK_ACTIVE"
        assert states["other/app/s3"] == "IDLE"

    def test_list_filtered(self, client):
        body = client.get("/api/streams", params={"vhost": "other", "app": "app"}).json()
        assert [s["stream_name"] for s in body["streams"]] == ["other/app/s3"]

    def test_stream_state(self, client, service):
        cue_out = service.inject_cue_out("live/s1", 9, 60)
        body = client.get("/api/streams/live/s1/state").json()
        assert body["stream_name"] == "default/live/s1"
        assert body["state"] == "AD_BREAK_ACTIVE"
        assert [e["id"] for e in body["outstanding"]] == [cue_out.id]

    def test_gateway_failure_is_502(self, client, gateway, monkeypatch):
        def down():
            raise GatewayError("Failed to fetch /vhosts: refused")

        monkeypatch.setattr(gateway, "list_vhosts", down)
        response = client.get("/api/streams")
        assert response.status_code == 502
        assert response.json()["code"] == "GATEWAY_ERROR"


def test_lifespan_runs_dispatcher(service):
    with TestClient(create_app(service)):
        assert service.dispatcher.running
    assert not service.dispatcher.running

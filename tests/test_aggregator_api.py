"""Tests for the aggregator HTTP API and AggregateStore merge logic."""

from __future__ import annotations

import json
import time
from pathlib import Path
from typing import Any, Dict, List

import pytest
from fastapi.testclient import TestClient

from chronos.models import RecordSubmission
from chronos.routes.meta import mark_started
from chronos.services import AggregateStore, EventLog, JsonFileStorage

from .conftest import StepClock


def _batch(log: EventLog, *descriptions: str) -> Dict[str, Any]:
    for description in descriptions:
        log.record("Thinking", "tool-completion", description)
    return log.payload()


class TestHealth:
    def test_health(self, api_client: TestClient) -> None:
        response = api_client.get("/health")
        assert response.status_code == 200
        body = response.json()
        assert body["ok"] is True
        assert body["status"] == "ok"
        assert body["uptime"] >= 0

    def test_index_lists_endpoints(self, api_client: TestClient) -> None:
        response = api_client.get("/")
        assert response.status_code == 200
        assert "text/html" in response.headers["content-type"]
        assert "<b>POST</b> <code>/records</code> Submit event records from an agent" in response.text
        assert "<b>GET</b> <code>/records</code>" in response.text
        assert "<code>/agents</code>" in response.text
        assert "<code>/health</code>" in response.text
        assert "<ul></ul>" not in response.text

    def test_uptime_measured_from_start(self, api_client: TestClient) -> None:
        app = api_client.app
        previous = getattr(app.state, "started_at", None)
        try:
            mark_started(app, clock=lambda: time.monotonic() - 120)
            assert api_client.get("/health").json()["uptime"] >= 120

            mark_started(app)
            assert api_client.get("/health").json()["uptime"] < 120
        finally:
            app.state.started_at = previous


class TestSubmit:
    def test_first_submission_adds_everything(self, api_client: TestClient, event_log: EventLog) -> None:
        payload = _batch(event_log, "a", "b", "c")
        response = api_client.post("/records", json=payload)

        assert response.status_code == 200
        body = response.json()
        assert body == {"ok": True, "receivedCount": 3, "addedCount": 3, "duplicateCount": 0}

    def test_resubmission_is_all_duplicates(self, api_client: TestClient, event_log: EventLog) -> None:
        payload = _batch(event_log, "a", "b")
        api_client.post("/records", json=payload)
        body = api_client.post("/records", json=payload).json()

        assert body["addedCount"] == 0
        assert body["duplicateCount"] == body["receivedCount"] == 2

    def test_incremental_submission(self, api_client: TestClient, event_log: EventLog) -> None:
        api_client.post("/records", json=_batch(event_log, "a"))
        body = api_client.post("/records", json=_batch(event_log, "b", "c")).json()
        assert body == {"ok": True, "receivedCount": 3, "addedCount": 2, "duplicateCount": 1}

    def test_repeated_hash_within_batch(self, api_client: TestClient, event_log: EventLog) -> None:
        payload = _batch(event_log, "a")
        payload["records"] = payload["records"] * 2
        body = api_client.post("/records", json=payload).json()
        assert body["receivedCount"] == body["addedCount"] + body["duplicateCount"]
        assert body["addedCount"] == 1

    @pytest.mark.parametrize(
        "mutate",
        [
            lambda p: p.pop("sessionId"),
            lambda p: p.update(sessionId=""),
            lambda p: p.update(sessionId="   "),
            lambda p: p.update(agentName=42),
            lambda p: p.update(records="not-a-list"),
            lambda p: p.update(records=[{"state": "missing fields"}]),
        ],
    )
    def test_malformed_submission_rejected(
        self,
        api_client: TestClient,
        aggregate_store: AggregateStore,
        event_log: EventLog,
        mutate,
    ) -> None:
        payload = _batch(event_log, "a")
        mutate(payload)
        response = api_client.post("/records", json=payload)

        assert response.status_code == 400
        body = response.json()
        assert body["ok"] is False
        assert body["error"]
        assert isinstance(body["detail"], list) and body["detail"]
        assert aggregate_store.agents() == []

    def test_invalid_json_rejected(self, api_client: TestClient) -> None:
        response = api_client.post(
            "/records", content=b"{not json", headers={"Content-Type": "application/json"}
        )
        assert response.status_code == 400
        assert "error" in response.json()


class TestQueries:
    @pytest.fixture
    def two_agents(
        self, api_client: TestClient, tmp_path: Path, settings, clock: StepClock
    ) -> List[Dict[str, Any]]:
        from chronos.services import build_event_log

        payloads = []
        for name, descriptions in (("alpha", ("a1", "a2")), ("beta", ("b1", "b2", "b3"))):
            log = build_event_log(tmp_path / name, agent_name=name, settings=settings, clock=clock)
            payload = _batch(log, *descriptions)
            api_client.post("/records", json=payload)
            payloads.append(payload)
        return payloads

    def test_records_for_session(self, api_client: TestClient, two_agents) -> None:
        session_id = two_agents[1]["sessionId"]
        body = api_client.get("/records", params={"sessionId": session_id}).json()
        assert body["count"] == 3
        assert [r["description"] for r in body["records"]] == ["b1", "b2", "b3"]

    def test_records_limit_keeps_tail(self, api_client: TestClient, two_agents) -> None:
        session_id = two_agents[1]["sessionId"]
        body = api_client.get("/records", params={"sessionId": session_id, "limit": 2}).json()
        assert [r["description"] for r in body["records"]] == ["b2", "b3"]

    def test_all_records_merged(self, api_client: TestClient, two_agents) -> None:
        body = api_client.get("/records").json()
        assert body["count"] == 5
        assert sorted(r["description"] for r in body["records"]) == ["a1", "a2", "b1", "b2", "b3"]

    def test_unknown_session_is_empty(self, api_client: TestClient, two_agents) -> None:
        body = api_client.get("/records", params={"sessionId": "nope"}).json()
        assert body == {"count": 0, "records": []}

    def test_invalid_limit(self, api_client: TestClient, two_agents) -> None:
        assert api_client.get("/records", params={"limit": 0}).status_code == 400
        assert api_client.get("/records", params={"limit": "many"}).status_code == 400

    def test_stats(self, api_client: TestClient, two_agents) -> None:
        body = api_client.get("/stats").json()
        assert body["totalRecordCount"] == 5
        assert body["agentCount"] == 2
        counts = {s["agentName"]: s["recordCount"] for s in body["perAgentSummary"]}
        assert counts == {"alpha": 2, "beta": 3}

    def test_agents_without_records(self, api_client: TestClient, two_agents) -> None:
        body = api_client.get("/agents").json()
        assert body["count"] == 2
        for agent in body["agents"]:
            assert "records" not in agent
            assert agent["firstSeen"] <= agent["lastSeen"]


class TestErrors:
    def test_unknown_route(self, api_client: TestClient) -> None:
        response = api_client.get("/nowhere")
        assert response.status_code == 404
        assert response.json() == {"ok": False, "error": "Not Found"}

    def test_corrupt_store_is_server_error(
        self, api_client: TestClient, aggregate_store: AggregateStore, tmp_path: Path
    ) -> None:
        (tmp_path / "aggregate" / "aggregated-states.json").write_text("[]", encoding="utf-8")
        response = api_client.get("/stats")
        assert response.status_code == 500
        assert response.json()["ok"] is False


class TestAggregateStore:
    def test_creates_file_on_start(self, tmp_path: Path) -> None:
        path = tmp_path / "agg.json"
        AggregateStore(JsonFileStorage(path))
        document = json.loads(path.read_text(encoding="utf-8"))
        assert document["agents"] == {}
        assert document["createdAt"]

    def test_entry_lifecycle(self, tmp_path: Path, event_log: EventLog) -> None:
        aggregate_store = AggregateStore(
            JsonFileStorage(tmp_path / "agg.json"), clock=StepClock(step=10_000_000)
        )
        submission = RecordSubmission.model_validate(_batch(event_log, "a"))
        aggregate_store.submit(submission)
        first = aggregate_store.agents()[0]

        aggregate_store.submit(RecordSubmission.model_validate(_batch(event_log, "b")))
        second = aggregate_store.agents()[0]

        assert second.first_seen == first.first_seen
        assert second.last_seen > first.last_seen
        assert second.record_count == 2

    def test_state_persists_across_instances(self, tmp_path: Path, event_log: EventLog) -> None:
        path = tmp_path / "agg.json"
        AggregateStore(JsonFileStorage(path)).submit(RecordSubmission.model_validate(_batch(event_log, "a")))
        assert AggregateStore(JsonFileStorage(path)).stats().total_record_count == 1

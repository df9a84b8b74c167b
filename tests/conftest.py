"""Shared test fixtures for chronos."""

from __future__ import annotations

from pathlib import Path
from typing import Iterator

import pytest
from fastapi.testclient import TestClient

from chronos.config import Settings
from chronos.services import AggregateStore, EventLog, JsonFileStorage, build_event_log

# 2025-11-04T14:23:45.123456789Z
BASE_NS = 1_762_266_225_123_456_789


class StepClock:
    """Deterministic clock advancing by a fixed step on every reading."""

    def __init__(self, start: int = BASE_NS, step: int = 1_000) -> None:
        self.now = start
        self.step = step

    def __call__(self) -> int:
        current = self.now
        self.now += self.step
        return current


@pytest.fixture
def clock() -> StepClock:
    return StepClock()


@pytest.fixture
def settings(monkeypatch: pytest.MonkeyPatch) -> Settings:
    monkeypatch.delenv("CHRONOS_STATE_DIR", raising=False)
    monkeypatch.delenv("CHRONOS_AGENT", raising=False)
    return Settings()


@pytest.fixture
def workdir(tmp_path: Path) -> Path:
    target = tmp_path / "project"
    target.mkdir()
    return target


@pytest.fixture
def event_log(workdir: Path, settings: Settings, clock: StepClock) -> EventLog:
    return build_event_log(workdir, agent_name="test-agent", settings=settings, clock=clock)


@pytest.fixture
def aggregate_store(tmp_path: Path, clock: StepClock) -> AggregateStore:
    return AggregateStore(JsonFileStorage(tmp_path / "aggregate" / "aggregated-states.json"), clock=clock)


@pytest.fixture
def api_client(aggregate_store: AggregateStore) -> Iterator[TestClient]:
    from chronos.app import app
    from chronos.services import get_aggregate_store

    app.dependency_overrides[get_aggregate_store] = lambda: aggregate_store
    try:
        yield TestClient(app, raise_server_exceptions=False)
    finally:
        app.dependency_overrides.clear()

"""Tests for the chronos command-line interface."""

from __future__ import annotations

import csv
import json
from pathlib import Path

import pytest

from chronos.cli import main


@pytest.fixture(autouse=True)
def _isolated_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ("CHRONOS_STATE_DIR", "CHRONOS_AGENT", "CHRONOS_SYNC_URL"):
        monkeypatch.delenv(name, raising=False)


def _run(capsys: pytest.CaptureFixture, workdir: Path, *args: str):
    code = main(["--dir", str(workdir), *args])
    return code, capsys.readouterr()


def test_init_outputs_session(capsys, workdir: Path) -> None:
    code, out = _run(capsys, workdir, "init")
    assert code == 0
    body = json.loads(out.out)
    assert body["ok"] is True
    assert body["sessionId"]


def test_record_and_latest(capsys, workdir: Path) -> None:
    code, out = _run(capsys, workdir, "record", "Thinking", "tool-completion", "Read", "file:", "main.js")
    assert code == 0
    body = json.loads(out.out)
    assert body["duplicate"] is False
    assert body["record"]["description"] == "Read file: main.js"
    assert body["record"]["sequence"] == 1

    code, out = _run(capsys, workdir, "latest")
    assert code == 0
    assert out.out.strip() == body["record"]["stamp"]


def test_latest_empty(capsys, workdir: Path) -> None:
    code, out = _run(capsys, workdir, "latest")
    assert code == 0
    assert "No states recorded" in out.out


def test_list_with_limit(capsys, workdir: Path) -> None:
    for state in ("One", "Two", "Three"):
        _run(capsys, workdir, "record", state, "step")
    code, out = _run(capsys, workdir, "list", "2")
    assert code == 0
    lines = out.out.strip().splitlines()
    assert len(lines) == 2
    assert "::Two::" in lines[0] and "::Three::" in lines[1]


def test_stats(capsys, workdir: Path) -> None:
    _run(capsys, workdir, "record", "Thinking", "step", "a")
    _run(capsys, workdir, "record", "Coding", "step", "b")
    code, out = _run(capsys, workdir, "stats")
    body = json.loads(out.out)
    assert code == 0
    assert body["totalCount"] == 2
    assert body["uniqueStateCount"] == 2


def test_export(capsys, workdir: Path, tmp_path: Path) -> None:
    target = tmp_path / "states.csv"
    code, _ = _run(capsys, workdir, "export", str(target))
    assert code == 1
    assert not target.exists()

    _run(capsys, workdir, "record", "Thinking", "step", 'say "hi", then stop')
    code, _ = _run(capsys, workdir, "export", str(target))
    assert code == 0
    with target.open(newline="", encoding="utf-8") as handle:
        rows = list(csv.DictReader(handle))
    assert rows[0]["description"] == 'say "hi", then stop'


def test_stamp_json(capsys, workdir: Path) -> None:
    code, out = _run(
        capsys, workdir, "stamp", "--state", "Executing", "--tick", "42", "--session", "abc", "--json"
    )
    assert code == 0
    body = json.loads(out.out)
    assert "::Executing::TICK-0000000042::[abc]::" in body["stamp"]
    assert body["sequence"] == 42


def test_sync_without_url(capsys, workdir: Path) -> None:
    code, out = _run(capsys, workdir, "sync")
    assert code == 1
    assert "no aggregator URL" in out.err


def test_corrupt_log_exit_code(capsys, workdir: Path) -> None:
    _run(capsys, workdir, "init")
    (workdir / ".cognitive" / "states.json").write_text("{", encoding="utf-8")
    for command in ("list", "latest", "stats"):
        code, out = _run(capsys, workdir, command)
        assert code == 1
        body = json.loads(out.out)
        assert body["ok"] is False
        assert "Corrupt JSON" in body["error"]

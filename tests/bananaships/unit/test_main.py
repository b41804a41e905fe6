from __future__ import annotations

import json
import logging

import pytest

from bananaships.game.core.events import InitPayload, JoinPayload, StartPayload, event_to_dict
from bananaships.main import main
from tests.bananaships.conftest import GUEST, OWNER, make_event


@pytest.fixture(autouse=True)
def _keep_test_logging(monkeypatch) -> None:
    monkeypatch.setattr("bananaships.main.setup_logging", lambda: None)


def _write_log(path, events) -> None:
    path.write_text("".join(json.dumps(event_to_dict(event)) + "\n" for event in events), encoding="utf-8")


def test_replay_command_summarizes_log(tmp_path, monkeypatch, caplog) -> None:
    monkeypatch.chdir(tmp_path)
    log_path = tmp_path / "game.jsonl"
    _write_log(
        log_path,
        [
            make_event(1, OWNER, InitPayload(owner_name="Alice")),
            make_event(2, GUEST, JoinPayload(name="Bob")),
            make_event(3, OWNER, StartPayload()),
        ],
    )

    with caplog.at_level(logging.INFO, logger="bananaships.main"):
        code = main(["replay", str(log_path), "--viewer", GUEST, "--owner", OWNER, "--seed", "s"])

    assert code == 0
    assert "replay_summary game=replay phase=bananagrams players=2" in caplog.text
    assert "replay_player id=bob name=Bob" in caplog.text


def test_replay_command_without_init_fails(tmp_path, monkeypatch) -> None:
    monkeypatch.chdir(tmp_path)
    log_path = tmp_path / "game.jsonl"
    _write_log(log_path, [make_event(1, GUEST, JoinPayload(name="Bob"))])
    assert main(["replay", str(log_path), "--viewer", GUEST, "--owner", OWNER]) == 1


def test_replay_command_reports_unreadable_log(tmp_path, monkeypatch) -> None:
    monkeypatch.chdir(tmp_path)
    assert main(["replay", str(tmp_path / "missing.jsonl"), "--viewer", GUEST, "--owner", OWNER]) == 2

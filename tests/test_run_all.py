"""Tests for the multi-bot supervisor."""

import json
from unittest.mock import MagicMock

import pytest

import run_all


@pytest.fixture(autouse=True)
def reset_state(monkeypatch):
    monkeypatch.setattr(run_all, "processes", {})
    monkeypatch.setattr(run_all, "config_paths", {})
    monkeypatch.setattr(run_all, "shutting_down", False)
    monkeypatch.setattr(run_all.time, "sleep", MagicMock())


def _proc(retcode):
    proc = MagicMock()
    proc.poll.return_value = retcode
    return proc


def test_start_bot_spawns_main_with_config(tmp_path, monkeypatch):
    config_path = tmp_path / "lychii.json"
    config_path.write_text(json.dumps({"name": "lychii"}))
    popen = MagicMock()
    monkeypatch.setattr(run_all.subprocess, "Popen", popen)

    run_all.start_bot(config_path)

    args = popen.call_args.args[0]
    assert args[1].endswith("main.py")
    assert args[2:] == ["--config", str(config_path)]


def test_failed_bot_restarted(monkeypatch):
    replacement = _proc(None)
    start_bot = MagicMock(return_value=replacement)
    monkeypatch.setattr(run_all, "start_bot", start_bot)
    run_all.processes["lychii"] = _proc(1)
    run_all.config_paths["lychii"] = "bots/lychii.json"

    run_all.check_bots()

    start_bot.assert_called_once_with("bots/lychii.json")
    assert run_all.processes["lychii"] is replacement


def test_clean_exit_not_restarted(monkeypatch):
    start_bot = MagicMock()
    monkeypatch.setattr(run_all, "start_bot", start_bot)
    run_all.processes["lychii"] = _proc(0)

    run_all.check_bots()

    start_bot.assert_not_called()
    assert "lychii" not in run_all.processes


def test_running_bot_left_alone(monkeypatch):
    start_bot = MagicMock()
    monkeypatch.setattr(run_all, "start_bot", start_bot)
    proc = _proc(None)
    run_all.processes["lychii"] = proc

    run_all.check_bots()

    start_bot.assert_not_called()
    assert run_all.processes["lychii"] is proc

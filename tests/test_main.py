"""Tests for the bot entry point."""

from unittest.mock import patch

import main


def test_missing_tokens_exit_non_zero(monkeypatch, tmp_path):
    monkeypatch.delenv("SLACK_BOT_TOKEN", raising=False)
    monkeypatch.delenv("SLACK_APP_TOKEN", raising=False)

    assert main.main(["--env-file", str(tmp_path / "missing.env")]) == 1


def test_returns_bot_exit_status(monkeypatch, tmp_path):
    monkeypatch.setenv("SLACK_BOT_TOKEN", "xoxb-1")
    monkeypatch.setenv("SLACK_APP_TOKEN", "xapp-1")

    with patch("main.LychiiBot") as bot_cls:
        bot_cls.return_value.run.return_value = 1
        status = main.main(["--env-file", str(tmp_path / "missing.env")])

    assert status == 1
    config = bot_cls.call_args.args[0]
    assert config.token == "xoxb-1"


def test_interrupt_exits_cleanly(monkeypatch, tmp_path):
    monkeypatch.setenv("SLACK_BOT_TOKEN", "xoxb-1")
    monkeypatch.setenv("SLACK_APP_TOKEN", "xapp-1")

    with patch("main.LychiiBot") as bot_cls:
        bot_cls.return_value.run.side_effect = KeyboardInterrupt
        status = main.main(["--env-file", str(tmp_path / "missing.env")])

    assert status == 0

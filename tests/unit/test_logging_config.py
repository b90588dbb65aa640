"""Tests for tumbler/logging_config.py"""

import json
import logging

import pytest
import structlog

from tumbler.logging_config import bind_session, clear_session, setup_logging


@pytest.fixture(autouse=True)
def restore_logging():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    clear_session()
    structlog.reset_defaults()
    root.handlers[:] = handlers
    root.setLevel(level)


class TestLevels:
    def test_defaults_to_warning(self, monkeypatch):
        monkeypatch.delenv("TUMBLER_LOG_LEVEL", raising=False)

        setup_logging()

        assert logging.getLogger().level == logging.WARNING

    def test_env_override(self, monkeypatch):
        monkeypatch.setenv("TUMBLER_LOG_LEVEL", "debug")

        setup_logging()

        assert logging.getLogger().level == logging.DEBUG

    def test_explicit_level_wins(self, monkeypatch):
        monkeypatch.setenv("TUMBLER_LOG_LEVEL", "DEBUG")

        setup_logging(level="ERROR")

        assert logging.getLogger().level == logging.ERROR

    def test_unknown_level_falls_back_to_warning(self):
        setup_logging(level="chatty")
        assert logging.getLogger().level == logging.WARNING

    def test_info_rounds_hidden_by_default(self, monkeypatch, capsys):
        monkeypatch.delenv("TUMBLER_LOG_LEVEL", raising=False)
        setup_logging()

        structlog.get_logger("tumbler.test").info("duel.resolved", winner="a")

        assert "duel.resolved" not in capsys.readouterr().err


class TestJsonOutput:
    def test_session_id_on_every_line(self, capsys):
        setup_logging(level="INFO", json_output=True)
        bind_session(duel_session="abc123")

        structlog.get_logger("tumbler.test").info("duel.resolved", winner="a")

        line = capsys.readouterr().err.strip().splitlines()[-1]
        event = json.loads(line)
        assert event["event"] == "duel.resolved"
        assert event["duel_session"] == "abc123"
        assert event["winner"] == "a"
        assert event["level"] == "info"

    def test_clear_session_drops_context(self, capsys):
        setup_logging(level="INFO", json_output=True)
        bind_session(duel_session="abc123")
        clear_session()

        structlog.get_logger("tumbler.test").info("duel.closed")

        event = json.loads(capsys.readouterr().err.strip().splitlines()[-1])
        assert "duel_session" not in event

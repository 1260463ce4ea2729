"""Tests for structured JSON logging."""

from __future__ import annotations

import json
import logging

import pytest

from speakable.logging_config import MAX_FIELD_CHARS, JSONFormatter, resolve_level, setup_logging


@pytest.fixture(autouse=True)
def _restore_logger(monkeypatch):
    monkeypatch.delenv("SPEAKABLE_DEBUG", raising=False)
    monkeypatch.delenv("SPEAKABLE_LOG_LEVEL", raising=False)
    logger = logging.getLogger("speakable")
    handlers, level = list(logger.handlers), logger.level
    yield
    logger.handlers[:] = handlers
    logger.setLevel(level)


def _record(msg: str, **extra) -> logging.LogRecord:
    record = logging.LogRecord("speakable.renderer", logging.DEBUG, __file__, 1, msg, (), None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestJSONFormatter:
    def test_core_fields(self):
        payload = json.loads(JSONFormatter().format(_record("hello")))
        assert payload["level"] == "DEBUG"
        assert payload["logger"] == "speakable.renderer"
        assert payload["msg"] == "hello"
        assert "ts" in payload

    def test_extra_fields(self):
        payload = json.loads(JSONFormatter().format(_record("miss", target_id="123")))
        assert payload["target_id"] == "123"

    def test_non_ascii_kept(self):
        line = JSONFormatter().format(_record("不明なユーザー"))
        assert "不明なユーザー" in line

    def test_long_string_extra_truncated(self):
        preview = "あ" * (MAX_FIELD_CHARS + 30)
        payload = json.loads(JSONFormatter().format(_record("Rendering message", preview=preview)))
        assert payload["preview"].startswith("あ" * MAX_FIELD_CHARS)
        assert payload["preview"].endswith("(+30 chars)")

    def test_short_and_non_string_extras_untouched(self):
        payload = json.loads(JSONFormatter().format(_record("x", preview="hi", chars=4000)))
        assert payload["preview"] == "hi"
        assert payload["chars"] == 4000

    def test_private_attributes_skipped(self):
        payload = json.loads(JSONFormatter().format(_record("x", _secret="s")))
        assert "_secret" not in payload


class TestResolveLevel:
    def test_default_warning(self):
        assert resolve_level() == logging.WARNING

    def test_explicit(self):
        assert resolve_level("info") == logging.INFO

    def test_debug_flag_wins(self):
        assert resolve_level("ERROR", debug=True) == logging.DEBUG

    def test_debug_env(self, monkeypatch):
        monkeypatch.setenv("SPEAKABLE_DEBUG", "true")
        assert resolve_level() == logging.DEBUG

    def test_level_env(self, monkeypatch):
        monkeypatch.setenv("SPEAKABLE_LOG_LEVEL", "error")
        assert resolve_level() == logging.ERROR

    def test_unknown_level_falls_back(self):
        assert resolve_level("chatty") == logging.WARNING


class TestSetupLogging:
    def test_sets_level_and_handler(self):
        setup_logging("INFO")
        logger = logging.getLogger("speakable")
        assert logger.level == logging.INFO
        assert isinstance(logger.handlers[0].formatter, JSONFormatter)

    def test_repeat_calls_do_not_stack_handlers(self):
        setup_logging("INFO")
        count = len(logging.getLogger("speakable").handlers)
        setup_logging("DEBUG")
        assert len(logging.getLogger("speakable").handlers) == count

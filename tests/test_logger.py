"""Tests for the JSON logger."""

import json
import logging
import sys
import os

import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from core.logger import WolfgramLogger, _JsonFormatter


@pytest.fixture()
def fresh_logger(tmp_path, monkeypatch):
    """Point the singleton at a temporary log directory."""
    monkeypatch.setattr(WolfgramLogger, "_instance", None)
    monkeypatch.setattr(WolfgramLogger, "_LOG_DIR", str(tmp_path))
    base = logging.getLogger(WolfgramLogger.LOGGER_NAME)
    saved = list(base.handlers)
    for handler in saved:
        base.removeHandler(handler)
    yield tmp_path
    if WolfgramLogger._instance is not None:
        WolfgramLogger._instance.cleanup()
    for handler in saved:
        base.addHandler(handler)


class TestJsonFormatter:
    def test_extra_fields_merged(self) -> None:
        record = logging.LogRecord(
            name="wolfgram.client", level=logging.INFO, pathname=__file__, lineno=1,
            msg="Message sent", args=(), exc_info=None,
        )
        record.chat_id = 42
        record.api_endpoint = "sendMessage"
        entry = json.loads(_JsonFormatter().format(record))
        assert entry["message"] == "Message sent"
        assert entry["level"] == "INFO"
        assert entry["logger"] == "wolfgram.client"
        assert entry["chat_id"] == 42
        assert entry["api_endpoint"] == "sendMessage"

    def test_exception_traceback_included(self) -> None:
        try:
            raise RuntimeError("boom")
        except RuntimeError:
            record = logging.LogRecord(
                name="wolfgram.transport", level=logging.ERROR, pathname=__file__, lineno=1,
                msg="Bot API request error", args=(), exc_info=sys.exc_info(),
            )
        entry = json.loads(_JsonFormatter().format(record))
        assert "RuntimeError: boom" in entry["exc_info"]


class TestWolfgramLogger:
    def test_singleton(self, fresh_logger) -> None:
        assert WolfgramLogger.get_logger() is WolfgramLogger.get_logger()
        assert WolfgramLogger() is WolfgramLogger()

    def test_child_loggers_reach_file(self, fresh_logger) -> None:
        logger = WolfgramLogger.get_logger()
        logging.getLogger("wolfgram.client").warning("Delivery failed", extra={"chat_id": 7})
        for handler in logger.handlers:
            handler.flush()
        lines = (fresh_logger / "wolfgram.log").read_text(encoding="utf-8").splitlines()
        entry = json.loads(lines[-1])
        assert entry["message"] == "Delivery failed"
        assert entry["chat_id"] == 7

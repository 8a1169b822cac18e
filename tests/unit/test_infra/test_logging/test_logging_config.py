"""Tests for logging configuration and the JSON formatter."""

from __future__ import annotations

import json
import logging
import sys

import pytest

from service_registrar.core.settings import LoggingSettings
from service_registrar.infra.logging import JSONFormatter, configure_logging, setup_logging


def make_record(message: str = "Service registered", **extra) -> logging.LogRecord:
    record = logging.LogRecord(
        name="service_registrar.infra.discovery.lifecycle",
        level=logging.INFO,
        pathname=__file__,
        lineno=1,
        msg=message,
        args=(),
        exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


@pytest.mark.unit
class TestJSONFormatter:
    def test_basic_fields(self):
        formatter = JSONFormatter(static={"service": "orders"})

        data = json.loads(formatter.format(make_record()))

        assert data["level"] == "INFO"
        assert data["logger"] == "service_registrar.infra.discovery.lifecycle"
        assert data["message"] == "Service registered"
        assert data["service"] == "orders"
        assert data["timestamp"].endswith("Z")

    def test_extra_fields_included(self):
        formatter = JSONFormatter()

        data = json.loads(formatter.format(make_record(service_id="orders-1", tags=["a", "v1"])))

        assert data["service_id"] == "orders-1"
        assert data["tags"] == ["a", "v1"]
        assert "msg" not in data

    def test_exception_stays_on_one_line(self):
        formatter = JSONFormatter()
        try:
            raise RuntimeError("boom")
        except RuntimeError:
            record = make_record()
            record.exc_info = sys.exc_info()

        output = formatter.format(record)

        assert "\n" not in output
        assert "RuntimeError: boom" in json.loads(output)["exception"]


@pytest.mark.unit
class TestConfigureLogging:
    def test_root_level_and_handlers(self, tmp_path):
        log_file = tmp_path / "logs" / "registrar.log"

        configure_logging(log_level="DEBUG", json_logs=True, file_path=log_file)

        root = logging.getLogger()
        assert root.level == logging.DEBUG
        assert {type(h).__name__ for h in root.handlers} == {"StreamHandler", "RotatingFileHandler"}
        assert logging.getLogger("httpx").level == logging.WARNING

        logging.getLogger("test").info("written", extra={"service_id": "orders-1"})
        for handler in root.handlers:
            handler.flush()
        line = log_file.read_text().splitlines()[-1]
        assert json.loads(line)["service_id"] == "orders-1"

    def test_setup_logging_from_settings(self):
        setup_logging(LoggingSettings(level="WARNING", json_logs=False), force=True)

        root = logging.getLogger()
        assert root.level == logging.WARNING
        assert not isinstance(root.handlers[0].formatter, JSONFormatter)

"""
LoggerFactory / JSONFormatter tests.
"""

import json
import logging

from util_logger import ComponentType, JSONFormatter, LogContext, LogLevel, LoggerFactory


class TestLoggerFactory:

    def test_name_and_single_handler(self):
        first = LoggerFactory.create_logger(ComponentType.REPOSITORY, "LoggerTest")
        second = LoggerFactory.create_logger(ComponentType.REPOSITORY, "LoggerTest")
        assert first is second
        assert first.name == "repository.LoggerTest"
        json_handlers = [h for h in first.handlers if isinstance(h.formatter, JSONFormatter)]
        assert len(json_handlers) == 1

    def test_component_dimensions_merged(self, caplog):
        logger = LoggerFactory.create_logger(ComponentType.ADAPTER, "DimsTest")
        logger.warning("hello", extra={"custom_dimensions": {"ship_name": "Endeavour"}})

        record = next(r for r in caplog.records if r.name == "adapter.DimsTest")
        assert record.custom_dimensions == {
            "component_type": "adapter",
            "component_name": "DimsTest",
            "ship_name": "Endeavour",
        }


class TestJSONFormatter:

    def test_formats_dimensions_and_exception(self):
        try:
            raise ValueError("bad time")
        except ValueError:
            import sys
            record = logging.LogRecord("trigger.x", logging.ERROR, __file__, 1, "failed", (), sys.exc_info())
        record.custom_dimensions = {"correlation_id": "abcd1234"}

        payload = json.loads(JSONFormatter().format(record))
        assert payload["level"] == "ERROR"
        assert payload["customDimensions"]["correlation_id"] == "abcd1234"
        assert payload["exception"]["type"] == "ValueError"


class TestLogContext:

    def test_drops_unset_fields(self):
        assert LogContext(correlation_id="abcd1234", delivery_count=0).to_dict() == {
            "correlation_id": "abcd1234",
            "delivery_count": 0,
        }

    def test_log_level_from_string(self):
        assert LogLevel.from_string("warning") is LogLevel.WARNING

"""Tests for logging configuration and metrics registration."""

import json
import logging

from prometheus_client import REGISTRY

from bucketwire import metrics
from bucketwire.config import LoggingConfig
from bucketwire.logging_config import JSONFormatter, configure_from, configure_logging


def _record(**extra) -> logging.LogRecord:
    record = logging.LogRecord(
        name="bucketwire.dispatch",
        level=logging.WARNING,
        pathname=__file__,
        lineno=1,
        msg="GetObject on %s failed",
        args=("/b1/k1",),
        exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestJSONFormatter:
    """Tests for JSONFormatter."""

    def test_basic_fields(self):
        entry = json.loads(JSONFormatter().format(_record()))
        assert entry["level"] == "WARNING"
        assert entry["logger"] == "bucketwire.dispatch"
        assert entry["message"] == "GetObject on /b1/k1 failed"
        assert "timestamp" in entry

    def test_request_extras(self):
        entry = json.loads(
            JSONFormatter().format(_record(operation="GetObject", method="GET", path="/b1/k1", status=404))
        )
        assert entry["operation"] == "GetObject"
        assert entry["method"] == "GET"
        assert entry["path"] == "/b1/k1"
        assert entry["status"] == 404

    def test_absent_extras_are_omitted(self):
        entry = json.loads(JSONFormatter().format(_record()))
        assert "operation" not in entry
        assert "duration_ms" not in entry


class TestConfigureLogging:
    """Tests for configure_logging()."""

    def test_json_handler(self):
        root = logging.getLogger()
        saved = root.handlers[:], root.level
        try:
            configure_logging(level="DEBUG", fmt="json")
            assert root.level == logging.DEBUG
            assert len(root.handlers) == 1
            assert isinstance(root.handlers[0].formatter, JSONFormatter)
        finally:
            root.handlers[:] = saved[0]
            root.setLevel(saved[1])

    def test_from_config(self):
        root = logging.getLogger()
        saved = root.handlers[:], root.level
        try:
            configure_from(LoggingConfig(level="warning", format="text"))
            assert root.level == logging.WARNING
            assert not isinstance(root.handlers[0].formatter, JSONFormatter)
        finally:
            root.handlers[:] = saved[0]
            root.setLevel(saved[1])


class TestMetrics:
    """Tests for metric registration."""

    def test_init_is_idempotent(self):
        metrics.init_metrics()
        metrics.init_metrics()
        assert metrics.operations_total is not None
        assert metrics.operation_duration_seconds is not None

    def test_record_operation(self):
        metrics.init_metrics()
        labels = {"operation": "DeleteObject", "outcome": "api_error"}
        before = REGISTRY.get_sample_value("bucketwire_operations_total", labels) or 0.0
        metrics.record_operation("DeleteObject", "api_error", 0.05)
        assert REGISTRY.get_sample_value("bucketwire_operations_total", labels) == before + 1
        assert (
            REGISTRY.get_sample_value(
                "bucketwire_operation_duration_seconds_count", {"operation": "DeleteObject"}
            )
            >= 1
        )

"""Tests for logging helpers."""

import io
import json
import logging

from zendesk_client.utils import RequestLogContext, get_logger, setup_logging, timed_operation


class TestRequestLogContext:
    """Tests for request log fields."""

    def test_drops_unset_fields(self):
        """Test None values are removed."""
        ctx = RequestLogContext(method="GET", url="https://acme.zendesk.com/api/v2/organizations")

        assert ctx.to_dict() == {"method": "GET", "url": "https://acme.zendesk.com/api/v2/organizations"}

    def test_rounds_duration(self):
        """Test durations are rounded."""
        ctx = RequestLogContext(method="GET", url="u", status_code=200, duration_ms=12.34567)

        assert ctx.to_dict()["duration_ms"] == 12.35


class TestLoggingSetup:
    """Tests for JSON log output."""

    def test_json_lines_with_extra(self):
        """Test extras appear in the JSON record."""
        stream = io.StringIO()
        package_logger = setup_logging(level=logging.DEBUG, stream=stream)
        try:
            get_logger("tests").info("API request completed", extra={"status_code": 200})
        finally:
            package_logger.handlers = []
            package_logger.propagate = True
            package_logger.setLevel(logging.NOTSET)

        record = json.loads(stream.getvalue().strip())
        assert record["message"] == "API request completed"
        assert record["status_code"] == 200
        assert record["logger"] == "zendesk_client.tests"

    def test_timed_operation(self):
        """Test the timer records a duration."""
        with timed_operation("noop") as timer:
            pass

        assert timer.duration_ms >= 0
        assert timer.end_time is not None

    def test_timed_operation_logs_duration(self, caplog):
        """Test a passed logger receives the operation and its duration."""
        with caplog.at_level(logging.DEBUG, logger="zendesk_client.tests"):
            with timed_operation("GET organizations", logger=get_logger("tests")):
                pass

        record = caplog.records[-1]
        assert record.operation == "GET organizations"
        assert record.duration_ms >= 0

    def test_page_field(self):
        """Test the page number is kept when set."""
        ctx = RequestLogContext(method="GET", url="u", page=2)

        assert ctx.to_dict() == {"method": "GET", "url": "u", "page": 2}

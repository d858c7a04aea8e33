"""Tests for the logging bootstrap."""

import io
import json
import logging
from unittest.mock import patch

import pytest

from vta.configs.system import LoggingConfig
from vta.infra import logging as vta_logging
from vta.infra.logging import bind_session_id, setup_logging


@pytest.fixture
def captured():
    root = logging.getLogger()
    saved_handlers, saved_level = root.handlers[:], root.level
    stream = io.StringIO()
    with patch.object(vta_logging.sys, "stdout", stream):
        yield stream
    root.handlers = saved_handlers
    root.setLevel(saved_level)


class TestSetupLogging:
    def test_json_lines_carry_session_and_service(self, captured):
        setup_logging(LoggingConfig(json_output=True, service_name="vta-test"))
        bind_session_id("2024-03-01T12:00:00.000Z")

        logging.getLogger("vta.test").info("stored interaction")

        record = json.loads(captured.getvalue().splitlines()[-1])
        assert record["message"] == "stored interaction"
        assert record["level"] == "INFO"
        assert record["logger"] == "vta.test"
        assert record["service"] == "vta-test"
        assert record["session_id"] == "2024-03-01T12:00:00.000Z"
        assert record["trace_id"] == ""

    def test_client_libraries_are_quiet_unless_overridden(self, captured):
        setup_logging(LoggingConfig(loggers={"httpx": "debug"}))

        assert logging.getLogger("openai").level == logging.WARNING
        assert logging.getLogger("httpx").level == logging.DEBUG

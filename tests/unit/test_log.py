"""
Unit tests for logging setup and request/response summaries.
"""

import io
import json
import logging
import sys
from pathlib import Path

from miservidor.config import ServerConfig
from miservidor.http.request import parse_request
from miservidor.http.response import Response, Status, ok
from miservidor.log import (
    JsonFormatter,
    configure_logging,
    describe_request,
    describe_response,
)


class TestConfigureLogging:
    """Tests for configure_logging."""

    def test_console_format(self, clean_logger):
        """Test the text format on the console stream."""
        stream = io.StringIO()
        logger = configure_logging(ServerConfig(log_file=None), stream=stream)

        logger.info("Listening")

        line = stream.getvalue().strip()
        assert line.endswith(" INFO: Listening")
        # "YYYY-MM-DD HH:MM:SS"
        assert len(line.split(" INFO:")[0]) == 19

    def test_level_filters(self, clean_logger):
        """Test that records below the configured level are dropped."""
        stream = io.StringIO()
        logger = configure_logging(ServerConfig(log_level="WARNING", log_file=None), stream=stream)

        logger.info("hidden")
        logger.warning("shown")

        assert "hidden" not in stream.getvalue()
        assert "shown" in stream.getvalue()

    def test_json_file(self, clean_logger, tmp_path: Path):
        """Test that the log file gets one JSON object per line."""
        log_file = tmp_path / "log" / "out.log"
        logger = configure_logging(
            ServerConfig(log_level="DEBUG", log_file=str(log_file)),
            stream=io.StringIO(),
        )

        logger.debug("primera")
        logger.error("segunda ñ")

        lines = log_file.read_text(encoding="utf-8").splitlines()
        entries = [json.loads(line) for line in lines]
        assert [e["message"] for e in entries] == ["primera", "segunda ñ"]
        assert entries[1]["level"] == "ERROR"
        assert entries[1]["logger"] == "miservidor"

    def test_reconfigure_replaces_handlers(self, clean_logger):
        """Test that calling twice does not duplicate output."""
        first = io.StringIO()
        second = io.StringIO()
        configure_logging(ServerConfig(log_file=None), stream=first)
        logger = configure_logging(ServerConfig(log_file=None), stream=second)

        logger.info("una vez")

        assert first.getvalue() == ""
        assert second.getvalue().count("una vez") == 1
        assert len(logger.handlers) == 1

    def test_does_not_propagate(self, clean_logger):
        """Test that the root logger does not duplicate our records."""
        logger = configure_logging(ServerConfig(log_file=None), stream=io.StringIO())

        assert logger.propagate is False


class TestJsonFormatter:
    """Tests for JsonFormatter."""

    def test_includes_exception(self):
        """Test that tracebacks are embedded."""
        logger = logging.getLogger("miservidor.tests.json")
        try:
            raise RuntimeError("boom")
        except RuntimeError:
            record = logger.makeRecord(
                logger.name, logging.ERROR, __file__, 1, "failed", (), sys.exc_info()
            )

        entry = json.loads(JsonFormatter().format(record))

        assert entry["message"] == "failed"
        assert "RuntimeError: boom" in entry["exception"]


class TestDescribe:
    """Tests for describe_request and describe_response."""

    def test_describe_request(self):
        """Test the request summary."""
        request = parse_request(
            "POST /proceso.html?lang=es HTTP/1.1\r\nHost: a\r\n\r\nmensaje=hola"
        )

        assert describe_request(request) == {
            "method": "POST",
            "resource": "/proceso.html",
            "params": {"lang": "es"},
            "headers": {"Host": "a"},
            "body": "mensaje=hola",
        }

    def test_short_body_logged(self, clock):
        """Test that bodies under 100 bytes are shown."""
        summary = describe_response(ok(b"<p>hola</p>", "text/html", clock=clock))

        assert summary["status"] == "200 OK"
        assert summary["body"] == "<p>hola</p>"
        assert summary["headers"]["Content-Length"] == "11"

    def test_long_body_elided(self, clock):
        """Test that bodies of 100 bytes or more are not dumped."""
        summary = describe_response(ok(b"x" * 100, "text/plain", clock=clock))

        assert summary["body"] == "TOO LONG"

    def test_no_body(self):
        """Test a response without a body."""
        assert describe_response(Response(Status.OK))["body"] is None

    def test_summaries_are_json_serializable(self, clock):
        """Test that both summaries can be dumped as JSON."""
        request = parse_request("GET / HTTP/1.1\r\n\r\n")
        response = ok(bytes([0xff, 0xfe]), "image/gif", clock=clock)

        json.dumps(describe_request(request))
        json.dumps(describe_response(response))

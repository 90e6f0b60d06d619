"""
=============================================================================
LOGGING SETUP
=============================================================================

The process entry point calls configure_logging() once and hands the
resulting logger to the server. Nothing in the protocol engine touches
global logging configuration.

    ┌────────────────────────────┐
    │ logger "miservidor"        │
    ├────────────────────────────┤
    │  console  → text           │  2026-10-18 10:00:00 INFO: Listening on ...
    │  log file → JSON lines     │  {"timestamp": "...", "level": "INFO", ...}
    └────────────────────────────┘

Every request and response is logged at DEBUG as a structured summary
(see describe_request / describe_response). Bodies of 100 bytes or more
are not dumped; they show up as "TOO LONG".

=============================================================================
"""

import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict, Optional, TextIO

from .config import ServerConfig
from .http.request import Request
from .http.response import Response


LOGGER_NAME = "miservidor"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
TEXT_FORMAT = "%(asctime)s %(levelname)s: %(message)s"

# Response bodies at or above this size are summarised instead of logged
MAX_LOGGED_BODY = 100


class JsonFormatter(logging.Formatter):
    """
    One JSON object per record, for log aggregators.

        {"timestamp": "2026-10-18 10:00:00", "level": "DEBUG",
         "logger": "miservidor.server", "message": "..."}
    """

    def __init__(self):
        super().__init__(datefmt=DATE_FORMAT)

    def format(self, record: logging.LogRecord) -> str:
        entry: Dict[str, Any] = {
            "timestamp": self.formatTime(record, self.datefmt),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, ensure_ascii=False)


def configure_logging(config: ServerConfig, stream: Optional[TextIO] = None) -> logging.Logger:
    """
    Build the "miservidor" logger from configuration.

    Safe to call more than once: handlers from a previous call are closed
    and replaced.

    Args:
        config: Supplies log_level and log_file.
        stream: Console stream, stderr by default.

    Returns:
        The configured logger, to be passed to FileServer.
    """
    logger = logging.getLogger(LOGGER_NAME)
    level = getattr(logging, config.log_level.upper(), logging.INFO)
    logger.setLevel(level)
    logger.propagate = False

    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    console = logging.StreamHandler(stream or sys.stderr)
    console.setFormatter(logging.Formatter(TEXT_FORMAT, datefmt=DATE_FORMAT))
    logger.addHandler(console)

    if config.log_file:
        log_path = Path(config.log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_path, encoding="utf-8")
        file_handler.setFormatter(JsonFormatter())
        logger.addHandler(file_handler)

    return logger


def describe_request(request: Request) -> Dict[str, Any]:
    """Structured summary of a request for DEBUG logs."""
    return {
        "method": request.method_name,
        "resource": request.resource,
        "params": dict(request.params),
        "headers": dict(request.headers),
        "body": request.body,
    }


def describe_response(response: Response) -> Dict[str, Any]:
    """
    Structured summary of a response for DEBUG logs.

    Small bodies are decoded for readability; large ones become "TOO LONG".
    """
    body: Optional[str] = None
    if response.body is not None:
        if len(response.body) < MAX_LOGGED_BODY:
            body = response.body.decode("utf-8", errors="replace")
        else:
            body = "TOO LONG"

    return {
        "status": response.status.value,
        "headers": dict(response.headers),
        "body": body,
    }

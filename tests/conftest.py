"""
pytest configuration and fixtures.
"""

import logging
import socket
import threading
from datetime import datetime, timezone
from pathlib import Path
from typing import Generator

import pytest

# Add src to path for imports
import sys
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from miservidor import FileServer, ServerConfig
from miservidor.handlers import LocalFileTree, ResourceResolver
from miservidor.log import LOGGER_NAME


PAGES = {
    "index.html": b"<html><body><h1>\xc2\xa1Hola!</h1></body></html>",
    "404.html": b"<html><body>404 no encontrado</body></html>",
    "406.html": b"<html><body>406 no aceptable</body></html>",
    "501.html": b"<html><body>501 no implementado</body></html>",
    "proceso.html": b"<p>%%mensaje%%</p><p>%%nombre%%</p><p>%%mensaje%%</p>",
    "style.css": b"body { color: red; }",
    "logo.gif": b"GIF89a\x01\x00\x01\x00",
}

FIXED_NOW = datetime(2015, 5, 29, 13, 24, 18, tzinfo=timezone.utc)


@pytest.fixture
def www_root(tmp_path: Path) -> Path:
    """A served root with the status pages and a few resources."""
    root = tmp_path / "www"
    root.mkdir()
    for name, content in PAGES.items():
        (root / name).write_bytes(content)
    return root


@pytest.fixture
def clock():
    """Clock pinned to FIXED_NOW so Date headers are predictable."""
    return lambda: FIXED_NOW


@pytest.fixture
def resolver(www_root: Path, clock) -> ResourceResolver:
    return ResourceResolver(LocalFileTree(www_root), clock=clock)


@pytest.fixture
def clean_logger() -> Generator[logging.Logger, None, None]:
    """The "miservidor" logger, restored to a blank state afterwards."""
    logger = logging.getLogger(LOGGER_NAME)

    yield logger

    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.setLevel(logging.NOTSET)
    logger.propagate = True


@pytest.fixture
def config(www_root: Path) -> ServerConfig:
    """Test configuration: OS-assigned port, short timeout, no log file."""
    return ServerConfig(
        host="127.0.0.1",
        port=0,
        www_root=str(www_root),
        timeout=2.0,
        min_workers=2,
        max_workers=4,
        log_level="DEBUG",
        log_file=None,
    )


@pytest.fixture
def sample_get_request() -> bytes:
    """GET for the index page, HTML accepted."""
    return (
        b"GET /index.html HTTP/1.1\r\n"
        b"Host: localhost:9090\r\n"
        b"User-Agent: pytest\r\n"
        b"Accept: text/html\r\n"
        b"\r\n"
    )


@pytest.fixture
def sample_post_request() -> bytes:
    """Form POST to the templated page."""
    body = b"mensaje=Hola+Mundo"
    return (
        b"POST /proceso.html HTTP/1.1\r\n"
        b"Host: localhost:9090\r\n"
        b"Content-Type: application/x-www-form-urlencoded\r\n"
        + f"Content-Length: {len(body)}\r\n".encode()
        + b"\r\n"
    ) + body


class RunningServer:
    """Runs a FileServer on a background thread."""

    def __init__(self, server: FileServer):
        self.server = server
        self._thread = threading.Thread(target=server.run, daemon=True)

    @property
    def port(self) -> int:
        return self.server.address[1]

    def start(self):
        self._thread.start()
        if not self.server.wait_until_ready(timeout=5.0):
            raise RuntimeError("Server failed to start")

    def stop(self):
        self.server.shutdown()
        self._thread.join(timeout=5.0)

    def exchange(self, raw: bytes) -> bytes:
        """Send raw bytes, read until the server closes, return the reply."""
        with socket.create_connection(("127.0.0.1", self.port), timeout=5.0) as sock:
            sock.sendall(raw)
            chunks = []
            while True:
                chunk = sock.recv(4096)
                if not chunk:
                    break
                chunks.append(chunk)
        return b"".join(chunks)


@pytest.fixture
def running_server(config: ServerConfig, clock) -> Generator[RunningServer, None, None]:
    """A live server on a free loopback port."""
    server = FileServer(config, logger=logging.getLogger("miservidor.tests"), clock=clock)
    running = RunningServer(server)
    running.start()

    yield running

    running.stop()

"""
=============================================================================
FILE SERVER
=============================================================================

Glues the connection plumbing to the protocol engine.

=============================================================================
LIFE OF A CONNECTION
=============================================================================

    SocketServer.accept()
          │
          ▼
    ThreadPool.submit(_process_connection, conn)
          │                                            worker thread
          ▼                                            ─────────────
    conn.read_request()          bytes, concatenated across recv() calls
          │
          ▼
    handle(raw)
      ├── RequestParser.parse()       → Request
      ├── ResourceResolver.resolve()  → Response (200 / 404 / 406 / 501)
      └── serialize()                 → bytes
          │
          ▼
    conn.send_response()  →  conn.close()

One request per connection, always closed by the server.

=============================================================================
WHAT ENDS A CONNECTION WITHOUT A RESPONSE
=============================================================================

    Idle timeout              logged at DEBUG
    Malformed request line    logged at WARNING
    Missing status page       logged at ERROR (deployment defect)
    Unreadable resource       logged at ERROR
    Thread pool saturated     logged at WARNING

None of these stops the accept loop.

=============================================================================
"""

import json
import logging
from datetime import datetime
from typing import Callable, Optional, Tuple

from .config import ServerConfig
from .core import Connection, ConnectionState, SocketServer, ThreadPool
from .handlers import FileTree, LocalFileTree, ResourceResolver, ResourceReadError, StatusPageError
from .http import RequestParser, RequestParseError
from .log import describe_request, describe_response


class FileServer:
    """
    Static file server with content negotiation and HTML form templating.

    Usage:
        server = FileServer(ServerConfig(port=9090, www_root="www"))
        server.run()   # blocks until Ctrl+C / SIGTERM

    Construction validates the configuration and checks the status pages,
    so a broken deployment fails before the socket is opened.
    """

    def __init__(
        self,
        config: Optional[ServerConfig] = None,
        logger: Optional[logging.Logger] = None,
        files: Optional[FileTree] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        """
        Args:
            config: Server configuration; defaults apply if omitted.
            logger: Logger for every component. The caller owns its handlers.
            files:  Served root; a LocalFileTree over config.www_root by default.
            clock:  Time source for Date headers.

        Raises:
            ValueError:      Invalid configuration.
            StatusPageError: 404.html, 406.html or 501.html is missing.
        """
        self.config = config or ServerConfig()
        self.config.validate()

        self.logger = logger or logging.getLogger(__name__)

        self._parser = RequestParser()
        self.resolver = ResourceResolver(
            files or LocalFileTree(self.config.www_root),
            server_name=self.config.server_name,
            clock=clock,
            logger=self.logger,
        )
        self.resolver.check_status_pages()

        self._socket_server = SocketServer(self.config, logger=self.logger)
        self._thread_pool = ThreadPool(
            min_workers=self.config.min_workers,
            max_workers=self.config.max_workers,
            logger=self.logger,
        )

    # =========================================================================
    # LIFECYCLE
    # =========================================================================

    @property
    def address(self) -> Tuple[str, int]:
        """Bound (host, port); meaningful once the server is ready."""
        return self._socket_server.address

    def run(self):
        """
        Serve until shutdown() or a termination signal.

        Raises:
            OSError: If the listening socket cannot be bound.
        """
        self._thread_pool.start()
        self.logger.info(f"Serving {self.config.www_root} as {self.config.server_name}")

        try:
            self._socket_server.start(self._handle_connection)
        except KeyboardInterrupt:
            self.logger.info("Received keyboard interrupt")
        finally:
            self._thread_pool.shutdown()
            self.logger.info("Server stopped")

    def wait_until_ready(self, timeout: Optional[float] = None) -> bool:
        """Block until the listening socket is up (useful when run() is on a thread)."""
        return self._socket_server.wait_until_ready(timeout)

    def shutdown(self):
        """Ask run() to return. Safe from any thread."""
        self._socket_server.shutdown()

    # =========================================================================
    # REQUEST PIPELINE
    # =========================================================================

    def handle(self, raw: bytes) -> bytes:
        """
        Run the synchronous pipeline on one raw request.

        parse → resolve → serialize, with DEBUG logging of both sides and
        one INFO access line: "GET /index.html 200 44".

        Raises:
            RequestParseError, StatusPageError, ResourceReadError
        """
        request = self._parser.parse(raw)
        if self.logger.isEnabledFor(logging.DEBUG):
            self.logger.debug(f"Request: {json.dumps(describe_request(request), ensure_ascii=False)}")

        response = self.resolver.resolve(request)
        if self.logger.isEnabledFor(logging.DEBUG):
            self.logger.debug(f"Response: {json.dumps(describe_response(response), ensure_ascii=False)}")

        self.logger.info(f"{request.method_name} {request.target} {response.status.code} {response.content_length}")
        return response.to_bytes()

    def _handle_connection(self, conn: Connection):
        """Called by the accept loop; hands the connection to a worker."""
        if not self._thread_pool.submit(self._process_connection, args=(conn,)):
            self.logger.warning(f"[{conn.id}] Thread pool full, dropping {conn.peer}")
            conn.close()

    def _process_connection(self, conn: Connection):
        """One exchange on a worker thread. The connection is always closed."""
        with conn:
            try:
                raw = conn.read_request()
            except TimeoutError:
                self.logger.debug(f"[{conn.id}] Connection with {conn.peer} timed out")
                return

            if raw is None:
                return

            conn.state = ConnectionState.PROCESSING
            try:
                data = self.handle(raw)
            except RequestParseError as e:
                self.logger.warning(f"[{conn.id}] Malformed request from {conn.peer}: {e}")
                return
            except (StatusPageError, ResourceReadError) as e:
                self.logger.error(f"[{conn.id}] {e}")
                return

            conn.send_response(data)


def create_server(config: Optional[ServerConfig] = None, **kwargs) -> FileServer:
    """Factory mirroring FileServer(...), handy for embedding and tests."""
    return FileServer(config, **kwargs)

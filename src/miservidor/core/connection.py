"""
=============================================================================
CLIENT CONNECTION
=============================================================================

Wraps one accepted client socket for exactly one request/response
exchange:

    NEW ──► READING ──► PROCESSING ──► WRITING ──► CLOSED
              │                                      ▲
              └──── timeout / peer closed ───────────┘

=============================================================================
READING A REQUEST
=============================================================================

TCP delivers a byte stream, not messages. A request may arrive in one
recv() or in several, so chunks are concatenated until:

    1. the header terminator \r\n\r\n has been seen, and
    2. if a Content-Length header was sent, that many body bytes follow.

If the client closes its side early we stop and hand over whatever
arrived; the parser decides whether it is usable.

If the client sends nothing for `timeout` seconds the read raises
TimeoutError and the server drops the connection without a response.

=============================================================================
"""

import logging
import socket
import time
import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional


HEADER_TERMINATOR = b"\r\n\r\n"

# Upper bounds on reading leftovers from the client while closing
DRAIN_TIMEOUT = 0.5
DRAIN_LIMIT = 64 * 1024


class ConnectionState(Enum):
    """Where a connection is in its single exchange."""
    NEW = "new"
    READING = "reading"
    PROCESSING = "processing"
    WRITING = "writing"
    CLOSED = "closed"


@dataclass
class Connection:
    """
    A client connection.

    Attributes:
        socket: The accepted client socket.
        address: Client's (ip, port).
        id: Short random id used to correlate log lines.
        state: Current ConnectionState.
        buffer_size: Bytes per recv().
        timeout: Idle timeout in seconds (None = wait forever).
    """

    socket: socket.socket
    address: tuple[str, int]

    id: str = field(default_factory=lambda: str(uuid.uuid4())[:8])
    state: ConnectionState = ConnectionState.NEW

    buffer_size: int = 8192
    timeout: Optional[float] = 80.0

    logger: logging.Logger = field(default_factory=lambda: logging.getLogger(__name__), repr=False)

    def __post_init__(self):
        self.socket.setblocking(True)
        self.socket.settimeout(self.timeout)

    @property
    def client_ip(self) -> str:
        return self.address[0]

    @property
    def peer(self) -> str:
        """"ip:port" for log messages."""
        return f"{self.address[0]}:{self.address[1]}"

    # =========================================================================
    # READING
    # =========================================================================

    def read_request(self) -> Optional[bytes]:
        """
        Read one complete request from the socket.

        Returns:
            The raw request bytes, or None if the client closed the
            connection without sending anything.

        Raises:
            TimeoutError: The client stayed silent for longer than `timeout`.
        """
        self.state = ConnectionState.READING
        buffer = b""

        try:
            # ─────────────────────────────────────────────────────────────
            # STEP 1: Read until the blank line that ends the headers
            # ─────────────────────────────────────────────────────────────
            while HEADER_TERMINATOR not in buffer:
                chunk = self._recv()
                if not chunk:
                    # Peer closed; hand over what we have (maybe nothing)
                    return buffer or None
                buffer += chunk

            # ─────────────────────────────────────────────────────────────
            # STEP 2: Read the announced body, if any
            # ─────────────────────────────────────────────────────────────
            header_end = buffer.find(HEADER_TERMINATOR)
            body_start = header_end + len(HEADER_TERMINATOR)
            content_length = self._parse_content_length(buffer[:header_end])

            while len(buffer) - body_start < content_length:
                chunk = self._recv()
                if not chunk:
                    break
                buffer += chunk

            return buffer

        except socket.timeout:
            raise TimeoutError(f"Connection with {self.peer} timed out")

    def _recv(self) -> bytes:
        """recv() that treats a reset as an orderly close."""
        try:
            return self.socket.recv(self.buffer_size)
        except (ConnectionResetError, BrokenPipeError):
            return b""

    @staticmethod
    def _parse_content_length(headers: bytes) -> int:
        """
        Find Content-Length in raw header bytes.

        Done on bytes before parsing because we need it to know when the
        request is complete. Missing or malformed → 0.
        """
        text = headers.decode("utf-8", errors="replace").lower()
        for line in text.split("\r\n"):
            if line.startswith("content-length:"):
                try:
                    return max(int(line.split(":", 1)[1].strip()), 0)
                except ValueError:
                    return 0
        return 0

    # =========================================================================
    # WRITING
    # =========================================================================

    def send_response(self, data: bytes) -> bool:
        """
        Send a serialized response with sendall().

        Returns:
            True if everything was sent, False if the client went away.
        """
        self.state = ConnectionState.WRITING
        try:
            self.socket.sendall(data)
            return True
        except OSError as e:
            self.logger.warning(f"[{self.id}] Send to {self.peer} failed: {e}")
            return False

    # =========================================================================
    # CLOSING
    # =========================================================================

    def close(self):
        """
        Close the connection: send FIN, drain what the client still sends,
        release the socket. Idempotent.

        The drain is bounded by DRAIN_TIMEOUT seconds and DRAIN_LIMIT bytes.
        """
        if self.state == ConnectionState.CLOSED:
            return

        try:
            self.socket.shutdown(socket.SHUT_WR)
        except OSError:
            pass  # Peer already gone

        deadline = time.monotonic() + DRAIN_TIMEOUT
        drained = 0
        try:
            while drained < DRAIN_LIMIT:
                remaining = deadline - time.monotonic()
                if remaining <= 0:
                    break
                self.socket.settimeout(remaining)
                chunk = self.socket.recv(1024)
                if not chunk:
                    break
                drained += len(chunk)
        except OSError:
            pass

        self.socket.close()
        self.state = ConnectionState.CLOSED
        self.logger.debug(f"[{self.id}] Connection with {self.peer} closed")

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False

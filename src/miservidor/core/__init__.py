"""
=============================================================================
CONNECTION PLUMBING
=============================================================================

    SocketServer   accept loop, signals, shutdown
    Connection     one client socket, one request, one response
    ThreadPool     one worker thread per connection at a time

None of this knows about HTTP semantics; the server module glues it to
the protocol engine in miservidor.http.

=============================================================================
"""

from .socket_server import SocketServer
from .connection import Connection, ConnectionState
from .thread_pool import ThreadPool

__all__ = [
    "SocketServer",
    "Connection",
    "ConnectionState",
    "ThreadPool",
]

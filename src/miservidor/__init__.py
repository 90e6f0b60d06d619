"""
=============================================================================
MISERVIDOR - A Small Static File Server on Raw Sockets
=============================================================================

Serves files from one directory over HTTP/1.1, one request per
connection, with Accept-header negotiation and %%placeholder%% templating
of HTML pages that receive a form POST.

=============================================================================
PACKAGE STRUCTURE
=============================================================================

    miservidor/
    ├── __init__.py          # This file - package exports
    ├── __main__.py          # CLI entry point (python -m miservidor)
    ├── server.py            # FileServer: plumbing + protocol engine
    ├── config.py            # ServerConfig dataclass
    ├── log.py               # Logging setup, request/response summaries
    ├── core/                # Sockets and threads
    │   ├── socket_server.py # Accept loop, signals
    │   ├── connection.py    # One client socket
    │   └── thread_pool.py   # Worker threads
    ├── http/                # Protocol engine (no I/O)
    │   ├── request.py       # Request parsing
    │   ├── response.py      # Response building and serialization
    │   ├── mime.py          # MIME types and Accept negotiation
    │   └── template.py      # %%placeholder%% substitution
    └── handlers/
        └── static.py        # Resource resolution against the served root

=============================================================================
QUICK START
=============================================================================

    from miservidor import FileServer, ServerConfig

    server = FileServer(ServerConfig(port=9090, www_root="www"))
    server.run()

The served root must contain 404.html, 406.html and 501.html.

=============================================================================
"""

__version__ = "1.0.0"

from .server import FileServer, create_server
from .config import ServerConfig

__all__ = ["FileServer", "ServerConfig", "create_server", "__version__"]

"""
=============================================================================
SERVER CONFIGURATION
=============================================================================

All runtime settings in one dataclass, with sensible defaults for running
from a checkout:

    python -m miservidor                  # serves ./www on 127.0.0.1:9090

Settings can come from three places, highest priority first:

    1. Command-line flags        (see __main__.py)
    2. Environment variables     (ServerConfig.from_env)
    3. Dataclass defaults

=============================================================================
ENVIRONMENT VARIABLES
=============================================================================

    MISERVIDOR_HOST       Bind address            (default: 127.0.0.1)
    MISERVIDOR_PORT       Listening port          (default: 9090)
    MISERVIDOR_WWW        Served root directory   (default: www)
    MISERVIDOR_TIMEOUT    Idle timeout, seconds   (default: 80)
    MISERVIDOR_WORKERS    Max worker threads      (default: 16)
    MISERVIDOR_LOG_LEVEL  DEBUG/INFO/WARNING/...  (default: INFO)
    MISERVIDOR_LOG_FILE   JSON log file, "" = off (default: log/out.log)

=============================================================================
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional


LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass
class ServerConfig:
    """
    Configuration for the file server.

    Validate with validate() before use; FileServer does this for you.
    """

    # ─────────────────────────────────────────────────────────────────────
    # NETWORK
    # ─────────────────────────────────────────────────────────────────────

    host: str = "127.0.0.1"
    """Address to bind. Use "0.0.0.0" inside containers."""

    port: int = 9090
    """Listening port."""

    backlog: int = 128
    """Pending connections the OS queues before refusing new ones."""

    buffer_size: int = 8192
    """Bytes per recv() call."""

    timeout: Optional[float] = 80.0
    """
    Idle timeout in seconds. A client that connects and then sends nothing
    for this long is disconnected without a response. None disables it.
    """

    # ─────────────────────────────────────────────────────────────────────
    # CONTENT
    # ─────────────────────────────────────────────────────────────────────

    www_root: str = "www"
    """
    Served root. Must contain index.html-style content plus the status
    pages 404.html, 406.html and 501.html.
    """

    server_name: str = "MiServidor/1.0"
    """Value of the Server header."""

    # ─────────────────────────────────────────────────────────────────────
    # THREAD POOL
    # ─────────────────────────────────────────────────────────────────────

    min_workers: int = 4
    max_workers: int = 16

    # ─────────────────────────────────────────────────────────────────────
    # LOGGING
    # ─────────────────────────────────────────────────────────────────────

    log_level: str = "INFO"
    """Console and file log level. DEBUG logs every request and response."""

    log_file: Optional[str] = "log/out.log"
    """JSON-lines log file. None keeps logging on the console only."""

    @classmethod
    def from_env(cls) -> "ServerConfig":
        """
        Create configuration from MISERVIDOR_* environment variables.

        Missing variables fall back to the dataclass defaults. An empty
        MISERVIDOR_LOG_FILE disables the log file.
        """
        defaults = cls()
        log_file = os.getenv("MISERVIDOR_LOG_FILE", defaults.log_file)
        max_workers = int(os.getenv("MISERVIDOR_WORKERS", str(defaults.max_workers)))
        return cls(
            host=os.getenv("MISERVIDOR_HOST", defaults.host),
            port=int(os.getenv("MISERVIDOR_PORT", str(defaults.port))),
            www_root=os.getenv("MISERVIDOR_WWW", defaults.www_root),
            timeout=float(os.getenv("MISERVIDOR_TIMEOUT", str(defaults.timeout))),
            min_workers=min(defaults.min_workers, max_workers),
            max_workers=max_workers,
            log_level=os.getenv("MISERVIDOR_LOG_LEVEL", defaults.log_level).upper(),
            log_file=log_file or None,
        )

    def validate(self) -> None:
        """
        Validate configuration values.

        Fails fast at startup with a ValueError naming the bad setting.
        """
        if not 0 <= self.port < 65536:
            raise ValueError(f"Invalid port: {self.port}. Must be 0-65535.")

        if self.min_workers < 1:
            raise ValueError("min_workers must be >= 1")

        if self.max_workers < self.min_workers:
            raise ValueError("max_workers must be >= min_workers")

        if self.buffer_size < 1024:
            raise ValueError("buffer_size must be >= 1024")

        if self.timeout is not None and self.timeout <= 0:
            raise ValueError("timeout must be > 0")

        if self.log_level.upper() not in LOG_LEVELS:
            raise ValueError(f"Unknown log level: {self.log_level}")

        if not Path(self.www_root).is_dir():
            raise ValueError(f"Served root is not a directory: {self.www_root}")

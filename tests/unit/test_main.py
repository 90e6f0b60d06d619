"""
Unit tests for the command line entry point.
"""

from pathlib import Path

import pytest

from miservidor.__main__ import config_from_args, main


@pytest.fixture(autouse=True)
def no_env(monkeypatch):
    for name in ("HOST", "PORT", "WWW", "TIMEOUT", "WORKERS", "LOG_LEVEL", "LOG_FILE"):
        monkeypatch.delenv(f"MISERVIDOR_{name}", raising=False)


class TestConfigFromArgs:
    """Tests for CLI → ServerConfig translation."""

    def test_defaults(self):
        """Test that no flags gives the default configuration."""
        config = config_from_args([])

        assert config.host == "127.0.0.1"
        assert config.port == 9090
        assert config.www_root == "www"
        assert config.log_file == "log/out.log"

    def test_flags(self):
        """Test every flag."""
        config = config_from_args([
            "-H", "0.0.0.0",
            "-p", "8000",
            "-w", "public",
            "--timeout", "3.5",
            "--workers", "2",
            "-l", "debug",
            "--log-file", "otro.log",
        ])

        assert config.host == "0.0.0.0"
        assert config.port == 8000
        assert config.www_root == "public"
        assert config.timeout == 3.5
        assert config.max_workers == 2
        assert config.min_workers == 2
        assert config.log_level == "DEBUG"
        assert config.log_file == "otro.log"

    def test_no_log_file(self):
        """Test --no-log-file."""
        assert config_from_args(["--no-log-file"]).log_file is None

    def test_environment_is_the_fallback(self, monkeypatch):
        """Test that flags override the environment and the environment overrides defaults."""
        monkeypatch.setenv("MISERVIDOR_PORT", "7000")
        monkeypatch.setenv("MISERVIDOR_HOST", "10.0.0.1")

        config = config_from_args(["--port", "7001"])

        assert config.port == 7001
        assert config.host == "10.0.0.1"

    def test_bad_log_level_exits(self):
        """Test that argparse rejects unknown levels."""
        with pytest.raises(SystemExit):
            config_from_args(["--log-level", "LOUD"])


class TestMain:
    """Tests for main() failure paths."""

    def test_missing_root(self, tmp_path: Path, capsys):
        """Test that a bad served root exits with status 1."""
        code = main(["--www", str(tmp_path / "missing"), "--no-log-file"])

        assert code == 1
        assert "not a directory" in capsys.readouterr().err

    def test_missing_status_pages(self, tmp_path: Path, capsys, clean_logger):
        """Test that a root without status pages refuses to start."""
        code = main(["--www", str(tmp_path), "--no-log-file", "--port", "0"])

        assert code == 1
        assert "404.html" in capsys.readouterr().err

    def test_invalid_port(self, tmp_path: Path, capsys):
        """Test that an out-of-range port is reported."""
        code = main(["--www", str(tmp_path), "--port", "70000", "--no-log-file"])

        assert code == 1
        assert "Invalid port" in capsys.readouterr().err

    def test_version(self, capsys):
        """Test --version."""
        with pytest.raises(SystemExit) as exc_info:
            main(["--version"])

        assert exc_info.value.code == 0
        assert "MiServidor 1.0.0" in capsys.readouterr().out

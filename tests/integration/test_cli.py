"""
Tests for the command-line entry point.
"""

import os
import socket
import subprocess
import sys
from pathlib import Path

import pytest

from cannedhttp import __version__
from cannedhttp.__main__ import main, build_parser


SRC = Path(__file__).resolve().parent.parent.parent / "src"


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ("HTTP_HOST", "HTTP_PORT", "HTTP_TIMEOUT",
                 "HTTP_MAX_SESSIONS", "HTTP_LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)


class TestUsage:

    @pytest.mark.parametrize("argv", [
        [],
        ["127.0.0.1"],
        ["127.0.0.1", "8080", "extra"],
    ])
    def test_wrong_argument_count(self, argv, capsys):
        with pytest.raises(SystemExit) as exc_info:
            main(argv)

        assert exc_info.value.code == 2
        assert "usage" in capsys.readouterr().err.lower()

    def test_version(self, capsys):
        with pytest.raises(SystemExit) as exc_info:
            main(["--version"])

        assert exc_info.value.code == 0
        assert __version__ in capsys.readouterr().out

    def test_parser_options(self):
        args = build_parser().parse_args(["::", "80", "-l", "DEBUG", "--max-sessions", "4"])

        assert args.address == "::"
        assert args.port == "80"
        assert args.log_level == "DEBUG"
        assert args.max_sessions == 4


class TestStartupErrors:

    @pytest.mark.parametrize("address, port", [
        ("not-an-ip", "8080"),
        ("localhost", "8080"),
        ("127.0.0.1", "abc"),
        ("127.0.0.1", "70000"),
        ("127.0.0.1", "-1"),
    ])
    def test_invalid_endpoint(self, address, port, capsys):
        assert main([address, port]) == 1
        assert "Error:" in capsys.readouterr().err

    def test_invalid_max_sessions(self, capsys):
        assert main(["127.0.0.1", "0", "--max-sessions", "0"]) == 1
        assert "max_sessions" in capsys.readouterr().err

    def test_address_in_use(self, capsys):
        with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as taken:
            taken.bind(("127.0.0.1", 0))
            taken.listen(1)
            port = taken.getsockname()[1]

            assert main(["127.0.0.1", str(port)]) == 1

        assert "Error:" in capsys.readouterr().err


def test_module_entry_point_usage():
    env = dict(os.environ, PYTHONPATH=str(SRC))
    result = subprocess.run(
        [sys.executable, "-m", "cannedhttp"],
        capture_output=True,
        text=True,
        env=env,
        timeout=30,
    )

    assert result.returncode != 0
    assert "usage" in result.stderr.lower()

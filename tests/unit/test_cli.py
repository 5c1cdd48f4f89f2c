"""
Unit tests for the command-line entry point.
"""

from pathlib import Path

import pytest

from staticserver import __version__
from staticserver.__main__ import config_from_args, main


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ("STATIC_HOST", "STATIC_PORT", "STATIC_ROOT", "STATIC_INDEX",
                 "STATIC_BUFFER_SIZE", "STATIC_CONFINE", "STATIC_LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)


def test_defaults():
    config = config_from_args([])

    assert config.host == "0.0.0.0"
    assert config.port == 4000
    assert config.root_dir == "."
    assert config.confine_to_root is False
    assert config.log_level == "INFO"


def test_arguments(site_dir: Path):
    config = config_from_args([
        "--host", "127.0.0.1",
        "-p", "8080",
        "--root", str(site_dir),
        "--confine",
        "-l", "debug",
    ])

    assert config.host == "127.0.0.1"
    assert config.port == 8080
    assert config.root_dir == str(site_dir)
    assert config.confine_to_root is True
    assert config.log_level == "DEBUG"


def test_environment_supplies_defaults(monkeypatch):
    monkeypatch.setenv("STATIC_PORT", "9999")
    monkeypatch.setenv("STATIC_CONFINE", "true")

    config = config_from_args([])

    assert config.port == 9999
    assert config.confine_to_root is True


def test_arguments_override_environment(monkeypatch):
    monkeypatch.setenv("STATIC_PORT", "9999")

    assert config_from_args(["--port", "1234"]).port == 1234


def test_version(capsys):
    with pytest.raises(SystemExit) as exc_info:
        config_from_args(["--version"])

    assert exc_info.value.code == 0
    assert __version__ in capsys.readouterr().out


def test_bad_root_exits_with_error(capsys):
    with pytest.raises(SystemExit) as exc_info:
        main(["--root", "/definitely/not/here"])

    assert exc_info.value.code == 1
    assert "Root directory does not exist" in capsys.readouterr().err

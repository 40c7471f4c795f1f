"""Tests for the environment-driven configuration."""

from pathlib import Path

import pytest

from git_autosync.config import Config, parse_bool, parse_size


def test_config_defaults() -> None:
    """Verifies that the configuration initializes with sensible defaults."""
    conf = Config()
    assert conf.core.remote_name == "origin"
    assert conf.core.repo_path is None
    assert conf.sweep.mode == "pull"
    assert conf.log.level == "INFO"
    assert conf.log.to_file is True
    assert conf.log.max_size == 5 * 1024 * 1024


def test_config_load_ignores_unrelated_environment() -> None:
    """Verifies that variables without the prefix have no effect."""
    conf = Config.load({"HOME": "/home/alice", "REMOTE": "upstream"})
    assert conf == Config()


def test_config_load_from_environment() -> None:
    """Verifies that each GIT_AUTOSYNC_* variable maps onto its field."""
    conf = Config.load(
        {
            "GIT_AUTOSYNC_REMOTE": "upstream",
            "GIT_AUTOSYNC_REPO": "/srv/work",
            "GIT_AUTOSYNC_SWEEP_MODE": "FETCH",
            "GIT_AUTOSYNC_LOG_LEVEL": "debug",
            "GIT_AUTOSYNC_LOG_FILE": "off",
            "GIT_AUTOSYNC_MAX_LOG_SIZE": "1MB",
        }
    )

    assert conf.core.remote_name == "upstream"
    assert conf.core.repo_path == Path("/srv/work")
    assert conf.sweep.mode == "fetch"
    assert conf.log.level == "DEBUG"
    assert conf.log.to_file is False
    assert conf.log.max_size == 1024 * 1024


def test_config_invalid_values_fall_back(caplog: pytest.LogCaptureFixture) -> None:
    """Verifies that invalid values warn and keep the defaults."""
    conf = Config.load(
        {
            "GIT_AUTOSYNC_SWEEP_MODE": "rebase",
            "GIT_AUTOSYNC_REMOTE": "   ",
            "GIT_AUTOSYNC_MAX_LOG_SIZE": "huge",
            "GIT_AUTOSYNC_LOG_LEVEL": "DEBUG",
        }
    )

    assert conf.sweep.mode == "pull"
    assert conf.core.remote_name == "origin"
    assert conf.log.max_size == 5 * 1024 * 1024
    # Valid neighbours in the same section still apply.
    assert conf.log.level == "DEBUG"
    assert "Unknown sweep mode 'rebase'" in caplog.text
    assert "Config error in [log].max_size" in caplog.text


def test_config_unknown_variable_warns(caplog: pytest.LogCaptureFixture) -> None:
    """Verifies that typos in variable names are reported."""
    Config.load({"GIT_AUTOSYNC_REMOTES": "upstream"})
    assert "Unknown environment setting GIT_AUTOSYNC_REMOTES" in caplog.text


@pytest.mark.parametrize(
    ("value", "expected"),
    [(2048, 2048), ("512", 512), ("10kb", 10 * 1024), ("1.5 MB", int(1.5 * 1024**2))],
)
def test_parse_size(value: int | str, expected: int) -> None:
    assert parse_size(value) == expected


@pytest.mark.parametrize(
    ("value", "expected"),
    [("1", True), ("yes", True), ("On", True), ("0", False), ("false", False)],
)
def test_parse_bool(value: str, expected: bool) -> None:
    assert parse_bool(value) is expected


def test_parse_bool_rejects_garbage() -> None:
    with pytest.raises(ValueError):
        parse_bool("maybe")

import logging
import os
import re
from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any

from .constants import (
    APP_NAME,
    DEFAULT_REMOTE,
    ENV_PREFIX,
    SWEEP_MODES,
    SWEEP_PULL,
)

logger = logging.getLogger(APP_NAME)

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def parse_size(value: int | str) -> int:
    """Converts human-readable size strings (e.g., '100MB') to bytes."""
    if isinstance(value, int):
        return value
    match = re.match(r"^(\d+(?:\.\d+)?)\s*([kmg]b?)?$", str(value).strip().lower())
    if not match:
        raise ValueError(f"Invalid size format '{value}'")
    num, unit = float(match.group(1)), match.group(2)
    multiplier = {
        None: 1,
        "k": 1024,
        "kb": 1024,
        "m": 1024**2,
        "mb": 1024**2,
        "g": 1024**3,
        "gb": 1024**3,
    }
    return int(num * multiplier[unit])


def parse_bool(value: bool | str) -> bool:
    """Converts environment-style flags ('1', 'yes', 'off', ...) to booleans."""
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in ("1", "true", "yes", "on"):
        return True
    if text in ("0", "false", "no", "off", ""):
        return False
    raise ValueError(f"Invalid boolean '{value}'")


def parse_sweep_mode(value: str) -> str:
    mode = str(value).strip().lower()
    if mode not in SWEEP_MODES:
        raise ValueError(f"Unknown sweep mode '{value}' (expected one of {SWEEP_MODES})")
    return mode


def parse_remote(value: str) -> str:
    remote = str(value).strip()
    if not remote:
        raise ValueError("Remote name must not be empty")
    return remote


def parse_log_level(value: str) -> str:
    level = str(value).strip().upper()
    if level not in _LOG_LEVELS:
        raise ValueError(f"Unknown log level '{value}'")
    return level


@dataclass
class CoreConfig:
    """Core application settings.

    Attributes:
        remote_name (str): The git remote branches and commits are published to.
        repo_path (Path | None): The working copy to synchronize (None means CWD).
    """

    remote_name: str = DEFAULT_REMOTE
    repo_path: Path | None = None


@dataclass
class SweepConfig:
    """Branch sweep settings.

    Attributes:
        mode (str): 'pull' merges remote updates into each visited branch,
                    'fetch' only refreshes remote-tracking refs.
    """

    mode: str = SWEEP_PULL


@dataclass
class LogConfig:
    """Logging settings.

    Attributes:
        level (str): Minimum level emitted by the application logger.
        to_file (bool): Whether to also write a rotating log file.
        max_size (int): Max bytes for the log file before rotation.
    """

    level: str = "INFO"
    to_file: bool = True
    max_size: int = 5 * 1024 * 1024


# Environment variable suffix -> (section, field).
ENV_FIELDS: dict[str, tuple[str, str]] = {
    "REMOTE": ("core", "remote_name"),
    "REPO": ("core", "repo_path"),
    "SWEEP_MODE": ("sweep", "mode"),
    "LOG_LEVEL": ("log", "level"),
    "LOG_FILE": ("log", "to_file"),
    "MAX_LOG_SIZE": ("log", "max_size"),
}

_PARSERS = {
    "remote_name": parse_remote,
    "repo_path": lambda v: Path(v).expanduser(),
    "mode": parse_sweep_mode,
    "level": parse_log_level,
    "to_file": parse_bool,
    "max_size": parse_size,
}


@dataclass
class Config:
    """Global configuration aggregator.

    There is no configuration file: values come from defaults, overridden by
    `GIT_AUTOSYNC_*` environment variables.

    Attributes:
        core (CoreConfig): Core settings.
        sweep (SweepConfig): Branch sweep settings.
        log (LogConfig): Logging settings.
    """

    core: CoreConfig = field(default_factory=CoreConfig)
    sweep: SweepConfig = field(default_factory=SweepConfig)
    log: LogConfig = field(default_factory=LogConfig)

    @classmethod
    def load(cls, environ: Mapping[str, str] | None = None) -> "Config":
        """Builds the configuration from defaults and the environment.

        Args:
            environ (Mapping[str, str] | None): The environment to read.
                                                Defaults to `os.environ`.

        Returns:
            Config: The populated configuration object.
        """
        env = os.environ if environ is None else environ
        instance = cls()

        updates: dict[str, dict[str, str]] = {}
        for key, value in env.items():
            if not key.startswith(ENV_PREFIX):
                continue
            suffix = key[len(ENV_PREFIX) :]
            if suffix not in ENV_FIELDS:
                logger.warning(f"Unknown environment setting {key}. Ignoring.")
                continue
            section, name = ENV_FIELDS[suffix]
            updates.setdefault(section, {})[name] = value

        for section, values in updates.items():
            current = getattr(instance, section)
            setattr(instance, section, cls._update_dataclass(section, current, values))

        return instance

    @staticmethod
    def _update_dataclass(section_name: str, instance: Any, updates: dict) -> Any:
        """Updates a dataclass, warning on invalid values and parsing human-readable formats."""
        filtered_updates = {}
        for k, v in updates.items():
            try:
                parser = _PARSERS.get(k)
                filtered_updates[k] = parser(v) if parser else v
            except ValueError as e:
                logger.warning(
                    f"Config error in [{section_name}].{k}: {e}. Falling back to default."
                )
        return replace(instance, **filtered_updates)

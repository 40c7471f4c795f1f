import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path

from . import ops
from .config import Config
from .constants import APP_NAME, LOG_FILE
from .git_wrapper import GitRepo, GitRunner

logger = logging.getLogger(APP_NAME)

# Handlers installed by setup_logging, so repeated calls replace rather than stack.
_installed_handlers: list[logging.Handler] = []


def setup_logging(config: Config, log_file: Path = LOG_FILE) -> None:
    """Configures the logging subsystem.

    Always logs to stderr (captured by cron/systemd). When enabled, also writes
    to a size-rotated log file in the state directory.

    Args:
        config (Config): Provides the level and file rotation settings.
        log_file (Path, optional): Destination of the rotating log.
    """
    for handler in _installed_handlers:
        logger.removeHandler(handler)
        handler.close()
    _installed_handlers.clear()

    logger.setLevel(config.log.level)
    formatter = logging.Formatter(
        "[%(asctime)s] %(levelname)s: %(message)s", "%Y-%m-%d %H:%M:%S"
    )

    stream_handler = logging.StreamHandler(sys.stderr)
    stream_handler.setFormatter(formatter)
    logger.addHandler(stream_handler)
    _installed_handlers.append(stream_handler)

    if not config.log.to_file:
        return

    try:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            log_file,
            maxBytes=config.log.max_size,
            backupCount=5,
        )
    except OSError as e:
        logger.warning(f"Could not open log file {log_file}: {e}")
        return

    file_handler.setFormatter(formatter)
    logger.addHandler(file_handler)
    _installed_handlers.append(file_handler)


def run_sync(repo: GitRepo, config: Config) -> ops.WorkingCopyState:
    """Orchestrates one synchronization run.

    Steps:
    1. Derives the operator branch from the git identity.
    2. Ensures the branch exists (publishing it if new) and is checked out.
    3. Commits and publishes pending modifications.
    4. Sweeps every branch, then returns to the checkout active at the start.

    Any `SyncError` raised by steps 1-3 aborts the run before later stages.

    Args:
        repo (GitRepo): The working copy to synchronize.
        config (Config): Remote and sweep settings.

    Returns:
        ops.WorkingCopyState: The checkout after the run.
    """
    remote = config.core.remote_name

    identity = ops.read_identity(repo)
    branch = ops.branch_name_for(identity)
    logger.info(f"Operator branch: {branch}")

    original = ops.read_checkout(repo)

    state = ops.ensure_branch(repo, branch, remote)
    state = ops.commit_changes(repo, state, remote)

    return ops.walk_branches(repo, config.sweep.mode, restore_to=original)


def main(config: Config | None = None) -> ops.WorkingCopyState:
    """Runs a single pass against the configured working copy.

    Args:
        config (Config | None, optional): Preloaded configuration. Loaded from the
                                          environment when omitted.
    """
    config = config or Config.load()
    setup_logging(config)

    repo_path = (config.core.repo_path or Path.cwd()).resolve()
    logger.info(f"Synchronizing {repo_path}")
    return run_sync(GitRepo(GitRunner(repo_path)), config)

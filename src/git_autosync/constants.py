import os
from pathlib import Path

"""Global constants and path definitions for git-autosync.

This module defines the fixed naming rules, git wire-level constants, and the
filesystem layout (adhering to XDG standards) used across the application.
"""

# --- Identity ---
APP_NAME = "git-autosync"
"""str: The human-readable application name, also used as the logger name."""

ENV_PREFIX = "GIT_AUTOSYNC_"
"""str: Prefix for environment variables read by the configuration layer."""

# --- Branch / Commit Naming ---
BRANCH_SUFFIX = "_branch"
"""str: Literal appended to the operator identity to form the sync branch name."""

COMMIT_MESSAGE = "auto commit"
"""str: The fixed message used for every automatic commit."""

DEFAULT_REMOTE = "origin"
"""str: The remote branches are published to when none is configured."""

# --- Git Wire Constants ---
IDENTITY_KEY = "user.name"
"""str: The git config key holding the operator identity."""

CURRENT_MARKER = "* "
"""str: Prefix `git branch` puts in front of the checked-out branch."""

REMOTE_PREFIX = "remotes/"
"""str: Prefix `git branch --all` uses for remote-tracking references."""

NOT_A_REPO_STATUS = 128
"""int: Exit status git uses for 'not a repository' and other precondition failures."""

COMMAND_NOT_FOUND_STATUS = 127
"""int: Exit status reported when the git executable cannot be launched."""

# --- Sweep Modes ---
SWEEP_PULL = "pull"
SWEEP_FETCH = "fetch"
SWEEP_MODES = (SWEEP_PULL, SWEEP_FETCH)
"""tuple[str, ...]: Update strategies the branch sweep understands."""

# --- Paths ---
_XDG_STATE = os.environ.get("XDG_STATE_HOME")
_BASE_STATE = Path(_XDG_STATE) if _XDG_STATE else Path.home() / ".local/state"

STATE_DIR = _BASE_STATE / APP_NAME
"""Path: The directory for runtime state data (logs). Created on first use."""

LOG_FILE = STATE_DIR / "autosync.log"
"""Path: The file path for the rotating run log."""

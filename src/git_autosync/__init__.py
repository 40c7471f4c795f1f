"""git-autosync: Unattended branch synchronization for a git working copy.

This package provides the command-line entry point, the run orchestration, and
the workflow stages that keep a per-operator branch published and every other
branch up to date with its remote.
"""

from . import (
    agent,
    cli,
    config,
    constants,
    errors,
    git_wrapper,
    ops,
)

__all__ = [
    "agent",
    "cli",
    "config",
    "constants",
    "errors",
    "git_wrapper",
    "ops",
]

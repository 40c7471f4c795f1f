import logging
import os
import subprocess
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

from .constants import (
    APP_NAME,
    COMMAND_NOT_FOUND_STATUS,
    NOT_A_REPO_STATUS,
)

logger = logging.getLogger(APP_NAME)


@dataclass(frozen=True)
class CommandOutcome:
    """The result of a single external command.

    Attributes:
        output (str): Combined stdout and stderr text.
        exit_status (int): The process exit status (0 on success).
    """

    output: str = ""
    exit_status: int = 0

    @property
    def succeeded(self) -> bool:
        return self.exit_status == 0

    @property
    def not_a_repository(self) -> bool:
        """True for git's 'not a repository / precondition failed' status."""
        return self.exit_status == NOT_A_REPO_STATUS


class CommandRunner(Protocol):
    """Anything able to execute a named command and report the outcome as data."""

    def execute(self, name: str, args: Sequence[str]) -> CommandOutcome: ...


class GitRunner:
    """Executes commands inside a working copy using `subprocess`.

    The runner never raises and never terminates the process: launch errors and
    non-zero exits are both reported through the returned `CommandOutcome`, and
    all decisions about severity belong to the caller.

    Attributes:
        path (Path): The directory commands are executed in.
    """

    def __init__(self, path: Path):
        self.path = path

    def _environment(self) -> dict[str, str]:
        """Returns an environment that forbids interactive credential prompts."""
        env = os.environ.copy()
        env.setdefault("GIT_TERMINAL_PROMPT", "0")
        env.setdefault("GIT_SSH_COMMAND", "ssh -o BatchMode=yes")
        return env

    def execute(self, name: str, args: Sequence[str]) -> CommandOutcome:
        """Runs a command and captures its combined output.

        Args:
            name (str): The executable to run (e.g. 'git').
            args (Sequence[str]): Positional arguments passed to the executable.

        Returns:
            CommandOutcome: The combined output text and exit status.
        """
        cmd = [name, *args]
        printable = " ".join(cmd)
        logger.debug(f"RUN: {printable}")
        try:
            res = subprocess.run(
                cmd,
                cwd=self.path,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                text=True,
                env=self._environment(),
            )
            outcome = CommandOutcome(res.stdout or "", res.returncode)
        except OSError as e:
            outcome = CommandOutcome(
                f"Could not run {name}: {e}", COMMAND_NOT_FOUND_STATUS
            )

        if outcome.not_a_repository:
            logger.warning(
                f"'{printable}' failed (exit {NOT_A_REPO_STATUS}): not a git "
                f"repository or a precondition failed in {self.path}"
            )
        elif not outcome.succeeded:
            logger.debug(f"'{printable}' failed (exit {outcome.exit_status})")
        return outcome


class GitRepo:
    """Maps each logical version-control operation onto a git subcommand.

    Every method returns the raw `CommandOutcome`; interpreting output and
    deciding whether a failure is fatal is left to the workflow stages.

    Attributes:
        runner (CommandRunner): The capability used to execute git.
    """

    def __init__(self, runner: CommandRunner):
        self.runner = runner

    def _git(self, *args: str) -> CommandOutcome:
        return self.runner.execute("git", list(args))

    def config_get(self, key: str) -> CommandOutcome:
        """Reads a single git configuration value (e.g. 'user.name')."""
        return self._git("config", "--get", key)

    def branch_exists(self, branch: str) -> CommandOutcome:
        """Verifies that a local branch reference resolves.

        A non-zero exit status means the branch does not exist.
        """
        return self._git("rev-parse", "--verify", "--quiet", f"refs/heads/{branch}")

    def create_branch(self, branch: str) -> CommandOutcome:
        """Creates a branch at the current commit and switches to it."""
        return self._git("checkout", "-b", branch)

    def push_upstream(self, remote: str, branch: str) -> CommandOutcome:
        """Publishes a branch to the remote and sets it as the upstream."""
        return self._git("push", "-u", remote, branch)

    def current_branch(self) -> CommandOutcome:
        """Retrieves the name of the checked-out branch (empty when detached)."""
        return self._git("branch", "--show-current")

    def head_commit(self) -> CommandOutcome:
        """Resolves HEAD to a commit SHA."""
        return self._git("rev-parse", "HEAD")

    def checkout(self, branch: str) -> CommandOutcome:
        return self._git("checkout", branch)

    def status_porcelain(self) -> CommandOutcome:
        """Returns the machine-readable working copy status."""
        return self._git("status", "--porcelain")

    def add_all(self) -> CommandOutcome:
        """Stages every pending change, untracked files included."""
        return self._git("add", "-A")

    def commit(self, message: str) -> CommandOutcome:
        return self._git("commit", "-m", message)

    def push_all(self, remote: str) -> CommandOutcome:
        """Publishes every local branch to the remote."""
        return self._git("push", "--all", remote)

    def list_branches(self) -> CommandOutcome:
        """Lists local and remote-tracking branches."""
        return self._git("branch", "--all")

    def pull(self) -> CommandOutcome:
        return self._git("pull")

    def fetch(self) -> CommandOutcome:
        return self._git("fetch")

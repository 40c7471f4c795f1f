import logging
import re
from collections.abc import Iterator
from dataclasses import dataclass, replace

from .constants import (
    APP_NAME,
    BRANCH_SUFFIX,
    COMMIT_MESSAGE,
    CURRENT_MARKER,
    DEFAULT_REMOTE,
    IDENTITY_KEY,
    REMOTE_PREFIX,
    SWEEP_FETCH,
    SWEEP_PULL,
)
from .errors import (
    BranchCreationFailed,
    BranchEnumerationFailed,
    BranchPublishFailed,
    CheckoutFailed,
    CommitFailed,
    CurrentBranchUnavailable,
    IdentityUnavailable,
    PublishFailed,
    RestoreCheckoutFailed,
    StagingFailed,
    StatusUnavailable,
)
from .git_wrapper import CommandOutcome, GitRepo

logger = logging.getLogger(APP_NAME)

# XY status code, a space, then the path.
_PORCELAIN_ENTRY = re.compile(r"^[ MTADRCU?!]{2} \S")


@dataclass(frozen=True)
class WorkingCopyState:
    """Snapshot of the checkout a stage leaves behind.

    Attributes:
        current_branch (str): The active branch (or a commit SHA when detached).
        is_dirty (bool): Whether pending modifications were observed.
    """

    current_branch: str
    is_dirty: bool = False


@dataclass(frozen=True)
class Branch:
    """A single entry of the branch enumeration.

    Attributes:
        name (str): The checkout target, e.g. 'main' or 'remotes/origin/main'.
        exists_locally (bool): True for entries under refs/heads.
        exists_remotely (bool): True for remote-tracking entries.
    """

    name: str
    exists_locally: bool
    exists_remotely: bool


# --- BranchNamer ---


def branch_name_for(identity: str) -> str:
    """
    Derives the operator's sync branch from their git identity.

    Args:
        identity (str): The configured `user.name`.

    Returns:
        str: The identity (whitespace-trimmed) followed by '_branch'.

    Raises:
        IdentityUnavailable: If the identity is empty.
    """
    name = identity.strip()
    if not name:
        raise IdentityUnavailable("Git identity (user.name) is empty")
    return f"{name}{BRANCH_SUFFIX}"


def read_identity(repo: GitRepo) -> str:
    """Reads the operator identity from git configuration.

    Raises:
        IdentityUnavailable: If the value cannot be read or is blank.
    """
    outcome = repo.config_get(IDENTITY_KEY)
    identity = outcome.output.strip()
    if not outcome.succeeded or not identity:
        raise IdentityUnavailable(f"Could not read '{IDENTITY_KEY}'", outcome)
    return identity


def read_checkout(repo: GitRepo) -> str:
    """Returns the active branch, or the HEAD commit when detached.

    Raises:
        CurrentBranchUnavailable: If neither can be determined.
    """
    outcome = repo.current_branch()
    if outcome.succeeded and outcome.output.strip():
        return outcome.output.strip()

    head = repo.head_commit()
    if head.succeeded and head.output.strip():
        logger.info(f"HEAD is detached at {head.output.strip()[:12]}.")
        return head.output.strip()

    raise CurrentBranchUnavailable("Could not determine the current checkout", outcome)


# --- BranchEnsurer ---


def ensure_branch(
    repo: GitRepo, branch: str, remote: str = DEFAULT_REMOTE
) -> WorkingCopyState:
    """Guarantees that `branch` exists and is checked out.

    Missing branches are created at the current commit and published to the
    remote with upstream tracking. Existing branches are switched to only when
    they are not already active.

    Args:
        repo (GitRepo): The working copy.
        branch (str): The operator's sync branch.
        remote (str): The remote a new branch is published to.

    Returns:
        WorkingCopyState: The checkout after the stage (dirtiness not yet known).

    Raises:
        BranchCreationFailed: If the branch could not be created.
        BranchPublishFailed: If the new branch could not be pushed.
        CheckoutFailed: If switching to an existing branch failed.
    """
    if not repo.branch_exists(branch).succeeded:
        outcome = repo.create_branch(branch)
        if not outcome.succeeded:
            raise BranchCreationFailed(f"Could not create branch '{branch}'", outcome)
        logger.info(f"Created new branch: {branch}")

        outcome = repo.push_upstream(remote, branch)
        if not outcome.succeeded:
            raise BranchPublishFailed(
                f"Could not push branch '{branch}' to '{remote}'", outcome
            )
        logger.info(f"Pushed new branch: {branch} to {remote}")
        return WorkingCopyState(current_branch=branch)

    current = read_checkout(repo)
    if current == branch:
        logger.debug(f"Already on {branch}.")
        return WorkingCopyState(current_branch=branch)

    outcome = repo.checkout(branch)
    if not outcome.succeeded:
        raise CheckoutFailed(f"Could not switch from '{current}' to '{branch}'", outcome)
    logger.info(f"Switched to branch: {branch}")
    return WorkingCopyState(current_branch=branch)


# --- ChangeCommitter ---


def parse_porcelain(output: str) -> list[str]:
    """Extracts status entries from `git status --porcelain` output.

    Lines that are not status entries (e.g. warnings merged from stderr) are
    dropped.
    """
    entries = []
    for line in output.splitlines():
        if _PORCELAIN_ENTRY.match(line):
            entries.append(line)
        elif line.strip():
            logger.debug(f"Ignoring non-status output: {line.strip()}")
    return entries


def commit_changes(
    repo: GitRepo,
    state: WorkingCopyState,
    remote: str = DEFAULT_REMOTE,
    message: str = COMMIT_MESSAGE,
) -> WorkingCopyState:
    """Commits and publishes pending modifications, if any.

    The commit lands on the active branch, but the publish pushes every branch
    to the remote.

    Args:
        repo (GitRepo): The working copy.
        state (WorkingCopyState): The checkout produced by the previous stage.
        remote (str): The remote to publish to.
        message (str): The commit message.

    Returns:
        WorkingCopyState: `state` with `is_dirty` reflecting what was observed.

    Raises:
        StatusUnavailable: If the working copy status cannot be read.
        StagingFailed: If `git add` fails.
        CommitFailed: If `git commit` fails.
        PublishFailed: If `git push --all` fails.
    """
    outcome = repo.status_porcelain()
    if not outcome.succeeded:
        raise StatusUnavailable("Could not read working copy status", outcome)

    entries = parse_porcelain(outcome.output)
    if not entries:
        logger.info("No changes to commit")
        return replace(state, is_dirty=False)

    logger.info(f"Committing {len(entries)} pending change(s) on {state.current_branch}.")

    outcome = repo.add_all()
    if not outcome.succeeded:
        raise StagingFailed("Could not stage changes", outcome)

    outcome = repo.commit(message)
    if not outcome.succeeded:
        raise CommitFailed("Could not commit changes", outcome)

    outcome = repo.push_all(remote)
    if not outcome.succeeded:
        raise PublishFailed(f"Could not push branches to '{remote}'", outcome)
    logger.info(f"Pushed all branches to {remote}.")

    return replace(state, is_dirty=True)


# --- BranchWalker ---


def normalize_branch(entry: str) -> str:
    """Strips the current-branch marker and surrounding whitespace."""
    name = entry.strip()
    if name.startswith(CURRENT_MARKER):
        name = name[len(CURRENT_MARKER) :]
    return name.strip()


def iter_branches(repo: GitRepo) -> Iterator[Branch]:
    """Enumerates local and remote-tracking branches in `git branch --all` order.

    The listing is taken once, up front; entries are then yielded lazily.
    Duplicates are preserved.

    Raises:
        BranchEnumerationFailed: If the branch listing cannot be read.
    """
    outcome = repo.list_branches()
    if not outcome.succeeded:
        raise BranchEnumerationFailed("Could not list branches", outcome)

    def _entries() -> Iterator[Branch]:
        for line in outcome.output.splitlines():
            name = normalize_branch(line)
            if not name:
                continue
            remote = name.startswith(REMOTE_PREFIX)
            yield Branch(name=name, exists_locally=not remote, exists_remotely=remote)

    return _entries()


def _update_branch(repo: GitRepo, mode: str) -> CommandOutcome:
    if mode == SWEEP_FETCH:
        return repo.fetch()
    return repo.pull()


def walk_branches(
    repo: GitRepo, mode: str = SWEEP_PULL, restore_to: str | None = None
) -> WorkingCopyState:
    """Visits every known branch to bring it up to date, then restores the checkout.

    A branch that cannot be checked out or updated is logged and skipped; it
    never stops the sweep. The final checkout of the restoration target always
    runs, whatever happened before it.

    Args:
        repo (GitRepo): The working copy.
        mode (str): 'pull' or 'fetch'.
        restore_to (str | None): The checkout to return to. Captured from the
                                 working copy when not provided.

    Returns:
        WorkingCopyState: The restored checkout.

    Raises:
        CurrentBranchUnavailable: If the checkout to restore cannot be read.
        BranchEnumerationFailed: If the branch listing cannot be read.
        RestoreCheckoutFailed: If returning to the original checkout fails.
    """
    original = restore_to or read_checkout(repo)
    logger.info(f"Sweeping branches ({mode}); will return to {original}.")

    try:
        for branch in iter_branches(repo):
            outcome = repo.checkout(branch.name)
            if not outcome.succeeded:
                logger.warning(
                    f"SKIPPED {branch.name}: checkout failed "
                    f"(exit {outcome.exit_status}): {outcome.output.strip()}"
                )
                continue

            outcome = _update_branch(repo, mode)
            if not outcome.succeeded:
                logger.warning(
                    f"{mode.upper()} ERROR {branch.name} "
                    f"(exit {outcome.exit_status}): {outcome.output.strip()}"
                )
                continue
            logger.info(f"Updated {branch.name}.")
    finally:
        outcome = repo.checkout(original)
        if not outcome.succeeded:
            raise RestoreCheckoutFailed(
                f"Could not return to original checkout '{original}'", outcome
            )
        logger.info(f"Restored checkout: {original}")

    return WorkingCopyState(current_branch=original)

"""Fatal error taxonomy for a sync run.

Every exception here aborts the run. Recoverable problems (a branch that cannot
be checked out or updated during the sweep) are logged, never raised.
"""

from .git_wrapper import CommandOutcome


class SyncError(RuntimeError):
    """Base class for failures that abort the run.

    Attributes:
        stage (str): The workflow stage that failed.
        outcome (CommandOutcome | None): The git result that triggered the failure.
    """

    stage = "sync"

    def __init__(self, message: str, outcome: CommandOutcome | None = None):
        output = outcome.output.strip() if outcome else ""
        super().__init__(f"{message}: {output}" if output else message)
        self.outcome = outcome


# --- BranchNamer ---
class IdentityUnavailable(SyncError):
    stage = "identity"


# --- BranchEnsurer ---
class BranchCreationFailed(SyncError):
    stage = "ensure-branch"


class BranchPublishFailed(SyncError):
    stage = "ensure-branch"


class CheckoutFailed(SyncError):
    stage = "ensure-branch"


# --- ChangeCommitter ---
class StatusUnavailable(SyncError):
    stage = "commit"


class StagingFailed(SyncError):
    stage = "commit"


class CommitFailed(SyncError):
    stage = "commit"


class PublishFailed(SyncError):
    stage = "commit"


# --- BranchWalker ---
class CurrentBranchUnavailable(SyncError):
    stage = "sweep"


class BranchEnumerationFailed(SyncError):
    stage = "sweep"


class RestoreCheckoutFailed(SyncError):
    stage = "sweep"

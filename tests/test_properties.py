from hypothesis import assume, given
from hypothesis import strategies as st

from fakes import FakeGit
from git_autosync import ops
from git_autosync.git_wrapper import GitRepo

# Strategy: identities as git would store them (non-blank, no newlines inside)
identities = st.text(min_size=1).filter(lambda s: s.strip() and "\n" not in s.strip())

branch_names = st.sampled_from(
    ["main", "dev", "feature/x", "release/1.0", "remotes/origin/main", "hotfix"]
)


@given(identity=identities)
def test_branch_name_is_deterministic(identity: str) -> None:
    """
    Property: The same identity always yields identity + '_branch'.
    """
    first = ops.branch_name_for(identity)
    assert first == ops.branch_name_for(identity)
    assert first == identity.strip() + "_branch"


@given(a=identities, b=identities)
def test_distinct_identities_get_distinct_branches(a: str, b: str) -> None:
    """
    Property: Two identities that differ after trimming never share a branch.
    """
    assume(a.strip() != b.strip())
    assert ops.branch_name_for(a) != ops.branch_name_for(b)


@given(
    listing=st.lists(branch_names, max_size=8),
    failing_checkouts=st.sets(branch_names),
    failing_updates=st.sets(branch_names),
    start=st.sampled_from(["main", "dev", "hotfix"]),
)
def test_sweep_always_restores_original_checkout(
    listing: list[str],
    failing_checkouts: set[str],
    failing_updates: set[str],
    start: str,
) -> None:
    """
    Property: Whatever combination of visits fails (including all of them, or
    an empty listing), the sweep ends on the branch it started from, and every
    healthy branch is still updated in listing order.
    """
    assume(start not in failing_checkouts)

    git = FakeGit(
        local=["main", "dev", "feature/x", "release/1.0", "hotfix"],
        remote=["remotes/origin/main"],
        current=start,
    )
    git.listing = [f"* {b}" if b == start else f"  {b}" for b in listing]
    git.failing_checkouts = set(failing_checkouts)
    git.failing_updates = set(failing_updates)

    state = ops.walk_branches(GitRepo(git))

    assert git.current == start
    assert state.current_branch == start
    assert git.updated == [
        b for b in listing if b not in failing_checkouts and b not in failing_updates
    ]

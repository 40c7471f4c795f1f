import argparse
import logging
import sys
from importlib.metadata import PackageNotFoundError, version

from rich.console import Console
from rich.markup import escape

from . import agent
from .constants import APP_NAME
from .errors import SyncError

logger = logging.getLogger(APP_NAME)
console = Console()
err_console = Console(stderr=True)


def _package_version() -> str:
    try:
        return version(APP_NAME)
    except PackageNotFoundError:
        return "unknown"


def build_parser() -> argparse.ArgumentParser:
    """Builds the argument parser. The tool takes no operational arguments."""
    parser = argparse.ArgumentParser(
        prog=APP_NAME,
        description=(
            "Ensure the operator branch exists, commit and push pending changes, "
            "then pull every branch and return to the original checkout."
        ),
        epilog=(
            "Settings come from GIT_AUTOSYNC_* environment variables "
            "(REMOTE, REPO, SWEEP_MODE, LOG_LEVEL, LOG_FILE, MAX_LOG_SIZE)."
        ),
    )
    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {_package_version()}"
    )
    return parser


def main(argv: list[str] | None = None) -> None:
    """Main entry point for the git-autosync CLI."""
    build_parser().parse_args(argv)

    try:
        state = agent.main()
    except SyncError as e:
        logger.critical(f"FATAL [{e.stage}]: {e}")
        err_console.print(
            f"[bold red]FATAL:[/bold red] {e.stage}: {escape(str(e))}"
        )
        sys.exit(1)

    branch = escape(state.current_branch)
    console.print(f"[bold green]SUCCESS:[/bold green] Sync complete on {branch}.")


if __name__ == "__main__":
    main()

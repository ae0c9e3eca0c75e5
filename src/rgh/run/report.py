"""
Post-dispatch reporting: print, open or watch the correlated run.
"""

import shutil
import subprocess

import click

from ..errors import RghError
from ..gh.models import RunCandidate


def print_run_url(run: RunCandidate) -> None:
    click.echo(run.url)


def open_run_url(run: RunCandidate) -> None:
    """Open the run page in the default browser."""
    exit_code = click.launch(run.url)
    if exit_code:
        raise RghError(f"error opening URL {run.url} (exit code {exit_code})")


def watch_run(repo: str, run: RunCandidate) -> int:
    """
    Attach `gh run watch` to the run until it finishes.

    The gh CLI inherits the terminal, so its interactive display works as
    usual.

    Returns:
        Exit code of gh
    """
    if shutil.which('gh') is None:
        raise RghError("gh CLI not found on PATH, cannot watch run")
    result = subprocess.run(['gh', 'run', 'watch', '-R', repo, str(run.id)])
    return result.returncode

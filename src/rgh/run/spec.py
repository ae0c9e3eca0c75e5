"""
Run specification: what to dispatch, where, and on which ref.

Explicit --repo/--ref values win. Anything missing is filled in from the
local git checkout, and local changes are committed (and pushed) here, before
the correlator takes its dispatch timestamp.
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Dict, Optional, Union

from ..git import repo as git_repo


@dataclass(frozen=True)
class RunOptions:
    """What to do around the dispatch."""
    commit: bool = False
    push: bool = False
    print_url: bool = False
    open_url: bool = False
    watch: bool = False


@dataclass(frozen=True)
class RunSpec:
    """A fully resolved dispatch target."""
    repo: str
    ref: str
    workflow: str
    inputs: Dict[str, str] = field(default_factory=dict)


def build_run_spec(
    options: RunOptions,
    workflow: str,
    repo: Optional[str] = None,
    ref: Optional[str] = None,
    inputs: Optional[Dict[str, str]] = None,
    cwd: Optional[Union[str, Path]] = None,
    read_message: Optional[Callable[[], str]] = None,
) -> RunSpec:
    """
    Build a RunSpec, consulting the local checkout only when needed.

    Args:
        options: Run options (commit/push are acted on here)
        workflow: Workflow reference as given by the user
        repo: Repository id override ('owner/name')
        ref: Ref override
        inputs: workflow_dispatch inputs
        cwd: Directory to look for the checkout from (default: os.getcwd())
        read_message: Supplies the commit message when committing

    Raises:
        RepoNotFoundError: If a checkout is needed but none is found
        RepoError: If the checkout cannot be inspected or updated
    """
    root = None

    def checkout_root():
        nonlocal root
        if root is None:
            root = git_repo.find_repo_root(cwd or os.getcwd())
        return root

    if not repo:
        repo = git_repo.get_repo_id(checkout_root())

    if not ref:
        ref = git_repo.get_repo_ref(checkout_root())

    if options.commit:
        if read_message is None:
            raise ValueError("read_message is required when committing")
        git_repo.maybe_commit(checkout_root(), read_message, push_changes=options.push)

    return RunSpec(repo=repo, ref=ref, workflow=workflow, inputs=dict(inputs or {}))

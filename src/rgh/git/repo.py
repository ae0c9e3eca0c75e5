"""
Local git repository inspection and update.

Supplies the defaults a dispatch needs when the user does not pass them
explicitly: the GitHub repository id from the remotes and the current
branch (or commit) from HEAD. Also stages, commits and pushes local work
before a dispatch when asked to.

Everything goes through the git binary, so includes in git config and
ssh agent settings in ~/.ssh/config apply as they would on the command line.
"""

import re
import subprocess
from pathlib import Path
from typing import Callable, List, Optional, Tuple, Union

from ..errors import RepoError, RepoNotFoundError

GITHUB_REMOTE_PATTERNS = (
    re.compile(r'git@github\.com:(?P<repo>[A-Za-z0-9_.-]+/[A-Za-z0-9_.-]+?)(\.git)?/?$'),
    re.compile(r'(ssh://git@|https://)github\.com/(?P<repo>[A-Za-z0-9_.-]+/[A-Za-z0-9_.-]+?)(\.git)?/?$'),
)


def _git(args: List[str], cwd: Union[str, Path], check: bool = True) -> subprocess.CompletedProcess:
    """
    Run a git command in `cwd`.

    Raises:
        RepoError: If git is missing, or the command fails and check is True
    """
    try:
        return subprocess.run(
            ['git'] + args,
            cwd=cwd,
            capture_output=True,
            text=True,
            check=check,
        )
    except FileNotFoundError as e:
        raise RepoError("git executable not found") from e
    except subprocess.CalledProcessError as e:
        detail = (e.stderr or e.stdout or '').strip()
        raise RepoError(f"git {' '.join(args)} failed: {detail}") from e


def find_repo_root(start: Union[str, Path]) -> Path:
    """
    Find the working tree root containing `start`.

    Walks from `start` up through its ancestors and returns the first
    directory holding a .git entry (directory, or file for worktrees).

    Raises:
        RepoNotFoundError: If the filesystem root is reached first
    """
    start = Path(start).resolve()
    for candidate in [start] + list(start.parents):
        if (candidate / '.git').exists():
            return candidate
    raise RepoNotFoundError("repo root not found")


def parse_repo_id(url: str) -> Optional[str]:
    """
    Extract 'owner/name' from a GitHub remote URL.

    Returns:
        The repository id, or None for non-GitHub remotes
    """
    for pattern in GITHUB_REMOTE_PATTERNS:
        match = pattern.search(url.strip())
        if match:
            return match.group('repo')
    return None


def list_remote_urls(root: Union[str, Path]) -> List[str]:
    """Remote URLs in git config order."""
    result = _git(['config', '--get-regexp', r'^remote\..*\.url$'], cwd=root, check=False)
    urls = []
    for line in result.stdout.splitlines():
        parts = line.split(None, 1)
        if len(parts) == 2:
            urls.append(parts[1])
    return urls


def get_repo_id(root: Union[str, Path]) -> str:
    """
    Repository id of the first GitHub remote.

    Raises:
        RepoError: If no remote points at GitHub
    """
    for url in list_remote_urls(root):
        repo_id = parse_repo_id(url)
        if repo_id:
            return repo_id
    raise RepoError("unable to determine repo id from remotes")


def get_repo_ref(root: Union[str, Path], ref_override: Optional[str] = None) -> str:
    """
    Ref to dispatch against.

    Returns the override when given, else the current branch name, else the
    commit hash for a detached HEAD.
    """
    if ref_override:
        return ref_override

    branch = _git(['symbolic-ref', '--quiet', '--short', 'HEAD'], cwd=root, check=False)
    if branch.returncode == 0 and branch.stdout.strip():
        return branch.stdout.strip()

    head = _git(['rev-parse', 'HEAD'], cwd=root, check=False)
    if head.returncode != 0:
        raise RepoError(f"unable to determine repo HEAD: {head.stderr.strip()}")
    return head.stdout.strip()


def is_clean(root: Union[str, Path]) -> bool:
    """True if the working tree has no staged, unstaged or untracked changes."""
    result = _git(['status', '--porcelain'], cwd=root)
    return result.stdout.strip() == ''


def get_author(root: Union[str, Path]) -> Tuple[str, str]:
    """
    Commit author as (name, email) from git config.

    Raises:
        RepoError: If either value is unset
    """
    values = []
    for key in ('user.name', 'user.email'):
        result = _git(['config', key], cwd=root, check=False)
        value = result.stdout.strip()
        if not value:
            raise RepoError(f"git config {key} is not set")
        values.append(value)
    return values[0], values[1]


def commit_all(root: Union[str, Path], message: str) -> str:
    """
    Stage everything and commit it.

    Returns:
        Hash of the new commit
    """
    name, email = get_author(root)
    _git(['add', '--all'], cwd=root)
    _git(['commit', '--quiet', f'--author={name} <{email}>', '-m', message], cwd=root)
    return _git(['rev-parse', 'HEAD'], cwd=root).stdout.strip()


def push(root: Union[str, Path]) -> None:
    """Push the current branch to its upstream."""
    try:
        _git(['push', '--quiet'], cwd=root)
    except RepoError as e:
        raise RepoError(f"error pushing changes: {e}") from e


def maybe_commit(
    root: Union[str, Path],
    read_message: Callable[[], str],
    push_changes: bool = False,
) -> Optional[str]:
    """
    Commit (and optionally push) local changes if there are any.

    Args:
        root: Working tree root
        read_message: Returns the commit message; only called when the
            tree is dirty
        push_changes: Push after committing

    Returns:
        The new commit hash, or None if the tree was clean
    """
    if is_clean(root):
        return None

    message = read_message().strip()
    if not message:
        raise RepoError("empty commit message")

    commit = commit_all(root, message)
    if push_changes:
        push(root)
    return commit

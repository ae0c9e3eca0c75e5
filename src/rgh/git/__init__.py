"""Local git repository helpers."""

from .repo import (
    find_repo_root,
    parse_repo_id,
    get_repo_id,
    get_repo_ref,
    is_clean,
    maybe_commit,
)

__all__ = [
    'find_repo_root',
    'parse_repo_id',
    'get_repo_id',
    'get_repo_ref',
    'is_clean',
    'maybe_commit',
]

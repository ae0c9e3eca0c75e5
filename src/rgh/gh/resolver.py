"""
Workflow reference resolution.

Turns what the user typed (e.g. 'build' or 'build.yml') into the workflow
file identifier the dispatch and run-listing endpoints expect.

Matching rule:
    - A reference that already looks like a workflow file name
      ('*.yml' / '*.yaml') is used as-is, without an API call.
    - Otherwise the repository's workflows are listed and the first one
      located under .github/workflows/ wins, whatever its name. This is the
      long-standing behaviour and is kept as the default.
    - With strict=True the file stem must also equal the reference.
"""

import posixpath
import re
from typing import Callable, Iterable, Optional

from ..errors import NotFoundError
from .client import GitHubClient
from .models import WorkflowDescriptor

WORKFLOW_FILE_PATTERN = re.compile(r'\.ya?ml$')
WORKFLOW_PATH_PATTERN = re.compile(r'^\.github/workflows/(?P<stem>.+)\.ya?ml$')


def is_workflow_file(workflow_ref: str, file_pattern: re.Pattern = WORKFLOW_FILE_PATTERN) -> bool:
    """True if `workflow_ref` already names a workflow file."""
    return bool(file_pattern.search(workflow_ref))


def match_workflow(
    workflows: Iterable[WorkflowDescriptor],
    workflow_ref: str,
    strict: bool = False,
    path_pattern: re.Pattern = WORKFLOW_PATH_PATTERN,
) -> Optional[WorkflowDescriptor]:
    """
    Pick the workflow a reference points to.

    Args:
        workflows: Descriptors in listing order
        workflow_ref: Name the user asked for
        strict: Require the file stem to equal workflow_ref
        path_pattern: Pattern with a 'stem' group locating workflow files

    Returns:
        The first matching descriptor, or None
    """
    for workflow in workflows:
        match = path_pattern.search(workflow.path)
        if match is None:
            continue
        if strict and match.group('stem') != workflow_ref:
            continue
        return workflow
    return None


class WorkflowResolver:
    """
    Resolves symbolic workflow names against one repository.

    Example:
        resolver = WorkflowResolver(client, 'owner/name')
        workflow_file = resolver.resolve('build')   # -> 'build.yml'
    """

    def __init__(
        self,
        client: GitHubClient,
        repo: str,
        strict: bool = False,
        file_pattern: re.Pattern = WORKFLOW_FILE_PATTERN,
        path_pattern: re.Pattern = WORKFLOW_PATH_PATTERN,
        on_mismatch: Optional[Callable[[str, str], None]] = None,
    ):
        """
        Initialize resolver.

        Args:
            client: API client
            repo: Repository id ('owner/name')
            strict: Only accept a workflow whose file stem equals the reference
            file_pattern: Pattern recognising workflow file names
            path_pattern: Pattern locating workflow files, with a 'stem' group
            on_mismatch: Called with (workflow_ref, chosen_file) when the
                default rule picks a file whose stem differs from the reference
        """
        self.client = client
        self.repo = repo
        self.strict = strict
        self.file_pattern = file_pattern
        self.path_pattern = path_pattern
        self.on_mismatch = on_mismatch

    def resolve(self, workflow_ref: str) -> str:
        """
        Resolve a workflow reference to a workflow file identifier.

        Raises:
            NotFoundError: If no listed workflow matches
            TransportError: If listing workflows fails
        """
        if is_workflow_file(workflow_ref, self.file_pattern):
            return workflow_ref

        workflows = self.client.list_workflows(self.repo)
        workflow = match_workflow(
            workflows, workflow_ref, strict=self.strict, path_pattern=self.path_pattern,
        )
        if workflow is None:
            raise NotFoundError(
                f"unable to find matching workflow for '{workflow_ref}' in {self.repo}"
            )

        basename = posixpath.basename(workflow.path)
        stem = self.path_pattern.search(workflow.path).group('stem')
        if stem != workflow_ref and self.on_mismatch is not None:
            self.on_mismatch(workflow_ref, basename)
        return basename

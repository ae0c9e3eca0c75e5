"""GitHub Actions API: workflow resolution, dispatch and run correlation."""

from .client import GitHubClient
from .models import (
    WorkflowDescriptor,
    DispatchRequest,
    RunCandidate,
    CorrelationPolicy,
    CorrelationState,
)
from .resolver import WorkflowResolver, is_workflow_file, match_workflow
from .dispatch import DispatchRunCorrelator

__all__ = [
    'GitHubClient',
    # Data types
    'WorkflowDescriptor',
    'DispatchRequest',
    'RunCandidate',
    'CorrelationPolicy',
    'CorrelationState',
    # Resolution and correlation
    'WorkflowResolver',
    'is_workflow_file',
    'match_workflow',
    'DispatchRunCorrelator',
]

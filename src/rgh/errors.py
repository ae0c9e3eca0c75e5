"""
Error classes for rgh.

Every failure the dispatch/correlation core can produce is a subclass of
RghError, so the CLI can catch once at the boundary and report the message.

None of these are retried internally. The only retry in rgh is the bounded
run-listing poll in the correlator; anything else is the caller's problem.
"""

from typing import Optional


class RghError(Exception):
    """Base exception for rgh."""
    pass


class ConfigError(RghError):
    """Invalid config file, or no API token could be found."""
    pass


class TransportError(RghError):
    """
    Network or HTTP failure talking to the GitHub API.

    Attributes:
        status_code: HTTP status of the failed response, None for
            connection-level failures (DNS, refused, timeout)
    """

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class NotFoundError(RghError):
    """No workflow under the workflows directory matched the reference."""
    pass


class DispatchError(RghError):
    """The workflow dispatch request was rejected."""
    pass


class NoRunsError(RghError):
    """The workflow has no runs at all, not even older ones."""
    pass


class CorrelationTimeoutError(RghError):
    """Polling budget exhausted without seeing a run newer than the dispatch."""
    pass


class DetailFetchError(RghError):
    """The run was found but its detail view could not be fetched."""
    pass


class CancelledError(RghError):
    """The operation was cancelled by the caller."""
    pass


class RepoError(RghError):
    """Local git repository could not be inspected or updated."""
    pass


class RepoNotFoundError(RepoError):
    """No git repository between the start directory and the filesystem root."""
    pass

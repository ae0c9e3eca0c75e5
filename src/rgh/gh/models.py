"""
Data types exchanged with the GitHub Actions API.

The from_api constructors accept the raw JSON objects returned by the REST
endpoints and keep only the fields rgh needs.
"""

from dataclasses import dataclass, field
from datetime import datetime
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional

from ..utils.timing import parse_timestamp


@dataclass(frozen=True)
class WorkflowDescriptor:
    """One workflow definition as listed by the API."""
    path: str                   # e.g. '.github/workflows/build.yml'
    name: Optional[str] = None
    state: Optional[str] = None  # 'active', 'disabled_manually', ...

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> 'WorkflowDescriptor':
        return cls(
            path=data['path'],
            name=data.get('name'),
            state=data.get('state'),
        )


@dataclass(frozen=True)
class DispatchRequest:
    """Body of a workflow_dispatch call. Inputs are copied into a read-only view."""
    ref: Optional[str] = None
    inputs: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self):
        object.__setattr__(self, 'inputs', MappingProxyType(dict(self.inputs)))

    def to_payload(self) -> Dict[str, Any]:
        """
        JSON body for the dispatch endpoint.

        Empty ref and empty inputs are left out entirely rather than sent
        as empty values.
        """
        payload: Dict[str, Any] = {}
        if self.ref:
            payload['ref'] = self.ref
        if self.inputs:
            payload['inputs'] = dict(self.inputs)
        return payload


@dataclass(frozen=True)
class RunCandidate:
    """One execution of a workflow."""
    id: int
    url: str
    created_at: datetime

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> 'RunCandidate':
        return cls(
            id=int(data['id']),
            url=data.get('html_url') or data.get('url', ''),
            created_at=parse_timestamp(data['created_at']),
        )

    def is_newer_than(self, moment: datetime) -> bool:
        return self.created_at > moment


@dataclass(frozen=True)
class CorrelationPolicy:
    """
    Retry limits for the run-listing poll.

    With the defaults the correlator polls at most six times and sleeps
    1, 2, 4, 8 and 16 seconds between polls.
    """
    max_attempts: int = 5
    initial_backoff: float = 1.0
    backoff_factor: float = 2.0


@dataclass
class CorrelationState:
    """Mutable bookkeeping for a single correlation attempt."""
    dispatched_at: datetime
    attempts: int = 0
    backoff: float = 1.0
    waited: float = 0.0  # seconds slept so far

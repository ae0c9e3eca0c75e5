"""
Dispatch orchestration: resolve, dispatch, correlate.

Glues the RunSpec to the resolver and correlator so the CLI only deals with
options and output.

Usage:
    orch = DispatchOrchestrator(client, config)
    run = orch.run(spec)
"""

from typing import Callable, Optional

from ..gh.client import GitHubClient
from ..gh.dispatch import DispatchRunCorrelator
from ..gh.models import CorrelationState, RunCandidate
from ..gh.resolver import WorkflowResolver
from ..utils.cancel import CancelToken
from ..utils.timing import format_duration
from .config import RunConfig
from .spec import RunSpec


class DispatchOrchestrator:
    """
    Runs one dispatch end to end.

    Progress messages go to `echo` (a no-op by default) so library users
    get a quiet call and the CLI can route them to stderr.
    """

    def __init__(
        self,
        client: GitHubClient,
        config: Optional[RunConfig] = None,
        strict: bool = False,
        echo: Optional[Callable[[str], None]] = None,
        correlator_factory: Callable[..., DispatchRunCorrelator] = DispatchRunCorrelator,
    ):
        """
        Initialize orchestrator.

        Args:
            client: API client
            config: Config supplying the polling policy (defaults if None)
            strict: Require exact workflow name matches
            echo: Sink for progress messages
            correlator_factory: Builds the correlator for a repo
        """
        self.client = client
        self.config = config or RunConfig()
        self.strict = strict
        self.echo = echo or (lambda message: None)
        self.correlator_factory = correlator_factory

    def _warn_mismatch(self, workflow_ref: str, chosen: str) -> None:
        self.echo(f"Warning: '{workflow_ref}' resolved to {chosen}, "
                  f"which does not match by name (use --strict to require a match)")

    def _report_attempt(self, state: CorrelationState, newest: RunCandidate) -> None:
        self.echo(f"  Run not visible yet (attempt {state.attempts + 1}, "
                  f"waited {format_duration(state.waited)}), retrying in "
                  f"{format_duration(state.backoff)}")

    def resolve(self, spec: RunSpec) -> str:
        """Workflow file identifier for `spec.workflow`."""
        resolver = WorkflowResolver(
            self.client,
            spec.repo,
            strict=self.strict,
            on_mismatch=self._warn_mismatch,
        )
        return resolver.resolve(spec.workflow)

    def run(self, spec: RunSpec, cancel: Optional[CancelToken] = None) -> RunCandidate:
        """
        Resolve the workflow, dispatch it and return the created run.

        Raises:
            RghError: Any resolution, dispatch or correlation failure
        """
        cancel = cancel or CancelToken()

        workflow = cancel.call(self.resolve, spec)
        self.echo(f"Dispatching {workflow} on {spec.repo}@{spec.ref}")

        correlator = self.correlator_factory(self.client, spec.repo, policy=self.config.policy)
        run = correlator.dispatch_and_correlate(
            workflow,
            ref=spec.ref,
            inputs=spec.inputs,
            cancel=cancel,
            on_attempt=self._report_attempt,
        )
        self.echo(f"Found run {run.id}: {run.url}")
        return run

"""
Workflow dispatch and run correlation.

The dispatch endpoint accepts the request but returns no run id, and the
new run shows up in the run listing a few seconds later. The correlator
records the time just before dispatching, then polls the listing with
exponential backoff until the newest run was created after that moment.

Only the newest run is inspected. A run dispatched by someone else for the
same workflow while we are polling would be taken for ours.

State flow:
    Idle -> Dispatched -> Polling -> Correlated | TimedOut | Failed
"""

from datetime import datetime
from typing import Callable, Dict, Optional

from ..errors import (
    CorrelationTimeoutError,
    DetailFetchError,
    DispatchError,
    NoRunsError,
    TransportError,
)
from ..utils.cancel import CancelToken
from ..utils.timing import utc_now
from .client import GitHubClient
from .models import CorrelationPolicy, CorrelationState, DispatchRequest, RunCandidate

DEFAULT_POLICY = CorrelationPolicy()


class DispatchRunCorrelator:
    """
    Dispatches a workflow and identifies the run it created.

    Example:
        correlator = DispatchRunCorrelator(client, 'owner/name')
        run = correlator.dispatch_and_correlate('build.yml', 'main', {})
        print(run.url)
    """

    def __init__(
        self,
        client: GitHubClient,
        repo: str,
        policy: CorrelationPolicy = DEFAULT_POLICY,
        clock: Callable[[], datetime] = utc_now,
    ):
        """
        Initialize correlator.

        Args:
            client: API client
            repo: Repository id ('owner/name')
            policy: Poll limits and backoff growth
            clock: Returns the current UTC time
        """
        self.client = client
        self.repo = repo
        self.policy = policy
        self.clock = clock

    def dispatch(self, workflow: str, request: DispatchRequest, cancel: CancelToken) -> CorrelationState:
        """
        Send the dispatch and start a correlation state.

        The timestamp is taken before the request is sent, so a run created
        while the request is in flight still counts as newer.

        Raises:
            DispatchError: If the API rejects the dispatch
        """
        cancel.check()
        state = CorrelationState(
            dispatched_at=self.clock(),
            backoff=self.policy.initial_backoff,
        )
        try:
            cancel.call(self.client.dispatch, self.repo, workflow, request)
        except TransportError as e:
            raise DispatchError(f"error sending workflow dispatch request: {e}") from e
        return state

    def poll(
        self,
        workflow: str,
        state: CorrelationState,
        cancel: CancelToken,
        on_attempt: Optional[Callable[[CorrelationState, RunCandidate], None]] = None,
    ) -> RunCandidate:
        """
        Poll the run listing until the newest run postdates the dispatch.

        Args:
            workflow: Workflow file identifier
            state: State returned by dispatch()
            cancel: Cancellation token, used for every API call and the backoff sleep
            on_attempt: Called with (state, newest_run) after each poll that
                did not find our run, before sleeping

        Returns:
            The newest run from the listing

        Raises:
            NoRunsError: If the workflow has no runs at all
            CorrelationTimeoutError: If the attempt budget runs out
            TransportError: If listing runs fails
            CancelledError: If cancelled between or during polls
        """
        while True:
            total_count, runs = cancel.call(self.client.list_runs, self.repo, workflow)

            if total_count == 0 or not runs:
                raise NoRunsError(f"unable to find any workflow runs for {workflow}")

            newest = runs[0]
            if newest.is_newer_than(state.dispatched_at):
                return newest

            if state.attempts >= self.policy.max_attempts:
                raise CorrelationTimeoutError(
                    f"no run of {workflow} newer than the dispatch after "
                    f"{state.attempts + 1} polls ({state.waited:.0f}s)"
                )

            if on_attempt is not None:
                on_attempt(state, newest)

            cancel.sleep(state.backoff)
            state.waited += state.backoff
            state.backoff *= self.policy.backoff_factor
            state.attempts += 1

    def fetch_detail(self, run: RunCandidate, cancel: CancelToken) -> RunCandidate:
        """
        Fetch the canonical run view, which carries the human-facing URL.

        Raises:
            DetailFetchError: If the detail call fails
        """
        try:
            url = cancel.call(self.client.get_run, self.repo, run.id)
        except TransportError as e:
            raise DetailFetchError(f"error viewing run {run.id}: {e}") from e
        return RunCandidate(id=run.id, url=url, created_at=run.created_at)

    def dispatch_and_correlate(
        self,
        workflow: str,
        ref: Optional[str] = None,
        inputs: Optional[Dict[str, str]] = None,
        cancel: Optional[CancelToken] = None,
        on_attempt: Optional[Callable[[CorrelationState, RunCandidate], None]] = None,
    ) -> RunCandidate:
        """
        Dispatch `workflow` and return the run it created.

        Args:
            workflow: Workflow file identifier (see WorkflowResolver)
            ref: Branch, tag or commit to run on
            inputs: workflow_dispatch inputs
            cancel: Cancellation token (a fresh one if omitted)
            on_attempt: Progress callback, see poll()

        Returns:
            RunCandidate with the run's html URL
        """
        if cancel is None:
            cancel = CancelToken()
        request = DispatchRequest(ref=ref or None, inputs=dict(inputs or {}))

        state = self.dispatch(workflow, request, cancel)
        newest = self.poll(workflow, state, cancel, on_attempt=on_attempt)
        return self.fetch_detail(newest, cancel)

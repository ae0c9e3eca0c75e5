"""
Synchronous GitHub REST client.

Thin wrapper over httpx that knows the four Actions endpoints rgh needs.
Every connection problem, every 4xx/5xx response and every response body
that lacks the expected fields is raised as TransportError; callers decide
which of those are fatal in their context.
"""

from typing import Any, Dict, List, Optional, Tuple

import httpx

from ..errors import TransportError
from .models import DispatchRequest, RunCandidate, WorkflowDescriptor

DEFAULT_API_URL = "https://api.github.com"
API_VERSION = "2022-11-28"


def _extract_detail(resp: httpx.Response) -> str:
    """Best-effort error message from a GitHub error response."""
    try:
        data = resp.json()
    except ValueError:
        return resp.text.strip() or resp.reason_phrase
    if isinstance(data, dict) and data.get('message'):
        return str(data['message'])
    return resp.reason_phrase


class GitHubClient:
    """
    Minimal GitHub API client for workflow dispatch.

    Example:
        with GitHubClient(token) as client:
            workflows = client.list_workflows('owner/name')
    """

    def __init__(
        self,
        token: str,
        api_url: str = DEFAULT_API_URL,
        timeout: float = 30.0,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        """
        Initialize the client.

        Args:
            token: API token sent as a bearer token
            api_url: Base URL of the REST API (GitHub Enterprise differs)
            timeout: Per-request timeout in seconds
            transport: Optional httpx transport (tests pass a MockTransport)
        """
        self.api_url = api_url.rstrip('/')
        self._client = httpx.Client(
            base_url=self.api_url,
            timeout=timeout,
            transport=transport,
            headers={
                "Accept": "application/vnd.github+json",
                "Authorization": f"Bearer {token}",
                "X-GitHub-Api-Version": API_VERSION,
                "User-Agent": "rgh",
            },
        )

    def __enter__(self) -> 'GitHubClient':
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def close(self) -> None:
        self._client.close()

    # =========================================================================
    # Raw requests
    # =========================================================================

    def request(
        self,
        method: str,
        path: str,
        json_body: Optional[Dict[str, Any]] = None,
        params: Optional[Dict[str, Any]] = None,
    ) -> httpx.Response:
        """
        Send a request and return the successful response.

        Raises:
            TransportError: On connection failure or a 4xx/5xx status
        """
        try:
            resp = self._client.request(method, path, json=json_body, params=params)
        except httpx.TimeoutException as e:
            raise TransportError(f"{method} {path}: request timed out") from e
        except httpx.HTTPError as e:
            raise TransportError(f"{method} {path}: {e}") from e

        if resp.status_code >= 400:
            detail = _extract_detail(resp)
            raise TransportError(
                f"{method} {path}: {resp.status_code} {detail}",
                status_code=resp.status_code,
            )
        return resp

    def get(self, path: str, params: Optional[Dict[str, Any]] = None) -> Any:
        resp = self.request("GET", path, params=params)
        try:
            return resp.json()
        except ValueError as e:
            raise TransportError(f"GET {path}: response is not JSON") from e

    def post(self, path: str, json_body: Dict[str, Any]) -> None:
        self.request("POST", path, json_body=json_body)

    # =========================================================================
    # Actions endpoints
    # =========================================================================

    def list_workflows(self, repo: str) -> List[WorkflowDescriptor]:
        """List workflow definitions of `repo` in API order."""
        path = f"repos/{repo}/actions/workflows"
        data = self.get(path)
        try:
            return [WorkflowDescriptor.from_api(w) for w in data.get('workflows', [])]
        except (AttributeError, KeyError, TypeError, ValueError) as e:
            raise TransportError(f"GET {path}: unexpected response: {e!r}") from e

    def dispatch(self, repo: str, workflow: str, request: DispatchRequest) -> None:
        """Trigger a workflow_dispatch event. GitHub answers 204 with no body."""
        self.post(
            f"repos/{repo}/actions/workflows/{workflow}/dispatches",
            request.to_payload(),
        )

    def list_runs(self, repo: str, workflow: str) -> Tuple[int, List[RunCandidate]]:
        """
        List runs of a workflow, newest first.

        Returns:
            Tuple of (total_count, runs on the first page)
        """
        path = f"repos/{repo}/actions/workflows/{workflow}/runs"
        data = self.get(path)
        try:
            runs = [RunCandidate.from_api(r) for r in data.get('workflow_runs', [])]
            return int(data.get('total_count', len(runs))), runs
        except (AttributeError, KeyError, TypeError, ValueError) as e:
            raise TransportError(f"GET {path}: unexpected response: {e!r}") from e

    def get_run(self, repo: str, run_id: int) -> str:
        """
        Fetch the canonical view of a single run.

        Returns:
            The run's html_url (the API url when html_url is absent)
        """
        path = f"repos/{repo}/actions/runs/{run_id}"
        data = self.get(path)
        url = None
        if isinstance(data, dict):
            url = data.get('html_url') or data.get('url')
        if not url:
            raise TransportError(f"GET {path}: unexpected response: no run url")
        return url

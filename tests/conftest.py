"""Shared fixtures: an in-memory GitHub Actions API and a recording cancel token."""

import json
import re
import time
from datetime import datetime, timedelta, timezone

import httpx
import pytest

from rgh.gh.client import GitHubClient
from rgh.utils.cancel import CancelToken

REPO = "octo/widgets"
T0 = datetime(2024, 5, 1, 12, 0, 0, tzinfo=timezone.utc)


def iso(moment: datetime) -> str:
    return moment.strftime('%Y-%m-%dT%H:%M:%SZ')


def run_json(run_id: int, created_at: datetime) -> dict:
    return {
        "id": run_id,
        "url": f"https://api.github.com/repos/{REPO}/actions/runs/{run_id}",
        "html_url": f"https://github.com/{REPO}/actions/runs/{run_id}",
        "created_at": iso(created_at),
    }


class FakeGitHub:
    """
    Minimal stand-in for the Actions endpoints.

    run_pages is consumed one page per run-listing call; the last page
    repeats once the list is exhausted.
    """

    def __init__(self, workflows=None, run_pages=None):
        self.workflows = workflows or []
        self.run_pages = list(run_pages or [])
        self.dispatch_status = 204
        self.detail_status = 200
        self.list_status = 200
        self.detail_body = None   # overrides the generated run detail
        self.delay = 0            # seconds each request blocks for
        self.requests = []

    def calls(self, method, pattern):
        return [r for r in self.requests
                if r.method == method and re.search(pattern, r.url.path)]

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.delay:
            time.sleep(self.delay)
        path = request.url.path

        if request.method == "GET" and path.endswith("/actions/workflows"):
            if self.list_status != 200:
                return httpx.Response(self.list_status, json={"message": "Server Error"})
            return httpx.Response(200, json={
                "total_count": len(self.workflows),
                "workflows": [{"path": p, "name": p, "state": "active"} for p in self.workflows],
            })

        if request.method == "POST" and path.endswith("/dispatches"):
            if self.dispatch_status >= 400:
                return httpx.Response(self.dispatch_status, json={"message": "Unexpected inputs provided"})
            return httpx.Response(self.dispatch_status)

        if request.method == "GET" and path.endswith("/runs"):
            if self.list_status != 200:
                return httpx.Response(self.list_status, json={"message": "Server Error"})
            page = self.run_pages.pop(0) if len(self.run_pages) > 1 else self.run_pages[0]
            return httpx.Response(200, json={"total_count": len(page), "workflow_runs": page})

        match = re.search(r"/actions/runs/(\d+)$", path)
        if request.method == "GET" and match:
            if self.detail_status != 200:
                return httpx.Response(self.detail_status, json={"message": "Not Found"})
            if self.detail_body is not None:
                return httpx.Response(200, json=self.detail_body)
            return httpx.Response(200, json=run_json(int(match.group(1)), T0))

        return httpx.Response(404, json={"message": "Not Found"})

    def dispatch_bodies(self):
        return [json.loads(r.content) for r in self.calls("POST", r"/dispatches$")]


class RecordingCancel(CancelToken):
    """Cancel token that records sleeps instead of blocking."""

    def __init__(self, cancel_on_sleep=None):
        super().__init__()
        self.sleeps = []
        self.cancel_on_sleep = cancel_on_sleep

    def sleep(self, seconds):
        self.sleeps.append(seconds)
        if self.cancel_on_sleep == len(self.sleeps):
            self.cancel()
        super().sleep(0)


@pytest.fixture
def fake_github():
    return FakeGitHub()


@pytest.fixture
def client(fake_github):
    with GitHubClient("test-token", transport=httpx.MockTransport(fake_github.handler)) as c:
        yield c


@pytest.fixture
def before():
    """A run created ten seconds before the dispatch."""
    return lambda run_id=1: run_json(run_id, T0 - timedelta(seconds=10))


@pytest.fixture
def after():
    """A run created two seconds after the dispatch."""
    return lambda run_id=2: run_json(run_id, T0 + timedelta(seconds=2))

"""Tests for the GitHub REST client."""

import httpx
import pytest

from rgh.errors import TransportError
from rgh.gh.client import GitHubClient
from rgh.gh.models import DispatchRequest


def _client(handler, **kwargs):
    return GitHubClient("s3cret", transport=httpx.MockTransport(handler), **kwargs)


class TestRequests:
    """Tests for request construction and error mapping."""

    def test_headers_and_base_url(self):
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(200, json={"workflows": []})

        with _client(handler, api_url="https://ghe.example.com/api/v3/") as client:
            client.list_workflows("octo/widgets")

        request = seen[0]
        assert str(request.url) == "https://ghe.example.com/api/v3/repos/octo/widgets/actions/workflows"
        assert request.headers["Authorization"] == "Bearer s3cret"
        assert request.headers["Accept"] == "application/vnd.github+json"
        assert request.headers["X-GitHub-Api-Version"] == "2022-11-28"

    def test_http_error_carries_status_and_message(self):
        def handler(request):
            return httpx.Response(404, json={"message": "Not Found"})

        with _client(handler) as client:
            with pytest.raises(TransportError) as exc_info:
                client.get("repos/octo/widgets/actions/runs/1")

        assert exc_info.value.status_code == 404
        assert "Not Found" in str(exc_info.value)

    def test_connection_error(self):
        def handler(request):
            raise httpx.ConnectError("Connection refused", request=request)

        with _client(handler) as client:
            with pytest.raises(TransportError) as exc_info:
                client.list_workflows("octo/widgets")

        assert exc_info.value.status_code is None
        assert isinstance(exc_info.value.__cause__, httpx.ConnectError)

    def test_timeout(self):
        def handler(request):
            raise httpx.ReadTimeout("slow", request=request)

        with _client(handler) as client:
            with pytest.raises(TransportError, match="timed out"):
                client.list_workflows("octo/widgets")

    def test_non_json_body(self):
        def handler(request):
            return httpx.Response(200, text="<html>proxy login</html>")

        with _client(handler) as client:
            with pytest.raises(TransportError, match="not JSON"):
                client.list_workflows("octo/widgets")


class TestEndpoints:
    """Tests for the Actions endpoint helpers."""

    def test_dispatch_accepts_empty_204(self):
        bodies = []

        def handler(request):
            bodies.append(request.content)
            return httpx.Response(204)

        with _client(handler) as client:
            client.dispatch("octo/widgets", "build.yml", DispatchRequest())

        assert bodies == [b"{}"]

    def test_list_runs_parses_candidates(self):
        def handler(request):
            return httpx.Response(200, json={
                "total_count": 2,
                "workflow_runs": [
                    {"id": 11, "html_url": "https://github.com/o/n/actions/runs/11",
                     "created_at": "2024-05-01T12:00:05Z"},
                    {"id": 10, "html_url": "https://github.com/o/n/actions/runs/10",
                     "created_at": "2024-05-01T11:00:00Z"},
                ],
            })

        with _client(handler) as client:
            total, runs = client.list_runs("o/n", "build.yml")

        assert total == 2
        assert [r.id for r in runs] == [11, 10]
        assert runs[0].created_at > runs[1].created_at
        assert runs[0].created_at.tzinfo is not None

    def test_get_run_uses_html_url(self):
        def handler(request):
            return httpx.Response(200, json={
                "id": 42,
                "url": "https://api.github.com/repos/o/n/actions/runs/42",
                "html_url": "https://github.com/o/n/actions/runs/42",
                "created_at": "2024-05-01T12:00:05Z",
            })

        with _client(handler) as client:
            url = client.get_run("o/n", 42)

        assert url == "https://github.com/o/n/actions/runs/42"

    def test_get_run_needs_only_a_url(self):
        def handler(request):
            return httpx.Response(200, json={"html_url": "https://github.com/x/runs/3"})

        with _client(handler) as client:
            assert client.get_run("o/n", 3) == "https://github.com/x/runs/3"

    def test_get_run_without_url(self):
        def handler(request):
            return httpx.Response(200, json={"id": 3, "status": "queued"})

        with _client(handler) as client:
            with pytest.raises(TransportError, match="no run url"):
                client.get_run("o/n", 3)


class TestMalformedResponses:
    """Tests for response bodies missing the fields rgh reads."""

    @pytest.mark.parametrize("run", [
        {"id": 1, "url": "u"},
        {"id": 1, "url": "u", "created_at": "yesterday"},
        {"id": None, "url": "u", "created_at": "2024-05-01T12:00:05Z"},
    ])
    def test_bad_run_entry(self, run):
        def handler(request):
            return httpx.Response(200, json={"total_count": 1, "workflow_runs": [run]})

        with _client(handler) as client:
            with pytest.raises(TransportError, match="unexpected response"):
                client.list_runs("o/n", "build.yml")

    def test_workflow_without_path(self):
        def handler(request):
            return httpx.Response(200, json={"workflows": [{"name": "Build"}]})

        with _client(handler) as client:
            with pytest.raises(TransportError, match="unexpected response"):
                client.list_workflows("o/n")

    def test_listing_not_an_object(self):
        def handler(request):
            return httpx.Response(200, json=[])

        with _client(handler) as client:
            with pytest.raises(TransportError):
                client.list_workflows("o/n")

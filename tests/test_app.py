"""Tests for the GitHub REST client and App authentication."""

import asyncio
import json
from datetime import datetime, timedelta, timezone
from unittest.mock import patch

import httpx
import pytest

from om_github_agent.github.app import (
    GitHubAPIError,
    GitHubAppAuth,
    GitHubRepoClient,
    StaticTokenAuth,
)


def make_client(handler, requests):
    def record(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return handler(request)

    return GitHubRepoClient(
        StaticTokenAuth("test-token"),
        transport=httpx.MockTransport(record),
    )


class TestGitHubRepoClient:
    def test_get_branch(self):
        requests = []
        client = make_client(
            lambda request: httpx.Response(200, json={"name": "dev"}), requests
        )

        result = asyncio.run(client.get_branch("test-owner", "test-repo", "dev"))

        assert result == {"name": "dev"}
        request = requests[0]
        assert request.method == "GET"
        assert request.url.path == "/repos/test-owner/test-repo/branches/dev"
        assert request.headers["Authorization"] == "token test-token"
        assert request.headers["Accept"] == "application/vnd.github+json"

    def test_create_pull_request(self):
        requests = []
        client = make_client(
            lambda request: httpx.Response(
                201, json={"html_url": "https://github.com/test-owner/test-repo/pull/1"}
            ),
            requests,
        )

        result = asyncio.run(
            client.create_pull_request(
                "test-owner", "test-repo", title="Title", body="Body", head="dev", base="main"
            )
        )

        assert result["html_url"] == "https://github.com/test-owner/test-repo/pull/1"
        assert requests[0].method == "POST"
        assert requests[0].url.path == "/repos/test-owner/test-repo/pulls"
        assert json.loads(requests[0].content) == {
            "title": "Title",
            "body": "Body",
            "head": "dev",
            "base": "main",
        }

    def test_create_issue_comment(self):
        requests = []
        client = make_client(lambda request: httpx.Response(201, json={"id": 5}), requests)

        asyncio.run(client.create_issue_comment("test-owner", "test-repo", 123, "hello"))

        assert requests[0].url.path == "/repos/test-owner/test-repo/issues/123/comments"
        assert json.loads(requests[0].content) == {"body": "hello"}

    @pytest.mark.parametrize(
        "branch,encoded",
        [
            ("fix#12", "fix%2312"),
            ("what?", "what%3F"),
            ("100%", "100%25"),
            ("feature/new-branch", "feature%2Fnew-branch"),
        ],
    )
    def test_get_branch_encodes_branch_name(self, branch, encoded):
        requests = []
        client = make_client(
            lambda request: httpx.Response(200, json={"name": branch}), requests
        )

        asyncio.run(client.get_branch("test-owner", "test-repo", branch))

        assert requests[0].url.raw_path == (
            f"/repos/test-owner/test-repo/branches/{encoded}".encode()
        )
        assert requests[0].url.query == b""

    def test_error_carries_api_message(self):
        client = make_client(
            lambda request: httpx.Response(404, json={"message": "Branch not found"}), []
        )

        with pytest.raises(GitHubAPIError) as exc_info:
            asyncio.run(client.get_branch("test-owner", "test-repo", "gone"))

        assert exc_info.value.status_code == 404
        assert str(exc_info.value) == "Branch not found"

    def test_error_without_json_uses_reason(self):
        client = make_client(lambda request: httpx.Response(502, text="<html>"), [])

        with pytest.raises(GitHubAPIError) as exc_info:
            asyncio.run(client.get_branch("test-owner", "test-repo", "dev"))

        assert exc_info.value.status_code == 502
        assert exc_info.value.message == "Bad Gateway"


class TestGitHubAppAuth:
    def test_exchanges_and_caches_installation_token(self):
        requests = []
        expires_at = (datetime.now(timezone.utc) + timedelta(hours=1)).strftime("%Y-%m-%dT%H:%M:%SZ")

        def handler(request):
            requests.append(request)
            return httpx.Response(201, json={"token": "inst-token", "expires_at": expires_at})

        auth = GitHubAppAuth("12345", "unused-key", transport=httpx.MockTransport(handler))

        with patch.object(auth, "generate_jwt", return_value="app-jwt"):
            first = asyncio.run(auth.get_installation_token(42))
            second = asyncio.run(auth.get_installation_token(42))

        assert first == second == "inst-token"
        assert len(requests) == 1
        assert requests[0].url.path == "/app/installations/42/access_tokens"
        assert requests[0].headers["Authorization"] == "Bearer app-jwt"

    def test_refreshes_token_near_expiry(self):
        requests = []
        expires_at = (datetime.now(timezone.utc) + timedelta(hours=1)).strftime("%Y-%m-%dT%H:%M:%SZ")

        def handler(request):
            requests.append(request)
            return httpx.Response(201, json={"token": "fresh-token", "expires_at": expires_at})

        auth = GitHubAppAuth("12345", "unused-key", transport=httpx.MockTransport(handler))
        auth._installation_tokens[42] = (
            "stale-token",
            datetime.now(timezone.utc) + timedelta(minutes=2),
        )

        with patch.object(auth, "generate_jwt", return_value="app-jwt"):
            token = asyncio.run(auth.get_installation_token(42))

        assert token == "fresh-token"
        assert len(requests) == 1

    def test_requires_installation_id(self):
        auth = GitHubAppAuth("12345", "unused-key")

        with pytest.raises(ValueError, match="installation id"):
            asyncio.run(auth.get_installation_token(None))

    def test_token_exchange_failure(self):
        auth = GitHubAppAuth(
            "12345",
            "unused-key",
            transport=httpx.MockTransport(
                lambda request: httpx.Response(401, json={"message": "Bad credentials"})
            ),
        )

        with patch.object(auth, "generate_jwt", return_value="app-jwt"):
            with pytest.raises(GitHubAPIError, match="Bad credentials"):
                asyncio.run(auth.get_installation_token(42))

"""Shared pytest fixtures for OM GitHub Agent tests."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from om_github_agent.github.executor import RepoCoordinate


PR_URL = "https://github.com/test-owner/test-repo/pull/1"


@pytest.fixture
def repo_client():
    """Mock GitHub client where every call succeeds."""
    client = MagicMock()
    client.get_branch = AsyncMock(return_value={"name": "feature/new-branch"})
    client.create_pull_request = AsyncMock(return_value={"html_url": PR_URL, "number": 1})
    client.create_issue_comment = AsyncMock(return_value={"id": 1})
    return client


@pytest.fixture
def coord():
    return RepoCoordinate(owner="test-owner", repo="test-repo", issue_number=123)


@pytest.fixture
def comment_payload():
    """Build an issue_comment.created webhook payload."""

    def build(body: str, login: str = "test-user", user_type: str = "User") -> dict:
        return {
            "action": "created",
            "comment": {"body": body, "user": {"login": login, "type": user_type}},
            "issue": {"number": 123},
            "repository": {"name": "test-repo", "owner": {"login": "test-owner"}},
            "installation": {"id": 42},
        }

    return build

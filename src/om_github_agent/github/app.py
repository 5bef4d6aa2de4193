"""GitHub App integration for OM GitHub Agent.

Handles GitHub App authentication and the repository-level REST calls
the agent needs: branch lookup, pull request creation and issue comments.
"""

import time
import logging
from datetime import datetime, timedelta, timezone
from typing import Optional, Protocol
from urllib.parse import quote

import httpx
import jwt

logger = logging.getLogger(__name__)

# GitHub API base URL
GITHUB_API_URL = "https://api.github.com"
GITHUB_API_VERSION = "2022-11-28"


def _repo_path(owner: str, repo: str) -> str:
    """URL path of a repository, each segment percent-encoded."""
    return f"/repos/{quote(owner, safe='')}/{quote(repo, safe='')}"


class MissingInstallationError(ValueError):
    """A GitHub App request was made without an installation id."""


class GitHubAPIError(Exception):
    """A non-success response from the GitHub REST API."""

    def __init__(self, status_code: int, message: str):
        super().__init__(message)
        self.status_code = status_code
        self.message = message

    @classmethod
    def from_response(cls, response: httpx.Response) -> "GitHubAPIError":
        message = response.reason_phrase
        try:
            data = response.json()
        except ValueError:
            data = None
        if isinstance(data, dict) and data.get("message"):
            message = data["message"]
        return cls(response.status_code, message)


class RepoClient(Protocol):
    """The GitHub operations the create-pr command depends on."""

    async def get_branch(self, owner: str, repo: str, branch: str) -> dict:
        ...

    async def create_pull_request(
        self,
        owner: str,
        repo: str,
        title: str,
        body: str,
        head: str,
        base: str,
    ) -> dict:
        ...

    async def create_issue_comment(
        self,
        owner: str,
        repo: str,
        issue_number: int,
        body: str,
    ) -> dict:
        ...


class GitHubAppAuth:
    """Handles GitHub App JWT and installation token generation."""

    def __init__(
        self,
        app_id: str,
        private_key: str,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.app_id = app_id
        self.private_key = private_key
        self.transport = transport

        # Cache for installation tokens
        self._installation_tokens: dict[int, tuple[str, datetime]] = {}

    def generate_jwt(self) -> str:
        """Generate a JWT for GitHub App authentication.

        Valid for 10 minutes max.
        """
        now = int(time.time())
        payload = {
            "iat": now - 60,  # clock drift
            "exp": now + (9 * 60),
            "iss": self.app_id,
        }

        return jwt.encode(payload, self.private_key, algorithm="RS256")

    async def get_installation_token(
        self,
        installation_id: Optional[int],
        force_refresh: bool = False,
    ) -> str:
        """Get an installation access token, cached until near expiry."""
        if installation_id is None:
            raise MissingInstallationError("GitHub App authentication requires an installation id")

        if not force_refresh and installation_id in self._installation_tokens:
            token, expires_at = self._installation_tokens[installation_id]
            if datetime.now(timezone.utc) < expires_at - timedelta(minutes=5):
                return token

        app_jwt = self.generate_jwt()

        async with httpx.AsyncClient(transport=self.transport) as client:
            response = await client.post(
                f"{GITHUB_API_URL}/app/installations/{installation_id}/access_tokens",
                headers={
                    "Authorization": f"Bearer {app_jwt}",
                    "Accept": "application/vnd.github+json",
                    "X-GitHub-Api-Version": GITHUB_API_VERSION,
                },
            )
            if response.is_error:
                raise GitHubAPIError.from_response(response)
            data = response.json()

        token = data["token"]
        expires_at = datetime.fromisoformat(data["expires_at"].replace("Z", "+00:00"))

        self._installation_tokens[installation_id] = (token, expires_at)
        logger.debug(f"Refreshed installation token for installation {installation_id}")

        return token


class StaticTokenAuth:
    """Authenticates every request with a fixed token (PAT or bot token)."""

    def __init__(self, token: str):
        self.token = token

    async def get_installation_token(
        self,
        installation_id: Optional[int],
        force_refresh: bool = False,
    ) -> str:
        return self.token


class GitHubRepoClient:
    """Client for repository-level GitHub operations."""

    def __init__(
        self,
        auth: GitHubAppAuth | StaticTokenAuth,
        installation_id: Optional[int] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.auth = auth
        self.installation_id = installation_id
        self.transport = transport

    async def _get_token(self) -> str:
        return await self.auth.get_installation_token(self.installation_id)

    async def _request(
        self,
        method: str,
        endpoint: str,
        **kwargs,
    ) -> dict:
        token = await self._get_token()
        async with httpx.AsyncClient(transport=self.transport) as client:
            response = await client.request(
                method,
                f"{GITHUB_API_URL}{endpoint}",
                headers={
                    "Authorization": f"token {token}",
                    "Accept": "application/vnd.github+json",
                    "X-GitHub-Api-Version": GITHUB_API_VERSION,
                },
                **kwargs,
            )
        if response.is_error:
            raise GitHubAPIError.from_response(response)
        return response.json()

    # Issue operations

    async def create_issue_comment(
        self,
        owner: str,
        repo: str,
        issue_number: int,
        body: str,
    ) -> dict:
        """Create a comment on an issue."""
        return await self._request(
            "POST",
            f"{_repo_path(owner, repo)}/issues/{issue_number}/comments",
            json={"body": body},
        )

    # Branch operations

    async def get_branch(self, owner: str, repo: str, branch: str) -> dict:
        """Get branch information."""
        return await self._request(
            "GET", f"{_repo_path(owner, repo)}/branches/{quote(branch, safe='')}"
        )

    # Pull request operations

    async def create_pull_request(
        self,
        owner: str,
        repo: str,
        title: str,
        body: str,
        head: str,
        base: str,
    ) -> dict:
        """Create a pull request."""
        return await self._request(
            "POST",
            f"{_repo_path(owner, repo)}/pulls",
            json={
                "title": title,
                "body": body,
                "head": head,
                "base": base,
            },
        )

"""GitHub integration for OM GitHub Agent.

Handles GitHub webhooks, parses create-pr commands from issue comments,
and posts results back to GitHub.
"""

from om_github_agent.github.webhook import router as webhook_router
from om_github_agent.github.comment_parser import (
    ParsedCommand,
    ParseOutcome,
    ParseStatus,
    parse_create_pr_command,
    usage_message,
)
from om_github_agent.github.executor import (
    ExecutionResult,
    FailureKind,
    RepoCoordinate,
    execute_create_pr,
)
from om_github_agent.github.app import (
    GitHubAPIError,
    GitHubAppAuth,
    GitHubRepoClient,
    MissingInstallationError,
    RepoClient,
    StaticTokenAuth,
)

__all__ = [
    "webhook_router",
    "ParsedCommand",
    "ParseOutcome",
    "ParseStatus",
    "parse_create_pr_command",
    "usage_message",
    "ExecutionResult",
    "FailureKind",
    "RepoCoordinate",
    "execute_create_pr",
    "GitHubAPIError",
    "GitHubAppAuth",
    "GitHubRepoClient",
    "MissingInstallationError",
    "RepoClient",
    "StaticTokenAuth",
]

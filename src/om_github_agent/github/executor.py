"""Executes parsed create-pr commands against the GitHub API.

Every execution posts exactly one status comment back to the issue the
command came from, whether the pull request was created or not.
"""

import enum
import logging
from dataclasses import dataclass
from typing import Optional

import httpx

from om_github_agent.github.app import GitHubAPIError, RepoClient
from om_github_agent.github.comment_parser import ParsedCommand

logger = logging.getLogger(__name__)


class FailureKind(enum.Enum):
    """Classification of a failed pull request creation."""

    NOT_FOUND = "not_found"
    UNPROCESSABLE = "unprocessable"
    UNKNOWN = "unknown"


# Guidance appended to the failure comment, keyed on classification
FAILURE_HINTS = {
    FailureKind.NOT_FOUND: "One or more branches were not found.",
    FailureKind.UNPROCESSABLE: (
        "This could be due to non-existent branches, no differences between "
        "branches, or insufficient permissions."
    ),
}

STATUS_CLASSIFICATION = {
    404: FailureKind.NOT_FOUND,
    422: FailureKind.UNPROCESSABLE,
}


@dataclass(frozen=True)
class RepoCoordinate:
    """Where a command came from and where its result is reported."""

    owner: str
    repo: str
    issue_number: int


@dataclass(frozen=True)
class ExecutionResult:
    success: bool
    pull_request_url: Optional[str] = None
    message: Optional[str] = None
    failure_kind: Optional[FailureKind] = None


def classify_failure(status_code: Optional[int]) -> FailureKind:
    """Map an API status code to a failure classification."""
    return STATUS_CLASSIFICATION.get(status_code, FailureKind.UNKNOWN)


def success_message(pull_request_url: str) -> str:
    return f"Successfully created pull request: {pull_request_url}"


def failure_message(error_message: str, kind: FailureKind) -> str:
    message = f"Failed to create pull request. Error: {error_message}."
    hint = FAILURE_HINTS.get(kind)
    if hint:
        message += f" {hint}"
    return message


def pull_request_body(actor: str, mention_name: str) -> str:
    return f"Pull request created by @{actor} via {mention_name}."


async def execute_create_pr(
    command: ParsedCommand,
    coord: RepoCoordinate,
    actor: str,
    client: RepoClient,
    mention_name: str,
) -> ExecutionResult:
    """Create the pull request described by a command and report back.

    Steps run strictly in order: the source branch is looked up first, and
    a failed lookup skips pull request creation entirely. Errors from the
    lookup or creation are reported as a comment, never raised. A failure
    while posting the status comment itself propagates.

    Args:
        command: Parsed create-pr command
        coord: Repository and issue the command was posted on
        actor: Login of the user who posted the command
        client: GitHub client used for all API calls
        mention_name: Bot name, credited in the pull request body

    Returns:
        ExecutionResult describing the pull request or the failure
    """
    logger.info(
        f"Attempting to create PR in {coord.owner}/{coord.repo}: "
        f"source={command.source_branch}, target={command.target_branch}, "
        f"title={command.title}"
    )

    try:
        await client.get_branch(coord.owner, coord.repo, command.source_branch)

        pull_request = await client.create_pull_request(
            coord.owner,
            coord.repo,
            title=command.title,
            body=pull_request_body(actor, mention_name),
            head=command.source_branch,
            base=command.target_branch,
        )
    except (GitHubAPIError, httpx.HTTPError) as e:
        logger.error(f"Error creating pull request: {e}", exc_info=True)
        kind = classify_failure(getattr(e, "status_code", None))
        message = failure_message(str(e), kind)
        await client.create_issue_comment(
            coord.owner, coord.repo, coord.issue_number, message
        )
        return ExecutionResult(success=False, message=message, failure_kind=kind)

    url = pull_request["html_url"]
    logger.info(f"Created pull request {url}")

    await client.create_issue_comment(
        coord.owner, coord.repo, coord.issue_number, success_message(url)
    )
    return ExecutionResult(success=True, pull_request_url=url)

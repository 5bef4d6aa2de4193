"""GitHub event handlers for OM GitHub Agent.

Turns issue comment events into create-pr commands and reports the
outcome back on the issue.
"""

import logging
from typing import Any

from om_github_agent.github.app import RepoClient
from om_github_agent.github.comment_parser import (
    ParseStatus,
    parse_create_pr_command,
    usage_message,
)
from om_github_agent.github.executor import RepoCoordinate, execute_create_pr

logger = logging.getLogger(__name__)


async def handle_issue_comment(
    comment: dict[str, Any],
    issue: dict[str, Any],
    repo_owner: str,
    repo_name: str,
    client: RepoClient,
    mention_name: str,
) -> dict:
    """Handle a comment on an issue.

    - Comments that do not mention the create-pr command are ignored
    - Malformed commands get a usage comment
    - Valid commands create a pull request
    """
    comment_body = comment.get("body") or ""
    comment_author = comment.get("user", {}).get("login", "")
    issue_number = issue.get("number")

    if comment.get("user", {}).get("type") == "Bot":
        return {"status": "ignored", "reason": "comment authored by a bot"}

    logger.info(
        f"Received issue_comment from {comment_author} in "
        f"{repo_owner}/{repo_name}#{issue_number}"
    )

    outcome = parse_create_pr_command(comment_body, mention_name)

    if outcome.status is ParseStatus.NOT_MENTIONED:
        return {"status": "ignored", "reason": "no command found"}

    if outcome.status is ParseStatus.MALFORMED:
        logger.info(f"Invalid create-pr command from {comment_author}")
        await client.create_issue_comment(
            repo_owner, repo_name, issue_number, usage_message(mention_name)
        )
        return {"status": "invalid_command", "issue_number": issue_number}

    result = await execute_create_pr(
        outcome.command,
        RepoCoordinate(owner=repo_owner, repo=repo_name, issue_number=issue_number),
        actor=comment_author,
        client=client,
        mention_name=mention_name,
    )

    if result.success:
        return {"status": "pr_created", "url": result.pull_request_url}

    return {
        "status": "pr_failed",
        "classification": result.failure_kind.value,
        "message": result.message,
    }

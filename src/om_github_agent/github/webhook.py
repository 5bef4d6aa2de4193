"""GitHub webhook handler for OM GitHub Agent.

Handles GitHub webhook events:
- issue_comment.created → Process create-pr commands in comments
- ping → Webhook setup verification
"""

import json
import logging
from functools import lru_cache
from typing import Any, Callable, Optional

from fastapi import APIRouter, Depends, HTTPException, Request, Header

from om_github_agent.config import Settings, get_settings
from om_github_agent.github.app import (
    GitHubAppAuth,
    GitHubRepoClient,
    MissingInstallationError,
    RepoClient,
    StaticTokenAuth,
)
from om_github_agent.github.events import handle_issue_comment

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/webhook", tags=["webhooks"])

ClientFactory = Callable[[Optional[int]], RepoClient]


@lru_cache
def _app_auth(app_id: str, private_key: str) -> GitHubAppAuth:
    # Shared so installation tokens are cached across deliveries
    return GitHubAppAuth(app_id=app_id, private_key=private_key)


def get_client_factory(settings: Settings = Depends(get_settings)) -> ClientFactory:
    """Resolve how REST clients are built for incoming deliveries."""

    def factory(installation_id: Optional[int]) -> RepoClient:
        if settings.github_app_configured:
            if installation_id is None:
                raise MissingInstallationError(
                    "GitHub App authentication requires an installation id"
                )
            auth = _app_auth(settings.app_id, settings.load_private_key())
        elif settings.github_token:
            auth = StaticTokenAuth(settings.github_token.get_secret_value())
        else:
            logger.error("No GitHub App credentials or token configured")
            raise HTTPException(status_code=503, detail="GitHub credentials not configured")
        return GitHubRepoClient(auth, installation_id=installation_id)

    return factory


@router.post("")
async def github_webhook(
    request: Request,
    x_github_event: str = Header(..., alias="X-GitHub-Event"),
    settings: Settings = Depends(get_settings),
    client_factory: ClientFactory = Depends(get_client_factory),
):
    """Handle GitHub webhook events."""
    payload = await request.body()

    try:
        data = json.loads(payload)
    except json.JSONDecodeError:
        raise HTTPException(status_code=400, detail="Invalid JSON payload")

    if not isinstance(data, dict):
        raise HTTPException(status_code=400, detail="Webhook payload must be a JSON object")

    logger.info(f"Received GitHub webhook: {x_github_event}")

    if x_github_event == "ping":
        return await handle_ping_event(data)

    if x_github_event != "issue_comment":
        logger.debug(f"Unhandled GitHub event: {x_github_event}")
        return {"status": "ignored", "event": x_github_event}

    result = await handle_issue_comment_event(data, client_factory, settings.app_name)
    return {"status": "processed", "event": x_github_event, "result": result}


async def handle_issue_comment_event(
    data: dict[str, Any],
    client_factory: ClientFactory,
    mention_name: str,
) -> dict:
    """Handle issue comment events."""
    action = data.get("action")
    if action != "created":
        return {"action": action, "status": "ignored"}

    repo = data.get("repository") or {}
    installation_id = (data.get("installation") or {}).get("id")

    try:
        client = client_factory(installation_id)
    except MissingInstallationError:
        logger.warning(
            f"Ignoring issue_comment for {repo.get('full_name')}: no installation in payload"
        )
        return {"action": action, "status": "ignored", "reason": "no installation"}

    return await handle_issue_comment(
        comment=data.get("comment") or {},
        issue=data.get("issue") or {},
        repo_owner=(repo.get("owner") or {}).get("login"),
        repo_name=repo.get("name"),
        client=client,
        mention_name=mention_name,
    )


async def handle_ping_event(data: dict[str, Any]) -> dict:
    """Handle ping event (webhook setup verification)."""
    return {
        "status": "pong",
        "zen": data.get("zen"),
        "hook_id": data.get("hook_id"),
    }

"""OM GitHub Agent - FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.responses import PlainTextResponse

from om_github_agent import __version__
from om_github_agent.config import settings
from om_github_agent.github.webhook import router as github_webhook_router

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler for startup/shutdown."""
    logger.info(f"Starting OM GitHub Agent as @{settings.app_name}...")

    if settings.github_app_configured:
        logger.info(f"Using GitHub App {settings.app_id}")
    elif settings.github_token:
        logger.info("Using static GitHub token")
    else:
        logger.warning("No GitHub credentials configured - commands cannot be executed")

    logger.info("Webhook endpoint: /webhook")

    yield

    logger.info("Shutting down OM GitHub Agent...")


app = FastAPI(
    title="OM GitHub Agent",
    description="Creates pull requests from GitHub issue comment commands",
    version=__version__,
    lifespan=lifespan,
)

app.include_router(github_webhook_router)


@app.get("/", response_class=PlainTextResponse)
async def root():
    logger.info("GET / request received")
    return "Oh My Opencode GitHub Agent is running!"


@app.get("/api/health")
async def health_check():
    """Health check endpoint."""
    return {
        "status": "healthy",
        "version": __version__,
        "mention_name": settings.app_name,
    }


def run() -> None:
    """Run the development server."""
    import uvicorn

    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    uvicorn.run(
        "om_github_agent.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
    )


if __name__ == "__main__":
    run()

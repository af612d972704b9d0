"""FastAPI application for webhook handling."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, HTTPException, BackgroundTasks

from taskforge import __version__
from taskforge.config import configure_logging, get_settings
from taskforge.server.webhooks import verify_webhook_signature, handle_webhook
from taskforge.server.api import router as api_router


logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    settings = get_settings()
    logger.info(f"Starting taskforge webhook server on {settings.host}:{settings.port}")
    logger.info(f"LLM Provider: {settings.llm_provider}")
    yield
    logger.info("Shutting down taskforge webhook server")


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()
    configure_logging(settings.log_level)

    app = FastAPI(
        title="taskforge",
        description="Issue-driven code generation and pull request evaluation",
        version=__version__,
        lifespan=lifespan,
        debug=settings.debug,
    )

    @app.get("/")
    async def root():
        """Root endpoint with app info."""
        return {
            "name": "taskforge",
            "version": __version__,
            "description": "Issue-driven code generation and pull request evaluation",
            "status": "running",
        }

    @app.get("/health")
    async def health():
        """Health check endpoint."""
        return {"status": "healthy"}

    @app.post("/webhook")
    async def webhook(request: Request, background_tasks: BackgroundTasks):
        """GitHub webhook endpoint."""
        body = await request.body()
        await verify_webhook_signature(request, body)

        try:
            payload = await request.json()
        except ValueError:
            raise HTTPException(status_code=400, detail="Invalid JSON payload")

        event_type = request.headers.get("X-GitHub-Event", "")
        if not event_type:
            raise HTTPException(status_code=400, detail="Missing X-GitHub-Event header")

        if event_type == "ping":
            return {"status": "pong", "zen": payload.get("zen", "")}

        background_tasks.add_task(process_webhook_async, event_type, payload)

        return {
            "status": "accepted",
            "event": event_type,
            "action": payload.get("action", ""),
        }

    app.include_router(api_router)

    return app


async def process_webhook_async(event_type: str, payload: dict):
    """Process a webhook after the response has been sent."""
    try:
        result = await handle_webhook(event_type, payload)
        logger.info(f"Webhook processed: {result}")
    except Exception as e:
        logger.exception(f"Error processing webhook: {e}")


app = create_app()

"""FastAPI application factory for the streamchat API.

This module provides the application factory pattern for creating
configured FastAPI instances with middleware, routes and error handlers.
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from fastapi import FastAPI, Response
from fastapi.middleware.cors import CORSMiddleware

from streamchat import __version__
from streamchat.api.dependencies import build_container
from streamchat.api.middleware.correlation import CorrelationIdMiddleware
from streamchat.api.middleware.error_handler import setup_error_handlers
from streamchat.api.routes.chat import router as chat_router
from streamchat.api.routes.conversations import router as conversations_router
from streamchat.api.routes.health import router as health_router
from streamchat.config import Settings, load_settings_from_env
from streamchat.llm.gateway import CompletionGateway
from streamchat.observability.logging import get_logger, setup_logging
from streamchat.observability.metrics import get_metrics_collector
from streamchat.storage.base import BlobStore

logger = get_logger(__name__)


def create_app(
    settings: Optional[Settings] = None,
    gateway: Optional[CompletionGateway] = None,
    blobs: Optional[BlobStore] = None,
) -> FastAPI:
    """Create and configure a FastAPI application instance.

    Services are built once in the lifespan handler and stored on
    ``app.state.container``.

    Args:
        settings: Settings to use (defaults to the environment)
        gateway: Completion gateway override, mainly for tests
        blobs: Blob store override, mainly for tests

    Returns:
        Configured FastAPI application instance

    Examples:
        >>> app = create_app()
        >>> # uvicorn streamchat.api.app:app --reload
    """
    settings = settings or load_settings_from_env()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        setup_logging(log_level=settings.log_level, json_logs=settings.json_logs)
        logger.info("Application startup: initializing storage")

        container = await build_container(settings, gateway=gateway, blobs=blobs)
        app.state.container = container
        logger.info("Application startup complete")

        try:
            yield
        finally:
            logger.info("Application shutdown: closing storage")
            await container.close()

    app = FastAPI(
        title="streamchat",
        version=__version__,
        description="Streaming LLM chat with persisted conversation history",
        lifespan=lifespan,
    )

    # TODO: Restrict allowed origins once the UI's deployment origin is fixed
    app.add_middleware(
        CORSMiddleware,  # type: ignore[arg-type]
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Conversation-Id", "X-Correlation-ID"],
    )
    app.add_middleware(CorrelationIdMiddleware)  # type: ignore[arg-type]

    setup_error_handlers(app)

    app.include_router(chat_router)
    app.include_router(conversations_router)
    app.include_router(health_router)

    @app.get("/metrics")
    async def metrics() -> Response:
        """Prometheus metrics endpoint."""
        return Response(
            content=get_metrics_collector().generate_metrics(),
            media_type="text/plain; version=0.0.4; charset=utf-8",
        )

    return app


# Module-level app instance for uvicorn
app = create_app()

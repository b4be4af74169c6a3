"""Application factory: settings -> data contexts -> ordered pipeline."""

from contextlib import asynccontextmanager
from typing import Optional

import structlog
from fastapi import FastAPI, Request

from database import register_contexts
from pipeline import build_pipeline, install_routes, middleware_of
from settings import Settings, get_settings

logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = app.state.settings
    contexts = app.state.contexts
    if settings.database_auto_create:
        for context in contexts.all():
            context.ensure_created()
    yield
    for context in contexts.all():
        context.dispose()


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Build the FastAPI application.

    Raises a ``StartupError`` subclass when ``DefaultConnection`` is missing or
    cannot be used; nothing is served in that case.
    """
    settings = settings or get_settings()
    contexts = register_contexts(settings)
    stages = build_pipeline(settings)

    app = FastAPI(
        title="FullStackDemo API",
        description="Users and real estate listings behind a single-page application",
        version="1.0.0",
        # served by the documentation stage when enabled
        openapi_url=None,
        docs_url=None,
        redoc_url=None,
        middleware=middleware_of(stages),
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.contexts = contexts

    @app.get("/api/health", tags=["Health"])
    async def health_check(request: Request):
        return {
            "status": "healthy",
            "environment": request.app.state.settings.environment,
            "contexts": {
                type(context).__name__: context.url.get_backend_name()
                for context in request.app.state.contexts.all()
            },
        }

    install_routes(app, stages)
    logger.info(
        "application_built",
        environment=settings.environment,
        stages=[stage.name for stage in stages],
    )
    return app

"""Ordered request pipeline, decided once at startup.

Stages run in list order for every request:
HTTPS redirect, authorization, documentation (Development only),
controllers, then static files with the SPA fallback.
"""

import os
from dataclasses import dataclass
from typing import Callable, List, Optional

import structlog
from fastapi import APIRouter, FastAPI
from fastapi.openapi.docs import get_swagger_ui_html, get_swagger_ui_oauth2_redirect_html
from fastapi.responses import JSONResponse, RedirectResponse
from starlette.middleware import Middleware
from starlette.middleware.httpsredirect import HTTPSRedirectMiddleware

from auth import AuthorizationMiddleware
from real_estate_api import router as real_estate_router
from settings import Settings
from spa import SpaStaticFiles
from users_api import router as users_router

OPENAPI_URL = "/swagger/v1/swagger.json"
SWAGGER_UI_URL = "/swagger/index.html"
SWAGGER_OAUTH2_REDIRECT_URL = "/swagger/oauth2-redirect.html"
API_PREFIX = "/api"

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class PipelineStage:
    """Wraps the app in ``middleware``, ``install``s routes on it, or both."""

    name: str
    middleware: Optional[Middleware] = None
    install: Optional[Callable[[FastAPI], None]] = None


def install_documentation(app: FastAPI) -> None:
    docs = APIRouter(include_in_schema=False)

    @docs.get(OPENAPI_URL)
    async def openapi_document():
        return JSONResponse(app.openapi())

    @docs.get(SWAGGER_UI_URL)
    async def swagger_ui():
        return get_swagger_ui_html(
            openapi_url=OPENAPI_URL,
            title=f"{app.title} - Swagger UI",
            oauth2_redirect_url=SWAGGER_OAUTH2_REDIRECT_URL,
        )

    @docs.get(SWAGGER_OAUTH2_REDIRECT_URL)
    async def swagger_ui_redirect():
        return get_swagger_ui_oauth2_redirect_html()

    @docs.get("/swagger")
    async def swagger_root():
        return RedirectResponse(url=SWAGGER_UI_URL)

    app.include_router(docs)


class ApiTrailingSlashMiddleware:
    """Serves `/api/.../` from the same controller as `/api/...`."""

    def __init__(self, app, prefix: str = API_PREFIX):
        self.app = app
        self.prefix = prefix

    async def __call__(self, scope, receive, send):
        if scope["type"] == "http":
            path = scope["path"]
            if path.startswith(self.prefix + "/") and path.endswith("/"):
                path = path.rstrip("/")
                scope = dict(scope, path=path, raw_path=path.encode("utf-8"))
        await self.app(scope, receive, send)


def install_controllers(app: FastAPI) -> None:
    app.include_router(users_router, prefix=f"{API_PREFIX}/users", tags=["Users"])
    app.include_router(real_estate_router, prefix=f"{API_PREFIX}/properties", tags=["Real Estate"])


def static_files_installer(settings: Settings) -> Callable[[FastAPI], None]:
    def install(app: FastAPI) -> None:
        app.mount(
            "/",
            SpaStaticFiles(
                directory=settings.web_root,
                default_document=settings.default_document,
                fallback_file=settings.spa_fallback_file,
            ),
            name="spa",
        )

    return install


def build_pipeline(settings: Settings) -> List[PipelineStage]:
    stages = [
        PipelineStage("https_redirection", middleware=Middleware(HTTPSRedirectMiddleware)),
        PipelineStage(
            "authorization",
            middleware=Middleware(
                AuthorizationMiddleware,
                secret_key=settings.secret_key,
                algorithm=settings.jwt_algorithm,
            ),
        ),
    ]
    if settings.is_development():
        stages.append(PipelineStage("documentation", install=install_documentation))
    else:
        logger.info("documentation_disabled", environment=settings.environment)
    stages.append(
        PipelineStage(
            "controllers",
            middleware=Middleware(ApiTrailingSlashMiddleware),
            install=install_controllers,
        )
    )
    stages.append(PipelineStage("static_files", install=static_files_installer(settings)))

    fallback = os.path.join(settings.web_root, settings.spa_fallback_file.lstrip("/"))
    if not os.path.isfile(fallback):
        logger.warning("web_root_missing", web_root=settings.web_root, fallback=fallback)
    return stages


def middleware_of(stages: List[PipelineStage]) -> List[Middleware]:
    """Middleware in outermost-first order, as FastAPI expects it."""
    return [stage.middleware for stage in stages if stage.middleware is not None]


def install_routes(app: FastAPI, stages: List[PipelineStage]) -> None:
    for stage in stages:
        if stage.install is not None:
            stage.install(app)
        logger.debug("pipeline_stage_enabled", stage=stage.name)

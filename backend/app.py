"""FastAPI application entry point for the social rankings API."""

import logging
import sys

import httpx
from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware

from config import Settings, settings
from errors import register_error_handlers
from services.auth import TokenSupplier
from services.cache import RankingCaches, build_caches
from services.scheduler import create_scheduler
from services.upstream import SocialGraphClient

# Structured logging: JSON for production, human-readable for local
if settings.is_production:
    logging.basicConfig(
        level=settings.log_level,
        format='{"time":"%(asctime)s","level":"%(levelname)s","logger":"%(name)s","message":"%(message)s"}',
        stream=sys.stdout,
    )
else:
    logging.basicConfig(level=settings.log_level, format="%(levelname)s %(name)s: %(message)s")

logger = logging.getLogger(__name__)


def create_app(app_settings: Settings = settings, caches: RankingCaches | None = None) -> FastAPI:
    app = FastAPI(title="Social Rankings API", version="1.0.0")

    http_client: httpx.AsyncClient | None = None
    if caches is None:
        http_client = httpx.AsyncClient(timeout=app_settings.upstream_timeout_seconds)
        tokens = TokenSupplier(http_client, app_settings.upstream_auth_url, app_settings.client_credentials)
        source = SocialGraphClient(http_client, app_settings.upstream_base_url, tokens)
        caches = build_caches(app_settings, source)

    app.state.settings = app_settings
    app.state.caches = caches
    app.state.scheduler = None

    # CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=app_settings.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Security headers
    @app.middleware("http")
    async def add_security_headers(request: Request, call_next):
        response: Response = await call_next(request)
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        if app_settings.is_production:
            response.headers["Strict-Transport-Security"] = "max-age=31536000; includeSubDomains"
        return response

    # Centralized error handlers
    register_error_handlers(app)

    from routes.health import router as health_router
    from routes.rankings import router as rankings_router

    app.include_router(health_router)
    app.include_router(rankings_router)

    @app.on_event("startup")
    async def _startup() -> None:
        missing = app_settings.validate()
        if missing:
            logger.warning("Missing env vars (upstream auth will fail): %s", ", ".join(missing))

        if app_settings.scheduler_enabled:
            app.state.scheduler = create_scheduler(app_settings, caches)
            app.state.scheduler.start()
            logger.info("Refresh scheduler started (%s)", app_settings.scheduler_timezone)

    @app.on_event("shutdown")
    async def _shutdown() -> None:
        if app.state.scheduler is not None:
            app.state.scheduler.shutdown(wait=False)
            app.state.scheduler = None
        if http_client is not None:
            await http_client.aclose()

    return app


app = create_app()

"""FastAPI application factory for the $PUMPDROP dashboard API."""

from __future__ import annotations

import os

from fastapi import FastAPI
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from starlette.middleware.cors import CORSMiddleware

from config.settings import settings
from src.api.dependencies import limiter
from src.api.middleware import SecurityHeadersMiddleware


def create_app() -> FastAPI:
    """Build and configure the FastAPI application."""
    app = FastAPI(
        title="Pumpdrop Dashboard API",
        version="0.1.0",
        docs_url="/api/docs" if os.getenv("DASHBOARD_DEBUG") else None,
        redoc_url=None,
        openapi_url="/api/openapi.json" if os.getenv("DASHBOARD_DEBUG") else None,
    )

    # Rate limiting
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

    app.add_middleware(SecurityHeadersMiddleware)

    # The frontend is hosted elsewhere and polls this API cross-origin
    origins = settings.cors_origin_list or ["*"]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials="*" not in origins,
        allow_methods=["GET", "POST"],
        allow_headers=["*"],
    )

    from src.api.routers.health import router as health_router
    from src.api.routers.holders import router as holders_router
    from src.api.routers.logs import router as logs_router
    from src.api.routers.stats import router as stats_router

    app.include_router(health_router)
    app.include_router(stats_router)
    app.include_router(logs_router)
    app.include_router(holders_router)

    return app

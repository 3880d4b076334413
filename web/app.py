"""
FastAPI application for the appraisal desk API.

Production deployment configuration via environment variables.
"""

import logging
import os

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from core.repository import get_repository
from utils.config import Config
from web.appraisal_routes import router as appraisal_router
from web.comparable_routes import router as comparable_router
from web.market_routes import router as market_router
from web.property_routes import router as property_router
from web.valuation_routes import router as valuation_router


logger = logging.getLogger(__name__)

APP_VERSION = "0.1.0"

# =============================================================================
# Environment Configuration
# =============================================================================

# Production mode detection
IS_PRODUCTION = os.getenv("PRODUCTION", "").lower() == "true"


def create_app(config: Config = None) -> FastAPI:
    """Create and configure the FastAPI application."""
    config = config or Config.load()
    debug_mode = config.debug and not IS_PRODUCTION

    allowed_origins = config.allowed_origins
    if not allowed_origins and not IS_PRODUCTION:
        # Development fallback only
        allowed_origins = ["http://localhost:5173", "http://127.0.0.1:5173"]

    app = FastAPI(
        title="Appraisal Desk",
        description="Property appraisal records and valuation engine",
        version=APP_VERSION,
        docs_url=None if IS_PRODUCTION else "/docs",
        redoc_url=None if IS_PRODUCTION else "/redoc",
        openapi_url=None if IS_PRODUCTION else "/openapi.json",
        debug=debug_mode,
    )

    # Healthchecks first: synchronous, no IO.
    @app.get("/", include_in_schema=False)
    def root():
        """Root healthcheck. No dependencies, no IO."""
        return {"status": "ok"}

    @app.get("/health", include_in_schema=False)
    def health():
        """Secondary health endpoint. No dependencies, no IO."""
        return {"status": "healthy"}

    if allowed_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=allowed_origins,
            allow_credentials=True,
            allow_methods=["GET", "POST", "PUT", "DELETE"],
            allow_headers=["*"],
        )

    @app.on_event("startup")
    def on_startup():
        """Deferred startup tasks. Runs after healthcheck is ready."""
        counts = get_repository().count_by_kind()
        logger.info("Appraisal Desk started (records: %s)", counts)

    app.include_router(property_router)
    app.include_router(appraisal_router)
    app.include_router(comparable_router)
    app.include_router(market_router)
    app.include_router(valuation_router)

    @app.get("/api/health")
    def api_health():
        """Health check endpoint."""
        return {
            "status": "healthy",
            "version": APP_VERSION,
            "environment": "production" if IS_PRODUCTION else "development",
        }

    return app


# Create app instance for uvicorn
app = create_app()

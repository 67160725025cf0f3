"""FastAPI application factory."""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from ..config import settings
from ..logging_utils import configure_logging
from .routes import TIMESTAMP_HEADER, SIGNATURE_HEADER, router


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    configure_logging(settings.log_level)

    app = FastAPI(
        title="LoadCheck",
        description="Shipment table validation and normalization service",
        version="0.1.0",
        debug=settings.debug,
    )

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allow_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Content-Type", TIMESTAMP_HEADER, SIGNATURE_HEADER],
        max_age=600,
    )

    # API routes
    app.include_router(router, prefix="/api")

    return app

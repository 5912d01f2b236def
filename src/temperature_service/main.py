"""Main FastAPI application for the weather temperature service."""

import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import AsyncGenerator, Optional, Sequence
import os

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse
from fastapi.staticfiles import StaticFiles

from temperature_service.api.endpoints import router as temperature_router
from temperature_service.api.errors import register_error_handlers
from temperature_service.config import HOST, PORT, DEBUG, RATE_LIMIT_ENABLED
from temperature_service.logging_config import configure_logging
from temperature_service.middleware.rate_limit import RateLimitMiddleware, Rule, default_rules
from temperature_service.weather.service import TemperatureService

configure_logging(logging.DEBUG if DEBUG else logging.INFO)
logger = logging.getLogger(__name__)

STATIC_PATH = os.path.join(os.path.dirname(os.path.abspath(__file__)), "static")


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager owning the shared temperature service."""
    if app.state.temperature_service is None:
        app.state.temperature_service = TemperatureService()
    logger.info("Starting Weather Temperature Service")
    try:
        yield
    finally:
        logger.info("Shutting down Weather Temperature Service")
        await app.state.temperature_service.aclose()
        for _, limiter in app.state.rate_limit_rules:
            await limiter.close()


def create_app(
    service: Optional[TemperatureService] = None,
    rate_limit_enabled: bool = RATE_LIMIT_ENABLED,
    rate_limit_rules: Optional[Sequence[Rule]] = None
) -> FastAPI:
    """Create and configure FastAPI application.

    Args:
        service: Temperature service to serve (created at startup if None)
        rate_limit_enabled: Whether to enforce API rate limits
        rate_limit_rules: Path-prefix limiters (Redis-backed defaults if None)

    Returns:
        Configured FastAPI application instance
    """
    app = FastAPI(
        title="Weather Temperature Service",
        description="Daily temperatures around 14:00 for any location",
        version="2.0.0",
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan
    )
    app.state.temperature_service = service

    if rate_limit_enabled and rate_limit_rules is None:
        rate_limit_rules = default_rules()
    app.state.rate_limit_rules = list(rate_limit_rules or [])

    # Last added runs outermost: CORS wraps the rate limiter
    app.add_middleware(RateLimitMiddleware, rules=app.state.rate_limit_rules, enabled=rate_limit_enabled)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_error_handlers(app)
    app.include_router(temperature_router)

    app.mount("/static", StaticFiles(directory=STATIC_PATH), name="static")

    @app.get("/", tags=["root"], include_in_schema=False)
    async def root():
        """Serve the web interface."""
        return FileResponse(os.path.join(STATIC_PATH, "index.html"))

    @app.get("/health", tags=["root"])
    async def health_check() -> dict:
        """Health check endpoint.

        Returns:
            Health status response
        """
        return {"status": "ok", "timestamp": datetime.now(timezone.utc).isoformat()}

    return app


def main() -> None:
    """Main entry point for the application."""
    logger.info(f"Starting server on {HOST}:{PORT}")
    uvicorn.run(
        "temperature_service.main:create_app",
        factory=True,
        host=HOST,
        port=PORT,
        reload=DEBUG,
        log_config=None,
        log_level="info" if not DEBUG else "debug"
    )


if __name__ == "__main__":
    main()

"""
FastAPI application entrypoint for the bot dashboard backend.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from dashboard.api.routes import router as api_router
from dashboard.core.config import get_settings
from dashboard.core.logging import configure_logging
from dashboard.dependencies import get_credential_sweeper


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Run the credential sweeper for the lifetime of the process."""
    sweeper = get_credential_sweeper()
    await sweeper.start()
    try:
        yield
    finally:
        await sweeper.stop()


def create_app() -> FastAPI:
    """Factory for the FastAPI application."""
    settings = get_settings()
    configure_logging(settings.log_level)

    app = FastAPI(
        title="Bot Dashboard Backend",
        version="0.1.0",
        description="Discord login, session verification and CDN link signing.",
        lifespan=lifespan,
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(settings.cors_allow_origins),
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.include_router(api_router, prefix="/api")
    return app


app = create_app()

__all__ = ["app", "create_app"]

"""Rug estimate FastAPI application entry point."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from rugestimate.config import get_settings
from rugestimate.repositories.session_store import SessionStore
from rugestimate.services.report_parser import ReportTextParser

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Manage application startup and shutdown.

    On startup:
    - Configure logging from settings.
    - Create the report parser and the bounded session stores.
    - Store them on app.state for dependency injection.

    On shutdown the in-memory sessions are simply dropped; durable
    state belongs to the persistence collaborator.
    """
    settings = get_settings()
    logging.basicConfig(level=settings.log_level.upper())

    app.state.parser = ReportTextParser()
    app.state.annotation_sessions = SessionStore(
        max_entries=settings.max_sessions, ttl_seconds=settings.session_ttl_seconds
    )
    app.state.selection_sessions = SessionStore(
        max_entries=settings.max_sessions, ttl_seconds=settings.session_ttl_seconds
    )
    logger.info(
        "Session stores ready (max %d, ttl %.0fs)",
        settings.max_sessions,
        settings.session_ttl_seconds,
    )

    yield


app = FastAPI(
    title="RugEstimate",
    description="Estimate parsing, photo markers and client service selection",
    version="0.1.0",
    lifespan=lifespan,
)

# Behind a same-origin reverse proxy no CORS is needed.
settings = get_settings()
if not settings.behind_proxy:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

# Router includes
from rugestimate.routers import annotations, estimates, selections  # noqa: E402

app.include_router(estimates.router)
app.include_router(annotations.router)
app.include_router(selections.router)


@app.get("/health")
async def health_check() -> dict[str, str]:
    """Simple health check endpoint."""
    return {"status": "ok"}

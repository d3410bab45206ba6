# Copyright (C) 2024 AlbumRank Contributors
# SPDX-License-Identifier: GPL-3.0-or-later

"""AlbumRank Server - Main FastAPI application."""

import logging
import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from albumrank_server.config import settings
from albumrank_server.database import init_db
from albumrank_server.errors import AlbumRankError, PersistenceError
from albumrank_server.routers import albums, artwork, comparisons, lists, public

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


def _get_cors_origins() -> list[str]:
    raw = (settings.cors_origins or "*").strip()
    if raw == "*":
        return ["*"]
    return [o.strip() for o in raw.split(",") if o.strip()]


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown events."""
    await init_db()
    logger.info("AlbumRank server started (artwork at %s)", settings.artwork_path)
    yield
    # shutdown


app = FastAPI(
    title="AlbumRank Server",
    description="Personal album rankings with pairwise comparisons",
    version="0.1.0",
    lifespan=lifespan,
    docs_url="/api/docs",
    redoc_url="/api/redoc",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=_get_cors_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(AlbumRankError)
async def albumrank_error_handler(request: Request, exc: AlbumRankError) -> JSONResponse:
    """Map service errors to their HTTP status; 5xx carry the failed step when known."""
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    else:
        logger.warning("%s %s rejected: %s", request.method, request.url.path, exc.message)
    # Persistence messages embed driver output; the client gets the step only
    detail = "Could not save changes" if isinstance(exc, PersistenceError) else exc.message
    content = {"detail": detail}
    step = getattr(exc, "step", None)
    if step:
        content["step"] = step
    return JSONResponse(status_code=exc.status_code, content=content)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Log method, path, status, and duration for each request (no body or auth headers)."""
    start = time.perf_counter()
    response = await call_next(request)
    duration_ms = (time.perf_counter() - start) * 1000
    logger.info("%s %s %s %.1fms", request.method, request.url.path, response.status_code, duration_ms)
    return response

# API v1
app.include_router(lists.router, prefix="/api/v1")
app.include_router(albums.router, prefix="/api/v1")
app.include_router(comparisons.router, prefix="/api/v1")
app.include_router(public.router, prefix="/api/v1")
app.include_router(artwork.router)


@app.get("/")
async def root():
    """Health check / API info."""
    return {
        "name": "AlbumRank Server",
        "version": "0.1.0",
        "api": "/api/v1",
        "docs": "/api/docs",
    }


@app.get("/api/v1/health")
async def health():
    """Health check for load balancers."""
    return {"status": "ok"}

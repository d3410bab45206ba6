# Copyright (C) 2024 AlbumRank Contributors
# SPDX-License-Identifier: GPL-3.0-or-later

"""In-memory rate limiting for unauthenticated endpoints (slug guessing protection)."""

import time
from collections import defaultdict
from fastapi import HTTPException, Request

from albumrank_server.config import settings

# (client_key, scope) -> list of request timestamps in window
_buckets: defaultdict[tuple[str, str], list[float]] = defaultdict(list)
WINDOW = 60
PUBLIC_SCOPE = "public"
_last_prune = 0.0


def _client_key(request: Request) -> str:
    """Client address; X-Forwarded-For only when the proxy in front is trusted."""
    if settings.trust_forwarded_for:
        forwarded = request.headers.get("x-forwarded-for")
        if forwarded:
            return forwarded.split(",")[0].strip()
    if request.client:
        return request.client.host or "unknown"
    return "unknown"


def _clean_old(bucket: list[float], now: float) -> None:
    cutoff = now - WINDOW
    while bucket and bucket[0] < cutoff:
        bucket.pop(0)


def _prune(now: float) -> None:
    """Drop buckets with no requests left in the window. Runs at most once per window."""
    global _last_prune
    if now - _last_prune < WINDOW:
        return
    _last_prune = now
    for key in list(_buckets):
        _clean_old(_buckets[key], now)
        if not _buckets[key]:
            del _buckets[key]


def check_rate_limit(request: Request, scope: str, limit: int) -> None:
    """Raise 429 if the client has made `limit` requests to this scope within the window."""
    if limit <= 0:
        return
    now = time.monotonic()
    _prune(now)
    key = (_client_key(request), scope)
    bucket = _buckets[key]
    _clean_old(bucket, now)
    if len(bucket) >= limit:
        raise HTTPException(
            status_code=429,
            detail="Too many requests. Please try again later.",
        )
    bucket.append(now)


def reset() -> None:
    global _last_prune
    _buckets.clear()
    _last_prune = 0.0


async def rate_limit_public_dep(request: Request) -> None:
    """FastAPI dependency for the public share endpoint."""
    check_rate_limit(request, PUBLIC_SCOPE, settings.public_rate_limit_per_minute)

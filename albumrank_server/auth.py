# Copyright (C) 2024 AlbumRank Contributors
# SPDX-License-Identifier: GPL-3.0-or-later

"""Authentication: verify JWTs issued by the auth provider and mirror the caller's user row."""

import logging
from datetime import datetime, timedelta, timezone
from typing import Any

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from albumrank_server.config import settings
from albumrank_server.database import get_db
from albumrank_server.models import User

logger = logging.getLogger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)


def create_access_token(data: dict[str, Any], expires_delta: timedelta | None = None) -> str:
    """Create a JWT access token (scripts and tests; production tokens come from the provider)."""
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + (
        expires_delta or timedelta(minutes=settings.jwt_expire_minutes)
    )
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def decode_token(token: str) -> dict[str, Any] | None:
    """Decode and validate a JWT token."""
    try:
        payload = jwt.decode(
            token, settings.jwt_secret, algorithms=[settings.jwt_algorithm]
        )
        return payload
    except JWTError:
        return None


async def _insert_user(db: AsyncSession, user_id: int, username: str, display_name: str | None) -> bool:
    try:
        async with db.begin_nested():
            db.add(User(id=user_id, username=username, display_name=display_name))
    except IntegrityError:
        return False
    logger.info("Registered user %s (%s)", user_id, username)
    return True


async def _sync_user(db: AsyncSession, user_id: int, payload: dict[str, Any]) -> None:
    """Create the local user row on first sight; keep the display name current."""
    display_name = payload.get("name")
    user = await db.get(User, user_id)
    if user is not None:
        if display_name and user.display_name != display_name:
            user.display_name = display_name
        return
    candidates = [f"user-{user_id}"]
    preferred = payload.get("preferred_username")
    if preferred and preferred not in candidates:
        candidates.insert(0, preferred)
    for username in candidates:
        if await _insert_user(db, user_id, username, display_name):
            return
        # Another request created the row first
        if await db.get(User, user_id) is not None:
            return
    logger.warning("Could not register user %s: usernames %s are taken", user_id, candidates)
    raise HTTPException(
        status_code=status.HTTP_409_CONFLICT,
        detail="Username already taken",
    )


async def get_current_user_id(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    db: AsyncSession = Depends(get_db),
) -> int:
    """Extract and validate user ID from the Bearer JWT. Raises 401 if invalid."""
    if not credentials:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )
    payload = decode_token(credentials.credentials)
    if not payload:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
            headers={"WWW-Authenticate": "Bearer"},
        )
    sub = payload.get("sub")
    try:
        user_id = int(sub)
    except (TypeError, ValueError):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token",
            headers={"WWW-Authenticate": "Bearer"},
        ) from None
    await _sync_user(db, user_id, payload)
    return user_id

# Copyright (C) 2024 AlbumRank Contributors
# SPDX-License-Identifier: GPL-3.0-or-later

"""Stored Elo ratings per (list, album)."""

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from albumrank_server.config import settings
from albumrank_server.models import EloRating


async def ensure_rating(db: AsyncSession, list_id: int, album_id: int) -> EloRating:
    """Return the rating row, creating it at the baseline if missing (insert-or-ignore)."""
    rating = await db.get(EloRating, (list_id, album_id))
    if rating is not None:
        return rating
    rating = EloRating(
        ranking_list_id=list_id,
        album_id=album_id,
        rating=settings.elo_default_rating,
        matches=0,
    )
    try:
        async with db.begin_nested():
            db.add(rating)
    except IntegrityError:
        existing = await db.get(EloRating, (list_id, album_id), populate_existing=True)
        if existing is None:
            raise
        return existing
    return rating


async def ratings_for_list(db: AsyncSession, list_id: int) -> dict[int, EloRating]:
    result = await db.execute(select(EloRating).where(EloRating.ranking_list_id == list_id))
    return {r.album_id: r for r in result.scalars().all()}

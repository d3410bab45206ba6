# Copyright (C) 2024 AlbumRank Contributors
# SPDX-License-Identifier: GPL-3.0-or-later

"""List membership: add, remove, reorder and read albums in a list."""

import logging
from dataclasses import dataclass
from datetime import datetime

from sqlalchemy import and_, case, select
from sqlalchemy.ext.asyncio import AsyncSession

from albumrank_server.errors import NotFoundError, ValidationError
from albumrank_server.models import Album, EloRating, RankingItem, RankingList, UserAlbum
from albumrank_server.models.album import STATUS_LISTENING, STATUS_NOT_LISTENED
from albumrank_server.models.ranking_list import KIND_CUSTOM
from albumrank_server.services.lists import NEEDS_LISTENING, get_owned_list, is_derived
from albumrank_server.services.positions import next_position, remove_and_compact, reorder
from albumrank_server.services.ratings import ensure_rating

logger = logging.getLogger(__name__)

NEEDS_LISTENING_STATUSES = (STATUS_LISTENING, STATUS_NOT_LISTENED)


@dataclass
class Member:
    """An album as shown in a list."""

    album: Album
    position: int | None
    added_at: datetime | None = None
    rating: float | None = None
    matches: int | None = None
    status: str | None = None

    @property
    def album_id(self) -> int:
        return self.album.id


@dataclass
class AlbumMembership:
    list_id: int
    list_name: str
    mode: str
    position: int | None


def _reject_derived(ranking_list: RankingList) -> None:
    if is_derived(ranking_list):
        raise ValidationError(f"{NEEDS_LISTENING!r} follows listening status and cannot be edited directly")


async def add_to_list(db: AsyncSession, user_id: int, list_id: int, album_id: int) -> bool:
    """
    Add an album to one of the caller's lists.

    Ranked lists append at max(position) + 1 and get a baseline rating;
    collections store no position. Returns False if already a member.
    """
    ranking_list = await get_owned_list(db, user_id, list_id)
    _reject_derived(ranking_list)
    return await add_album(db, ranking_list, album_id)


async def add_album(db: AsyncSession, ranking_list: RankingList, album_id: int) -> bool:
    """Add without the ownership check; ingest uses this for lists it already resolved."""
    if await db.get(Album, album_id) is None:
        raise NotFoundError("Album", album_id)
    if await db.get(RankingItem, (ranking_list.id, album_id)) is not None:
        return False
    position = await next_position(db, ranking_list.id) if ranking_list.is_ranked else None
    db.add(RankingItem(ranking_list_id=ranking_list.id, album_id=album_id, position=position))
    await db.flush()
    if ranking_list.is_ranked:
        await ensure_rating(db, ranking_list.id, album_id)
    logger.info("Added album %s to list %s at position %s", album_id, ranking_list.id, position)
    return True


async def remove_from_list(db: AsyncSession, user_id: int, list_id: int, album_id: int) -> None:
    """Remove an album; ranked lists are renumbered to 1..N. The album's rating row is kept."""
    ranking_list = await get_owned_list(db, user_id, list_id)
    _reject_derived(ranking_list)
    if not await remove_and_compact(db, ranking_list, album_id):
        raise NotFoundError("Album", album_id)
    logger.info("Removed album %s from list %s", album_id, list_id)


async def reorder_list(db: AsyncSession, user_id: int, list_id: int, ordered_album_ids: list[int]) -> None:
    ranking_list = await get_owned_list(db, user_id, list_id)
    if not ranking_list.is_ranked:
        raise ValidationError("Collection lists are unordered")
    await reorder(db, list_id, ordered_album_ids)
    logger.info("Reordered list %s", list_id)


async def needs_listening_members(db: AsyncSession, user_id: int) -> list[Member]:
    """Albums the user has not finished: in-progress first, then newest annotation first."""
    status_rank = case((UserAlbum.status == STATUS_LISTENING, 0), else_=1)
    result = await db.execute(
        select(UserAlbum, Album)
        .join(Album, UserAlbum.album_id == Album.id)
        .where(
            UserAlbum.user_id == user_id,
            UserAlbum.status.in_(NEEDS_LISTENING_STATUSES),
        )
        .order_by(status_rank, UserAlbum.created_at.desc(), Album.id.desc())
    )
    return [
        Member(album=album, position=None, added_at=ua.created_at, status=ua.status)
        for ua, album in result.all()
    ]


async def members_of(db: AsyncSession, ranking_list: RankingList) -> list[Member]:
    """Members of a list without an ownership check (callers check access)."""
    if is_derived(ranking_list):
        return await needs_listening_members(db, ranking_list.user_id)
    q = (
        select(RankingItem, Album, EloRating)
        .join(Album, RankingItem.album_id == Album.id)
        .outerjoin(
            EloRating,
            and_(
                EloRating.ranking_list_id == RankingItem.ranking_list_id,
                EloRating.album_id == RankingItem.album_id,
            ),
        )
        .where(RankingItem.ranking_list_id == ranking_list.id)
        .execution_options(populate_existing=True)
    )
    if ranking_list.is_ranked:
        q = q.order_by(RankingItem.position.asc().nullslast(), RankingItem.album_id)
    else:
        q = q.order_by(RankingItem.added_at.desc(), RankingItem.album_id.desc())
    result = await db.execute(q)
    return [
        Member(
            album=album,
            position=item.position,
            added_at=item.added_at,
            rating=rating.rating if rating else None,
            matches=rating.matches if rating else None,
        )
        for item, album, rating in result.all()
    ]


async def list_members(db: AsyncSession, user_id: int, list_id: int) -> list[Member]:
    ranking_list = await get_owned_list(db, user_id, list_id)
    return await members_of(db, ranking_list)


async def memberships_for_album(db: AsyncSession, user_id: int, album_id: int) -> list[AlbumMembership]:
    """Which of the caller's lists contain this album, including the derived collection."""
    result = await db.execute(
        select(RankingItem, RankingList)
        .join(RankingList, RankingItem.ranking_list_id == RankingList.id)
        .where(RankingItem.album_id == album_id, RankingList.user_id == user_id)
        .order_by(RankingList.created_at, RankingList.id)
    )
    out = [
        AlbumMembership(list_id=rl.id, list_name=rl.name, mode=rl.mode, position=item.position)
        for item, rl in result.all()
    ]

    status = await db.scalar(
        select(UserAlbum.status).where(UserAlbum.user_id == user_id, UserAlbum.album_id == album_id)
    )
    if status in NEEDS_LISTENING_STATUSES:
        derived = await db.scalar(
            select(RankingList).where(
                RankingList.user_id == user_id,
                RankingList.kind == KIND_CUSTOM,
                RankingList.name == NEEDS_LISTENING,
            )
        )
        if derived is not None:
            out.append(AlbumMembership(list_id=derived.id, list_name=derived.name, mode=derived.mode, position=None))
    return out

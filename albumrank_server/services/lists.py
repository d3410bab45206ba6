# Copyright (C) 2024 AlbumRank Contributors
# SPDX-License-Identifier: GPL-3.0-or-later

"""Ranking list lifecycle: ensure, create, rename, delete, ownership."""

import logging
from collections.abc import Iterable

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from albumrank_server.errors import AuthorizationError, DuplicateListError, NotFoundError, ValidationError
from albumrank_server.models import Comparison, EloRating, RankingItem, RankingList
from albumrank_server.models.ranking_list import KIND_CUSTOM, KIND_YEAR, MODE_COLLECTION, MODE_RANKED

logger = logging.getLogger(__name__)

# Reserved collection whose members are derived from listening status
NEEDS_LISTENING = "Needs listening"
NEEDS_LISTENING_DESCRIPTION = "Albums to listen to"
ALL_TIME = "All Time"

LIST_MODES = (MODE_RANKED, MODE_COLLECTION)


def is_derived(ranking_list: RankingList) -> bool:
    """True for the "Needs listening" list, whose membership is never stored."""
    return ranking_list.kind == KIND_CUSTOM and ranking_list.name == NEEDS_LISTENING


async def get_owned_list(db: AsyncSession, user_id: int, list_id: int) -> RankingList:
    """Load a list and check the caller owns it."""
    ranking_list = await db.get(RankingList, list_id)
    if ranking_list is None:
        raise NotFoundError("Ranking list", list_id)
    if ranking_list.user_id != user_id:
        raise AuthorizationError("Ranking list not found for user")
    return ranking_list


async def list_user_lists(db: AsyncSession, user_id: int) -> list[RankingList]:
    result = await db.execute(
        select(RankingList)
        .where(RankingList.user_id == user_id)
        .order_by(RankingList.created_at, RankingList.id)
    )
    return list(result.scalars().all())


async def _find_list(db: AsyncSession, user_id: int, kind: str, name: str) -> RankingList | None:
    result = await db.execute(
        select(RankingList).where(
            RankingList.user_id == user_id,
            RankingList.kind == kind,
            RankingList.name == name,
        )
    )
    return result.scalar_one_or_none()


async def _insert_if_missing(
    db: AsyncSession, user_id: int, kind: str, name: str, **values
) -> tuple[RankingList, bool]:
    """Select, then insert in a savepoint. A concurrent duplicate insert counts as already existing."""
    existing = await _find_list(db, user_id, kind, name)
    if existing is not None:
        return existing, False
    ranking_list = RankingList(user_id=user_id, kind=kind, name=name, **values)
    try:
        async with db.begin_nested():
            db.add(ranking_list)
    except IntegrityError:
        logger.info("List %r (%s) for user %s created concurrently", name, kind, user_id)
        existing = await _find_list(db, user_id, kind, name)
        if existing is None:
            raise
        return existing, False
    logger.info("Created %s list %r for user %s", kind, name, user_id)
    return ranking_list, True


def _clean_name(name: str | None) -> str:
    cleaned = (name or "").strip()
    if not cleaned:
        raise ValidationError("List name is required")
    return cleaned


async def ensure_lists(
    db: AsyncSession, user_id: int, years: Iterable[int], custom_names: Iterable[str]
) -> list[RankingList]:
    """
    Make sure one ranked list exists per year and one list per custom name.

    "Needs listening" is always included and is created as a collection.
    Idempotent; returns every list of the user.
    """
    names = {_clean_name(n) for n in custom_names}
    names.add(NEEDS_LISTENING)
    for year in sorted(set(years)):
        await _insert_if_missing(db, user_id, KIND_YEAR, str(year), year=year, mode=MODE_RANKED)
    for name in sorted(names):
        if name == NEEDS_LISTENING:
            await _insert_if_missing(
                db, user_id, KIND_CUSTOM, name,
                mode=MODE_COLLECTION, description=NEEDS_LISTENING_DESCRIPTION,
            )
        else:
            await _insert_if_missing(db, user_id, KIND_CUSTOM, name, mode=MODE_RANKED)
    return await list_user_lists(db, user_id)


async def create_list(
    db: AsyncSession,
    user_id: int,
    name: str | None,
    mode: str = MODE_RANKED,
    description: str | None = None,
    kind: str = KIND_CUSTOM,
    year: int | None = None,
) -> RankingList:
    """Create a user-defined list. Fails if the (kind, name) or (kind, year) is taken."""
    if mode not in LIST_MODES:
        raise ValidationError(f"Unknown list mode {mode!r}")
    if kind == KIND_YEAR:
        if year is None:
            raise ValidationError("Year lists require a year")
        name = str(year)
    elif kind == KIND_CUSTOM:
        name = _clean_name(name)
        year = None
        if name == NEEDS_LISTENING:
            raise ValidationError(f"{NEEDS_LISTENING!r} is a reserved list name")
    else:
        raise ValidationError(f"Unknown list kind {kind!r}")

    if await _find_list(db, user_id, kind, name) is not None:
        raise DuplicateListError(f"A {kind} list named {name!r} already exists")
    ranking_list = RankingList(
        user_id=user_id, kind=kind, name=name, year=year, mode=mode, description=description
    )
    try:
        async with db.begin_nested():
            db.add(ranking_list)
    except IntegrityError as e:
        raise DuplicateListError(f"A {kind} list named {name!r} already exists") from e
    logger.info("Created %s list %r for user %s", kind, name, user_id)
    return ranking_list


async def update_list(
    db: AsyncSession,
    user_id: int,
    list_id: int,
    name: str | None = None,
    description: str | None = None,
) -> RankingList:
    """Rename a custom list and/or change its description."""
    ranking_list = await get_owned_list(db, user_id, list_id)
    if name is not None:
        new_name = _clean_name(name)
        if new_name != ranking_list.name:
            if ranking_list.kind == KIND_YEAR:
                raise ValidationError("Year lists are named after their year")
            if is_derived(ranking_list) or new_name == NEEDS_LISTENING:
                raise ValidationError(f"{NEEDS_LISTENING!r} is a reserved list name")
            if await _find_list(db, user_id, ranking_list.kind, new_name) is not None:
                raise DuplicateListError(f"A {ranking_list.kind} list named {new_name!r} already exists")
            ranking_list.name = new_name
    if description is not None:
        ranking_list.description = description or None
    try:
        await db.flush()
    except IntegrityError as e:
        raise DuplicateListError(f"A list named {ranking_list.name!r} already exists") from e
    return ranking_list


async def delete_list(db: AsyncSession, user_id: int, list_id: int) -> None:
    """Delete a list with its items, ratings and comparisons. Albums are untouched."""
    ranking_list = await get_owned_list(db, user_id, list_id)
    if is_derived(ranking_list):
        raise ValidationError(f"{NEEDS_LISTENING!r} cannot be deleted")
    await db.execute(delete(RankingItem).where(RankingItem.ranking_list_id == list_id))
    await db.execute(delete(EloRating).where(EloRating.ranking_list_id == list_id))
    await db.execute(delete(Comparison).where(Comparison.ranking_list_id == list_id))
    await db.delete(ranking_list)
    await db.flush()
    logger.info("Deleted list %s for user %s", list_id, user_id)


async def get_or_create_all_time(db: AsyncSession, user_id: int) -> RankingList:
    ranking_list, _ = await _insert_if_missing(db, user_id, KIND_CUSTOM, ALL_TIME, mode=MODE_RANKED)
    return ranking_list

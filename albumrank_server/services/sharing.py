# Copyright (C) 2024 AlbumRank Contributors
# SPDX-License-Identifier: GPL-3.0-or-later

"""Public, read-only links to ranked lists."""

import logging
import uuid
from dataclasses import dataclass

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from albumrank_server.errors import NotFoundError
from albumrank_server.models import RankingList, User
from albumrank_server.services.lists import get_owned_list
from albumrank_server.services.memberships import Member, members_of

logger = logging.getLogger(__name__)


@dataclass
class PublicRanking:
    ranking_list: RankingList
    items: list[Member]
    owner_name: str


def generate_slug() -> str:
    return uuid.uuid4().hex


async def publish(db: AsyncSession, user_id: int, list_id: int) -> str:
    """Make a list public. An existing slug is reused so old links keep working."""
    ranking_list = await get_owned_list(db, user_id, list_id)
    if not ranking_list.public_slug:
        ranking_list.public_slug = generate_slug()
    ranking_list.is_public = True
    await db.flush()
    logger.info("List %s published as %s", list_id, ranking_list.public_slug)
    return ranking_list.public_slug


async def unpublish(db: AsyncSession, user_id: int, list_id: int) -> None:
    ranking_list = await get_owned_list(db, user_id, list_id)
    ranking_list.is_public = False
    ranking_list.public_slug = None
    await db.flush()
    logger.info("List %s made private", list_id)


async def resolve(db: AsyncSession, slug: str) -> PublicRanking:
    """
    Look up a public list by slug.

    Unknown slugs and lists that are no longer public both raise the same
    NotFoundError so callers cannot tell them apart.
    """
    result = await db.execute(
        select(RankingList, User)
        .join(User, RankingList.user_id == User.id)
        .where(RankingList.public_slug == slug, RankingList.is_public.is_(True))
    )
    row = result.one_or_none()
    if row is None:
        raise NotFoundError("Ranking")
    ranking_list, owner = row
    items = await members_of(db, ranking_list)
    return PublicRanking(ranking_list=ranking_list, items=items, owner_name=owner.public_name)

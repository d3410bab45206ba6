# Copyright (C) 2024 AlbumRank Contributors
# SPDX-License-Identifier: GPL-3.0-or-later

"""Public share API - read-only rankings by slug, no authentication."""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from albumrank_server.database import get_db
from albumrank_server.api.schemas import PublicItemResponse, PublicListSummary, PublicRankingResponse
from albumrank_server.rate_limit import rate_limit_public_dep
from albumrank_server.services.artwork import artwork_url
from albumrank_server.services.sharing import resolve

router = APIRouter(prefix="/public", tags=["public"])


@router.get(
    "/rankings/{slug}",
    response_model=PublicRankingResponse,
    dependencies=[Depends(rate_limit_public_dep)],
)
async def get_public_ranking(
    slug: str,
    db: AsyncSession = Depends(get_db),
) -> PublicRankingResponse:
    """Ranked items of a shared list. 404 for unknown or private slugs alike."""
    public = await resolve(db, slug)
    return PublicRankingResponse(
        ranking=PublicListSummary.model_validate(public.ranking_list),
        owner_name=public.owner_name,
        items=[
            PublicItemResponse(
                album_id=m.album_id,
                position=m.position,
                title=m.album.title,
                artist=m.album.artist,
                release_year=m.album.release_year,
                artwork_thumb_path=m.album.artwork_thumb_path,
                artwork_thumb_url=artwork_url(m.album.artwork_thumb_path),
            )
            for m in public.items
        ],
    )

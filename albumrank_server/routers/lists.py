# Copyright (C) 2024 AlbumRank Contributors
# SPDX-License-Identifier: GPL-3.0-or-later

"""Ranking list API routes."""

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from albumrank_server.auth import get_current_user_id
from albumrank_server.database import get_db
from albumrank_server.api.schemas import (
    EnsureListsRequest,
    ListCreate,
    ListItemResponse,
    ListResponse,
    ListUpdate,
    MembershipAdd,
    OkResponse,
    PairResponse,
    ReorderRequest,
    ShareResponse,
)
from albumrank_server.routers.albums import album_response
from albumrank_server.services import lists as list_service
from albumrank_server.services import memberships, sharing
from albumrank_server.services.comparisons import suggest_pair

router = APIRouter(prefix="/lists", tags=["lists"])


@router.get("", response_model=list[ListResponse])
async def get_lists(
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
) -> list[ListResponse]:
    """List current user's lists."""
    lists = await list_service.list_user_lists(db, user_id)
    return [ListResponse.model_validate(rl) for rl in lists]


@router.post("/ensure", response_model=list[ListResponse])
async def ensure_lists(
    data: EnsureListsRequest,
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
) -> list[ListResponse]:
    """Create missing year and custom lists; returns all of the user's lists."""
    lists = await list_service.ensure_lists(db, user_id, data.years, data.custom_names)
    return [ListResponse.model_validate(rl) for rl in lists]


@router.post("", response_model=ListResponse, status_code=status.HTTP_201_CREATED)
async def create_list(
    data: ListCreate,
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
) -> ListResponse:
    ranking_list = await list_service.create_list(
        db,
        user_id,
        data.name,
        mode=data.mode,
        description=data.description,
        kind=data.kind,
        year=data.year,
    )
    await db.refresh(ranking_list)
    return ListResponse.model_validate(ranking_list)


@router.get("/{list_id}", response_model=ListResponse)
async def get_list(
    list_id: int,
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
) -> ListResponse:
    ranking_list = await list_service.get_owned_list(db, user_id, list_id)
    return ListResponse.model_validate(ranking_list)


@router.patch("/{list_id}", response_model=ListResponse)
async def update_list(
    list_id: int,
    data: ListUpdate,
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
) -> ListResponse:
    """Rename a custom list or change its description."""
    ranking_list = await list_service.update_list(
        db, user_id, list_id, name=data.name, description=data.description
    )
    await db.refresh(ranking_list)
    return ListResponse.model_validate(ranking_list)


@router.delete("/{list_id}", status_code=status.HTTP_204_NO_CONTENT, response_class=Response)
async def delete_list(
    list_id: int,
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
) -> Response:
    await list_service.delete_list(db, user_id, list_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/{list_id}/items", response_model=list[ListItemResponse])
async def get_list_items(
    list_id: int,
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
) -> list[ListItemResponse]:
    """Albums in a list, by position for ranked lists."""
    members = await memberships.list_members(db, user_id, list_id)
    return [
        ListItemResponse(
            album_id=m.album_id,
            position=m.position,
            added_at=m.added_at,
            rating=m.rating,
            matches=m.matches,
            status=m.status,
            album=album_response(m.album),
        )
        for m in members
    ]


@router.post("/{list_id}/items", status_code=status.HTTP_204_NO_CONTENT, response_class=Response)
async def add_list_item(
    list_id: int,
    data: MembershipAdd,
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
) -> Response:
    """Add an album to a list (no-op if already there)."""
    await memberships.add_to_list(db, user_id, list_id, data.album_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.delete("/{list_id}/items/{album_id}", status_code=status.HTTP_204_NO_CONTENT, response_class=Response)
async def remove_list_item(
    list_id: int,
    album_id: int,
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
) -> Response:
    """Remove an album; remaining positions are compacted."""
    await memberships.remove_from_list(db, user_id, list_id, album_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/{list_id}/reorder", response_model=OkResponse)
async def reorder_list(
    list_id: int,
    data: ReorderRequest,
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
) -> OkResponse:
    """Replace the order of a ranked list. The ids must be exactly the current members."""
    await memberships.reorder_list(db, user_id, list_id, data.ordered_album_ids)
    return OkResponse(ok=True)


@router.get("/{list_id}/pair", response_model=PairResponse)
async def get_comparison_pair(
    list_id: int,
    subject_album_id: int | None = Query(None),
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
) -> PairResponse:
    """Suggest a pair to compare: the subject and a nearby opponent."""
    left, right = await suggest_pair(db, user_id, list_id, subject_album_id)
    return PairResponse(left_album_id=left, right_album_id=right)


@router.post("/{list_id}/share", response_model=ShareResponse)
async def share_list(
    list_id: int,
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
) -> ShareResponse:
    slug = await sharing.publish(db, user_id, list_id)
    return ShareResponse(public_slug=slug, is_public=True)


@router.delete("/{list_id}/share", response_model=ShareResponse)
async def unshare_list(
    list_id: int,
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
) -> ShareResponse:
    await sharing.unpublish(db, user_id, list_id)
    return ShareResponse(public_slug=None, is_public=False)

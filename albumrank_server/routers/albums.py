# Copyright (C) 2024 AlbumRank Contributors
# SPDX-License-Identifier: GPL-3.0-or-later

"""Album API routes - ingest, manual entry, annotations, memberships."""

from fastapi import APIRouter, Depends, File, Form, UploadFile
from sqlalchemy.ext.asyncio import AsyncSession

from albumrank_server.auth import get_current_user_id
from albumrank_server.database import get_db
from albumrank_server.models import Album
from albumrank_server.api.schemas import (
    AlbumDetailResponse,
    AlbumIngestRequest,
    AlbumIngestResponse,
    AlbumMembershipResponse,
    AlbumResponse,
    ArtworkRefetchResponse,
    UserAlbumResponse,
    UserAlbumUpdate,
)
from albumrank_server.services import albums as album_service
from albumrank_server.services.artwork import Artwork, ArtworkStore, artwork_url, get_artwork_store
from albumrank_server.services.memberships import memberships_for_album

router = APIRouter(prefix="/albums", tags=["albums"])


def album_response(album: Album) -> AlbumResponse:
    return AlbumResponse(
        id=album.id,
        provider=album.provider,
        provider_album_id=album.provider_album_id,
        title=album.title,
        artist=album.artist,
        release_year=album.release_year,
        external_url=album.external_url,
        artwork_thumb_path=album.artwork_thumb_path,
        artwork_medium_path=album.artwork_medium_path,
        artwork_thumb_url=artwork_url(album.artwork_thumb_path),
        artwork_medium_url=artwork_url(album.artwork_medium_path),
    )


@router.post("/ingest", response_model=AlbumIngestResponse)
async def ingest_album(
    data: AlbumIngestRequest,
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
    store: ArtworkStore = Depends(get_artwork_store),
) -> AlbumIngestResponse:
    """Add an album picked from catalog search results."""
    result = await album_service.ingest_catalog_album(
        db,
        user_id,
        data.candidate,
        store,
        target_list_id=data.target_list_id,
        include_in_list=data.include_in_list,
    )
    return AlbumIngestResponse(
        album_id=result.album_id,
        created_album=result.created_album,
        created_ranking_item=result.created_ranking_item,
    )


@router.post("/manual", response_model=AlbumIngestResponse)
async def create_manual_album(
    title: str = Form(...),
    artist: str = Form(...),
    release_year: int | None = Form(None),
    target_list_id: int | None = Form(None),
    include_in_list: bool = Form(True),
    cover: UploadFile | None = File(None),
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
    store: ArtworkStore = Depends(get_artwork_store),
) -> AlbumIngestResponse:
    """Create an album by hand with an uploaded cover image."""
    artwork = None
    if cover is not None:
        artwork = Artwork(data=await cover.read(), content_type=cover.content_type or "image/jpeg")
    result = await album_service.create_manual_album(
        db,
        user_id,
        title,
        artist,
        artwork,
        store,
        release_year=release_year,
        target_list_id=target_list_id,
        include_in_list=include_in_list,
    )
    return AlbumIngestResponse(
        album_id=result.album_id,
        created_album=result.created_album,
        created_ranking_item=result.created_ranking_item,
    )


@router.get("/{album_id}", response_model=AlbumDetailResponse)
async def get_album(
    album_id: int,
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
) -> AlbumDetailResponse:
    album, user_album = await album_service.get_album_detail(db, user_id, album_id)
    return AlbumDetailResponse(
        album=album_response(album),
        user_album=UserAlbumResponse.model_validate(user_album) if user_album else None,
    )


@router.patch("/{album_id}/user", response_model=UserAlbumResponse)
async def update_user_album(
    album_id: int,
    data: UserAlbumUpdate,
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
) -> UserAlbumResponse:
    """Set listening status and notes."""
    user_album = await album_service.update_user_album(
        db, user_id, album_id, status=data.status, notes=data.notes
    )
    await db.refresh(user_album)
    return UserAlbumResponse.model_validate(user_album)


@router.get("/{album_id}/memberships", response_model=list[AlbumMembershipResponse])
async def get_album_memberships(
    album_id: int,
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
) -> list[AlbumMembershipResponse]:
    """Lists of the caller that contain this album."""
    await album_service.get_album(db, album_id)
    memberships = await memberships_for_album(db, user_id, album_id)
    return [AlbumMembershipResponse.model_validate(m) for m in memberships]


@router.post("/{album_id}/artwork/refetch", response_model=ArtworkRefetchResponse)
async def refetch_album_artwork(
    album_id: int,
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
    store: ArtworkStore = Depends(get_artwork_store),
) -> ArtworkRefetchResponse:
    album = await album_service.refetch_artwork(db, user_id, album_id, store)
    return ArtworkRefetchResponse(
        artwork_thumb_path=album.artwork_thumb_path,
        artwork_medium_path=album.artwork_medium_path,
    )

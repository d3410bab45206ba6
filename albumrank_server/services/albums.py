# Copyright (C) 2024 AlbumRank Contributors
# SPDX-License-Identifier: GPL-3.0-or-later

"""Album ingest, manual entry, listening annotations and artwork backfill."""

import logging
import re
from dataclasses import dataclass

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from albumrank_server.api.schemas import CatalogAlbumCandidate
from albumrank_server.errors import AlbumRankError, AuthorizationError, NotFoundError, ValidationError
from albumrank_server.models import Album, RankingList, UserAlbum
from albumrank_server.models.album import LISTENING_STATUSES, PROVIDER_MANUAL
from albumrank_server.services.artwork import (
    Artwork,
    ArtworkStore,
    artwork_candidates,
    fetch_artwork,
    lookup_artwork_url,
)
from albumrank_server.services.lists import ALL_TIME, get_or_create_all_time, get_owned_list, is_derived
from albumrank_server.services.memberships import add_album

logger = logging.getLogger(__name__)


@dataclass
class IngestResult:
    album_id: int
    created_album: bool
    created_ranking_item: bool


def parse_year(release_date: str | None) -> int | None:
    """Year from an ISO-ish date ("2011-05-03T07:00:00Z", "1997-06", "1997")."""
    if not release_date:
        return None
    m = re.match(r"^\s*(\d{4})", release_date)
    return int(m.group(1)) if m else None


async def ensure_user_album(db: AsyncSession, user_id: int, album_id: int) -> UserAlbum:
    result = await db.execute(
        select(UserAlbum).where(UserAlbum.user_id == user_id, UserAlbum.album_id == album_id)
    )
    user_album = result.scalar_one_or_none()
    if user_album is not None:
        return user_album
    user_album = UserAlbum(user_id=user_id, album_id=album_id)
    try:
        async with db.begin_nested():
            db.add(user_album)
    except IntegrityError:
        result = await db.execute(
            select(UserAlbum).where(UserAlbum.user_id == user_id, UserAlbum.album_id == album_id)
        )
        return result.scalar_one()
    return user_album


async def _target_list(
    db: AsyncSession, user_id: int, target_list_id: int | None, include_in_list: bool
) -> RankingList | None:
    if not include_in_list or target_list_id is None:
        return None
    return await get_owned_list(db, user_id, target_list_id)


async def _add_to_target(db: AsyncSession, target: RankingList | None, album_id: int) -> bool:
    # The derived collection picks the album up from its listening status
    if target is None or is_derived(target):
        return False
    return await add_album(db, target, album_id)


async def _add_to_all_time(db: AsyncSession, user_id: int, album_id: int) -> bool:
    """Best effort: a failure is logged and never fails the ingest."""
    try:
        async with db.begin_nested():
            all_time = await get_or_create_all_time(db, user_id)
            return await add_album(db, all_time, album_id)
    except (AlbumRankError, SQLAlchemyError) as e:
        logger.warning("Could not add album %s to %r for user %s: %s", album_id, ALL_TIME, user_id, e)
        return False


async def ingest_catalog_album(
    db: AsyncSession,
    user_id: int,
    candidate: CatalogAlbumCandidate,
    store: ArtworkStore,
    target_list_id: int | None = None,
    include_in_list: bool = True,
) -> IngestResult:
    """
    Turn a catalog search result into an Album plus the caller's UserAlbum.

    Albums are shared and matched on (provider, provider_album_id); metadata
    is refreshed on re-ingest. Album rows are committed before artwork is
    fetched, so an artwork failure leaves them in place (retry with
    refetch_artwork).
    """
    target = await _target_list(db, user_id, target_list_id, include_in_list)

    result = await db.execute(
        select(Album).where(
            Album.provider == candidate.provider,
            Album.provider_album_id == candidate.provider_album_id,
        )
    )
    album = result.scalar_one_or_none()
    created_album = album is None
    if album is None:
        album = Album(provider=candidate.provider, provider_album_id=candidate.provider_album_id)
        db.add(album)
    album.title = candidate.title
    album.artist = candidate.artist
    album.release_year = parse_year(candidate.release_date)
    album.external_url = candidate.external_url
    await db.flush()

    await ensure_user_album(db, user_id, album.id)
    created_item = await _add_to_target(db, target, album.id)
    await db.commit()

    if not album.has_artwork:
        urls = artwork_candidates(candidate.artwork_url_100, candidate.artwork_url_60)
        if urls:
            artwork = await fetch_artwork(urls)
            album.artwork_thumb_path, album.artwork_medium_path = store.save_album_artwork(
                f"{album.provider}/{album.provider_album_id}", artwork
            )
            await db.flush()

    if await _add_to_all_time(db, user_id, album.id):
        created_item = True
    logger.info("Ingested %s album %s (%s) for user %s", album.provider, album.id, album.title, user_id)
    return IngestResult(album_id=album.id, created_album=created_album, created_ranking_item=created_item)


async def create_manual_album(
    db: AsyncSession,
    user_id: int,
    title: str,
    artist: str,
    cover: Artwork | None,
    store: ArtworkStore,
    release_year: int | None = None,
    target_list_id: int | None = None,
    include_in_list: bool = True,
) -> IngestResult:
    """Create an album entered by hand, with an uploaded cover."""
    title = (title or "").strip()
    artist = (artist or "").strip()
    if not title or not artist:
        raise ValidationError("Title and artist are required")
    if cover is None or not cover.data:
        raise ValidationError("Invalid or missing image data")
    target = await _target_list(db, user_id, target_list_id, include_in_list)

    album = Album(
        provider=PROVIDER_MANUAL,
        created_by_user_id=user_id,
        title=title,
        artist=artist,
        release_year=release_year,
    )
    db.add(album)
    await db.flush()
    await ensure_user_album(db, user_id, album.id)
    await db.commit()

    album.artwork_thumb_path, album.artwork_medium_path = store.save_album_artwork(
        f"manual/{album.id}", cover
    )
    await db.flush()

    created_item = await _add_to_target(db, target, album.id)
    if await _add_to_all_time(db, user_id, album.id):
        created_item = True
    logger.info("Created manual album %s (%s) for user %s", album.id, album.title, user_id)
    return IngestResult(album_id=album.id, created_album=True, created_ranking_item=created_item)


async def get_album(db: AsyncSession, album_id: int) -> Album:
    album = await db.get(Album, album_id)
    if album is None:
        raise NotFoundError("Album", album_id)
    return album


async def get_album_detail(db: AsyncSession, user_id: int, album_id: int) -> tuple[Album, UserAlbum | None]:
    album = await get_album(db, album_id)
    result = await db.execute(
        select(UserAlbum).where(UserAlbum.user_id == user_id, UserAlbum.album_id == album_id)
    )
    return album, result.scalar_one_or_none()


async def update_user_album(
    db: AsyncSession,
    user_id: int,
    album_id: int,
    status: str | None = None,
    notes: str | None = None,
) -> UserAlbum:
    """Set listening status and/or notes. Status decides "Needs listening" membership."""
    if status is not None and status not in LISTENING_STATUSES:
        raise ValidationError(f"Unknown listening status {status!r}")
    await get_album(db, album_id)
    user_album = await ensure_user_album(db, user_id, album_id)
    if status is not None:
        user_album.status = status
    if notes is not None:
        user_album.notes = notes
    await db.flush()
    return user_album


async def refetch_artwork(db: AsyncSession, user_id: int, album_id: int, store: ArtworkStore) -> Album:
    """
    Fetch and store artwork again for an external album the caller has.

    Writes are deterministic for a given source, so concurrent refetches
    converge on the same paths.
    """
    result = await db.execute(
        select(UserAlbum.id).where(UserAlbum.user_id == user_id, UserAlbum.album_id == album_id)
    )
    if result.scalar_one_or_none() is None:
        raise AuthorizationError("Album not found for user")
    album = await get_album(db, album_id)
    if not album.is_external:
        raise ValidationError("Artwork refetch only supported for external albums")

    url = await lookup_artwork_url(album)
    if not url:
        raise ValidationError("No artwork URL available")
    artwork = await fetch_artwork([url])
    album.artwork_thumb_path, album.artwork_medium_path = store.save_album_artwork(
        f"{album.provider}/{album.provider_album_id}", artwork
    )
    await db.flush()
    logger.info("Refetched artwork for album %s", album.id)
    return album

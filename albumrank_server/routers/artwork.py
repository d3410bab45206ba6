# Copyright (C) 2024 AlbumRank Contributors
# SPDX-License-Identifier: GPL-3.0-or-later

"""Artwork API - serves stored album covers by relative path."""

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import FileResponse

from albumrank_server.config import settings
from albumrank_server.services.artwork import ArtworkStore, get_artwork_store

router = APIRouter(prefix=settings.artwork_base_url.rstrip("/"), tags=["artwork"])


@router.get("/{path:path}")
async def get_artwork_file(
    path: str,
    store: ArtworkStore = Depends(get_artwork_store),
) -> FileResponse:
    """Get a stored cover image. Paths are the ones kept on the album row."""
    full_path = store.path_for(path)
    if full_path is None or not full_path.is_file():
        raise HTTPException(status_code=404, detail="Artwork not found")
    return FileResponse(full_path)

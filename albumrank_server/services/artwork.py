# Copyright (C) 2024 AlbumRank Contributors
# SPDX-License-Identifier: GPL-3.0-or-later

"""Album artwork: fetch from catalog URLs and keep the bytes in local storage."""

import logging
import re
from dataclasses import dataclass
from pathlib import Path

import httpx

from albumrank_server.config import settings
from albumrank_server.errors import UpstreamCollaboratorError
from albumrank_server.models import Album
from albumrank_server.models.album import PROVIDER_MUSICBRAINZ

logger = logging.getLogger(__name__)

ITUNES_LOOKUP_URL = "https://itunes.apple.com/lookup"
COVER_ART_ARCHIVE_URL = "https://coverartarchive.org/release-group/{mbid}/front-500"

_ITUNES_SIZE = re.compile(r"/[0-9]+x[0-9]+bb\.")


@dataclass
class Artwork:
    data: bytes
    content_type: str = "image/jpeg"

    @property
    def extension(self) -> str:
        return extension_for(self.content_type)


def extension_for(content_type: str | None) -> str:
    ct = (content_type or "").lower()
    if "image/png" in ct:
        return "png"
    if "image/webp" in ct:
        return "webp"
    return "jpg"


def derive_large_itunes_url(url: str) -> str:
    """iTunes artwork URLs encode the size (e.g. 100x100bb.jpg); ask for 1000x1000."""
    return _ITUNES_SIZE.sub("/1000x1000bb.", url)


def artwork_candidates(*urls: str | None) -> list[str]:
    """Large iTunes variant of each URL first, then the URL itself; no duplicates."""
    out: list[str] = []
    for url in urls:
        if not url:
            continue
        for candidate in (derive_large_itunes_url(url), url):
            if candidate not in out:
                out.append(candidate)
    return out


async def fetch_artwork(urls: list[str]) -> Artwork:
    """Download the first URL that answers with 2xx."""
    async with httpx.AsyncClient(timeout=settings.http_timeout_seconds, follow_redirects=True) as client:
        for url in urls:
            try:
                r = await client.get(url)
                r.raise_for_status()
            except httpx.HTTPError as e:
                logger.debug("Artwork fetch failed for %s: %s", url, e)
                continue
            content_type = r.headers.get("content-type", "image/jpeg").split(";")[0].strip()
            return Artwork(data=r.content, content_type=content_type or "image/jpeg")
    raise UpstreamCollaboratorError("Failed to fetch artwork from provided URLs")


async def lookup_artwork_url(album: Album) -> str | None:
    """
    Find a fresh artwork URL for an external album.

    MusicBrainz release groups use the Cover Art Archive; iTunes albums are
    looked up by collection id.
    """
    if not album.provider_album_id:
        return None
    if album.provider == PROVIDER_MUSICBRAINZ:
        return COVER_ART_ARCHIVE_URL.format(mbid=album.provider_album_id)
    try:
        async with httpx.AsyncClient(timeout=settings.http_timeout_seconds) as client:
            r = await client.get(
                ITUNES_LOOKUP_URL,
                params={"id": album.provider_album_id, "entity": "album"},
            )
            r.raise_for_status()
            data = r.json()
    except (httpx.HTTPError, ValueError) as e:
        raise UpstreamCollaboratorError(f"Failed to lookup iTunes artwork: {e}") from e
    results = data.get("results") or []
    if not results or not isinstance(results[0], dict):
        return None
    return results[0].get("artworkUrl100")


class ArtworkStore:
    """Stores image bytes under a root directory and returns paths relative to it."""

    def __init__(self, root: Path | None = None) -> None:
        self.root = Path(root or settings.artwork_path)

    def path_for(self, key: str) -> Path | None:
        """Absolute path for a stored key, or None if the key escapes the root."""
        target = (self.root / key).resolve()
        if self.root.resolve() not in target.parents:
            return None
        return target

    def save(self, key: str, data: bytes) -> str:
        target = self.path_for(key)
        if target is None:
            raise UpstreamCollaboratorError(f"Invalid artwork key {key!r}")
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_bytes(data)
        except OSError as e:
            raise UpstreamCollaboratorError(f"Artwork storage failed: {e}") from e
        return key

    def save_album_artwork(self, prefix: str, artwork: Artwork) -> tuple[str, str]:
        """Write thumb and medium copies. Returns (thumb_path, medium_path)."""
        ext = artwork.extension
        thumb = self.save(f"{prefix}/thumb.{ext}", artwork.data)
        medium = self.save(f"{prefix}/medium.{ext}", artwork.data)
        return thumb, medium


def artwork_url(path: str | None) -> str | None:
    if not path:
        return None
    return f"{settings.artwork_base_url.rstrip('/')}/{path}"


def get_artwork_store() -> ArtworkStore:
    """FastAPI dependency."""
    return ArtworkStore()

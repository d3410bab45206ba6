# Copyright (C) 2024 AlbumRank Contributors
# SPDX-License-Identifier: GPL-3.0-or-later

"""Pydantic schemas for API request/response."""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

ListKind = Literal["year", "custom"]
ListMode = Literal["ranked", "collection"]
ListeningStatus = Literal["not_listened", "listening", "listened"]
CatalogProvider = Literal["itunes", "musicbrainz"]


# Albums
class AlbumResponse(BaseModel):
    id: int
    provider: str
    provider_album_id: str | None = None
    title: str
    artist: str
    release_year: int | None = None
    external_url: str | None = None
    artwork_thumb_path: str | None = None
    artwork_medium_path: str | None = None
    artwork_thumb_url: str | None = None
    artwork_medium_url: str | None = None

    model_config = ConfigDict(from_attributes=True)


class UserAlbumResponse(BaseModel):
    album_id: int
    status: ListeningStatus
    notes: str = ""
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class UserAlbumUpdate(BaseModel):
    status: ListeningStatus | None = None
    notes: str | None = None


class AlbumDetailResponse(BaseModel):
    album: AlbumResponse
    user_album: UserAlbumResponse | None = None


class CatalogAlbumCandidate(BaseModel):
    """Album metadata as returned by the catalog search collaborator."""

    provider: CatalogProvider = "itunes"
    provider_album_id: str = Field(min_length=1)
    title: str = Field(min_length=1)
    artist: str = Field(min_length=1)
    release_date: str | None = None
    artwork_url_60: str | None = None
    artwork_url_100: str | None = None
    external_url: str | None = None


class AlbumIngestRequest(BaseModel):
    candidate: CatalogAlbumCandidate
    target_list_id: int | None = None
    include_in_list: bool = True


class AlbumIngestResponse(BaseModel):
    album_id: int
    created_album: bool
    created_ranking_item: bool


class AlbumMembershipResponse(BaseModel):
    list_id: int
    list_name: str
    mode: ListMode
    position: int | None = None

    model_config = ConfigDict(from_attributes=True)


class ArtworkRefetchResponse(BaseModel):
    ok: bool = True
    artwork_thumb_path: str
    artwork_medium_path: str


# Lists
class EnsureListsRequest(BaseModel):
    years: list[int] = Field(default_factory=list)
    custom_names: list[str] = Field(default_factory=list)


class ListCreate(BaseModel):
    name: str | None = None
    mode: ListMode = "ranked"
    description: str | None = None
    kind: ListKind = "custom"
    year: int | None = None


class ListUpdate(BaseModel):
    name: str | None = None
    description: str | None = None


class ListResponse(BaseModel):
    id: int
    name: str
    kind: ListKind
    year: int | None = None
    mode: ListMode
    description: str | None = None
    is_public: bool
    public_slug: str | None = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class MembershipAdd(BaseModel):
    album_id: int


class ListItemResponse(BaseModel):
    album_id: int
    position: int | None = None
    added_at: datetime | None = None
    rating: float | None = None
    matches: int | None = None
    status: ListeningStatus | None = None
    album: AlbumResponse


class ReorderRequest(BaseModel):
    ordered_album_ids: list[int]


class OkResponse(BaseModel):
    ok: bool = True


class ShareResponse(BaseModel):
    public_slug: str | None = None
    is_public: bool


# Comparisons
class ComparisonCreate(BaseModel):
    list_id: int
    left_album_id: int
    right_album_id: int
    winner_album_id: int


class RatingResponse(BaseModel):
    album_id: int
    rating: float
    matches: int

    model_config = ConfigDict(from_attributes=True)


class ComparisonResponse(BaseModel):
    left: RatingResponse
    right: RatingResponse
    reordered: bool


class PairResponse(BaseModel):
    left_album_id: int
    right_album_id: int


# Public share
class PublicListSummary(BaseModel):
    id: int
    name: str
    kind: ListKind
    year: int | None = None
    mode: ListMode
    description: str | None = None

    model_config = ConfigDict(from_attributes=True)


class PublicItemResponse(BaseModel):
    album_id: int
    position: int | None = None
    title: str
    artist: str
    release_year: int | None = None
    artwork_thumb_path: str | None = None
    artwork_thumb_url: str | None = None


class PublicRankingResponse(BaseModel):
    ranking: PublicListSummary
    owner_name: str
    items: list[PublicItemResponse]

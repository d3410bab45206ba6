# Copyright (C) 2024 AlbumRank Contributors
# SPDX-License-Identifier: GPL-3.0-or-later

"""Album and per-user album annotation models."""

from sqlalchemy import ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from albumrank_server.models.base import Base
from albumrank_server.models.timestamp import TimestampMixin, UpdatedAtMixin

PROVIDER_ITUNES = "itunes"
PROVIDER_MUSICBRAINZ = "musicbrainz"
PROVIDER_MANUAL = "manual"
EXTERNAL_PROVIDERS = (PROVIDER_ITUNES, PROVIDER_MUSICBRAINZ)

STATUS_NOT_LISTENED = "not_listened"
STATUS_LISTENING = "listening"
STATUS_LISTENED = "listened"
LISTENING_STATUSES = (STATUS_NOT_LISTENED, STATUS_LISTENING, STATUS_LISTENED)


class Album(Base, TimestampMixin, UpdatedAtMixin):
    """Catalog entry shared by all users."""

    __tablename__ = "albums"
    __table_args__ = (
        UniqueConstraint("provider", "provider_album_id", name="uq_albums_provider_album"),
    )

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    provider: Mapped[str] = mapped_column(String(16), nullable=False)
    provider_album_id: Mapped[str | None] = mapped_column(String(128), nullable=True, index=True)
    created_by_user_id: Mapped[int | None] = mapped_column(ForeignKey("users.id"), nullable=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    artist: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    release_year: Mapped[int | None] = mapped_column(Integer, nullable=True)
    external_url: Mapped[str | None] = mapped_column(String(512), nullable=True)
    artwork_thumb_path: Mapped[str | None] = mapped_column(String(512), nullable=True)
    artwork_medium_path: Mapped[str | None] = mapped_column(String(512), nullable=True)

    @property
    def is_external(self) -> bool:
        return self.provider in EXTERNAL_PROVIDERS

    @property
    def has_artwork(self) -> bool:
        return bool(self.artwork_thumb_path and self.artwork_medium_path)


class UserAlbum(Base, TimestampMixin, UpdatedAtMixin):
    """A user's listening status and notes for one album."""

    __tablename__ = "user_albums"
    __table_args__ = (
        UniqueConstraint("user_id", "album_id", name="uq_user_albums_user_album"),
    )

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    album_id: Mapped[int] = mapped_column(ForeignKey("albums.id", ondelete="CASCADE"), nullable=False)
    status: Mapped[str] = mapped_column(String(16), default=STATUS_NOT_LISTENED, nullable=False)
    notes: Mapped[str] = mapped_column(Text, default="", nullable=False)

    album: Mapped["Album"] = relationship("Album")

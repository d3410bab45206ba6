# Copyright (C) 2024 AlbumRank Contributors
# SPDX-License-Identifier: GPL-3.0-or-later

"""Ranking list models."""

from datetime import datetime
from sqlalchemy import Boolean, DateTime, ForeignKey, Integer, String, Text, UniqueConstraint, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from albumrank_server.models.base import Base
from albumrank_server.models.timestamp import TimestampMixin, UpdatedAtMixin

KIND_YEAR = "year"
KIND_CUSTOM = "custom"

MODE_RANKED = "ranked"
MODE_COLLECTION = "collection"


class RankingList(Base, TimestampMixin, UpdatedAtMixin):
    """Named container of albums owned by one user, either ranked or a collection.

    Year lists are named after their year, so (user, kind, name) is unique for
    both kinds.
    """

    __tablename__ = "ranking_lists"
    __table_args__ = (
        UniqueConstraint("user_id", "kind", "name", name="uq_ranking_lists_user_kind_name"),
    )

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    kind: Mapped[str] = mapped_column(String(16), default=KIND_CUSTOM, nullable=False)
    year: Mapped[int | None] = mapped_column(Integer, nullable=True)
    mode: Mapped[str] = mapped_column(String(16), default=MODE_RANKED, nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    is_public: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    public_slug: Mapped[str | None] = mapped_column(String(64), unique=True, nullable=True, index=True)

    user: Mapped["User"] = relationship("User", back_populates="ranking_lists")

    @property
    def is_ranked(self) -> bool:
        return self.mode == MODE_RANKED


class RankingItem(Base):
    """Album in a list. Position is set only in ranked lists."""

    __tablename__ = "ranking_items"
    __table_args__ = (
        UniqueConstraint("ranking_list_id", "position", name="uq_ranking_items_list_position"),
    )

    ranking_list_id: Mapped[int] = mapped_column(
        ForeignKey("ranking_lists.id", ondelete="CASCADE"), primary_key=True
    )
    album_id: Mapped[int] = mapped_column(
        ForeignKey("albums.id", ondelete="CASCADE"), primary_key=True, index=True
    )
    position: Mapped[int | None] = mapped_column(Integer, nullable=True)
    added_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )

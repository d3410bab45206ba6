# Copyright (C) 2024 AlbumRank Contributors
# SPDX-License-Identifier: GPL-3.0-or-later

"""Elo rating and comparison audit models."""

from sqlalchemy import Float, ForeignKey, Integer
from sqlalchemy.orm import Mapped, mapped_column

from albumrank_server.models.base import Base
from albumrank_server.models.timestamp import TimestampMixin, UpdatedAtMixin


class EloRating(Base, UpdatedAtMixin):
    """Skill estimate of an album within one list. Created on first comparison."""

    __tablename__ = "elo_ratings"

    ranking_list_id: Mapped[int] = mapped_column(
        ForeignKey("ranking_lists.id", ondelete="CASCADE"), primary_key=True
    )
    album_id: Mapped[int] = mapped_column(
        ForeignKey("albums.id", ondelete="CASCADE"), primary_key=True
    )
    rating: Mapped[float] = mapped_column(Float, default=1500.0, nullable=False)
    matches: Mapped[int] = mapped_column(Integer, default=0, nullable=False)


class Comparison(Base, TimestampMixin):
    """One "left vs right" judgment. Append-only."""

    __tablename__ = "comparisons"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    ranking_list_id: Mapped[int] = mapped_column(
        ForeignKey("ranking_lists.id", ondelete="CASCADE"), nullable=False, index=True
    )
    left_album_id: Mapped[int] = mapped_column(ForeignKey("albums.id"), nullable=False)
    right_album_id: Mapped[int] = mapped_column(ForeignKey("albums.id"), nullable=False)
    winner_album_id: Mapped[int] = mapped_column(ForeignKey("albums.id"), nullable=False)

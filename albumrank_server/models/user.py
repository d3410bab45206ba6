# Copyright (C) 2024 AlbumRank Contributors
# SPDX-License-Identifier: GPL-3.0-or-later

"""User model."""

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from albumrank_server.models.base import Base
from albumrank_server.models.ranking_list import RankingList
from albumrank_server.models.timestamp import TimestampMixin


class User(Base, TimestampMixin):
    """Account known to the auth provider. The id is the ownership key for lists and annotations."""

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    username: Mapped[str] = mapped_column(String(64), unique=True, nullable=False, index=True)
    display_name: Mapped[str | None] = mapped_column(String(128), nullable=True)

    ranking_lists: Mapped[list["RankingList"]] = relationship(
        "RankingList", back_populates="user", cascade="all, delete-orphan"
    )

    @property
    def public_name(self) -> str:
        return self.display_name or self.username

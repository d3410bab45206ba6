# Copyright (C) 2024 AlbumRank Contributors
# SPDX-License-Identifier: GPL-3.0-or-later

"""Database models."""

from albumrank_server.models.base import Base
from albumrank_server.models.user import User
from albumrank_server.models.album import Album, UserAlbum
from albumrank_server.models.ranking_list import RankingList, RankingItem
from albumrank_server.models.rating import Comparison, EloRating

__all__ = [
    "Base",
    "User",
    "Album",
    "UserAlbum",
    "RankingList",
    "RankingItem",
    "EloRating",
    "Comparison",
]

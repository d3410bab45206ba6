# Copyright (C) 2024 AlbumRank Contributors
# SPDX-License-Identifier: GPL-3.0-or-later
"""Initial schema: users, albums, user annotations, lists, items, ratings, comparisons.

Revision ID: 0001_initial
Revises:
Create Date: 2026-03-02

"""
from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

revision: str = "0001_initial"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _created_at() -> sa.Column:
    return sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False)


def _updated_at() -> sa.Column:
    return sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False)


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("username", sa.String(64), nullable=False),
        sa.Column("display_name", sa.String(128), nullable=True),
        _created_at(),
    )
    op.create_index("ix_users_username", "users", ["username"], unique=True)

    op.create_table(
        "albums",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("provider", sa.String(16), nullable=False),
        sa.Column("provider_album_id", sa.String(128), nullable=True),
        sa.Column("created_by_user_id", sa.Integer(), sa.ForeignKey("users.id"), nullable=True),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("artist", sa.String(255), nullable=False),
        sa.Column("release_year", sa.Integer(), nullable=True),
        sa.Column("external_url", sa.String(512), nullable=True),
        sa.Column("artwork_thumb_path", sa.String(512), nullable=True),
        sa.Column("artwork_medium_path", sa.String(512), nullable=True),
        _created_at(),
        _updated_at(),
        sa.UniqueConstraint("provider", "provider_album_id", name="uq_albums_provider_album"),
    )
    op.create_index("ix_albums_provider_album_id", "albums", ["provider_album_id"])
    op.create_index("ix_albums_title", "albums", ["title"])
    op.create_index("ix_albums_artist", "albums", ["artist"])

    op.create_table(
        "user_albums",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("album_id", sa.Integer(), sa.ForeignKey("albums.id", ondelete="CASCADE"), nullable=False),
        sa.Column("status", sa.String(16), nullable=False),
        sa.Column("notes", sa.Text(), nullable=False),
        _created_at(),
        _updated_at(),
        sa.UniqueConstraint("user_id", "album_id", name="uq_user_albums_user_album"),
    )
    op.create_index("ix_user_albums_user_id", "user_albums", ["user_id"])

    op.create_table(
        "ranking_lists",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("kind", sa.String(16), nullable=False),
        sa.Column("year", sa.Integer(), nullable=True),
        sa.Column("mode", sa.String(16), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("is_public", sa.Boolean(), nullable=False),
        sa.Column("public_slug", sa.String(64), nullable=True),
        _created_at(),
        _updated_at(),
        sa.UniqueConstraint("user_id", "kind", "name", name="uq_ranking_lists_user_kind_name"),
    )
    op.create_index("ix_ranking_lists_user_id", "ranking_lists", ["user_id"])
    op.create_index("ix_ranking_lists_public_slug", "ranking_lists", ["public_slug"], unique=True)

    op.create_table(
        "ranking_items",
        sa.Column(
            "ranking_list_id",
            sa.Integer(),
            sa.ForeignKey("ranking_lists.id", ondelete="CASCADE"),
            primary_key=True,
        ),
        sa.Column("album_id", sa.Integer(), sa.ForeignKey("albums.id", ondelete="CASCADE"), primary_key=True),
        sa.Column("position", sa.Integer(), nullable=True),
        sa.Column("added_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.UniqueConstraint("ranking_list_id", "position", name="uq_ranking_items_list_position"),
    )
    op.create_index("ix_ranking_items_album_id", "ranking_items", ["album_id"])

    op.create_table(
        "elo_ratings",
        sa.Column(
            "ranking_list_id",
            sa.Integer(),
            sa.ForeignKey("ranking_lists.id", ondelete="CASCADE"),
            primary_key=True,
        ),
        sa.Column("album_id", sa.Integer(), sa.ForeignKey("albums.id", ondelete="CASCADE"), primary_key=True),
        sa.Column("rating", sa.Float(), nullable=False),
        sa.Column("matches", sa.Integer(), nullable=False),
        _updated_at(),
    )

    op.create_table(
        "comparisons",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            "ranking_list_id",
            sa.Integer(),
            sa.ForeignKey("ranking_lists.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("left_album_id", sa.Integer(), sa.ForeignKey("albums.id"), nullable=False),
        sa.Column("right_album_id", sa.Integer(), sa.ForeignKey("albums.id"), nullable=False),
        sa.Column("winner_album_id", sa.Integer(), sa.ForeignKey("albums.id"), nullable=False),
        _created_at(),
    )
    op.create_index("ix_comparisons_ranking_list_id", "comparisons", ["ranking_list_id"])


def downgrade() -> None:
    op.drop_table("comparisons")
    op.drop_table("elo_ratings")
    op.drop_table("ranking_items")
    op.drop_table("ranking_lists")
    op.drop_table("user_albums")
    op.drop_table("albums")
    op.drop_table("users")

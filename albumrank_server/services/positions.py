# Copyright (C) 2024 AlbumRank Contributors
# SPDX-License-Identifier: GPL-3.0-or-later

"""Ordinal positions of albums in ranked lists.

Positions in a ranked list are the dense sequence 1..N after every mutation.
(ranking_list_id, position) is unique, so rewriting positions in one pass
could collide with a row that has not been rewritten yet. ``reorder`` writes
every row to a temporary position above anything currently stored, then to
its final position. Readers may observe the temporary range between the two
passes; they order by position with album id as tie-break and never assume
positions are within 1..N.
"""

import logging
from collections.abc import Iterable, Iterator

from sqlalchemy import delete, func, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from albumrank_server.config import settings
from albumrank_server.errors import ReorderError, ValidationError
from albumrank_server.models import RankingItem, RankingList

logger = logging.getLogger(__name__)


class ListOrder:
    """Ordered album ids of one ranked list; index 0 is position 1."""

    def __init__(self, album_ids: Iterable[int]) -> None:
        self._ids = list(album_ids)

    def __len__(self) -> int:
        return len(self._ids)

    def __iter__(self) -> Iterator[int]:
        return iter(self._ids)

    def __contains__(self, album_id: object) -> bool:
        return album_id in self._ids

    @property
    def album_ids(self) -> list[int]:
        return list(self._ids)

    def position_of(self, album_id: int) -> int:
        try:
            return self._ids.index(album_id) + 1
        except ValueError:
            raise ValidationError(f"Album {album_id} is not in this list") from None

    def validate_permutation(self, ordered_album_ids: Iterable[int]) -> list[int]:
        """Return ordered ids if they are exactly the current members, else raise."""
        ordered = list(ordered_album_ids)
        if len(ordered) != len(self._ids) or len(set(ordered)) != len(ordered) or set(ordered) != set(self._ids):
            raise ValidationError("ordered_album_ids must exactly match current ranking items")
        return ordered

    def move_before(self, album_id: int, anchor_id: int) -> bool:
        """
        Splice album_id into the slot immediately before anchor_id.

        Only moves when album_id is currently after anchor_id; the relative
        order of every other album is unchanged. Returns True if it moved.
        """
        current = self.position_of(album_id)
        anchor = self.position_of(anchor_id)
        if current < anchor:
            return False
        self._ids.remove(album_id)
        self._ids.insert(anchor - 1, album_id)
        return True


async def next_position(db: AsyncSession, list_id: int) -> int:
    """Position for an appended album, read from the stored maximum at call time."""
    current_max = await db.scalar(
        select(func.max(RankingItem.position)).where(RankingItem.ranking_list_id == list_id)
    )
    return (current_max or 0) + 1


async def current_order(db: AsyncSession, list_id: int) -> ListOrder:
    result = await db.execute(
        select(RankingItem.album_id)
        .where(RankingItem.ranking_list_id == list_id)
        .order_by(RankingItem.position.asc().nullslast(), RankingItem.album_id)
    )
    return ListOrder(result.scalars().all())


async def _write_positions(
    db: AsyncSession, list_id: int, ordered: list[int], base: int, phase: str
) -> None:
    for index, album_id in enumerate(ordered):
        try:
            await db.execute(
                update(RankingItem)
                .where(
                    RankingItem.ranking_list_id == list_id,
                    RankingItem.album_id == album_id,
                )
                .values(position=base + index + 1)
            )
        except SQLAlchemyError as e:
            logger.error("Reorder of list %s failed in %s pass at index %s", list_id, phase, index)
            raise ReorderError(list_id, phase, index, album_id, e) from e


async def reorder(db: AsyncSession, list_id: int, ordered_album_ids: Iterable[int]) -> list[int]:
    """
    Rewrite positions of a ranked list to match ordered_album_ids (2N writes).

    ordered_album_ids must be exactly the current membership set. Positions
    end as 1..N in the given order; calling twice with the same order leaves
    them unchanged.
    """
    order = await current_order(db, list_id)
    ordered = order.validate_permutation(ordered_album_ids)
    if not ordered:
        return ordered

    # Temporary positions start above anything stored, including rows left in
    # the offset range by an earlier failed reorder.
    current_max = await db.scalar(
        select(func.max(RankingItem.position)).where(RankingItem.ranking_list_id == list_id)
    )
    offset = max(settings.reorder_temp_offset, current_max or 0, len(ordered))

    await _write_positions(db, list_id, ordered, offset, "offset")
    await _write_positions(db, list_id, ordered, 0, "final")
    logger.debug("Reordered list %s (%d items)", list_id, len(ordered))
    return ordered


async def normalize(db: AsyncSession, list_id: int) -> bool:
    """Corrective reorder: renumber to 1..N in current read order unless already dense."""
    result = await db.execute(
        select(RankingItem.album_id, RankingItem.position)
        .where(RankingItem.ranking_list_id == list_id)
        .order_by(RankingItem.position.asc().nullslast(), RankingItem.album_id)
    )
    rows = result.all()
    if [position for _, position in rows] == list(range(1, len(rows) + 1)):
        return False
    await reorder(db, list_id, [album_id for album_id, _ in rows])
    logger.info("Normalized positions of list %s (%d items)", list_id, len(rows))
    return True


async def remove_and_compact(db: AsyncSession, ranking_list: RankingList, album_id: int) -> bool:
    """
    Delete the membership row; in ranked lists renumber the rest to 1..N.

    Returns False when the album was not a member. An emptied list is left
    as is with no reorder.
    """
    result = await db.execute(
        delete(RankingItem).where(
            RankingItem.ranking_list_id == ranking_list.id,
            RankingItem.album_id == album_id,
        )
    )
    if not result.rowcount:
        return False
    if not ranking_list.is_ranked:
        return True
    remaining = await current_order(db, ranking_list.id)
    if len(remaining):
        await reorder(db, ranking_list.id, remaining.album_ids)
    return True

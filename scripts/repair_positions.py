#!/usr/bin/env python3
# Copyright (C) 2024 AlbumRank Contributors
# SPDX-License-Identifier: GPL-3.0-or-later
"""One-off: find ranked lists whose positions are not 1..N and renumber them.
A reorder that failed in its final pass leaves rows in the offset range.
Run from repo root with: python3 scripts/repair_positions.py [--dry-run]
"""
import asyncio
import sys

from sqlalchemy import func, select

from albumrank_server.database import async_session_maker
from albumrank_server.models import RankingItem, RankingList
from albumrank_server.models.ranking_list import MODE_RANKED
from albumrank_server.services.positions import normalize


async def main(dry_run: bool) -> None:
    async with async_session_maker() as db:
        result = await db.execute(
            select(
                RankingList.id,
                RankingList.name,
                func.count(RankingItem.album_id),
                func.min(RankingItem.position),
                func.max(RankingItem.position),
            )
            .join(RankingItem, RankingItem.ranking_list_id == RankingList.id)
            .where(RankingList.mode == MODE_RANKED)
            .group_by(RankingList.id, RankingList.name)
        )
        suspect = [row for row in result.all() if row[3] != 1 or row[4] != row[2]]
        print(f"{len(suspect)} list(s) with positions outside 1..N")
        fixed = 0
        for list_id, name, count, low, high in suspect:
            print(f"  list {list_id} {name!r}: {count} items, positions {low}..{high}")
            if dry_run:
                continue
            if await normalize(db, list_id):
                fixed += 1
            await db.commit()
        if not dry_run:
            print(f"Renumbered {fixed} list(s)")


if __name__ == "__main__":
    asyncio.run(main("--dry-run" in sys.argv[1:]))

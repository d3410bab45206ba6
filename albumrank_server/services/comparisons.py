# Copyright (C) 2024 AlbumRank Contributors
# SPDX-License-Identifier: GPL-3.0-or-later

"""Pairwise comparisons: rate the pair with Elo and keep the winner ordered above the loser."""

import logging
import random
from dataclasses import dataclass

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from albumrank_server.config import settings
from albumrank_server.errors import ComparisonStepError, ValidationError
from albumrank_server.models import Comparison, RankingList
from albumrank_server.services.elo import apply_match
from albumrank_server.services.lists import get_owned_list
from albumrank_server.services.positions import ListOrder, current_order, reorder
from albumrank_server.services.ratings import ensure_rating, ratings_for_list

logger = logging.getLogger(__name__)


@dataclass
class RatingOutcome:
    album_id: int
    rating: float
    matches: int


@dataclass
class ComparisonResult:
    left: RatingOutcome
    right: RatingOutcome
    reordered: bool


async def _comparable_order(db: AsyncSession, user_id: int, list_id: int) -> tuple[RankingList, ListOrder]:
    ranking_list = await get_owned_list(db, user_id, list_id)
    if not ranking_list.is_ranked:
        raise ValidationError("Comparisons are only offered on ranked lists")
    order = await current_order(db, list_id)
    if len(order) < 2:
        raise ValidationError("A list needs at least two albums to compare")
    return ranking_list, order


async def submit_comparison(
    db: AsyncSession,
    user_id: int,
    list_id: int,
    left_album_id: int,
    right_album_id: int,
    winner_album_id: int,
) -> ComparisonResult:
    """
    Record "winner beat the other one" for a pair in a ranked list.

    Steps: validate, ensure both ratings exist, compute Elo, append the
    comparison (committed immediately, it is an append-only audit row),
    update both ratings, then move the winner directly above the loser if it
    was ranked below. Nothing is written when validation fails.
    """
    if winner_album_id not in (left_album_id, right_album_id):
        raise ValidationError("winner_album_id must match one of the pair")
    if left_album_id == right_album_id:
        raise ValidationError("An album cannot be compared with itself")
    _, order = await _comparable_order(db, user_id, list_id)
    for album_id in (left_album_id, right_album_id):
        if album_id not in order:
            raise ValidationError(f"Album {album_id} is not in this list")

    loser_album_id = right_album_id if winner_album_id == left_album_id else left_album_id

    try:
        winner = await ensure_rating(db, list_id, winner_album_id)
        loser = await ensure_rating(db, list_id, loser_album_id)
    except SQLAlchemyError as e:
        raise ComparisonStepError(f"Could not load ratings: {e}", step="ensure_ratings") from e

    new_winner, new_loser = apply_match(winner.rating, loser.rating, settings.elo_k_factor)

    try:
        db.add(
            Comparison(
                ranking_list_id=list_id,
                left_album_id=left_album_id,
                right_album_id=right_album_id,
                winner_album_id=winner_album_id,
            )
        )
        await db.commit()
    except SQLAlchemyError as e:
        raise ComparisonStepError(f"Could not record comparison: {e}", step="persist:comparison") from e

    try:
        winner.rating = new_winner
        winner.matches = winner.matches + 1
        loser.rating = new_loser
        loser.matches = loser.matches + 1
        await db.flush()
    except SQLAlchemyError as e:
        raise ComparisonStepError(f"Could not update ratings: {e}", step="persist:ratings") from e

    reordered = order.move_before(winner_album_id, loser_album_id)
    if reordered:
        await reorder(db, list_id, order.album_ids)
    logger.info(
        "Comparison on list %s: %s beat %s (%.1f / %.1f)%s",
        list_id, winner_album_id, loser_album_id, new_winner, new_loser,
        " - winner moved up" if reordered else "",
    )

    by_id = {winner_album_id: winner, loser_album_id: loser}
    return ComparisonResult(
        left=RatingOutcome(left_album_id, by_id[left_album_id].rating, by_id[left_album_id].matches),
        right=RatingOutcome(right_album_id, by_id[right_album_id].rating, by_id[right_album_id].matches),
        reordered=reordered,
    )


def choose_opponent(
    order: ListOrder,
    subject_album_id: int,
    k: int | None = None,
    rng: random.Random | None = None,
) -> int:
    """
    Pick an opponent among the k albums closest in position to the subject.

    Closer positions give more informative judgments than global random pairs.
    """
    if len(order) < 2:
        raise ValidationError("A list needs at least two albums to compare")
    k = max(1, k if k is not None else settings.opponent_neighbourhood)
    subject_position = order.position_of(subject_album_id)
    candidates = sorted(
        (abs(position - subject_position), position, album_id)
        for position, album_id in enumerate(order, start=1)
        if album_id != subject_album_id
    )
    nearest = [album_id for _, _, album_id in candidates[:k]]
    return (rng or random).choice(nearest)


async def suggest_pair(
    db: AsyncSession,
    user_id: int,
    list_id: int,
    subject_album_id: int | None = None,
    rng: random.Random | None = None,
) -> tuple[int, int]:
    """Return (subject, opponent). Without a subject, the least-compared album is used."""
    _, order = await _comparable_order(db, user_id, list_id)
    if subject_album_id is None:
        ratings = await ratings_for_list(db, list_id)
        subject_album_id = min(
            order,
            key=lambda a: (ratings[a].matches if a in ratings else 0, order.position_of(a)),
        )
    elif subject_album_id not in order:
        raise ValidationError(f"Album {subject_album_id} is not in this list")
    return subject_album_id, choose_opponent(order, subject_album_id, rng=rng)

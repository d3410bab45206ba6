# Copyright (C) 2024 AlbumRank Contributors
# SPDX-License-Identifier: GPL-3.0-or-later

"""Elo rating engine. Pure functions, no database access."""

DEFAULT_RATING = 1500.0
DEFAULT_K = 32.0


def expected_score(rating_a: float, rating_b: float) -> float:
    """
    Expected score (win probability) of A against B.

    1 / (1 + 10^((rating_b - rating_a) / 400)); 0.5 for equal ratings.
    """
    return 1 / (1 + 10 ** ((rating_b - rating_a) / 400))


def apply_match(
    winner_rating: float, loser_rating: float, k: float = DEFAULT_K
) -> tuple[float, float]:
    """
    Return (new_winner_rating, new_loser_rating) after the winner beat the loser.

    With equal ratings both move by exactly k/2. The winner's gain approaches
    but never reaches k as the gap grows.
    """
    expected_winner = expected_score(winner_rating, loser_rating)
    expected_loser = expected_score(loser_rating, winner_rating)
    new_winner = winner_rating + k * (1.0 - expected_winner)
    new_loser = loser_rating + k * (0.0 - expected_loser)
    return new_winner, new_loser

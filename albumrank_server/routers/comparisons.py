# Copyright (C) 2024 AlbumRank Contributors
# SPDX-License-Identifier: GPL-3.0-or-later

"""Comparison API - submit pairwise judgments."""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from albumrank_server.auth import get_current_user_id
from albumrank_server.database import get_db
from albumrank_server.api.schemas import ComparisonCreate, ComparisonResponse, RatingResponse
from albumrank_server.services.comparisons import submit_comparison

router = APIRouter(prefix="/comparisons", tags=["comparisons"])


@router.post("", response_model=ComparisonResponse)
async def create_comparison(
    data: ComparisonCreate,
    user_id: int = Depends(get_current_user_id),
    db: AsyncSession = Depends(get_db),
) -> ComparisonResponse:
    """
    Record which album of the pair won.
    Returns updated ratings; the winner is moved above the loser if it was ranked below.
    """
    result = await submit_comparison(
        db,
        user_id,
        data.list_id,
        data.left_album_id,
        data.right_album_id,
        data.winner_album_id,
    )
    return ComparisonResponse(
        left=RatingResponse.model_validate(result.left),
        right=RatingResponse.model_validate(result.right),
        reordered=result.reordered,
    )

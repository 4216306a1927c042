"""Gamification progress endpoints."""

from fastapi import APIRouter, Depends

from papertrade.api.deps import get_current_owner, get_gamification_service
from papertrade.api.schemas import (
    BadgeResponse,
    ProgressResponse,
    LeaderboardEntryResponse,
    LeaderboardResponse,
)
from papertrade.domain.models import next_level_threshold
from papertrade.services import GamificationService

router = APIRouter(prefix="/progress", tags=["progress"])


@router.get("/me", response_model=ProgressResponse)
def get_my_progress(
    owner_id: str = Depends(get_current_owner),
    gamification: GamificationService = Depends(get_gamification_service),
) -> ProgressResponse:
    """Get the caller's trading stats, points and level."""
    progress = gamification.get_progress(owner_id)
    return ProgressResponse(
        owner_id=progress.owner_id,
        points=progress.points,
        level=progress.level,
        total_trades=progress.total_trades,
        successful_trades=progress.successful_trades,
        profit_loss=progress.profit_loss,
        win_rate=progress.win_rate,
        next_level_points=next_level_threshold(progress.level),
        badges=[BadgeResponse.model_validate(b) for b in progress.badges],
        updated_at=progress.updated_at,
    )


@router.get("/leaderboard", response_model=LeaderboardResponse)
def get_leaderboard(
    gamification: GamificationService = Depends(get_gamification_service),
) -> LeaderboardResponse:
    """Top owners by points."""
    return LeaderboardResponse(
        entries=[
            LeaderboardEntryResponse(
                rank=rank,
                owner_id=p.owner_id,
                points=p.points,
                level=p.level,
            )
            for rank, p in enumerate(gamification.leaderboard(), start=1)
        ]
    )

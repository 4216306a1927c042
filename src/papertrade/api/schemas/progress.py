"""Pydantic schemas for gamification endpoints."""

from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel


class BadgeResponse(BaseModel):
    model_config = {"from_attributes": True}

    name: str
    description: str
    earned_at: Optional[datetime] = None


class ProgressResponse(BaseModel):
    """Response schema for an owner's trading stats, points and level."""

    model_config = {"from_attributes": True}

    owner_id: str
    points: int
    level: int
    total_trades: int
    successful_trades: int
    profit_loss: Decimal
    win_rate: Decimal
    next_level_points: Optional[int] = None
    badges: list[BadgeResponse] = []
    updated_at: Optional[datetime] = None


class LeaderboardEntryResponse(BaseModel):
    model_config = {"from_attributes": True}

    rank: int
    owner_id: str
    points: int
    level: int


class LeaderboardResponse(BaseModel):
    """Response schema for the points leaderboard."""

    entries: list[LeaderboardEntryResponse]

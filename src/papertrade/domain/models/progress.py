"""Gamification progress domain model."""

from bisect import bisect_right
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Optional

# Points awarded per action
POINTS = {
    "TRADE_EXECUTED": 5,
    "PROFITABLE_TRADE": 20,
}

# Points required to reach each level (index 0 = level 1)
LEVEL_THRESHOLDS = [0, 1000, 2500, 5000, 10000, 20000, 35000, 50000, 75000, 100000]


@dataclass(frozen=True)
class BadgeRule:
    """A badge earned once an owner reaches ``points``."""

    name: str
    description: str
    points: int


BADGE_RULES = (
    BadgeRule("Novice Trader", "Earned 1000 points", 1000),
    BadgeRule("Expert Trader", "Earned 5000 points", 5000),
)


def level_for_points(points: int) -> int:
    """Return the level reached with ``points``."""
    return max(bisect_right(LEVEL_THRESHOLDS, points), 1)


@dataclass
class Badge:
    name: str
    description: str
    earned_at: Optional[datetime] = None


@dataclass
class UserProgress:
    """Points, level and trading statistics for one owner."""

    owner_id: str
    points: int = 0
    level: int = 1
    total_trades: int = 0
    successful_trades: int = 0
    profit_loss: Decimal = field(default_factory=lambda: Decimal("0"))
    win_rate: Decimal = field(default_factory=lambda: Decimal("0"))
    badges: list[Badge] = field(default_factory=list)
    updated_at: Optional[datetime] = None

    def record_trade(self, profit_loss: Decimal) -> int:
        """
        Count one completed trade and award its points.

        Returns the number of points earned.
        """
        self.total_trades += 1
        earned = POINTS["TRADE_EXECUTED"]
        if profit_loss > 0:
            self.successful_trades += 1
            earned += POINTS["PROFITABLE_TRADE"]
        self.profit_loss += profit_loss
        self.win_rate = Decimal(self.successful_trades) / Decimal(self.total_trades) * 100
        self.points += earned
        self.level = level_for_points(self.points)
        return earned

    def award_badges(self, at: Optional[datetime] = None) -> list[Badge]:
        """Add every badge whose threshold is reached and not yet held; return the new ones."""
        held = {badge.name for badge in self.badges}
        new = [
            Badge(name=rule.name, description=rule.description, earned_at=at)
            for rule in BADGE_RULES
            if self.points >= rule.points and rule.name not in held
        ]
        self.badges.extend(new)
        return new


def next_level_threshold(level: int) -> Optional[int]:
    """Points needed to reach the level after ``level``; None at the top level."""
    if level < len(LEVEL_THRESHOLDS):
        return LEVEL_THRESHOLDS[level]
    return None

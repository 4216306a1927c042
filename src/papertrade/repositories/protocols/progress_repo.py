"""User progress repository protocol."""

from typing import Protocol, Optional

from papertrade.domain.models import UserProgress


class ProgressRepository(Protocol):
    """Interface for gamification progress data access."""

    def get_by_owner(self, owner_id: str) -> Optional[UserProgress]:
        """Retrieve the owner's progress."""
        ...

    def save(self, progress: UserProgress) -> UserProgress:
        """Insert or update progress."""
        ...

    def top_by_points(self, limit: int = 10) -> list[UserProgress]:
        """Return the highest-scoring owners."""
        ...

"""
Profile repository.

Data access layer for Profile model (identity/directory lookup).
"""

from sqlalchemy.ext.asyncio import AsyncSession

from app.models.profile import Profile
from app.repositories.base import BaseRepository


class ProfileRepository(BaseRepository[Profile]):
    """Profile repository."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize profile repository."""
        super().__init__(Profile, session)

"""
User repository - encapsulates all user data access (SOLID: Single Responsibility).
"""

from sqlalchemy import select
from sqlalchemy.orm import selectinload

from cityshare.db.models.user import User
from cityshare.db.repositories.base_repository import BaseRepository


class UserRepository(BaseRepository[User]):
    """User-specific queries. Profile is always loaded alongside (async: no lazy loads)."""

    def __init__(self, session):
        super().__init__(session, User)

    async def get_by_email(self, email: str) -> User | None:
        """Find user by email - the join key with the identity provider."""
        result = await self.session.execute(
            select(User).where(User.email == email).options(selectinload(User.profile))
        )
        return result.scalar_one_or_none()


"""
Profile service - read and upsert the caller's display profile.
"""

import logging

from sqlalchemy.exc import SQLAlchemyError

from cityshare.core.exceptions import StorageFailure, Unauthorized
from cityshare.db.models.profile import Profile
from cityshare.db.models.user import User
from cityshare.db.repositories.user_repository import UserRepository
from cityshare.schemas.profile import ProfileResponse, ProfileUpdate

logger = logging.getLogger(__name__)

PROFILE_FIELDS = ("display_name", "username", "bio", "location", "avatar_url")


class ProfileService:

    def __init__(self, user_repo: UserRepository):
        self.user_repo = user_repo

    async def get_profile(self, user: User | None) -> ProfileResponse | None:
        if user is None:
            raise Unauthorized()
        if user.profile is None:
            return None
        await self.user_repo.refresh(user.profile)
        return ProfileResponse.model_validate(user.profile)

    async def upsert(self, user: User | None, data: ProfileUpdate) -> ProfileResponse:
        """Non-null fields overwrite; null or omitted fields keep their stored value."""
        if user is None:
            raise Unauthorized()
        try:
            profile = user.profile
            if profile is None:
                profile = Profile(user_id=user.id)
                user.profile = profile
            for field in PROFILE_FIELDS:
                value = getattr(data, field)
                if value is not None:
                    setattr(profile, field, value)
            await self.user_repo.flush()
            await self.user_repo.refresh(profile)
        except SQLAlchemyError as exc:
            logger.exception("Storage failure during profile upsert for user id=%s", user.id)
            await self.user_repo.rollback()
            raise StorageFailure("failed to update profile") from exc
        return ProfileResponse.model_validate(profile)

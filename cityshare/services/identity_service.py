"""
Identity boundary - maps an authenticated principal to a local User.
Side effect: first sight of a new email provisions a User + Profile pair.
"""

import logging
from dataclasses import dataclass
from typing import Any

from cityshare.db.models.profile import Profile
from cityshare.db.models.user import User
from cityshare.db.repositories.user_repository import UserRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Principal:
    """What the identity provider tells us about the caller."""

    email: str
    display_name: str | None = None
    avatar_url: str | None = None


def principal_from_claims(claims: dict[str, Any]) -> Principal | None:
    """Read email and Supabase-style user_metadata from token claims. None if no email."""
    email = claims.get("email")
    if not isinstance(email, str) or not email.strip():
        return None
    metadata = claims.get("user_metadata") or {}
    if not isinstance(metadata, dict):
        metadata = {}
    return Principal(
        email=email.strip().lower(),
        display_name=metadata.get("display_name") or metadata.get("full_name"),
        avatar_url=metadata.get("avatar_url"),
    )


class IdentityService:
    """Resolves principals to users; used once per authenticated request."""

    def __init__(self, user_repo: UserRepository):
        self.user_repo = user_repo

    async def resolve_or_create_user(self, principal: Principal) -> User:
        user = await self.user_repo.get_by_email(principal.email)
        if user is None:
            user = await self._provision_user(principal)
        return user

    async def _provision_user(self, principal: Principal) -> User:
        display_name = principal.display_name or principal.email.split("@")[0] or "User"
        user = User(
            email=principal.email,
            profile=Profile(display_name=display_name, avatar_url=principal.avatar_url),
        )
        user = await self.user_repo.add(user)
        logger.info("Auto-provisioned user id=%s for %s", user.id, principal.email)
        return user

"""
Security: bearer tokens issued by the identity provider.
Challenge: Validate signature and expiry; expose claims to the identity boundary.
"""

from datetime import datetime, timezone, timedelta
from typing import Any

from jose import JWTError, jwt

from cityshare.config import get_settings

settings = get_settings()


def create_access_token(email: str, extra: dict[str, Any] | None = None) -> str:
    """Issue a provider-style token for `email` (seed scripts and tests)."""
    expire = datetime.now(timezone.utc) + timedelta(minutes=settings.jwt_expire_minutes)
    to_encode = {"sub": email, "email": email, "exp": expire}
    if extra:
        to_encode.update(extra)
    return jwt.encode(to_encode, settings.secret_key, algorithm=settings.jwt_algorithm)


def decode_access_token(token: str) -> dict[str, Any] | None:
    """Decode and validate JWT. Returns payload or None if invalid."""
    try:
        return jwt.decode(
            token, settings.secret_key, algorithms=[settings.jwt_algorithm]
        )
    except JWTError:
        return None

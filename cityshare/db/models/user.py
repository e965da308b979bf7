"""
User model - the local record behind an identity-provider principal.
Email is the join key; there is no password here (sign-in is external).
"""

from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import String, DateTime, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from cityshare.db.base import Base

if TYPE_CHECKING:
    from cityshare.db.models.listing import Listing
    from cityshare.db.models.profile import Profile


class User(Base):
    """User entity. Auto-provisioned the first time a principal's email is seen."""

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    email: Mapped[str] = mapped_column(String(255), unique=True, index=True, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    profile: Mapped["Profile | None"] = relationship(
        "Profile", back_populates="user", uselist=False, cascade="all, delete-orphan"
    )
    listings: Mapped[list["Listing"]] = relationship(
        "Listing", back_populates="owner", foreign_keys="Listing.owner_id"
    )

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email={self.email})>"

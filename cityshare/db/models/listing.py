"""
Listing model - the central catalog entity.
Price presence is tied to kind; the CHECK constraint mirrors the service rule.
"""

from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import CheckConstraint, String, Text, DateTime, ForeignKey, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from cityshare.core.enums import ListingStatus, UsageStatus
from cityshare.db.base import URL_MAX_LENGTH, Base

if TYPE_CHECKING:
    from cityshare.db.models.category import Category
    from cityshare.db.models.listing_image import ListingImage
    from cityshare.db.models.user import User


ITEM_NAME_MAX_LENGTH = 255


class Listing(Base):
    """One postable item: sell, donate or borrow."""

    __tablename__ = "listings"
    __table_args__ = (
        CheckConstraint(
            "(kind = 'sell' AND price_cents IS NOT NULL AND price_cents > 0)"
            " OR (kind <> 'sell' AND price_cents IS NULL)",
            name="ck_listings_price_matches_kind",
        ),
    )

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    listing_number: Mapped[int | None] = mapped_column(unique=True, nullable=True)
    owner_id: Mapped[int] = mapped_column(ForeignKey("users.id"), nullable=False, index=True)
    category_id: Mapped[int | None] = mapped_column(
        ForeignKey("categories.id"), nullable=True, index=True
    )
    item_name: Mapped[str] = mapped_column(String(ITEM_NAME_MAX_LENGTH), nullable=False, index=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    kind: Mapped[str] = mapped_column(String(16), nullable=False, index=True)
    condition: Mapped[str | None] = mapped_column(Text, nullable=True)
    price_cents: Mapped[int | None] = mapped_column(nullable=True)
    image_url: Mapped[str | None] = mapped_column(String(URL_MAX_LENGTH), nullable=True)
    status: Mapped[str] = mapped_column(
        String(16), nullable=False, default=ListingStatus.ACTIVE.value, index=True
    )
    usage_status: Mapped[str] = mapped_column(
        String(16), nullable=False, default=UsageStatus.AVAILABLE.value
    )
    borrowed_by_user_id: Mapped[int | None] = mapped_column(ForeignKey("users.id"), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), index=True
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    owner: Mapped["User"] = relationship(
        "User", back_populates="listings", foreign_keys=[owner_id]
    )
    category: Mapped["Category | None"] = relationship("Category")
    images: Mapped[list["ListingImage"]] = relationship(
        "ListingImage",
        back_populates="listing",
        cascade="all, delete-orphan",
        order_by="[ListingImage.position, ListingImage.id]",
    )

    def __repr__(self) -> str:
        return f"<Listing(id={self.id}, item_name={self.item_name}, kind={self.kind})>"

"""
Listing repository - listing data access and query optimization (SOLID: Single Responsibility).
Challenge: Filtered, paginated browse with a matching total; avoid N+1 via selectinload.
"""

from sqlalchemy import Select, false, func, select
from sqlalchemy.orm import selectinload

from cityshare.db.base import INT32_MAX
from cityshare.db.models.category import Category
from cityshare.db.models.listing import Listing
from cityshare.db.models.listing_image import ListingImage
from cityshare.db.models.user import User
from cityshare.db.repositories.base_repository import BaseRepository
from cityshare.schemas.listing_filter import ListingFilter

# Newest first; id breaks created_at ties deterministically
_ORDERING = (Listing.created_at.desc(), Listing.id.desc())


def _hydrated(stmt: Select, *, primary_image_only: bool = False) -> Select:
    """
    Eager-load everything the response mappers touch (async sessions cannot lazy load).
    List views only need the primary image, which is always position 0.
    """
    images = Listing.images
    if primary_image_only:
        images = images.and_(ListingImage.position == 0)
    return stmt.options(
        selectinload(Listing.category),
        selectinload(Listing.owner).selectinload(User.profile),
        selectinload(images),
    )


def _conditions(filters: ListingFilter) -> list:
    """Translate the typed filter into AND-ed WHERE clauses."""
    conditions = []
    if filters.status is not None:
        conditions.append(Listing.status == filters.status.value)
    if filters.kind is not None:
        conditions.append(Listing.kind == filters.kind.value)
    if filters.usage_status is not None:
        conditions.append(Listing.usage_status == filters.usage_status.value)
    if filters.owner_id is not None:
        conditions.append(Listing.owner_id == filters.owner_id)
    if filters.category_id is not None:
        if filters.category_id > INT32_MAX:
            conditions.append(false())
        else:
            conditions.append(Listing.category_id == filters.category_id)
    if filters.category_name is not None:
        conditions.append(
            Listing.category.has(func.lower(Category.name) == filters.category_name.lower())
        )
    if filters.q:
        conditions.append(
            Listing.item_name.icontains(filters.q, autoescape=True)
            | Listing.description.icontains(filters.q, autoescape=True)
        )
    return conditions


class ListingRepository(BaseRepository[Listing]):
    """Listing-specific queries."""

    def __init__(self, session):
        super().__init__(session, Listing)

    async def get_hydrated(self, id: int) -> Listing | None:
        """Fetch listing with category, owner profile and ordered images. Refreshes identity-map copies."""
        result = await self.session.execute(
            _hydrated(select(Listing).where(Listing.id == id)).execution_options(
                populate_existing=True
            )
        )
        return result.scalar_one_or_none()

    async def search(
        self, filters: ListingFilter, *, offset: int = 0, limit: int = 20
    ) -> tuple[list[Listing], int]:
        """One page of matching listings plus the total match count (ignores offset/limit)."""
        conditions = _conditions(filters)
        total = await self.session.scalar(
            select(func.count()).select_from(Listing).where(*conditions)
        )
        result = await self.session.execute(
            _hydrated(select(Listing).where(*conditions), primary_image_only=True)
            .order_by(*_ORDERING)
            .offset(offset)
            .limit(limit)
        )
        return list(result.scalars().all()), int(total or 0)

    async def list_all(self, filters: ListingFilter) -> list[Listing]:
        """Every matching listing, same ordering as search, no pagination."""
        result = await self.session.execute(
            _hydrated(
                select(Listing).where(*_conditions(filters)), primary_image_only=True
            ).order_by(*_ORDERING)
        )
        return list(result.scalars().all())

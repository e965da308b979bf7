"""
Listing catalog service - business logic for listings (SOLID: Single Responsibility).
Challenge: Validate in a fixed order, keep create atomic, hydrate responses without lazy loads.
Design: Service depends on repositories bound to one request-scoped session; easy to test with mocks.

Every operation is terminal on error: nothing here retries. Persistence faults are
rolled back, logged and surfaced as StorageFailure.
"""

import logging
from contextlib import contextmanager
from typing import Any

from sqlalchemy.exc import SQLAlchemyError

from cityshare.config import get_settings
from cityshare.core.enums import (
    ListingCondition,
    ListingKind,
    ListingStatus,
    UsageStatus,
    parse_enum,
)
from cityshare.core.exceptions import Forbidden, InvalidInput, NotFound, StorageFailure, Unauthorized
from cityshare.db.base import INT32_MAX, URL_MAX_LENGTH
from cityshare.db.models.category import CATEGORY_NAME_MAX_LENGTH, Category
from cityshare.db.models.listing import ITEM_NAME_MAX_LENGTH, Listing
from cityshare.db.models.listing_image import ListingImage
from cityshare.db.models.user import User
from cityshare.db.repositories.category_repository import CategoryRepository
from cityshare.db.repositories.listing_repository import ListingRepository
from cityshare.db.repositories.user_repository import UserRepository
from cityshare.schemas.listing import (
    ListingCreate,
    ListingDetail,
    ListingImageResponse,
    ListingPage,
    ListingSummary,
    ListingUpdate,
    OwnerDetail,
    OwnerSummary,
    Pagination,
)
from cityshare.schemas.category import CategoryResponse
from cityshare.schemas.listing_filter import ListingFilter

logger = logging.getLogger(__name__)
settings = get_settings()


def parse_listing_id(raw: Any) -> int:
    """Accept a positive integer or its decimal string form."""
    if isinstance(raw, bool):
        raise InvalidInput("invalid listing id")
    if isinstance(raw, int):
        value = raw
    else:
        text = str(raw).strip()
        if not (text.isascii() and text.isdigit()):
            raise InvalidInput("invalid listing id")
        value = int(text)
    if value <= 0:
        raise InvalidInput("invalid listing id")
    if value > INT32_MAX:
        # Well-formed, but no row can carry an id this large
        raise NotFound("listing not found")
    return value


def parse_price_cents(raw: Any) -> int | None:
    """Integer minor units from int, integral float or digit string; None if unparseable."""
    if raw is None or isinstance(raw, bool):
        return None
    if isinstance(raw, int):
        return raw
    if isinstance(raw, float):
        return int(raw) if raw.is_integer() else None
    text = str(raw).strip()
    if text.startswith("-"):
        sign, text = -1, text[1:]
    else:
        sign = 1
    if not (text.isascii() and text.isdigit()):
        return None
    return sign * int(text)


def _clean_image_urls(urls: list[str]) -> list[str]:
    cleaned = [u.strip() for u in urls if u and u.strip()]
    if any(len(u) > URL_MAX_LENGTH for u in cleaned):
        raise InvalidInput(f"image url too long (max {URL_MAX_LENGTH} characters)")
    return cleaned


def normalize_condition(raw: str | None) -> str | None:
    """Canonical condition value when recognizable ("Like New" -> like_new), freeform otherwise."""
    text = (raw or "").strip()
    if not text:
        return None
    canonical = parse_enum(ListingCondition, text.replace(" ", "_").replace("-", "_"))
    return canonical.value if canonical else text


def _category_to_response(category: Category | None) -> CategoryResponse | None:
    if category is None:
        return None
    return CategoryResponse(id=category.id, name=category.name)


def _image_to_response(image: ListingImage) -> ListingImageResponse:
    return ListingImageResponse(id=image.id, url=image.url, position=image.position)


def _listing_fields(listing: Listing) -> dict:
    return {
        "id": listing.id,
        "listing_number": listing.listing_number,
        "item_name": listing.item_name,
        "description": listing.description,
        "kind": listing.kind,
        "condition": listing.condition,
        "price_cents": listing.price_cents,
        "image_url": listing.image_url,
        "status": listing.status,
        "usage_status": listing.usage_status,
        "created_at": listing.created_at,
        "category": _category_to_response(listing.category),
    }


def listing_to_summary(listing: Listing) -> ListingSummary:
    """List-view mapping: owner display fields, primary image only."""
    profile = listing.owner.profile
    owner = OwnerSummary(
        id=listing.owner.id,
        display_name=profile.display_name if profile else None,
        username=profile.username if profile else None,
        avatar_url=profile.avatar_url if profile else None,
    )
    return ListingSummary(
        **_listing_fields(listing),
        owner=owner,
        images=[_image_to_response(i) for i in listing.images[:1]],
    )


def listing_to_detail(listing: Listing) -> ListingDetail:
    """Detail mapping: full owner profile including location, every image in order."""
    profile = listing.owner.profile
    owner = OwnerDetail(
        id=listing.owner.id,
        display_name=profile.display_name if profile else None,
        username=profile.username if profile else None,
        avatar_url=profile.avatar_url if profile else None,
        location=profile.location if profile else None,
    )
    return ListingDetail(
        **_listing_fields(listing),
        owner=owner,
        images=[_image_to_response(i) for i in listing.images],
        borrowed_by_user_id=listing.borrowed_by_user_id,
        updated_at=listing.updated_at,
    )


def _sync_primary_image(listing: Listing, removed_url: str | None = None) -> None:
    """images[0] is the primary image; fall back to image_url only when there are no images."""
    if listing.images:
        listing.image_url = listing.images[0].url
    elif removed_url is not None and listing.image_url == removed_url:
        listing.image_url = None


class ListingService:
    """Handles all listing use cases: create, browse, detail, owner views and edits."""

    def __init__(
        self,
        listing_repo: ListingRepository,
        category_repo: CategoryRepository,
        user_repo: UserRepository,
    ):
        self.listing_repo = listing_repo
        self.category_repo = category_repo
        self.user_repo = user_repo

    @contextmanager
    def _storage_errors(self, action: str):
        try:
            yield
        except SQLAlchemyError as exc:
            logger.exception("Storage failure during %s", action)
            raise StorageFailure(f"failed to {action}") from exc

    async def _rollback_quietly(self) -> None:
        try:
            await self.listing_repo.rollback()
        except SQLAlchemyError:
            logger.exception("Rollback failed")

    async def _resolve_category(self, raw: int | str | None) -> Category | None:
        """Numeric value -> existing category by id; other text -> get-or-create by name."""
        if raw is None or isinstance(raw, bool):
            return None
        if isinstance(raw, int):
            category_id = raw
        else:
            text = str(raw).strip()
            if not text:
                return None
            if not (text.isascii() and text.isdigit()):
                if len(text) > CATEGORY_NAME_MAX_LENGTH:
                    raise InvalidInput(
                        f"category name too long (max {CATEGORY_NAME_MAX_LENGTH} characters)"
                    )
                return await self.category_repo.get_or_create(text)
            category_id = int(text)
        if category_id > INT32_MAX:
            raise InvalidInput("unknown category")
        category = await self.category_repo.get_by_id(category_id)
        if category is None:
            raise InvalidInput("unknown category")
        return category

    async def _get_owned(self, owner: User | None, raw_id: Any) -> Listing:
        if owner is None:
            raise Unauthorized()
        listing_id = parse_listing_id(raw_id)
        with self._storage_errors("load listing"):
            listing = await self.listing_repo.get_hydrated(listing_id)
        if listing is None:
            raise NotFound("listing not found")
        if listing.owner_id != owner.id:
            raise Forbidden("only the owner can change this listing")
        return listing

    async def _reload_detail(self, listing_id: int) -> ListingDetail:
        with self._storage_errors("load listing"):
            listing = await self.listing_repo.get_hydrated(listing_id)
        if listing is None:
            raise NotFound("listing not found")
        return listing_to_detail(listing)

    async def create(self, owner: User | None, data: ListingCreate) -> ListingDetail:
        """Validate, then insert listing + images (+ maybe a category) as one unit of work."""
        if owner is None:
            raise Unauthorized()
        item_name = (data.item_name or "").strip()
        if not item_name:
            raise InvalidInput("item name required")
        if len(item_name) > ITEM_NAME_MAX_LENGTH:
            raise InvalidInput(f"item name too long (max {ITEM_NAME_MAX_LENGTH} characters)")
        kind = parse_enum(ListingKind, data.kind)
        if kind is None:
            raise InvalidInput("invalid listing kind")
        price_cents = None
        if kind is ListingKind.SELL:
            price_cents = parse_price_cents(data.price_cents)
            if price_cents is None or price_cents <= 0:
                raise InvalidInput("price required for sale")
            if price_cents > INT32_MAX:
                raise InvalidInput("price too large")

        image_urls = _clean_image_urls(data.images)
        image_url = image_urls[0] if image_urls else ((data.image_url or "").strip() or None)
        if image_url is not None and len(image_url) > URL_MAX_LENGTH:
            raise InvalidInput(f"image url too long (max {URL_MAX_LENGTH} characters)")

        try:
            with self._storage_errors("create listing"):
                category = await self._resolve_category(data.category)
                listing = Listing(
                    owner_id=owner.id,
                    category=category,
                    item_name=item_name,
                    description=data.description,
                    kind=kind.value,
                    condition=normalize_condition(data.condition),
                    price_cents=price_cents,
                    image_url=image_url,
                    status=ListingStatus.ACTIVE.value,
                    usage_status=UsageStatus.AVAILABLE.value,
                    images=[ListingImage(url=url, position=i) for i, url in enumerate(image_urls)],
                )
                listing = await self.listing_repo.add(listing)
                listing.listing_number = settings.listing_number_offset + listing.id
                await self.listing_repo.flush()
        except StorageFailure:
            await self._rollback_quietly()
            raise
        logger.info(
            "Created listing id=%s number=%s kind=%s owner=%s images=%d",
            listing.id, listing.listing_number, kind.value, owner.id, len(image_urls),
        )
        return await self._reload_detail(listing.id)

    async def list_listings(
        self, filters: ListingFilter, *, limit: int | None = None, offset: int = 0
    ) -> ListingPage:
        """Public browse. Empty pages are normal results, not errors."""
        if offset < 0 or offset > INT32_MAX:
            raise InvalidInput(f"offset must be between 0 and {INT32_MAX}")
        if limit is None:
            limit = settings.default_page_size
        limit = max(1, min(limit, settings.max_page_size))
        with self._storage_errors("fetch listings"):
            listings, total = await self.listing_repo.search(filters, offset=offset, limit=limit)
        return ListingPage(
            listings=[listing_to_summary(l) for l in listings],
            pagination=Pagination(
                total=total,
                limit=limit,
                offset=offset,
                has_more=offset + limit < total,
            ),
        )

    async def get_by_id(self, raw_id: Any) -> ListingDetail:
        listing_id = parse_listing_id(raw_id)
        return await self._reload_detail(listing_id)

    async def list_owned(self, owner: User | None) -> list[ListingSummary]:
        """Every listing of the caller, any status, newest first, unpaginated."""
        if owner is None:
            raise Unauthorized()
        filters = ListingFilter(status=None, owner_id=owner.id)
        with self._storage_errors("fetch owned listings"):
            listings = await self.listing_repo.list_all(filters)
        return [listing_to_summary(l) for l in listings]

    async def update(self, owner: User | None, raw_id: Any, data: ListingUpdate) -> ListingDetail:
        """Owner edits. Enum values are strict here (unlike browse filters)."""
        listing = await self._get_owned(owner, raw_id)
        changes = data.model_dump(exclude_unset=True)

        status = usage_status = None
        if changes.get("status") is not None:
            status = parse_enum(ListingStatus, changes["status"])
            if status is None:
                raise InvalidInput("invalid listing status")
        if changes.get("usage_status") is not None:
            usage_status = parse_enum(UsageStatus, changes["usage_status"])
            if usage_status is None:
                raise InvalidInput("invalid usage status")
        if changes.get("borrowed_by_user_id") is not None and listing.kind != ListingKind.BORROW.value:
            raise InvalidInput("only borrow listings can have a borrower")

        try:
            with self._storage_errors("update listing"):
                if "category" in changes:
                    listing.category = await self._resolve_category(changes["category"])
                if "borrowed_by_user_id" in changes:
                    borrower_id = changes["borrowed_by_user_id"]
                    if borrower_id is not None and (
                        borrower_id <= 0
                        or borrower_id > INT32_MAX
                        or await self.user_repo.get_by_id(borrower_id) is None
                    ):
                        raise InvalidInput("unknown borrower")
                    listing.borrowed_by_user_id = borrower_id
                if "description" in changes:
                    listing.description = changes["description"]
                if "condition" in changes:
                    listing.condition = normalize_condition(changes["condition"])
                if status is not None:
                    listing.status = status.value
                if usage_status is not None:
                    listing.usage_status = usage_status.value
                await self.listing_repo.flush()
        except StorageFailure:
            await self._rollback_quietly()
            raise
        return await self._reload_detail(listing.id)

    async def delete(self, owner: User | None, raw_id: Any) -> None:
        """Soft delete: the row stays, status becomes deleted."""
        listing = await self._get_owned(owner, raw_id)
        try:
            with self._storage_errors("delete listing"):
                listing.status = ListingStatus.DELETED.value
                await self.listing_repo.flush()
        except StorageFailure:
            await self._rollback_quietly()
            raise
        logger.info("Soft-deleted listing id=%s", listing.id)

    async def add_images(self, owner: User | None, raw_id: Any, urls: list[str]) -> ListingDetail:
        """Append images after the existing ones, keeping insertion order."""
        listing = await self._get_owned(owner, raw_id)
        urls = _clean_image_urls(urls)
        if not urls:
            raise InvalidInput("at least one image url required")
        next_position = max((i.position for i in listing.images), default=-1) + 1
        try:
            with self._storage_errors("add listing images"):
                for offset, url in enumerate(urls):
                    listing.images.append(ListingImage(url=url, position=next_position + offset))
                _sync_primary_image(listing)
                await self.listing_repo.flush()
        except StorageFailure:
            await self._rollback_quietly()
            raise
        return await self._reload_detail(listing.id)

    async def remove_image(self, owner: User | None, raw_id: Any, image_id: int) -> ListingDetail:
        listing = await self._get_owned(owner, raw_id)
        image = next((i for i in listing.images if i.id == image_id), None)
        if image is None:
            raise NotFound("image not found")
        try:
            with self._storage_errors("remove listing image"):
                listing.images.remove(image)
                # Keep positions contiguous so the primary image is always position 0
                for position, remaining in enumerate(listing.images):
                    remaining.position = position
                _sync_primary_image(listing, removed_url=image.url)
                await self.listing_repo.flush()
        except StorageFailure:
            await self._rollback_quietly()
            raise
        return await self._reload_detail(listing.id)

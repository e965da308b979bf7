"""Listing request/response schemas - REST API contract."""

from datetime import datetime

from pydantic import BaseModel, Field

from cityshare.schemas.category import CategoryResponse


class ListingCreate(BaseModel):
    # Loose types: the service validates in a fixed order and answers 400
    item_name: str | None = None
    description: str | None = None
    category: int | str | None = None  # id or name
    kind: str | None = None
    condition: str | None = None
    price_cents: int | float | str | None = None
    image_url: str | None = None
    images: list[str] = Field(default_factory=list)


class ListingUpdate(BaseModel):
    description: str | None = None
    category: int | str | None = None
    condition: str | None = None
    status: str | None = None
    usage_status: str | None = None
    borrowed_by_user_id: int | None = None


class ListingImagesAdd(BaseModel):
    urls: list[str] = Field(..., min_length=1)


class ListingImageResponse(BaseModel):
    id: int
    url: str
    position: int

    model_config = {"from_attributes": True}


class OwnerSummary(BaseModel):
    id: int
    display_name: str | None = None
    username: str | None = None
    avatar_url: str | None = None


class OwnerDetail(OwnerSummary):
    location: str | None = None


class ListingBase(BaseModel):
    id: int
    listing_number: int | None = None
    item_name: str
    description: str | None = None
    kind: str
    condition: str | None = None
    price_cents: int | None = None
    image_url: str | None = None
    status: str
    usage_status: str
    created_at: datetime | None = None
    category: CategoryResponse | None = None


class ListingSummary(ListingBase):
    """List-view shape: owner display fields and at most the primary image."""

    owner: OwnerSummary
    images: list[ListingImageResponse] = Field(default_factory=list)


class ListingDetail(ListingBase):
    """Single-listing shape: full owner profile and every image in order."""

    owner: OwnerDetail
    images: list[ListingImageResponse] = Field(default_factory=list)
    borrowed_by_user_id: int | None = None
    updated_at: datetime | None = None


class Pagination(BaseModel):
    total: int
    limit: int
    offset: int
    has_more: bool


class ListingPage(BaseModel):
    listings: list[ListingSummary]
    pagination: Pagination


class OwnedListingsResponse(BaseModel):
    listings: list[ListingSummary]

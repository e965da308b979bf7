"""
Listing endpoints - RESTful catalog resource.
Challenge: Filtering, pagination, auth, 400/401/404 handling.
Design: Thin controller; service layer holds business logic and raises catalog errors.
"""

from fastapi import APIRouter, Query, Response, status

from cityshare.core.dependencies import CurrentUser, ListingServiceDep
from cityshare.schemas.listing import (
    ListingCreate,
    ListingDetail,
    ListingImagesAdd,
    ListingPage,
    ListingUpdate,
)
from cityshare.schemas.listing_filter import ListingFilter

router = APIRouter()


@router.get("", response_model=ListingPage)
async def list_listings(
    svc: ListingServiceDep,
    q: str | None = None,
    category: str | None = None,
    kind: str | None = None,
    usage_status: str | None = None,
    status_: str | None = Query(None, alias="status"),
    limit: int | None = None,
    offset: int = 0,
):
    """Browse listings. GET /listings?q=&category=&kind=&usage_status=&status=&limit=20&offset=0."""
    filters = ListingFilter.from_query(
        q=q, category=category, kind=kind, usage_status=usage_status, status=status_
    )
    return await svc.list_listings(filters, limit=limit, offset=offset)


@router.get("/{listing_id}", response_model=ListingDetail)
async def get_listing(svc: ListingServiceDep, listing_id: str):
    """Single listing with every image and the owner's profile."""
    return await svc.get_by_id(listing_id)


@router.post("", response_model=ListingDetail, status_code=status.HTTP_201_CREATED)
async def create_listing(svc: ListingServiceDep, data: ListingCreate, user: CurrentUser):
    """Create listing (authenticated). Owner always comes from the token."""
    return await svc.create(user, data)


@router.patch("/{listing_id}", response_model=ListingDetail)
async def update_listing(
    svc: ListingServiceDep, listing_id: str, data: ListingUpdate, user: CurrentUser
):
    """Owner edits category, condition, description, status, usage status, borrower."""
    return await svc.update(user, listing_id, data)


@router.delete("/{listing_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_listing(svc: ListingServiceDep, listing_id: str, user: CurrentUser):
    """Soft delete (status=deleted)."""
    await svc.delete(user, listing_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/{listing_id}/images", response_model=ListingDetail, status_code=status.HTTP_201_CREATED)
async def add_listing_images(
    svc: ListingServiceDep, listing_id: str, data: ListingImagesAdd, user: CurrentUser
):
    """Append already-uploaded image URLs to a listing."""
    return await svc.add_images(user, listing_id, data.urls)


@router.delete("/{listing_id}/images/{image_id}", response_model=ListingDetail)
async def remove_listing_image(
    svc: ListingServiceDep, listing_id: str, image_id: int, user: CurrentUser
):
    return await svc.remove_image(user, listing_id, image_id)

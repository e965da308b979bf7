"""
Profile endpoints - the caller's own profile and listings (auth required).
"""

from fastapi import APIRouter

from cityshare.core.dependencies import CurrentUser, ListingServiceDep, ProfileServiceDep
from cityshare.schemas.listing import OwnedListingsResponse
from cityshare.schemas.profile import ProfileEnvelope, ProfileUpdate

router = APIRouter()


@router.get("/me", response_model=ProfileEnvelope)
async def get_my_profile(svc: ProfileServiceDep, user: CurrentUser):
    return ProfileEnvelope(profile=await svc.get_profile(user))


@router.post("/update", response_model=ProfileEnvelope)
async def update_my_profile(svc: ProfileServiceDep, data: ProfileUpdate, user: CurrentUser):
    """Upsert: only provided, non-null fields change."""
    return ProfileEnvelope(profile=await svc.upsert(user, data))


@router.get("/listings", response_model=OwnedListingsResponse)
async def list_my_listings(svc: ListingServiceDep, user: CurrentUser):
    """Every listing the caller owns, regardless of status."""
    return OwnedListingsResponse(listings=await svc.list_owned(user))

"""
FastAPI dependencies - injection for DB-backed services and auth (SOLID: Dependency Inversion).
Challenge: Reusable auth, consistent error responses.
"""

from typing import Annotated

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from cityshare.core.exceptions import Unauthorized
from cityshare.core.security import decode_access_token
from cityshare.db.models.user import User
from cityshare.db.repositories.category_repository import CategoryRepository
from cityshare.db.repositories.listing_repository import ListingRepository
from cityshare.db.repositories.user_repository import UserRepository
from cityshare.db.session import DbSession
from cityshare.services.identity_service import IdentityService, Principal, principal_from_claims
from cityshare.services.listing_service import ListingService
from cityshare.services.profile_service import ProfileService
from cityshare.services.upload_service import UploadService
from cityshare.storage.blob_storage import BlobStorage, get_blob_storage

security = HTTPBearer(auto_error=False)


async def get_principal(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
) -> Principal | None:
    """Principal from a valid bearer token, else None (unauthenticated)."""
    if not credentials:
        return None
    payload = decode_access_token(credentials.credentials)
    if not payload:
        return None
    return principal_from_claims(payload)


async def get_current_user(
    session: DbSession,
    principal: Annotated[Principal | None, Depends(get_principal)],
) -> User:
    """Resolve the caller to a local user (provisioning on first sight). Raises 401 if anonymous."""
    if principal is None:
        raise Unauthorized("Unauthorized - Please sign in")
    return await IdentityService(UserRepository(session)).resolve_or_create_user(principal)


def get_listing_service(session: DbSession) -> ListingService:
    """Factory for service with repository injection (Dependency Inversion)."""
    return ListingService(
        ListingRepository(session), CategoryRepository(session), UserRepository(session)
    )


def get_profile_service(session: DbSession) -> ProfileService:
    return ProfileService(UserRepository(session))


def get_upload_service(
    storage: Annotated[BlobStorage, Depends(get_blob_storage)],
) -> UploadService:
    return UploadService(storage)


CurrentUser = Annotated[User, Depends(get_current_user)]
ListingServiceDep = Annotated[ListingService, Depends(get_listing_service)]
ProfileServiceDep = Annotated[ProfileService, Depends(get_profile_service)]
UploadServiceDep = Annotated[UploadService, Depends(get_upload_service)]

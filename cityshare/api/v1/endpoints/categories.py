"""
Category endpoint - options for the post-listing form.
"""

from fastapi import APIRouter

from cityshare.db.repositories.category_repository import CategoryRepository
from cityshare.db.session import DbSession
from cityshare.schemas.category import CategoryResponse

router = APIRouter()


@router.get("", response_model=list[CategoryResponse])
async def list_categories(session: DbSession):
    """All categories ordered by name."""
    categories = await CategoryRepository(session).list_all()
    return [CategoryResponse.model_validate(c) for c in categories]

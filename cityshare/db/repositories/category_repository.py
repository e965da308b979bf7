"""
Category repository - lookup by id or by case-insensitive name, lazy creation.
"""

from sqlalchemy import func, select

from cityshare.db.models.category import Category
from cityshare.db.repositories.base_repository import BaseRepository


class CategoryRepository(BaseRepository[Category]):

    def __init__(self, session):
        super().__init__(session, Category)

    async def get_by_name(self, name: str) -> Category | None:
        """Case-insensitive match on the trimmed name."""
        result = await self.session.execute(
            select(Category).where(func.lower(Category.name) == name.strip().lower())
        )
        return result.scalar_one_or_none()

    async def get_or_create(self, name: str) -> Category:
        """Return the category named `name` (any case), creating it with this casing if absent."""
        category = await self.get_by_name(name)
        if category is None:
            category = await self.add(Category(name=name.strip()))
        return category

    async def list_all(self) -> list[Category]:
        result = await self.session.execute(select(Category).order_by(Category.name))
        return list(result.scalars().all())

"""
Category model - flat, named tag. Names are unique regardless of case.
"""

from sqlalchemy import Index, String, func
from sqlalchemy.orm import Mapped, mapped_column

from cityshare.db.base import Base


CATEGORY_NAME_MAX_LENGTH = 100


class Category(Base):
    __tablename__ = "categories"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(CATEGORY_NAME_MAX_LENGTH), unique=True, nullable=False)

    def __repr__(self) -> str:
        return f"<Category(id={self.id}, name={self.name})>"


# Get-or-create matches names case-insensitively; the store backs that up.
Index("ix_categories_name_lower", func.lower(Category.name), unique=True)

# Repository pattern: abstract data access (SOLID - Dependency Inversion)

from cityshare.db.repositories.category_repository import CategoryRepository
from cityshare.db.repositories.listing_repository import ListingRepository
from cityshare.db.repositories.user_repository import UserRepository

__all__ = ["UserRepository", "CategoryRepository", "ListingRepository"]

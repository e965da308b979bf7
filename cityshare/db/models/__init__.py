from cityshare.db.models.category import Category
from cityshare.db.models.listing import Listing
from cityshare.db.models.listing_image import ListingImage
from cityshare.db.models.profile import Profile
from cityshare.db.models.user import User

__all__ = ["User", "Profile", "Category", "Listing", "ListingImage"]

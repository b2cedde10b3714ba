"""Import all models for Alembic or metadata creation."""

from app.models.announcement import Announcement
from app.models.category import Category, CategoryPassword, Item
from app.models.permission import CategoryPermission
from app.models.profile import Profile
from app.models.tier import Tier

__all__ = [
    "Announcement",
    "Category",
    "CategoryPassword",
    "CategoryPermission",
    "Item",
    "Profile",
    "Tier",
]

"""SQLAlchemy models."""
from models.base import Base, CreatedAtMixin, TimestampMixin
from models.tag import Tag, bookmark_tags  # Must be before bookmark due to import
from models.bookmark import Bookmark
from models.user import User

__all__ = [
    "Base",
    "Bookmark",
    "CreatedAtMixin",
    "Tag",
    "TimestampMixin",
    "User",
    "bookmark_tags",
]

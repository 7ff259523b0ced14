"""SQLAlchemy ORM models."""

from geocats.models.base import Base
from geocats.models.cat import Cat
from geocats.models.user import User

__all__ = ["Base", "Cat", "User"]

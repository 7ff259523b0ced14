"""Core app configuration, database, and security."""

from geocats.core.config import get_settings, settings
from geocats.core.database import get_db

__all__ = ["get_settings", "settings", "get_db"]

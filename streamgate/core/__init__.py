"""Core app configuration, database and security primitives."""

from streamgate.core.config import get_settings, settings
from streamgate.core.database import get_db

__all__ = ["get_settings", "settings", "get_db"]

"""SQLAlchemy ORM models."""

from streamgate.models.base import Base
from streamgate.models.role import Role
from streamgate.models.subscription import Subscription
from streamgate.models.user import User

__all__ = ["Base", "Role", "Subscription", "User"]

"""ORM model for application users (authentication and role reference)."""

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, String, Text, func
from sqlalchemy.orm import relationship

from streamgate.models.base import Base, new_id


class User(Base):
    """
    User account (the identity behind every token).

    The role is held by reference (role_id), so a role change applies to the
    next authorization decision. refresh_token_hash stores only the hash of
    the most recently issued refresh token; NULL means logged out.
    """

    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=new_id)
    email = Column(String(255), nullable=False, unique=True, index=True)
    username = Column(String(50), nullable=False)
    password_hash = Column(String(255), nullable=False)
    role_id = Column(String(36), ForeignKey("roles.id"), nullable=False)
    is_active = Column(Boolean, nullable=False, default=True)
    refresh_token_hash = Column(Text, nullable=True)
    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
    )

    role = relationship("Role", back_populates="users", lazy="joined")
    subscription = relationship(
        "Subscription",
        back_populates="user",
        uselist=False,
        lazy="selectin",
    )

    @property
    def role_name(self) -> str:
        return self.role.name

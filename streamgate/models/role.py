"""ORM model for roles (closed set: admin, premium, free)."""

from sqlalchemy import Column, DateTime, String, Text, func
from sqlalchemy.orm import relationship

from streamgate.models.base import Base, new_id


class Role(Base):
    """Role row; name is one of RoleName's values."""

    __tablename__ = "roles"

    id = Column(String(36), primary_key=True, default=new_id)
    name = Column(String(50), nullable=False, unique=True, index=True)
    description = Column(Text, nullable=True)
    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )

    users = relationship("User", back_populates="role")

"""ORM model for a user's subscription (at most one per user)."""

from datetime import datetime

from sqlalchemy import Boolean, Column, DateTime, Enum, ForeignKey, String, func
from sqlalchemy.orm import relationship

from streamgate.core.clock import ensure_utc, utcnow
from streamgate.core.roles import PlanType
from streamgate.models.base import Base, new_id


class Subscription(Base):
    """
    Subscription record. Renew and cancel overwrite it in place; it is never deleted.

    Validity is always computed from is_active and expiry_date, never stored.
    """

    __tablename__ = "subscriptions"

    id = Column(String(36), primary_key=True, default=new_id)
    user_id = Column(
        String(36),
        ForeignKey("users.id"),
        nullable=False,
        unique=True,
        index=True,
    )
    plan_type = Column(
        Enum(PlanType, name="plan_type", values_callable=lambda e: [m.value for m in e]),
        nullable=False,
    )
    start_date = Column(DateTime(timezone=True), nullable=False)
    expiry_date = Column(DateTime(timezone=True), nullable=False)
    is_active = Column(Boolean, nullable=False, default=True)
    auto_renew = Column(Boolean, nullable=False, default=False)
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

    user = relationship("User", back_populates="subscription")

    def is_valid(self, now: datetime | None = None) -> bool:
        """Active and not yet expired at ``now`` (defaults to the current time)."""
        current = ensure_utc(now) if now is not None else utcnow()
        return bool(self.is_active) and current < ensure_utc(self.expiry_date)

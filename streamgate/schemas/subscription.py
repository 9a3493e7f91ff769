"""Schemas for subscriptions and access decisions."""

import math
from datetime import datetime
from typing import TYPE_CHECKING

from pydantic import BaseModel, Field, model_validator

from streamgate.core.clock import ensure_utc, utcnow
from streamgate.core.roles import PlanType

if TYPE_CHECKING:
    from streamgate.models import Subscription


class SubscribeRequest(BaseModel):
    """Plan chosen when subscribing or renewing."""

    plan_type: PlanType = Field(..., description="Subscription plan type")


class CreateSubscriptionRequest(BaseModel):
    """Admin-created subscription with explicit dates."""

    user_id: str = Field(..., min_length=1, description="User ID for the subscription")
    plan_type: PlanType
    start_date: datetime
    expiry_date: datetime
    auto_renew: bool = False

    @model_validator(mode="after")
    def expiry_after_start(self) -> "CreateSubscriptionRequest":
        if ensure_utc(self.expiry_date) <= ensure_utc(self.start_date):
            raise ValueError("expiry_date must be after start_date")
        return self


class SubscriptionSnapshot(BaseModel):
    """Stored subscription fields as returned to clients."""

    id: str
    user_id: str
    plan_type: PlanType
    start_date: datetime
    expiry_date: datetime
    is_active: bool
    auto_renew: bool

    @classmethod
    def from_model(cls, subscription: "Subscription") -> "SubscriptionSnapshot":
        return cls(
            id=subscription.id,
            user_id=subscription.user_id,
            plan_type=subscription.plan_type,
            start_date=ensure_utc(subscription.start_date),
            expiry_date=ensure_utc(subscription.expiry_date),
            is_active=bool(subscription.is_active),
            auto_renew=bool(subscription.auto_renew),
        )


class SubscriptionStatus(SubscriptionSnapshot):
    """Snapshot plus validity computed at request time."""

    is_valid: bool
    days_remaining: int

    @classmethod
    def from_model_at(
        cls, subscription: "Subscription", now: datetime | None = None
    ) -> "SubscriptionStatus":
        current = ensure_utc(now) if now is not None else utcnow()
        snapshot = SubscriptionSnapshot.from_model(subscription)
        remaining = (snapshot.expiry_date - current).total_seconds() / 86400
        return cls(
            **snapshot.model_dump(),
            is_valid=subscription.is_valid(current),
            days_remaining=max(0, math.ceil(remaining)),
        )


class MySubscriptionResponse(BaseModel):
    """Response for /subscriptions/my-subscription."""

    has_subscription: bool
    message: str | None = None
    subscription: SubscriptionStatus | None = None


class AccessDecisionResponse(BaseModel):
    """Body of an allowed access check. Denials are a 403 error body with detail, code and reason."""

    allowed: bool

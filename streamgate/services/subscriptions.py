"""Subscription lifecycle: subscribe, admin create, renew, cancel, status."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import TYPE_CHECKING

from streamgate.core.clock import ensure_utc, utcnow
from streamgate.core.errors import ConflictError, NotFoundError
from streamgate.core.roles import PlanType
from streamgate.schemas.subscription import SubscriptionStatus

if TYPE_CHECKING:
    from streamgate.models import Subscription
    from streamgate.services.credential_store import CredentialStore

logger = logging.getLogger(__name__)

ALREADY_SUBSCRIBED = "User already has a subscription"
SUBSCRIPTION_NOT_FOUND = "Subscription not found"


def period_end(start: datetime, plan_type: PlanType) -> datetime:
    """Expiry for a period of plan_type starting at start."""
    return ensure_utc(start) + PlanType(plan_type).duration


class SubscriptionService:
    """
    Subscription records are created once per user and then overwritten in
    place by renew/cancel; concurrent writes are last-writer-wins in the store.
    """

    def __init__(self, store: "CredentialStore") -> None:
        self._store = store

    def subscribe(
        self,
        identity_id: str,
        plan_type: PlanType,
        now: datetime | None = None,
    ) -> "Subscription":
        """Start a plan for the user beginning at now (30 or 365 days)."""
        start = ensure_utc(now) if now is not None else utcnow()
        if self._store.find_subscription_by_identity_id(identity_id) is not None:
            raise ConflictError(ALREADY_SUBSCRIBED)
        subscription = self._store.create_subscription(
            identity_id,
            plan_type,
            start,
            period_end(start, plan_type),
            is_active=True,
            auto_renew=False,
        )
        logger.info(
            "Subscription created",
            extra={"user_id": identity_id, "plan_type": PlanType(plan_type).value},
        )
        return subscription

    def create(
        self,
        identity_id: str,
        plan_type: PlanType,
        start_date: datetime,
        expiry_date: datetime,
        auto_renew: bool = False,
    ) -> "Subscription":
        """Admin path: explicit dates for any existing user."""
        if self._store.find_identity_by_id(identity_id) is None:
            raise NotFoundError("User not found")
        if self._store.find_subscription_by_identity_id(identity_id) is not None:
            raise ConflictError(ALREADY_SUBSCRIBED)
        subscription = self._store.create_subscription(
            identity_id,
            plan_type,
            ensure_utc(start_date),
            ensure_utc(expiry_date),
            is_active=True,
            auto_renew=auto_renew,
        )
        logger.info(
            "Subscription created by admin",
            extra={"user_id": identity_id, "plan_type": PlanType(plan_type).value},
        )
        return subscription

    def get(self, identity_id: str) -> "Subscription | None":
        return self._store.find_subscription_by_identity_id(identity_id)

    def status(self, identity_id: str, now: datetime | None = None) -> SubscriptionStatus | None:
        """Subscription with is_valid and days_remaining, or None if the user has none."""
        subscription = self.get(identity_id)
        if subscription is None:
            return None
        return SubscriptionStatus.from_model_at(subscription, now)

    def check_validity(self, identity_id: str, now: datetime | None = None) -> bool:
        subscription = self.get(identity_id)
        return subscription.is_valid(now) if subscription is not None else False

    def renew(
        self,
        identity_id: str,
        plan_type: PlanType,
        now: datetime | None = None,
    ) -> "Subscription":
        """Restart the subscription at now with plan_type, whatever its prior state."""
        subscription = self.get(identity_id)
        if subscription is None:
            raise NotFoundError(SUBSCRIPTION_NOT_FOUND)
        start = ensure_utc(now) if now is not None else utcnow()
        subscription.plan_type = PlanType(plan_type)
        subscription.start_date = start
        subscription.expiry_date = period_end(start, plan_type)
        subscription.is_active = True
        self._store.save_subscription(subscription)
        logger.info(
            "Subscription renewed",
            extra={"user_id": identity_id, "plan_type": PlanType(plan_type).value},
        )
        return subscription

    def cancel(self, identity_id: str) -> "Subscription":
        subscription = self.get(identity_id)
        if subscription is None:
            raise NotFoundError(SUBSCRIPTION_NOT_FOUND)
        subscription.is_active = False
        subscription.auto_renew = False
        self._store.save_subscription(subscription)
        logger.info("Subscription cancelled", extra={"user_id": identity_id})
        return subscription

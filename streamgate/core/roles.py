"""Closed sets for roles and subscription plans."""

from datetime import timedelta
from enum import Enum


class RoleName(str, Enum):
    ADMIN = "admin"
    PREMIUM = "premium"
    FREE = "free"


ROLE_DESCRIPTIONS: dict[RoleName, str] = {
    RoleName.ADMIN: "Administrator with full access",
    RoleName.PREMIUM: "Premium user with full content access",
    RoleName.FREE: "Free user with trailer access only",
}


class PlanType(str, Enum):
    MONTHLY = "monthly"
    YEARLY = "yearly"

    @property
    def duration(self) -> timedelta:
        """Length of one billing period."""
        if self is PlanType.MONTHLY:
            return timedelta(days=30)
        if self is PlanType.YEARLY:
            return timedelta(days=365)
        raise ValueError(f"Unhandled plan type: {self.value}")

"""Authorization guards: pure decision functions plus an ordered pipeline.

Each guard returns an ``AccessDecision`` (``Allow`` or ``Deny``) instead of
raising, so a request handler can chain them explicitly with ``evaluate`` and
turn the first denial into an error with ``enforce``.
"""

from __future__ import annotations

from collections.abc import Callable, Collection, Iterable
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING, Union

from streamgate.core.errors import ForbiddenError, UnauthorizedError
from streamgate.core.roles import RoleName

if TYPE_CHECKING:
    from streamgate.models import Subscription, User


class DenyReason(str, Enum):
    UNAUTHENTICATED = "unauthenticated"
    ROLE_NOT_ALLOWED = "role_not_allowed"
    UPGRADE_REQUIRED = "upgrade_required"
    NO_SUBSCRIPTION = "no_subscription"
    EXPIRED = "expired"
    UNKNOWN = "unknown"


DENY_MESSAGES: dict[DenyReason, str] = {
    DenyReason.UNAUTHENTICATED: "User not authenticated",
    DenyReason.ROLE_NOT_ALLOWED: "You do not have permission to perform this action",
    DenyReason.UPGRADE_REQUIRED: "Free users cannot access premium content. Please upgrade to premium.",
    DenyReason.NO_SUBSCRIPTION: "No active subscription found",
    DenyReason.EXPIRED: "Your subscription has expired. Please renew to continue watching.",
    DenyReason.UNKNOWN: "Access denied",
}


@dataclass(frozen=True)
class Allow:
    allowed: bool = True


@dataclass(frozen=True)
class Deny:
    reason: DenyReason
    allowed: bool = False

    @property
    def message(self) -> str:
        return DENY_MESSAGES[self.reason]


AccessDecision = Union[Allow, Deny]

ALLOW = Allow()

SubscriptionLookup = Callable[[str], "Subscription | None"]


def _role_of(identity: "User") -> RoleName | None:
    try:
        return RoleName(identity.role_name)
    except ValueError:
        return None


def allows(caller_role: RoleName | str, required_roles: Collection[RoleName | str]) -> bool:
    """True when the caller's role is one of the required roles."""
    wanted = {r.value if isinstance(r, RoleName) else str(r) for r in required_roles}
    role = caller_role.value if isinstance(caller_role, RoleName) else str(caller_role)
    return role in wanted


def authorize(
    identity: "User | None", required_roles: Collection[RoleName | str]
) -> AccessDecision:
    """Role guard for an already-authenticated identity (None means unauthenticated)."""
    if identity is None:
        return Deny(DenyReason.UNAUTHENTICATED)
    if allows(identity.role_name, required_roles):
        return ALLOW
    return Deny(DenyReason.ROLE_NOT_ALLOWED)


def check_subscription_access(
    identity: "User | None",
    find_subscription: SubscriptionLookup,
    now: datetime | None = None,
) -> AccessDecision:
    """
    Subscription guard.

    Admins pass, free users must upgrade, premium users need a valid
    subscription. At most one subscription lookup per call.
    """
    if identity is None:
        return Deny(DenyReason.UNAUTHENTICATED)

    role = _role_of(identity)
    if role is RoleName.ADMIN:
        return ALLOW
    if role is RoleName.FREE:
        return Deny(DenyReason.UPGRADE_REQUIRED)
    if role is RoleName.PREMIUM:
        subscription = find_subscription(identity.id)
        if subscription is None:
            return Deny(DenyReason.NO_SUBSCRIPTION)
        if not subscription.is_valid(now):
            return Deny(DenyReason.EXPIRED)
        return ALLOW
    return Deny(DenyReason.UNKNOWN)


def evaluate(checks: Iterable[Callable[[], AccessDecision]]) -> AccessDecision:
    """Run checks in order and stop at the first Deny."""
    for check in checks:
        decision = check()
        if isinstance(decision, Deny):
            return decision
    return ALLOW


def enforce(decision: AccessDecision) -> None:
    """Raise for a Deny: Unauthorized when there is no caller, Forbidden otherwise."""
    if isinstance(decision, Allow):
        return
    if decision.reason is DenyReason.UNAUTHENTICATED:
        raise UnauthorizedError(decision.message)
    raise ForbiddenError(decision.message, decision.reason)

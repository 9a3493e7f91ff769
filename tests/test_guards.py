"""Unit tests for streamgate.services.guards: role guard, subscription guard, pipeline."""

import unittest
from datetime import timedelta
from types import SimpleNamespace
from unittest.mock import MagicMock

from streamgate.core.errors import ForbiddenError, UnauthorizedError
from streamgate.core.roles import PlanType, RoleName
from streamgate.models import Subscription
from streamgate.services.guards import (
    ALLOW,
    Allow,
    Deny,
    DenyReason,
    allows,
    authorize,
    check_subscription_access,
    enforce,
    evaluate,
)
from tests.support import T0


def _identity(role: str = "premium", identity_id: str = "u1") -> SimpleNamespace:
    return SimpleNamespace(id=identity_id, role_name=role)


def _subscription(expiry_offset: timedelta = timedelta(days=30), is_active: bool = True) -> Subscription:
    """Transient subscription starting at T0."""
    return Subscription(
        user_id="u1",
        plan_type=PlanType.MONTHLY,
        start_date=T0,
        expiry_date=T0 + expiry_offset,
        is_active=is_active,
        auto_renew=False,
    )


class TestRoleGuard(unittest.TestCase):
    def test_allows_listed_role(self) -> None:
        self.assertTrue(allows("admin", [RoleName.ADMIN]))
        self.assertTrue(allows(RoleName.PREMIUM, ["premium", "admin"]))
        self.assertFalse(allows("free", [RoleName.ADMIN, RoleName.PREMIUM]))

    def test_authorize(self) -> None:
        self.assertEqual(authorize(_identity("admin"), [RoleName.ADMIN]), ALLOW)
        self.assertEqual(
            authorize(_identity("free"), [RoleName.ADMIN]),
            Deny(DenyReason.ROLE_NOT_ALLOWED),
        )
        self.assertEqual(authorize(None, [RoleName.ADMIN]), Deny(DenyReason.UNAUTHENTICATED))


class TestSubscriptionGuard(unittest.TestCase):
    """Admins pass, free users must upgrade, premium users need a valid subscription."""

    def test_admin_allowed_without_lookup(self) -> None:
        lookup = MagicMock()
        self.assertIsInstance(check_subscription_access(_identity("admin"), lookup, T0), Allow)
        lookup.assert_not_called()

    def test_free_user_must_upgrade(self) -> None:
        lookup = MagicMock(return_value=_subscription())
        decision = check_subscription_access(_identity("free"), lookup, T0)
        self.assertEqual(decision, Deny(DenyReason.UPGRADE_REQUIRED))
        lookup.assert_not_called()

    def test_premium_with_valid_subscription(self) -> None:
        lookup = MagicMock(return_value=_subscription())
        decision = check_subscription_access(_identity("premium"), lookup, T0 + timedelta(days=5))
        self.assertIsInstance(decision, Allow)
        lookup.assert_called_once_with("u1")

    def test_premium_without_subscription(self) -> None:
        decision = check_subscription_access(_identity("premium"), MagicMock(return_value=None), T0)
        self.assertEqual(decision, Deny(DenyReason.NO_SUBSCRIPTION))

    def test_premium_past_expiry(self) -> None:
        lookup = MagicMock(return_value=_subscription())
        decision = check_subscription_access(_identity("premium"), lookup, T0 + timedelta(days=31))
        self.assertEqual(decision, Deny(DenyReason.EXPIRED))

    def test_expiry_instant_itself_is_expired(self) -> None:
        lookup = MagicMock(return_value=_subscription())
        decision = check_subscription_access(_identity("premium"), lookup, T0 + timedelta(days=30))
        self.assertEqual(decision, Deny(DenyReason.EXPIRED))

    def test_cancelled_subscription_is_expired(self) -> None:
        lookup = MagicMock(return_value=_subscription(is_active=False))
        decision = check_subscription_access(_identity("premium"), lookup, T0 + timedelta(days=1))
        self.assertEqual(decision, Deny(DenyReason.EXPIRED))

    def test_unknown_role_and_missing_identity(self) -> None:
        lookup = MagicMock()
        self.assertEqual(
            check_subscription_access(_identity("guest"), lookup, T0),
            Deny(DenyReason.UNKNOWN),
        )
        self.assertEqual(
            check_subscription_access(None, lookup, T0),
            Deny(DenyReason.UNAUTHENTICATED),
        )


class TestPipeline(unittest.TestCase):
    def test_evaluate_stops_at_first_deny(self) -> None:
        later = MagicMock(return_value=ALLOW)
        decision = evaluate([lambda: ALLOW, lambda: Deny(DenyReason.EXPIRED), later])
        self.assertEqual(decision, Deny(DenyReason.EXPIRED))
        later.assert_not_called()

    def test_evaluate_all_allow(self) -> None:
        self.assertIsInstance(evaluate([lambda: ALLOW, lambda: ALLOW]), Allow)
        self.assertIsInstance(evaluate([]), Allow)

    def test_enforce_maps_denials_to_errors(self) -> None:
        enforce(ALLOW)
        with self.assertRaises(UnauthorizedError):
            enforce(Deny(DenyReason.UNAUTHENTICATED))
        with self.assertRaises(ForbiddenError) as ctx:
            enforce(Deny(DenyReason.UPGRADE_REQUIRED))
        self.assertEqual(ctx.exception.reason, DenyReason.UPGRADE_REQUIRED)
        self.assertIn("upgrade", ctx.exception.message)

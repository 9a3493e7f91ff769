"""Unit tests for streamgate.services.auth_flow: register, login, refresh rotation, logout."""

import unittest
from datetime import timedelta
from unittest.mock import MagicMock

from streamgate.core.clock import utcnow
from streamgate.core.errors import ConflictError, UnauthorizedError
from streamgate.core.roles import PlanType, RoleName
from streamgate.core.security import hash_password, verify_password, verify_refresh_token
from streamgate.services.auth_flow import (
    ACCESS_DENIED,
    ACCOUNT_DEACTIVATED,
    INVALID_CREDENTIALS,
    AuthenticationService,
)
from streamgate.services.subscriptions import SubscriptionService
from tests.support import make_store, make_token_service


class _AuthTestCase(unittest.TestCase):
    def setUp(self) -> None:
        self.store, self.session = make_store()
        self.tokens = make_token_service()
        self.auth = AuthenticationService(self.store, self.tokens)

    def tearDown(self) -> None:
        self.session.close()


class TestRegister(_AuthTestCase):
    """Registration creates the identity, issues a pair and stores only hashes."""

    def test_register_defaults_to_free(self) -> None:
        result = self.auth.register("a@b.com", "alice", "secret123")
        self.assertEqual(result.user.role, "free")
        self.assertEqual(result.user.email, "a@b.com")
        self.assertEqual(self.tokens.verify(result.access_token).role, "free")

    def test_register_with_explicit_role(self) -> None:
        result = self.auth.register("p@b.com", "paula", "secret123", role=RoleName.PREMIUM)
        self.assertEqual(result.user.role, "premium")

    def test_password_and_refresh_token_stored_hashed(self) -> None:
        result = self.auth.register("a@b.com", "alice", "secret123")
        user = self.store.find_identity_by_email("a@b.com")
        self.assertNotEqual(user.password_hash, "secret123")
        self.assertTrue(verify_password("secret123", user.password_hash))
        self.assertNotEqual(user.refresh_token_hash, result.refresh_token)
        self.assertTrue(verify_refresh_token(result.refresh_token, user.refresh_token_hash))

    def test_user_view_has_no_secrets(self) -> None:
        result = self.auth.register("a@b.com", "alice", "secret123")
        dumped = result.user.model_dump()
        self.assertNotIn("password_hash", dumped)
        self.assertNotIn("refresh_token_hash", dumped)

    def test_duplicate_email_is_conflict(self) -> None:
        self.auth.register("a@b.com", "alice", "secret123")
        with self.assertRaises(ConflictError):
            self.auth.register("A@B.com", "alice2", "secret456")

    def test_unknown_role_is_conflict(self) -> None:
        with self.assertRaises(ConflictError):
            self.auth.register("a@b.com", "alice", "secret123", role="superuser")
        self.assertEqual(self.store.count_identities(), 0)


class TestLogin(_AuthTestCase):
    """Wrong password and unknown email are indistinguishable."""

    def setUp(self) -> None:
        super().setUp()
        self.registered = self.auth.register("a@b.com", "alice", "secret123")

    def test_login_returns_pair_and_user(self) -> None:
        result = self.auth.login("a@b.com", "secret123")
        self.assertEqual(result.user.role, "free")
        self.assertIsNone(result.user.subscription)
        self.assertEqual(self.tokens.verify(result.refresh_token).sub, result.user.id)

    def test_wrong_password_and_unknown_email_fail_identically(self) -> None:
        with self.assertRaises(UnauthorizedError) as wrong_password:
            self.auth.login("a@b.com", "wrong-password")
        with self.assertRaises(UnauthorizedError) as unknown_email:
            self.auth.login("nobody@b.com", "secret123")
        self.assertEqual(wrong_password.exception.message, INVALID_CREDENTIALS)
        self.assertEqual(unknown_email.exception.message, INVALID_CREDENTIALS)
        self.assertEqual(wrong_password.exception.kind, unknown_email.exception.kind)

    def test_deactivated_account_cannot_log_in(self) -> None:
        self.store.update_identity(self.registered.user.id, is_active=False)
        with self.assertRaises(UnauthorizedError) as ctx:
            self.auth.login("a@b.com", "secret123")
        self.assertEqual(ctx.exception.message, ACCOUNT_DEACTIVATED)

    def test_login_replaces_previous_refresh_token(self) -> None:
        self.auth.login("a@b.com", "secret123")
        with self.assertRaises(UnauthorizedError):
            self.auth.refresh(self.registered.user.id, self.registered.refresh_token)

    def test_login_includes_subscription(self) -> None:
        SubscriptionService(self.store).subscribe(self.registered.user.id, PlanType.MONTHLY)
        result = self.auth.login("a@b.com", "secret123")
        self.assertIsNotNone(result.user.subscription)
        self.assertEqual(result.user.subscription.plan_type, PlanType.MONTHLY)

    def test_token_failure_stores_nothing(self) -> None:
        store = MagicMock()
        store.find_identity_by_email.return_value = MagicMock(
            id="u1", email="a@b.com", role_name="free", is_active=True,
            password_hash=hash_password("secret123"),
        )
        tokens = MagicMock()
        tokens.issue.side_effect = RuntimeError("signing failed")
        with self.assertRaises(RuntimeError):
            AuthenticationService(store, tokens).login("a@b.com", "secret123")
        store.update_identity.assert_not_called()


class TestRefresh(_AuthTestCase):
    """Only the most recently issued refresh token is accepted."""

    def setUp(self) -> None:
        super().setUp()
        self.registered = self.auth.register("a@b.com", "alice", "secret123")
        self.user_id = self.registered.user.id

    def test_refresh_rotates(self) -> None:
        pair = self.auth.refresh(self.user_id, self.registered.refresh_token)
        self.assertNotEqual(pair.refresh_token, self.registered.refresh_token)
        stored = self.store.find_identity_by_id(self.user_id).refresh_token_hash
        self.assertTrue(verify_refresh_token(pair.refresh_token, stored))

    def test_rotated_token_cannot_be_reused(self) -> None:
        pair = self.auth.refresh(self.user_id, self.registered.refresh_token)
        with self.assertRaises(UnauthorizedError) as ctx:
            self.auth.refresh(self.user_id, self.registered.refresh_token)
        self.assertEqual(ctx.exception.message, ACCESS_DENIED)
        # The newer token still works.
        self.auth.refresh(self.user_id, pair.refresh_token)

    def test_refresh_after_logout_fails(self) -> None:
        self.auth.logout(self.user_id)
        with self.assertRaises(UnauthorizedError):
            self.auth.refresh(self.user_id, self.registered.refresh_token)

    def test_refresh_unknown_identity_fails(self) -> None:
        with self.assertRaises(UnauthorizedError):
            self.auth.refresh("missing-id", self.registered.refresh_token)

    def test_refresh_deactivated_identity_fails(self) -> None:
        self.store.update_identity(self.user_id, is_active=False)
        with self.assertRaises(UnauthorizedError):
            self.auth.refresh(self.user_id, self.registered.refresh_token)

    def test_refresh_from_token_uses_token_subject(self) -> None:
        pair = self.auth.refresh_from_token(self.registered.refresh_token)
        self.assertEqual(self.tokens.verify(pair.access_token).sub, self.user_id)

    def test_refresh_from_forged_token_fails(self) -> None:
        with self.assertRaises(UnauthorizedError):
            self.auth.refresh_from_token("forged.token.value")

    def test_refresh_from_access_token_fails(self) -> None:
        with self.assertRaises(UnauthorizedError):
            self.auth.refresh_from_token(self.registered.access_token)

    def test_refresh_from_expired_token_fails(self) -> None:
        stale = make_token_service(clock=lambda: utcnow() - timedelta(days=8))
        old = stale.issue(self.user_id, "a@b.com", "free").refresh_token
        with self.assertRaises(UnauthorizedError):
            self.auth.refresh_from_token(old)


class TestLogout(_AuthTestCase):
    def test_logout_clears_hash_and_is_idempotent(self) -> None:
        registered = self.auth.register("a@b.com", "alice", "secret123")
        self.auth.logout(registered.user.id)
        self.auth.logout(registered.user.id)
        self.assertIsNone(self.store.find_identity_by_id(registered.user.id).refresh_token_hash)

    def test_logout_of_unknown_identity_does_not_raise(self) -> None:
        self.auth.logout("missing-id")

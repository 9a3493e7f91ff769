"""Unit tests for streamgate.core.security: password and refresh-token hashing."""

import unittest

from streamgate.core.config import Settings
from streamgate.core.security import (
    dummy_password_hash,
    hash_password,
    hash_refresh_token,
    verify_password,
    verify_refresh_token,
)


class TestPasswordHashing(unittest.TestCase):
    """Password digests are salted bcrypt and never the plain text."""

    def test_hash_then_verify(self) -> None:
        digest = hash_password("secret123")
        self.assertNotEqual(digest, "secret123")
        self.assertTrue(verify_password("secret123", digest))
        self.assertFalse(verify_password("secret124", digest))

    def test_same_password_gets_different_salts(self) -> None:
        self.assertNotEqual(hash_password("secret123"), hash_password("secret123"))

    def test_cost_factor_comes_from_settings(self) -> None:
        # Test env sets BCRYPT_ROUNDS=4; production default is 10.
        self.assertTrue(hash_password("secret123").startswith("$2b$04$"))
        self.assertEqual(Settings.model_fields["BCRYPT_ROUNDS"].default, 10)

    def test_malformed_or_missing_digest_never_matches(self) -> None:
        self.assertFalse(verify_password("secret123", "not-a-bcrypt-hash"))
        self.assertFalse(verify_password("secret123", None))
        self.assertFalse(verify_password("secret123", ""))
        self.assertFalse(verify_password("", hash_password("secret123")))

    def test_dummy_hash_is_stable_and_rejects_arbitrary_input(self) -> None:
        self.assertIs(dummy_password_hash(), dummy_password_hash())
        self.assertFalse(verify_password("whatever", dummy_password_hash()))


class TestRefreshTokenHashing(unittest.TestCase):
    """Refresh tokens are long JWTs; the whole token must matter, not the first 72 bytes."""

    def test_hash_then_verify(self) -> None:
        token = "header." + "a" * 200 + ".signature"
        digest = hash_refresh_token(token)
        self.assertTrue(verify_refresh_token(token, digest))

    def test_tokens_sharing_a_long_prefix_do_not_collide(self) -> None:
        prefix = "x" * 100
        digest = hash_refresh_token(prefix + "-first")
        self.assertFalse(verify_refresh_token(prefix + "-second", digest))

    def test_missing_inputs_never_match(self) -> None:
        digest = hash_refresh_token("token")
        self.assertFalse(verify_refresh_token("", digest))
        self.assertFalse(verify_refresh_token("token", None))
        self.assertFalse(verify_refresh_token("token", "garbage"))

"""Register / login / refresh / logout orchestration."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from streamgate.core.errors import (
    ConflictError,
    ExpiredTokenError,
    InvalidTokenError,
    UnauthorizedError,
)
from streamgate.core.roles import RoleName
from streamgate.core.security import (
    dummy_password_hash,
    hash_password,
    hash_refresh_token,
    verify_password,
    verify_refresh_token,
)
from streamgate.schemas.auth import AuthResult, UserView
from streamgate.schemas.subscription import SubscriptionSnapshot
from streamgate.services.tokens import REFRESH_TOKEN_TYPE, TokenPair, TokenService

if TYPE_CHECKING:
    from streamgate.models import User
    from streamgate.services.credential_store import CredentialStore

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = "Invalid credentials"
ACCOUNT_DEACTIVATED = "Account is deactivated"
ACCESS_DENIED = "Access Denied"


def public_user(user: "User", *, with_subscription: bool = False) -> UserView:
    """Public view of a user: never includes the password or refresh-token hash."""
    subscription = None
    if with_subscription and user.subscription is not None:
        subscription = SubscriptionSnapshot.from_model(user.subscription)
    return UserView(
        id=user.id,
        email=user.email,
        username=user.username,
        role=user.role_name,
        subscription=subscription,
    )


class AuthenticationService:
    """
    Authentication state machine per identity.

    Holds no state of its own: every transition reads and writes the
    credential store. The stored refresh-token hash is overwritten on every
    login and refresh, so only the most recently issued refresh token works.
    """

    def __init__(self, store: "CredentialStore", token_service: TokenService) -> None:
        self._store = store
        self._tokens = token_service

    def register(
        self,
        email: str,
        username: str,
        password: str,
        role: RoleName | str = RoleName.FREE,
    ) -> AuthResult:
        if self._store.find_identity_by_email(email) is not None:
            raise ConflictError("Email already exists")

        role_name = role.value if isinstance(role, RoleName) else str(role)
        role_row = self._store.find_role_by_name(role_name)
        if role_row is None:
            raise ConflictError("Role not found")

        user = self._store.create_identity(
            email=email,
            username=username,
            hashed_password=hash_password(password),
            role=role_row,
        )
        pair = self._issue_and_persist(user)

        logger.info(
            "User registered",
            extra={"user_id": user.id, "role": user.role_name},
        )
        return AuthResult(
            access_token=pair.access_token,
            refresh_token=pair.refresh_token,
            user=public_user(user),
        )

    def login(self, email: str, password: str) -> AuthResult:
        user = self._store.find_identity_by_email(email)
        if user is None:
            # Same bcrypt work as a real check so response time does not reveal the email.
            verify_password(password, dummy_password_hash())
            logger.info("Login failed: invalid credentials")
            raise UnauthorizedError(INVALID_CREDENTIALS)
        if not verify_password(password, user.password_hash):
            logger.info("Login failed: invalid credentials")
            raise UnauthorizedError(INVALID_CREDENTIALS)
        if not user.is_active:
            logger.info("Login refused for deactivated user", extra={"user_id": user.id})
            raise UnauthorizedError(ACCOUNT_DEACTIVATED)

        pair = self._issue_and_persist(user)

        logger.info("User logged in", extra={"user_id": user.id})
        return AuthResult(
            access_token=pair.access_token,
            refresh_token=pair.refresh_token,
            user=public_user(user, with_subscription=True),
        )

    def refresh(self, identity_id: str, presented_refresh_token: str) -> TokenPair:
        """
        Exchange the current refresh token for a new pair (rotation).

        The new hash is committed before the pair is returned, so a caller
        never receives tokens that are not yet the stored ones. A concurrent
        refresh holding the same old token loses and gets Unauthorized.
        """
        user = self._store.find_identity_by_id(identity_id)
        if user is None or not user.refresh_token_hash:
            raise UnauthorizedError(ACCESS_DENIED)
        if not user.is_active:
            raise UnauthorizedError(ACCESS_DENIED)
        if not verify_refresh_token(presented_refresh_token, user.refresh_token_hash):
            logger.warning("Refresh token mismatch", extra={"user_id": user.id})
            raise UnauthorizedError(ACCESS_DENIED)

        pair = self._issue_and_persist(user)
        logger.debug("Tokens refreshed", extra={"user_id": user.id})
        return pair

    def refresh_from_token(self, presented_refresh_token: str) -> TokenPair:
        """
        Refresh using only the presented token (e.g. read from a cookie).

        The token's signature, expiry and type (refresh) are verified before
        its subject is trusted for the lookup; the hash comparison in refresh()
        still applies.
        """
        try:
            claims = self._tokens.verify(
                presented_refresh_token, expected_type=REFRESH_TOKEN_TYPE
            )
        except (InvalidTokenError, ExpiredTokenError) as e:
            raise UnauthorizedError(ACCESS_DENIED) from e
        return self.refresh(claims.sub, presented_refresh_token)

    def logout(self, identity_id: str) -> None:
        """Forget the stored refresh-token hash. Safe to call repeatedly."""
        self._store.update_identity(identity_id, refresh_token_hash=None)
        logger.info("User logged out", extra={"user_id": identity_id})

    def _issue_and_persist(self, user: "User") -> TokenPair:
        pair = self._tokens.issue(user.id, user.email, user.role_name)
        self._store.update_identity(
            user.id,
            refresh_token_hash=hash_refresh_token(pair.refresh_token),
        )
        return pair

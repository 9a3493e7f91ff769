"""Signing and verification of access/refresh token pairs (HMAC JWT)."""

from __future__ import annotations

import uuid
from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING, Any

import jwt

from streamgate.core.clock import utcnow
from streamgate.core.errors import ExpiredTokenError, InvalidTokenError

if TYPE_CHECKING:
    from streamgate.core.config import Settings

ACCESS_TOKEN_TTL_SECONDS = 900
REFRESH_TOKEN_TTL_SECONDS = 604800

# Custom claims shared by both tokens of a pair.
REQUIRED_CLAIMS = ("sub", "email", "role")

ACCESS_TOKEN_TYPE = "access"
REFRESH_TOKEN_TYPE = "refresh"


@dataclass(frozen=True)
class TokenPair:
    access_token: str
    refresh_token: str


@dataclass(frozen=True)
class TokenClaims:
    """Identity snapshot carried by a token. Not re-checked against the store."""

    sub: str
    email: str
    role: str
    exp: datetime | None = None
    iat: datetime | None = None
    jti: str | None = None
    token_type: str | None = None


class TokenService:
    """
    Issues and verifies the access/refresh token pair.

    The secret is passed in at construction (see get_token_service in
    streamgate.api.deps); nothing here reads global configuration.
    """

    ALGORITHM = "HS256"

    def __init__(
        self,
        secret: str,
        *,
        algorithm: str = ALGORITHM,
        access_ttl: timedelta = timedelta(seconds=ACCESS_TOKEN_TTL_SECONDS),
        refresh_ttl: timedelta = timedelta(seconds=REFRESH_TOKEN_TTL_SECONDS),
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        if not secret:
            raise ValueError("Token signing secret cannot be empty")
        self._secret = secret
        self._algorithm = algorithm
        self._access_ttl = access_ttl
        self._refresh_ttl = refresh_ttl
        self._clock = clock

    @classmethod
    def from_settings(cls, settings: "Settings") -> "TokenService":
        return cls(
            settings.JWT_SECRET.get_secret_value(),
            algorithm=settings.JWT_ALGORITHM,
            access_ttl=timedelta(seconds=settings.ACCESS_TOKEN_EXPIRE_SECONDS),
            refresh_ttl=timedelta(seconds=settings.REFRESH_TOKEN_EXPIRE_SECONDS),
        )

    @property
    def access_ttl(self) -> timedelta:
        return self._access_ttl

    @property
    def refresh_ttl(self) -> timedelta:
        return self._refresh_ttl

    def issue(self, identity_id: str, email: str, role: str) -> TokenPair:
        """
        Sign a fresh access/refresh pair for the identity.

        Both tokens are signed before the pair is built, so an error in either
        propagates and no half-issued pair is ever returned.
        """
        claims = {"sub": str(identity_id), "email": email, "role": role}
        now = self._clock()
        access_token = self._sign(claims, now, self._access_ttl, ACCESS_TOKEN_TYPE)
        refresh_token = self._sign(claims, now, self._refresh_ttl, REFRESH_TOKEN_TYPE)
        return TokenPair(access_token=access_token, refresh_token=refresh_token)

    def verify(self, token: str, expected_type: str | None = None) -> TokenClaims:
        """
        Check signature and expiry and return the claims.

        With expected_type ("access" or "refresh"), a token of the other type
        is rejected, so a refresh token never works as a bearer credential.

        Raises ExpiredTokenError when exp has passed and InvalidTokenError for
        any other failure (bad signature, malformed token, missing claims,
        wrong token type).
        """
        if not token:
            raise InvalidTokenError("Token is empty")
        try:
            payload = jwt.decode(
                token,
                self._secret,
                algorithms=[self._algorithm],
                options={"require": ["exp", *REQUIRED_CLAIMS]},
            )
        except jwt.ExpiredSignatureError as e:
            raise ExpiredTokenError("Token has expired") from e
        except jwt.PyJWTError as e:
            raise InvalidTokenError(f"Invalid token: {e}") from e
        claims = self._claims(payload)
        if expected_type is not None and claims.token_type != expected_type:
            raise InvalidTokenError(f"Expected a {expected_type} token")
        return claims

    def decode(self, token: str) -> TokenClaims:
        """
        Read claims WITHOUT verifying signature or expiry.

        Only for extracting the subject of a token that is checked by other
        means afterwards; never an authorization decision by itself.
        """
        if not token:
            raise InvalidTokenError("Token is empty")
        try:
            payload = jwt.decode(
                token,
                options={"verify_signature": False, "verify_exp": False},
                algorithms=[self._algorithm],
            )
        except jwt.PyJWTError as e:
            raise InvalidTokenError(f"Malformed token: {e}") from e
        return self._claims(payload)

    def _sign(
        self, claims: dict[str, Any], now: datetime, ttl: timedelta, token_type: str
    ) -> str:
        payload = {
            **claims,
            "type": token_type,
            "iat": now,
            "exp": now + ttl,
            # Two pairs issued in the same second must still differ.
            "jti": uuid.uuid4().hex,
        }
        return jwt.encode(payload, self._secret, algorithm=self._algorithm)

    @staticmethod
    def _claims(payload: dict[str, Any]) -> TokenClaims:
        try:
            sub = str(payload["sub"])
            email = str(payload["email"])
            role = str(payload["role"])
        except KeyError as e:
            raise InvalidTokenError(f"Malformed token payload: missing {e}") from e
        if not sub:
            raise InvalidTokenError("Malformed token payload: empty sub")
        return TokenClaims(
            sub=sub,
            email=email,
            role=role,
            exp=_timestamp(payload.get("exp")),
            iat=_timestamp(payload.get("iat")),
            jti=payload.get("jti"),
            token_type=payload.get("type"),
        )


def _timestamp(value: Any) -> datetime | None:
    if value is None:
        return None
    try:
        return datetime.fromtimestamp(int(value), tz=UTC)
    except (TypeError, ValueError, OverflowError) as e:
        raise InvalidTokenError(f"Malformed token timestamp: {value!r}") from e

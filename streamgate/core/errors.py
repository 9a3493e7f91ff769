"""Error taxonomy for the access-control core.

Every failure raised by the services derives from ``AccessError`` and carries
an ``ErrorKind``. The transport layer maps kinds to status codes
(see ``streamgate.api.exception_handlers``); nothing here is retried.
"""

from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from streamgate.services.guards import DenyReason


class ErrorKind(str, Enum):
    CONFLICT = "conflict"
    UNAUTHORIZED = "unauthorized"
    FORBIDDEN = "forbidden"
    EXPIRED_TOKEN = "expired_token"
    INVALID_TOKEN = "invalid_token"
    NOT_FOUND = "not_found"


class AccessError(Exception):
    """Base exception for all access-control errors."""

    kind: ErrorKind = ErrorKind.UNAUTHORIZED

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class ConflictError(AccessError):
    """Duplicate email, unknown role at registration, or an existing subscription."""

    kind = ErrorKind.CONFLICT


class UnauthorizedError(AccessError):
    """Bad credentials, inactive account, or a missing/mismatched refresh token."""

    kind = ErrorKind.UNAUTHORIZED


class ForbiddenError(AccessError):
    """Authenticated caller lacks the role or subscription for an operation."""

    kind = ErrorKind.FORBIDDEN

    def __init__(self, message: str, reason: "DenyReason") -> None:
        self.reason = reason
        super().__init__(message)


class InvalidTokenError(AccessError):
    """Token signature, structure or claims are invalid."""

    kind = ErrorKind.INVALID_TOKEN


class ExpiredTokenError(AccessError):
    """Token signature is valid but its exp has passed."""

    kind = ErrorKind.EXPIRED_TOKEN


class NotFoundError(AccessError):
    """Referenced user or subscription does not exist."""

    kind = ErrorKind.NOT_FOUND

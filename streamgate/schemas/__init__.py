"""Pydantic request/response schemas."""

from streamgate.schemas.auth import (
    AccessTokenResponse,
    AuthResponse,
    AuthResult,
    CurrentUser,
    LoginRequest,
    MessageResponse,
    RegisterRequest,
    UserView,
)
from streamgate.schemas.health import HealthResponse
from streamgate.schemas.roles import AdminOnlyResponse, RoleItem
from streamgate.schemas.subscription import (
    AccessDecisionResponse,
    CreateSubscriptionRequest,
    MySubscriptionResponse,
    SubscribeRequest,
    SubscriptionSnapshot,
    SubscriptionStatus,
)

__all__ = [
    "AccessDecisionResponse",
    "AccessTokenResponse",
    "AdminOnlyResponse",
    "AuthResponse",
    "AuthResult",
    "CreateSubscriptionRequest",
    "CurrentUser",
    "HealthResponse",
    "LoginRequest",
    "MessageResponse",
    "MySubscriptionResponse",
    "RegisterRequest",
    "RoleItem",
    "SubscribeRequest",
    "SubscriptionSnapshot",
    "SubscriptionStatus",
    "UserView",
]

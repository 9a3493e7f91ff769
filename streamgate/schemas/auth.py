"""Request/response schemas for auth endpoints and the authentication flow."""

from pydantic import BaseModel, ConfigDict, EmailStr, Field

from streamgate.core.roles import RoleName
from streamgate.core.security import (
    PASSWORD_MAX_LEN,
    PASSWORD_MIN_LEN,
    USERNAME_MAX_LEN,
    USERNAME_MIN_LEN,
)
from streamgate.schemas.subscription import SubscriptionSnapshot


class RegisterRequest(BaseModel):
    """
    New account; role defaults to free.

    Any role, admin included, may be requested at registration; callers that
    must not self-assign roles need a gate in front of this endpoint.
    """

    email: EmailStr = Field(..., description="User email address")
    username: str = Field(
        ...,
        min_length=USERNAME_MIN_LEN,
        max_length=USERNAME_MAX_LEN,
        description="Username for the account",
    )
    password: str = Field(
        ...,
        min_length=PASSWORD_MIN_LEN,
        max_length=PASSWORD_MAX_LEN,
        description="User password",
    )
    role: RoleName = Field(default=RoleName.FREE, description="User role")


class LoginRequest(BaseModel):
    """Credentials for login."""

    email: EmailStr = Field(..., description="User email address")
    password: str = Field(..., min_length=1, max_length=PASSWORD_MAX_LEN, description="Password")


class UserView(BaseModel):
    """Public user data. Never carries the password or refresh-token hash."""

    id: str
    email: str
    username: str
    role: str
    subscription: SubscriptionSnapshot | None = None


class AuthResult(BaseModel):
    """Outcome of register/login inside the service layer (refresh token included)."""

    access_token: str
    refresh_token: str
    user: UserView


class AuthResponse(BaseModel):
    """Register/login response body. The refresh token travels only in the HTTP-only cookie."""

    access_token: str = Field(..., description="JWT access token")
    token_type: str = Field(default="bearer", description="Token type")
    expires_in: int = Field(..., description="Access token lifetime in seconds")
    user: UserView


class AccessTokenResponse(BaseModel):
    """Response body for /auth/refresh."""

    access_token: str = Field(..., description="JWT access token")
    token_type: str = Field(default="bearer", description="Token type")
    expires_in: int = Field(..., description="Access token lifetime in seconds")


class MessageResponse(BaseModel):
    message: str


class CurrentUser(BaseModel):
    """Authenticated user resolved from a bearer token, with the role as currently stored."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    email: str
    username: str
    role: str

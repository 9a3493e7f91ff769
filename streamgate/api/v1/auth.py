"""Register, login, refresh (cookie) and logout endpoints."""

from fastapi import APIRouter, Request, Response, status

from streamgate.api.deps import AuthServiceDep, CurrentUserDep, SettingsDep
from streamgate.core.config import Settings
from streamgate.core.errors import UnauthorizedError
from streamgate.schemas.auth import (
    AccessTokenResponse,
    AuthResponse,
    AuthResult,
    CurrentUser,
    LoginRequest,
    MessageResponse,
    RegisterRequest,
)

router = APIRouter()


def _cookie_path(settings: Settings) -> str:
    # Only sent to the auth endpoints.
    return f"{settings.API_V1_PREFIX}/auth"


def _set_refresh_cookie(response: Response, token: str, settings: Settings) -> None:
    response.set_cookie(
        key=settings.REFRESH_COOKIE_NAME,
        value=token,
        httponly=True,
        secure=settings.COOKIE_SECURE,
        samesite=settings.COOKIE_SAMESITE,
        max_age=settings.REFRESH_TOKEN_EXPIRE_SECONDS,
        path=_cookie_path(settings),
    )


def _clear_refresh_cookie(response: Response, settings: Settings) -> None:
    response.delete_cookie(
        key=settings.REFRESH_COOKIE_NAME,
        path=_cookie_path(settings),
        httponly=True,
        secure=settings.COOKIE_SECURE,
        samesite=settings.COOKIE_SAMESITE,
    )


def _auth_response(result: AuthResult, settings: Settings) -> AuthResponse:
    return AuthResponse(
        access_token=result.access_token,
        token_type="bearer",
        expires_in=settings.ACCESS_TOKEN_EXPIRE_SECONDS,
        user=result.user,
    )


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
def register(
    body: RegisterRequest,
    response: Response,
    auth: AuthServiceDep,
    settings: SettingsDep,
) -> AuthResponse:
    """
    Create an account (role defaults to free) and sign the user in.
    Returns 409 if the email is already registered.
    """
    result = auth.register(body.email, body.username, body.password, body.role)
    _set_refresh_cookie(response, result.refresh_token, settings)
    return _auth_response(result, settings)


@router.post("/login", response_model=AuthResponse)
def login(
    body: LoginRequest,
    response: Response,
    auth: AuthServiceDep,
    settings: SettingsDep,
) -> AuthResponse:
    """
    Authenticate with email and password. The access token is returned in the
    body; the refresh token is set as an HTTP-only cookie.
    """
    result = auth.login(body.email, body.password)
    _set_refresh_cookie(response, result.refresh_token, settings)
    return _auth_response(result, settings)


@router.get(
    "/refresh",
    response_model=AccessTokenResponse,
    responses={401: {"description": "Missing, invalid or reused refresh token"}},
)
def refresh(
    request: Request,
    response: Response,
    auth: AuthServiceDep,
    settings: SettingsDep,
) -> AccessTokenResponse:
    """Exchange the refresh cookie for a new access token and a rotated cookie."""
    refresh_token = request.cookies.get(settings.REFRESH_COOKIE_NAME)
    if not refresh_token:
        raise UnauthorizedError("Refresh token not found")
    pair = auth.refresh_from_token(refresh_token)
    _set_refresh_cookie(response, pair.refresh_token, settings)
    return AccessTokenResponse(
        access_token=pair.access_token,
        token_type="bearer",
        expires_in=settings.ACCESS_TOKEN_EXPIRE_SECONDS,
    )


@router.post("/logout", response_model=MessageResponse)
def logout(
    response: Response,
    user: CurrentUserDep,
    auth: AuthServiceDep,
    settings: SettingsDep,
) -> MessageResponse:
    """Invalidate the stored refresh token and clear the cookie."""
    auth.logout(user.id)
    _clear_refresh_cookie(response, settings)
    return MessageResponse(message="Successfully logged out")


@router.get("/me", response_model=CurrentUser)
def me(user: CurrentUserDep) -> CurrentUser:
    """Current user with the role as stored now."""
    return CurrentUser(id=user.id, email=user.email, username=user.username, role=user.role_name)

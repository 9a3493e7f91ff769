"""FastAPI dependencies: services per request, bearer authentication, role gates."""

from collections.abc import Callable
from typing import Annotated

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from streamgate.core.config import Settings, get_settings
from streamgate.core.database import get_db
from streamgate.core.errors import UnauthorizedError
from streamgate.core.roles import RoleName
from streamgate.models import User
from streamgate.services.auth_flow import ACCOUNT_DEACTIVATED, AuthenticationService
from streamgate.services.credential_store import CredentialStore, SqlAlchemyCredentialStore
from streamgate.services.guards import authorize, enforce
from streamgate.services.subscriptions import SubscriptionService
from streamgate.services.tokens import ACCESS_TOKEN_TYPE, TokenService

security = HTTPBearer(auto_error=False)

SettingsDep = Annotated[Settings, Depends(get_settings)]


def get_store(db: Annotated[Session, Depends(get_db)]) -> CredentialStore:
    return SqlAlchemyCredentialStore(db)


def get_token_service(settings: SettingsDep) -> TokenService:
    return TokenService.from_settings(settings)


StoreDep = Annotated[CredentialStore, Depends(get_store)]
TokenServiceDep = Annotated[TokenService, Depends(get_token_service)]


def get_auth_service(store: StoreDep, tokens: TokenServiceDep) -> AuthenticationService:
    return AuthenticationService(store, tokens)


def get_subscription_service(store: StoreDep) -> SubscriptionService:
    return SubscriptionService(store)


def get_current_user(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
    store: StoreDep,
    tokens: TokenServiceDep,
) -> User:
    """
    Require a valid bearer access token and return the user it names.
    Refresh tokens are rejected here.

    The user is reloaded from the store, so the role used for authorization is
    the current one, not the snapshot in the token. Token errors propagate as
    InvalidTokenError/ExpiredTokenError (both 401).
    """
    if credentials is None or not credentials.credentials:
        raise UnauthorizedError("Not authenticated")
    claims = tokens.verify(credentials.credentials, expected_type=ACCESS_TOKEN_TYPE)
    user = store.find_identity_by_id(claims.sub)
    if user is None:
        raise UnauthorizedError("User not found")
    if not user.is_active:
        raise UnauthorizedError(ACCOUNT_DEACTIVATED)
    return user


CurrentUserDep = Annotated[User, Depends(get_current_user)]


def require_roles(*roles: RoleName) -> Callable[[User], User]:
    """Dependency factory: the current user must hold one of roles (403 otherwise)."""
    required = frozenset(roles)

    def dependency(user: CurrentUserDep) -> User:
        enforce(authorize(user, required))
        return user

    return dependency


AdminDep = Annotated[User, Depends(require_roles(RoleName.ADMIN))]
AuthServiceDep = Annotated[AuthenticationService, Depends(get_auth_service)]
SubscriptionServiceDep = Annotated[SubscriptionService, Depends(get_subscription_service)]

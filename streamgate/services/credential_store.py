"""Credential/session store: persisted users, roles, refresh-token hashes and subscriptions.

``CredentialStore`` is the contract the authentication flow, the guards and
the subscription service consume. ``SqlAlchemyCredentialStore`` implements it
on a SQLAlchemy session; every write is committed before the method returns.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from datetime import datetime

from sqlalchemy import func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from streamgate.core.errors import ConflictError
from streamgate.core.roles import PlanType, RoleName
from streamgate.models import Role, Subscription, User

logger = logging.getLogger(__name__)

# Columns update_identity may touch.
UPDATABLE_IDENTITY_FIELDS = frozenset({"refresh_token_hash", "is_active", "username"})


def normalize_email(email: str) -> str:
    return (email or "").strip().lower()


class CredentialStore(ABC):
    """Abstract persistence contract for identities, roles and subscriptions."""

    @abstractmethod
    def find_identity_by_email(self, email: str) -> User | None:
        """Return the user with this (normalized) email, or None."""

    @abstractmethod
    def find_identity_by_id(self, identity_id: str) -> User | None:
        """Return the user with this id, or None."""

    @abstractmethod
    def create_identity(
        self,
        email: str,
        username: str,
        hashed_password: str,
        role: Role,
    ) -> User:
        """Insert a new user. Raises ConflictError if the email is taken."""

    @abstractmethod
    def update_identity(self, identity_id: str, **fields: object) -> None:
        """
        Overwrite the given columns on one user row (last writer wins).

        Only keys in UPDATABLE_IDENTITY_FIELDS are accepted. Updating a
        missing row is a no-op.
        """

    @abstractmethod
    def count_identities(self) -> int:
        """Number of users."""

    @abstractmethod
    def find_role_by_name(self, name: str) -> Role | None:
        """Return the role row for name, or None if it does not resolve."""

    @abstractmethod
    def list_roles(self) -> list[Role]:
        """All role rows."""

    @abstractmethod
    def create_role(self, name: RoleName, description: str | None = None) -> Role:
        """Insert a role row."""

    @abstractmethod
    def find_subscription_by_identity_id(self, identity_id: str) -> Subscription | None:
        """Return the user's subscription, or None."""

    @abstractmethod
    def create_subscription(
        self,
        identity_id: str,
        plan_type: PlanType,
        start_date: datetime,
        expiry_date: datetime,
        *,
        is_active: bool = True,
        auto_renew: bool = False,
    ) -> Subscription:
        """Insert a subscription. Raises ConflictError if the user already has one."""

    @abstractmethod
    def save_subscription(self, subscription: Subscription) -> None:
        """Persist in-place changes to an existing subscription."""


class SqlAlchemyCredentialStore(CredentialStore):
    """CredentialStore backed by a SQLAlchemy session (one per request)."""

    def __init__(self, session: Session) -> None:
        self._session = session

    def find_identity_by_email(self, email: str) -> User | None:
        normalized = normalize_email(email)
        if not normalized:
            return None
        return self._session.execute(
            select(User).where(User.email == normalized)
        ).scalar_one_or_none()

    def find_identity_by_id(self, identity_id: str) -> User | None:
        if not identity_id:
            return None
        return self._session.get(User, str(identity_id))

    def create_identity(
        self,
        email: str,
        username: str,
        hashed_password: str,
        role: Role,
    ) -> User:
        user = User(
            email=normalize_email(email),
            username=username.strip(),
            password_hash=hashed_password,
            role=role,
            is_active=True,
        )
        self._session.add(user)
        try:
            self._session.commit()
        except IntegrityError as e:
            # Unique index on email lost a race with a concurrent registration.
            self._session.rollback()
            raise ConflictError("Email already exists") from e
        self._session.refresh(user)
        return user

    def update_identity(self, identity_id: str, **fields: object) -> None:
        unknown = set(fields) - UPDATABLE_IDENTITY_FIELDS
        if unknown:
            raise ValueError(f"Cannot update identity fields: {sorted(unknown)}")
        if not fields:
            return
        self._session.execute(
            update(User)
            .where(User.id == str(identity_id))
            .values(**fields, updated_at=func.now())
            .execution_options(synchronize_session="fetch")
        )
        self._session.commit()

    def count_identities(self) -> int:
        return int(self._session.execute(select(func.count(User.id))).scalar_one())

    def find_role_by_name(self, name: str) -> Role | None:
        value = name.value if isinstance(name, RoleName) else str(name or "")
        if not value:
            return None
        return self._session.execute(
            select(Role).where(Role.name == value)
        ).scalar_one_or_none()

    def list_roles(self) -> list[Role]:
        return list(self._session.execute(select(Role).order_by(Role.name)).scalars())

    def create_role(self, name: RoleName, description: str | None = None) -> Role:
        role = Role(name=RoleName(name).value, description=description)
        self._session.add(role)
        self._session.commit()
        self._session.refresh(role)
        return role

    def find_subscription_by_identity_id(self, identity_id: str) -> Subscription | None:
        if not identity_id:
            return None
        return self._session.execute(
            select(Subscription).where(Subscription.user_id == str(identity_id))
        ).scalar_one_or_none()

    def create_subscription(
        self,
        identity_id: str,
        plan_type: PlanType,
        start_date: datetime,
        expiry_date: datetime,
        *,
        is_active: bool = True,
        auto_renew: bool = False,
    ) -> Subscription:
        subscription = Subscription(
            user_id=str(identity_id),
            plan_type=PlanType(plan_type),
            start_date=start_date,
            expiry_date=expiry_date,
            is_active=is_active,
            auto_renew=auto_renew,
        )
        self._session.add(subscription)
        try:
            self._session.commit()
        except IntegrityError as e:
            self._session.rollback()
            raise ConflictError("User already has a subscription") from e
        self._session.refresh(subscription)
        return subscription

    def save_subscription(self, subscription: Subscription) -> None:
        self._session.add(subscription)
        self._session.commit()
        self._session.refresh(subscription)

"""One-time, idempotent seeding of roles and the default admin."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from streamgate.core.roles import ROLE_DESCRIPTIONS, RoleName
from streamgate.core.security import hash_password

if TYPE_CHECKING:
    from streamgate.core.config import Settings
    from streamgate.services.credential_store import CredentialStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SeedResult:
    roles_created: list[str]
    admin_created: bool


def seed_roles(store: "CredentialStore") -> list[str]:
    """Create any missing role rows. Returns the names created."""
    created: list[str] = []
    for name in RoleName:
        if store.find_role_by_name(name.value) is None:
            store.create_role(name, ROLE_DESCRIPTIONS[name])
            created.append(name.value)
    if created:
        logger.info("Seeded roles: %s", ", ".join(created))
    return created


def seed_default_admin(store: "CredentialStore", settings: "Settings") -> bool:
    """
    Create the configured default admin if no user has that email.

    Requires DEFAULT_ADMIN_EMAIL, DEFAULT_ADMIN_USERNAME and
    DEFAULT_ADMIN_PASSWORD; does nothing (with a warning) otherwise.
    Returns True when a user was created.
    """
    if not settings.default_admin_configured():
        logger.warning("Default admin credentials not configured; skipping admin seed.")
        return False

    email = settings.DEFAULT_ADMIN_EMAIL
    if store.find_identity_by_email(email) is not None:
        logger.info("Default admin already exists")
        return False

    role = store.find_role_by_name(RoleName.ADMIN.value)
    if role is None:
        raise RuntimeError("Admin role missing; run seed_roles first")

    store.create_identity(
        email=email,
        username=settings.DEFAULT_ADMIN_USERNAME,
        hashed_password=hash_password(settings.DEFAULT_ADMIN_PASSWORD.get_secret_value()),
        role=role,
    )
    logger.info("Default admin created")
    return True


def run_seed(store: "CredentialStore", settings: "Settings") -> SeedResult:
    """Seed roles, then the default admin. Safe to run on every deploy."""
    roles_created = seed_roles(store)
    admin_created = seed_default_admin(store, settings)
    return SeedResult(roles_created=roles_created, admin_created=admin_created)

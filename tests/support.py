"""Shared helpers: in-memory SQLite stores with the roles seeded."""

from datetime import UTC, datetime

from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from streamgate.models import Base
from streamgate.services.credential_store import SqlAlchemyCredentialStore
from streamgate.services.seeding import seed_roles
from streamgate.services.tokens import TokenService

TEST_SECRET = "test-secret-key-for-streamgate-unit-tests"

T0 = datetime(2025, 1, 1, 12, 0, 0, tzinfo=UTC)


def make_session_factory() -> sessionmaker:
    """Fresh in-memory database shared by every session from the factory."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


def make_store(seed: bool = True) -> tuple[SqlAlchemyCredentialStore, Session]:
    """Store over a new in-memory database, with admin/premium/free roles unless seed=False."""
    session = make_session_factory()()
    store = SqlAlchemyCredentialStore(session)
    if seed:
        seed_roles(store)
    return store, session


def make_token_service(clock=None) -> TokenService:
    if clock is None:
        return TokenService(TEST_SECRET)
    return TokenService(TEST_SECRET, clock=clock)

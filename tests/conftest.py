"""
Shared pytest fixtures for all tests.

Provides an isolated SQLite database per test and common principals.
"""

import os

# Settings are read at import time; point them at SQLite before anything loads
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("LOG_JSON", "false")

import uuid  # noqa: E402
from typing import Generator  # noqa: E402

import pytest  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import Session, sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from promptspace.models import load_models  # noqa: E402
from promptspace.teams import MembershipDirectory, TeamCRUD, TeamRole  # noqa: E402


# =============================================================================
# DATABASE FIXTURES
# =============================================================================

@pytest.fixture(scope="function")
def test_engine():
    """
    Create a fresh in-memory SQLite database for each test.

    Services commit their own transactions, so every test gets its own
    database instead of relying on rollback for isolation.
    """
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    load_models().create_all(bind=engine)

    yield engine

    engine.dispose()


@pytest.fixture(scope="function")
def db_session(test_engine) -> Generator[Session, None, None]:
    """Database session bound to the per-test engine."""
    TestingSessionLocal = sessionmaker(
        autocommit=False,
        autoflush=False,
        bind=test_engine,
    )

    session = TestingSessionLocal()

    try:
        yield session
    finally:
        session.rollback()
        session.close()


# =============================================================================
# PRINCIPALS
# =============================================================================

@pytest.fixture
def owner_id() -> uuid.UUID:
    return uuid.uuid4()


@pytest.fixture
def member_id() -> uuid.UUID:
    return uuid.uuid4()


@pytest.fixture
def outsider_id() -> uuid.UUID:
    return uuid.uuid4()


# =============================================================================
# TEAMS
# =============================================================================

@pytest.fixture
def team(db_session, owner_id):
    """Team created by ``owner_id``, who is its OWNER."""
    return TeamCRUD.create(db_session, owner_id, {"name": "Prompt Lab"})


@pytest.fixture
def editor_team(db_session, team, member_id):
    """``team`` with ``member_id`` registered as EDITOR."""
    MembershipDirectory.register(db_session, team.id, member_id, TeamRole.EDITOR)
    return team

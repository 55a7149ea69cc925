"""
Pytest configuration and fixtures.
"""

import os
import itertools
from contextlib import contextmanager
from typing import Callable, Dict, Generator
from unittest.mock import MagicMock, patch

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker

import sample_app.models  # noqa: F401  registers tables
from sample_app import app
from sample_app.core.database import Base, get_db
from sample_app.core.security import create_access_token
from sample_app.models.user import User
from sample_app.services import user as user_service

# Test database configuration
TEST_DB_PATH = "test.db"

test_engine = create_engine(
    f"sqlite:///{TEST_DB_PATH}",
    connect_args={"check_same_thread": False}  # Required for SQLite
)

TestingSessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=test_engine,
    expire_on_commit=False
)

DEFAULT_PASSWORD = "foobar"

_sequence = itertools.count(1)


@pytest.fixture(scope="session", autouse=True)
def db_engine():
    """
    Create the test database once per run and remove it afterwards.
    """
    if os.path.exists(TEST_DB_PATH):
        os.remove(TEST_DB_PATH)

    Base.metadata.create_all(bind=test_engine)

    yield test_engine

    Base.metadata.drop_all(bind=test_engine)
    test_engine.dispose()
    if os.path.exists(TEST_DB_PATH):
        os.remove(TEST_DB_PATH)


@pytest.fixture(scope="function")
def db_session(db_engine) -> Generator[Session, None, None]:
    """
    Session for one test. Every table is emptied afterwards so no data
    leaks between tests.
    """
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.rollback()
        for table in reversed(Base.metadata.sorted_tables):
            session.execute(table.delete())
        session.commit()
        session.close()


@pytest.fixture(scope="function", autouse=True)
def redis_client() -> Generator[MagicMock, None, None]:
    """
    Stand-in Redis client so tests never need a server.

    Behaves like an empty cache; tests can inspect or reconfigure it.
    """
    client = MagicMock()
    client.get.return_value = None
    client.setex.return_value = True
    client.delete.return_value = 0

    @contextmanager
    def mock_get_redis():
        yield client

    with patch("sample_app.core.cache.get_redis_client", mock_get_redis):
        yield client


@pytest.fixture(scope="function")
def client(db_session) -> Generator[TestClient, None, None]:
    """
    Test client whose requests share the test's database session.
    """
    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    try:
        with TestClient(app) as test_client:
            yield test_client
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def make_user(db_session) -> Callable[..., User]:
    """Factory for persisted users with unique names and emails."""
    def factory(name: str = None, email: str = None, password: str = DEFAULT_PASSWORD, admin: bool = False) -> User:
        n = next(_sequence)
        return user_service.create_user(
            db_session,
            name or f"Person {n}",
            email or f"person-{n}@example.com",
            password,
            password,
            admin=admin,
        )
    return factory


@pytest.fixture
def user(make_user) -> User:
    return make_user()


@pytest.fixture
def other_user(make_user) -> User:
    return make_user()


@pytest.fixture
def admin(make_user) -> User:
    return make_user(name="Admin", admin=True)


def auth_headers(user: User) -> Dict[str, str]:
    """Authorization header that signs the request in as user."""
    return {"Authorization": f"Bearer {create_access_token(user.id)}"}

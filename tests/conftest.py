"""Pytest fixtures and configuration for multizone tests."""

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from multizone.cache import FlagCache
from multizone.config import Settings
from multizone.database.database import build_engine, build_session_factory, init_db
from multizone.database.feature_flag_repository import FeatureFlagRepository
from multizone.database.user_repository import UserRepository
from multizone.services.feature_flags import FeatureFlagService


# Use in-memory SQLite database for tests
TEST_DATABASE_URL = "sqlite:///:memory:"

ZONE_MAIN_URL = "http://zone-main.test"
ZONE_ADMIN_URL = "http://zone-admin.test/admin"


@pytest.fixture(scope="function")
def engine():
    """In-memory SQLite engine with the schema created, fresh for each test."""
    engine = build_engine(TEST_DATABASE_URL)
    init_db(engine)
    try:
        yield engine
    finally:
        engine.dispose()


@pytest.fixture(scope="function")
def db_session(engine):
    """Create a database session for testing."""
    session = build_session_factory(engine)()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def user_repository(db_session: Session):
    """Create a UserRepository instance for testing."""
    return UserRepository(db_session)


@pytest.fixture
def feature_flag_repository(db_session: Session):
    """Create a FeatureFlagRepository instance for testing."""
    return FeatureFlagRepository(db_session)


@pytest.fixture
def flag_cache():
    return FlagCache()


@pytest.fixture
def feature_flag_service(feature_flag_repository, flag_cache):
    return FeatureFlagService(feature_flag_repository, flag_cache)


@pytest.fixture
def test_settings():
    """Settings pointing at an in-memory database and fake zone URLs."""
    return Settings(
        database_url=TEST_DATABASE_URL,
        zone_main_url=ZONE_MAIN_URL,
        zone_admin_url=ZONE_ADMIN_URL,
    )


@pytest.fixture
def app(test_settings):
    from multizone.api.app import create_app
    return create_app(test_settings)


@pytest.fixture
def test_client(app):
    """Create a FastAPI test client; entering it runs startup (schema creation)."""
    with TestClient(app) as client:
        yield client

"""Pytest fixtures for Preventa backend tests."""

from collections.abc import Generator
from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker

from preventa.core.rate_limit import limiter
from preventa.core.security import create_access_token, get_password_hash
from preventa.database import get_session_factory
from preventa.main import app
from preventa.models import Base, User
from preventa.services.health import HealthService
from preventa.services.openai_service import get_ai_service
from preventa.services.progress import ProgressCalculator, ProgressTracker, get_progress_tracker
from preventa.services.tracking import SQLDocumentStore

TEST_PASSWORD = "correct-horse-battery"


@pytest.fixture(scope="function")
def session_factory(tmp_path) -> Generator[sessionmaker, None, None]:
    """Fresh file-backed SQLite database for each test.

    A file (not :memory:) so sessions opened from executor threads see the
    same data.
    """
    engine = create_engine(
        f"sqlite:///{tmp_path / 'preventa_test.db'}",
        connect_args={"check_same_thread": False},
    )
    Base.metadata.create_all(bind=engine)
    factory = sessionmaker(autocommit=False, autoflush=False, bind=engine)

    yield factory

    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def test_db(session_factory: sessionmaker) -> Generator[Session, None, None]:
    db = session_factory()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def health_service(session_factory: sessionmaker) -> HealthService:
    return HealthService(session_factory)


@pytest.fixture
def document_store(session_factory: sessionmaker) -> SQLDocumentStore:
    return SQLDocumentStore(session_factory)


@pytest.fixture
def tracker(health_service: HealthService, document_store: SQLDocumentStore) -> ProgressTracker:
    return ProgressTracker(ProgressCalculator(health_service, document_store))


@pytest.fixture
def client(session_factory: sessionmaker, tracker: ProgressTracker) -> Generator[TestClient, None, None]:
    """Create a test client wired to the test database."""
    app.dependency_overrides[get_session_factory] = lambda: session_factory
    app.dependency_overrides[get_progress_tracker] = lambda: tracker
    limiter.enabled = False

    yield TestClient(app)

    limiter.enabled = True
    app.dependency_overrides.clear()


@pytest.fixture
def password() -> str:
    return TEST_PASSWORD


@pytest.fixture
def user(test_db: Session) -> User:
    """A registered user with default goals."""
    account = User(
        username="alex",
        password_hash=get_password_hash(TEST_PASSWORD),
        display_name="Alex",
    )
    test_db.add(account)
    test_db.commit()
    test_db.refresh(account)
    return account


@pytest.fixture
def auth_token(user: User) -> str:
    """Create a valid authentication token for tests."""
    return create_access_token(uid=user.uid, username=user.username)


@pytest.fixture
def auth_headers(auth_token: str) -> dict:
    """Create authorization headers for authenticated requests."""
    return {"Authorization": f"Bearer {auth_token}"}


@pytest.fixture
def mock_ai_service() -> Generator[MagicMock, None, None]:
    """Stand-in for the OpenAI-backed service."""
    instance = MagicMock()
    instance.model = "gpt-test"
    instance.is_configured = True
    instance.generate_health_insight = AsyncMock(return_value="Nice work today. Try a walk after dinner.")
    app.dependency_overrides[get_ai_service] = lambda: instance
    yield instance
    app.dependency_overrides.pop(get_ai_service, None)

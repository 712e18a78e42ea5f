import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from checkify.config import get_settings
from checkify.database.base import Base
from checkify.models import NotionDatabase, TodoList, UserProfile

# Ensure all models are imported so they're registered with Base.metadata
__all__ = ["NotionDatabase", "TodoList", "UserProfile"]


def _set_sqlite_pragma(dbapi_connection, connection_record):
    """Enable foreign key enforcement in SQLite."""
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


@pytest.fixture(autouse=True)
def fast_settings(monkeypatch):
    """Drop pacing delays and outside configuration so tests run instantly and offline."""
    monkeypatch.setenv("NOTION_REQUEST_DELAY_SECONDS", "0")
    monkeypatch.setenv("SYNC_BATCH_DELAY_SECONDS", "0")
    monkeypatch.setenv("STREAM_BATCH_DELAY_SECONDS", "0")
    monkeypatch.setenv("UPSTREAM_MAX_ATTEMPTS", "1")
    monkeypatch.delenv("STRIPE_SECRET_KEY", raising=False)
    monkeypatch.delenv("DEV_USER_ID", raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def engine():
    """Create an in-memory SQLite engine for testing.

    Uses StaticPool to ensure all connections share the same in-memory database.
    """
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        echo=False,
    )
    event.listen(engine, "connect", _set_sqlite_pragma)
    Base.metadata.create_all(engine)
    yield engine
    Base.metadata.drop_all(engine)


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autocommit=False, autoflush=False)


@pytest.fixture
def session(session_factory) -> Session:
    """Create a test database session."""
    session = session_factory()
    yield session
    session.rollback()
    session.close()


@pytest.fixture
def test_user_id() -> str:
    """Provide a consistent test user ID."""
    return "test-user-00000000-0000-0000-0000-000000000001"


@pytest.fixture
def notion_database(session: Session, test_user_id: str) -> NotionDatabase:
    database = NotionDatabase(
        notion_database_id="db-0001",
        user_id=test_user_id,
        access_token="secret_notion_token",
    )
    session.add(database)
    session.commit()
    return database


@pytest.fixture
def todo_list(session: Session, test_user_id: str, notion_database: NotionDatabase) -> TodoList:
    todo_list = TodoList(
        todo_list_id="list-0001",
        user_id=test_user_id,
        notion_database_id=notion_database.notion_database_id,
        notion_sync_database_id="sync-db-0001",
    )
    session.add(todo_list)
    session.commit()
    session.refresh(todo_list)
    return todo_list


@pytest.fixture
def user_profile(session: Session, test_user_id: str) -> UserProfile:
    profile = UserProfile(user_id=test_user_id, subscription_tier="free", subscription_status="active")
    session.add(profile)
    session.commit()
    return profile


@pytest.fixture
def client(session_factory, test_user_id: str) -> TestClient:
    """
    Create a FastAPI test client with in-memory database.

    Auth is overridden to always return the test user.
    """
    from checkify.auth import dependencies as auth_deps
    from checkify.auth.schemas import User
    from checkify.database import session as session_module
    from checkify.main import app

    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    def override_get_current_user() -> User:
        return User(id=test_user_id, email="test@test.com")

    app.dependency_overrides[session_module.get_db] = override_get_db
    app.dependency_overrides[session_module.get_session_factory] = lambda: session_factory
    app.dependency_overrides[auth_deps.get_current_user] = override_get_current_user

    with TestClient(app) as client:
        yield client

    app.dependency_overrides.clear()

import os
import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

# Ensure background jobs stay disabled during tests
os.environ.setdefault("ENABLE_BACKGROUND_JOBS", "false")

from moodflix.database import Base, get_db
from moodflix.main import app
from moodflix.utils.cache import clear_all_cache

SQLALCHEMY_DATABASE_URL = "sqlite://"

engine = create_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)

TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

PASSWORD = "Password123"


@pytest.fixture(autouse=True)
def fresh_cache():
    """Cached TMDB responses must not leak between tests."""
    clear_all_cache()
    yield
    clear_all_cache()


@pytest.fixture
def db_session():
    """Provide a clean database session for each test."""
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client(db_session, monkeypatch):
    """FastAPI test client with the database dependency overridden."""

    def override_get_db():
        test_db = TestingSessionLocal()
        try:
            yield test_db
        finally:
            test_db.close()

    app.dependency_overrides[get_db] = override_get_db
    monkeypatch.setenv("ENABLE_BACKGROUND_JOBS", "false")
    monkeypatch.setenv("ADMIN_USERNAMES", "boss")

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.pop(get_db, None)


def sign_up(client, username: str, password: str = PASSWORD) -> str:
    """Register and log in, returning the session token."""
    response = client.post("/api/auth/register", json={"username": username, "password": password})
    assert response.status_code == 201, response.text
    response = client.post("/api/auth/login", json={"username": username, "password": password})
    assert response.status_code == 200, response.text
    return response.json()["access_token"]


@pytest.fixture
def user_token(client):
    return sign_up(client, "alice")


@pytest.fixture
def other_token(client):
    return sign_up(client, "bob")


@pytest.fixture
def admin_token(client):
    return sign_up(client, "boss")


def user_data(client, action: str, token=None, **data):
    return client.post("/functions/user-data", json={"action": action, "token": token, "data": data})

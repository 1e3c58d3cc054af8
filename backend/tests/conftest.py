import os
from typing import Generator

import pytest
from fastapi.testclient import TestClient

# Settings are read once at import: point them at an in-memory database first
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["SECRET_KEY"] = "test-secret-key"
os.environ["BCRYPT_ROUNDS"] = "4"

from dating_api.core.database import Base, SessionLocal, engine  # noqa: E402
from dating_api.main import app  # noqa: E402


@pytest.fixture()
def anyio_backend():
    return "asyncio"


@pytest.fixture(autouse=True)
def clean_db():
    """Reset schema for each test for isolation."""
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield


@pytest.fixture()
def client(clean_db) -> Generator[TestClient, None, None]:
    """FastAPI test client that also triggers startup/shutdown hooks."""
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture()
def db_session():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def make_profile(**overrides) -> dict:
    profile = {
        "name": "Alice Example",
        "nickname": "alice",
        "email": "alice@example.com",
        "password": "secret123",
        "role": "woman",
        "birthday": "1995-04-02",
        "gender": "female",
        "interested_in_genders": ["male", "other"],
        "interested_in_roles": ["man"],
    }
    profile.update(overrides)
    return profile


@pytest.fixture()
def profile_factory():
    return make_profile


@pytest.fixture()
def register_user(client):
    """Register a user through the API and return the response body"""

    def _register(**overrides) -> dict:
        response = client.post("/api/auth/register", json=make_profile(**overrides))
        assert response.status_code == 201, response.text
        return response.json()

    return _register


@pytest.fixture()
def auth_headers():
    def _headers(token: str) -> dict:
        return {"Authorization": f"Bearer {token}"}

    return _headers

"""
Shared fixtures for the matchmaking API tests.

The app runs against an in-memory SQLite database (see app/database.py);
tables are recreated for every test. Access tokens are minted locally
with the same secret the app verifies against.
"""

import os

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["SUPABASE_URL"] = "http://localhost:54321"
os.environ["SUPABASE_KEY"] = "test-anon-key"
os.environ["SUPABASE_JWT_SECRET"] = "test-jwt-secret"
os.environ["SUPABASE_SERVICE_ROLE_KEY"] = "test-service-role-key"

import uuid
from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient
from jose import jwt
from sqlalchemy.exc import OperationalError
from sqlalchemy import func
from sqlmodel import Session, SQLModel, select

from app.database import engine
from app.main import app
from app.models.match import Match
from app.models.profile import Profile

JWT_SECRET = os.environ["SUPABASE_JWT_SECRET"]


def make_token(
    sub: uuid.UUID | str,
    email: str = "someone@example.com",
    name: str | None = None,
    expires_in: timedelta = timedelta(hours=1),
    secret: str = JWT_SECRET,
) -> str:
    claims = {
        "sub": str(sub),
        "email": email,
        "aud": "authenticated",
        "exp": datetime.now(timezone.utc) + expires_in,
        "user_metadata": {"name": name} if name else {},
    }
    return jwt.encode(claims, secret, algorithm="HS256")


def auth_headers(sub: uuid.UUID | str, **kwargs) -> dict[str, str]:
    return {"Authorization": f"Bearer {make_token(sub, **kwargs)}"}


def db_error(*args, **kwargs):
    """Stand-in for a repository call whose round trip fails."""
    raise OperationalError("SELECT 1", {}, Exception("connection reset"))


@pytest.fixture(autouse=True)
def reset_db():
    SQLModel.metadata.drop_all(engine)
    SQLModel.metadata.create_all(engine)
    yield


@pytest.fixture
def client():
    return TestClient(app)


@pytest.fixture
def create_profile():
    """Factory: insert a Profile and return its id."""

    def _create(**fields) -> uuid.UUID:
        fields.setdefault("id", uuid.uuid4())
        fields.setdefault("name", "Test User")
        with Session(engine) as session:
            profile = Profile(**fields)
            session.add(profile)
            session.commit()
            return fields["id"]

    return _create


@pytest.fixture
def get_profile():
    def _get(profile_id: uuid.UUID) -> Profile | None:
        with Session(engine) as session:
            return session.get(Profile, profile_id)

    return _get


@pytest.fixture
def count_matches():
    def _count() -> int:
        with Session(engine) as session:
            return session.exec(select(func.count()).select_from(Match)).one()

    return _count


@pytest.fixture
def list_matches():
    def _list() -> list[Match]:
        with Session(engine) as session:
            return list(session.exec(select(Match)).all())

    return _list


@pytest.fixture
def ordered_ids():
    """Two fresh UUIDs, smaller first."""
    a, b = uuid.uuid4(), uuid.uuid4()
    return (a, b) if a < b else (b, a)

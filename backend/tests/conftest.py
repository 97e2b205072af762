"""Pytest configuration and shared fixtures."""

import os

# Must be set before the app modules read their configuration.
os.environ.setdefault("MONGODB_URI", "mongodb://localhost:27017/shopfront_test")
os.environ.setdefault("JWT_SECRET", "test-jwt-secret")
os.environ.setdefault("GOOGLE_CLIENT_ID", "test-client-id")
os.environ.setdefault("GOOGLE_CLIENT_SECRET", "test-client-secret")
os.environ["ENV"] = "test"
os.environ["STORE_RETRY_BACKOFF_SECONDS"] = "0"

from datetime import datetime

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from mongomock_motor import AsyncMongoMockClient

import database
from config.env import SESSION_COOKIE_NAME
from main import app
from utils.identity_store import create_user
from utils.indexes import ensure_indexes
from utils.sessions import create_session


@pytest_asyncio.fixture
async def db(monkeypatch):
    """In-memory Mongo with the production indexes, swapped in for get_db()."""
    mock_db = AsyncMongoMockClient()["shopfront_test"]
    await ensure_indexes(mock_db)
    monkeypatch.setattr(database, "db", mock_db)
    return mock_db


@pytest_asyncio.fixture
async def client(db):
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()


@pytest.fixture
def make_user(db):
    """Create an identity at a given onboarding point."""

    async def _make_user(
        *,
        email: str = "ann@example.com",
        first_name: str | None = None,
        is_seller: bool | None = None,
        seller_submitted: bool = False,
        **extra,
    ) -> dict:
        data = {"email": email, **extra}
        if first_name is not None:
            data["profile"] = {"first_name": first_name}
        if is_seller is not None:
            data["is_seller"] = is_seller
        if seller_submitted:
            data["seller_profile"] = {
                "organisation_name": "Ann's Pottery",
                "social_handles": {},
                "employment_history": [],
                "submitted_at": datetime.utcnow(),
            }
        return await create_user(db, data)

    return _make_user


@pytest.fixture
def login_as(db, client):
    async def _login_as(user: dict) -> str:
        token = await create_session(db, user["_id"])
        client.cookies.set(SESSION_COOKIE_NAME, token)
        return token

    return _login_as

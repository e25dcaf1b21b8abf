"""
tests/conftest.py -- Shared test fixtures for SessionGate tests.

This module provides:
  - make_user_store(): isolated named shared-memory SQLite UserStore
  - _patch_lifespan(): wires test collaborators into app.state, bypassing real startup
  - server: ApiHarness (TestClient) against the real app with a seeded user

Design: Named shared-memory SQLite URIs (not plain :memory:) are required
because TestClient runs sync work in a thread pool. Plain :memory: DBs are
per-connection and would present a blank schema to each worker thread.

DEBUG and BCRYPT_ROUNDS must be set before any app import: DEBUG so
get_settings() auto-generates SECRET_KEY instead of raising, BCRYPT_ROUNDS
so hashing in tests is fast.
"""

from __future__ import annotations

import os
from collections.abc import Generator
from contextlib import asynccontextmanager
from dataclasses import dataclass

# Set before any auth/core import.
os.environ.setdefault("DEBUG", "true")
os.environ.setdefault("BCRYPT_ROUNDS", "4")

import pytest
from fastapi.testclient import TestClient

from api.limiter import limiter
from api.main import app
from auth.models import User
from auth.passwords import CredentialStore
from auth.store import UserStore
from auth.tokens import TokenService
from core.config import get_settings

TEST_USERNAME = "testuser"
TEST_PASSWORD = "password123"


def make_user_store(db_suffix: str) -> UserStore:
    """Create an isolated named shared-memory SQLite store.

    Args:
        db_suffix: Unique string appended to the DB name so test modules
                   don't share state.
    """
    return UserStore(db_url=f"sqlite:///file:test_auth_{db_suffix}?mode=memory&cache=shared&uri=true")


def _patch_lifespan(user_store: UserStore, credentials: CredentialStore, tokens: TokenService):
    """Return an async context manager that replaces the real lifespan."""

    @asynccontextmanager
    async def test_lifespan(app):
        app.state.user_store = user_store
        app.state.credentials = credentials
        app.state.tokens = tokens
        yield

    return test_lifespan


@dataclass
class ApiHarness:
    client: TestClient
    user_store: UserStore
    credentials: CredentialStore
    tokens: TokenService
    user: User


@pytest.fixture(scope="session")
def credentials() -> CredentialStore:
    return CredentialStore(rounds=get_settings().bcrypt_rounds)


@pytest.fixture(scope="session")
def tokens() -> TokenService:
    return TokenService.from_settings(get_settings())


@pytest.fixture(scope="module")
def server(request, credentials: CredentialStore, tokens: TokenService) -> Generator[ApiHarness, None, None]:
    """Yield an ApiHarness for API integration tests.

    The TestClient uses the real FastAPI app with a patched lifespan so tests
    hit real route handlers but use an isolated in-memory user store. The
    user testuser / password123 exists before the client starts. Rate
    limiting is switched off so test volume never trips it.
    """
    user_store = make_user_store(request.module.__name__.rsplit(".", 1)[-1])
    user = user_store.create_user(User(username=TEST_USERNAME, password_hash=credentials.hash(TEST_PASSWORD)))

    app.router.lifespan_context = _patch_lifespan(user_store, credentials, tokens)
    limiter.enabled = False

    with TestClient(app, raise_server_exceptions=False) as client:
        yield ApiHarness(client=client, user_store=user_store, credentials=credentials, tokens=tokens, user=user)

    limiter.enabled = True
    user_store.close()


@pytest.fixture()
def user_store() -> Generator[UserStore, None, None]:
    """A fresh single-connection in-memory store for unit tests."""
    store = UserStore(db_url="sqlite:///:memory:")
    yield store
    store.close()

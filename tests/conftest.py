"""
tests/conftest.py -- Shared test fixtures for TokenAuth.

This module provides:
  - db_url:     a fresh named shared-memory SQLite URL per test
  - accounts / denylist / verifier / codec / sessions: the auth components
                wired together against that database
  - api_client: TestClient running the real FastAPI app with a patched
                lifespan that uses isolated in-memory stores

Design: Named shared-memory SQLite URIs (not plain :memory:) are required
because TestClient runs sync route handlers in a thread pool, and because the
account store and the denylist each open their own engine. Plain :memory: DBs
are per-connection and would present a blank schema to every other connection.

DEBUG and BCRYPT_ROUNDS must be set before any app import: get_settings()
then auto-generates SECRET_KEY instead of raising, and bcrypt runs at its
cheapest cost factor.
"""

from __future__ import annotations

import asyncio
import os
import uuid
from collections.abc import Generator
from contextlib import asynccontextmanager

# CRITICAL: Set before any auth/core/api import.
os.environ.setdefault("DEBUG", "true")
os.environ.setdefault("BCRYPT_ROUNDS", "4")

import pytest
from fastapi.testclient import TestClient

from api.main import app, build_session_service
from auth.denylist import DenylistStore
from auth.passwords import CredentialVerifier
from auth.sessions import SessionService
from auth.store import AccountStore
from auth.tokens import TokenCodec
from core.config import get_settings

TEST_SECRET = "test-secret-key-0123456789abcdef-0123456789"
TEST_LIFETIME = 1800


def memory_db_url() -> str:
    return f"sqlite:///file:test_auth_{uuid.uuid4().hex}?mode=memory&cache=shared&uri=true"


# ---------------------------------------------------------------------------
# Component fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def db_url() -> str:
    return memory_db_url()


@pytest.fixture
def accounts(db_url: str) -> Generator[AccountStore, None, None]:
    store = AccountStore(db_url)
    yield store
    store.close()


@pytest.fixture
def denylist(db_url: str) -> Generator[DenylistStore, None, None]:
    store = DenylistStore(db_url)
    yield store
    store.close()


@pytest.fixture
def verifier(accounts: AccountStore) -> CredentialVerifier:
    return CredentialVerifier(accounts, rounds=4)


@pytest.fixture
def codec() -> TokenCodec:
    return TokenCodec(secret_key=TEST_SECRET, lifetime_seconds=TEST_LIFETIME)


@pytest.fixture
def sessions(
    accounts: AccountStore,
    verifier: CredentialVerifier,
    codec: TokenCodec,
    denylist: DenylistStore,
) -> SessionService:
    return SessionService(accounts, verifier, codec, denylist)


# ---------------------------------------------------------------------------
# HTTP fixture
# ---------------------------------------------------------------------------


def _patch_lifespan(accounts: AccountStore, denylist: DenylistStore):
    """Return an async context manager that replaces the real lifespan.

    Wires the test stores into app.state. The purge_task is a long-sleeping
    coroutine: a real asyncio.Task is required because shutdown calls .cancel().
    """

    @asynccontextmanager
    async def test_lifespan(app):
        app.state.accounts = accounts
        app.state.denylist = denylist
        app.state.sessions = build_session_service(get_settings(), accounts, denylist)
        app.state.purge_task = asyncio.create_task(asyncio.sleep(99999))
        yield
        app.state.purge_task.cancel()

    return test_lifespan


@pytest.fixture
def api_client(accounts: AccountStore, denylist: DenylistStore) -> Generator[TestClient, None, None]:
    """Yield a TestClient over the real app with empty, isolated stores.

    Function-scoped: the scenario tests depend on starting with no accounts
    and an empty denylist.
    """
    app.router.lifespan_context = _patch_lifespan(accounts, denylist)
    with TestClient(app, raise_server_exceptions=True) as client:
        yield client

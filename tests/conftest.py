"""
Shared test fixtures.

The Supabase client is swapped for tests.fakes.FakeSupabase through FastAPI's
dependency overrides, so no test touches the network.
"""

import pytest
from fastapi.testclient import TestClient

from shelfbook.database.supabase_client import get_supabase
from shelfbook.main import app, limiter
from shelfbook.modules.auth.service import clear_auth_cache
from tests.fakes import FakeSupabase

ALICE_ID = "11111111-aaaa-4aaa-8aaa-111111111111"
BOB_ID = "22222222-bbbb-4bbb-8bbb-222222222222"


@pytest.fixture
def fake_supabase() -> FakeSupabase:
    return FakeSupabase()


@pytest.fixture(autouse=True)
def reset_auth_cache():
    """Token lookups are cached per process; start every test empty."""
    clear_auth_cache()
    yield
    clear_auth_cache()


@pytest.fixture(autouse=True)
def reset_rate_limits():
    """Request counts are kept in memory per process; start every test at zero."""
    limiter.reset()
    yield


@pytest.fixture
def client(fake_supabase: FakeSupabase):
    app.dependency_overrides[get_supabase] = lambda: fake_supabase
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def auth_headers():
    """Factory fixture for bearer headers."""

    def _auth_headers(token: str) -> dict:
        return {"Authorization": f"Bearer {token}"}

    return _auth_headers


@pytest.fixture
def alice(fake_supabase: FakeSupabase) -> dict:
    """Authenticated user without a profile."""
    fake_supabase.auth.add_user(ALICE_ID, "alice@example.com", token="alice-token")
    return {"id": ALICE_ID, "email": "alice@example.com", "token": "alice-token"}


@pytest.fixture
def bob(fake_supabase: FakeSupabase) -> dict:
    fake_supabase.auth.add_user(BOB_ID, "bob@example.com", token="bob-token")
    return {"id": BOB_ID, "email": "bob@example.com", "token": "bob-token"}


@pytest.fixture
def make_profile(fake_supabase: FakeSupabase):
    """Insert a profile row directly into the fake store."""

    def _make_profile(user: dict, username: str, **fields) -> dict:
        row = {"user_id": user["id"], "username": username, "display_name": username}
        row.update(fields)
        return fake_supabase.insert_row("profiles", row)

    return _make_profile


@pytest.fixture
def alice_profile(alice: dict, make_profile) -> dict:
    return make_profile(alice, "alice", bio="Hello", avatar_url="https://cdn.example.com/old.png")


@pytest.fixture
def make_section(fake_supabase: FakeSupabase):
    """Insert a section row directly into the fake store."""

    def _make_section(profile: dict, type: str, content: dict, position: int, title: str = None, visible: bool = True) -> dict:
        return fake_supabase.insert_row("sections", {
            "profile_id": profile["id"],
            "title": title or f"{type} {position}",
            "type": type,
            "content": content,
            "position": position,
            "visible": visible,
        })

    return _make_section

import threading

import pytest
from fastapi.testclient import TestClient

from shelfbook.core.errors import ConfigurationError
from shelfbook.database import supabase_client
from shelfbook.database.supabase_client import SupabaseClient, get_supabase
from shelfbook.main import app


@pytest.fixture
def configured(monkeypatch):
    created = []

    def fake_create_client(url, key):
        created.append((url, key))
        return object()

    monkeypatch.setattr(supabase_client.settings, "supabase_url", "https://proj.supabase.co")
    monkeypatch.setattr(supabase_client.settings, "supabase_key", "anon-key")
    monkeypatch.setattr(supabase_client, "create_client", fake_create_client)
    SupabaseClient.reset_client()
    yield created
    SupabaseClient.reset_client()


class TestSupabaseClient:
    def test_memoized(self, configured):
        first = get_supabase()
        assert get_supabase() is first
        assert configured == [("https://proj.supabase.co", "anon-key")]

    def test_concurrent_first_access_builds_one_client(self, configured):
        results = []
        threads = [threading.Thread(target=lambda: results.append(SupabaseClient.get_client())) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        assert len(configured) == 1
        assert all(r is results[0] for r in results)

    @pytest.mark.parametrize("url, key", [("", "anon-key"), ("https://proj.supabase.co", ""), ("", "")])
    def test_missing_configuration(self, monkeypatch, url, key):
        monkeypatch.setattr(supabase_client.settings, "supabase_url", url)
        monkeypatch.setattr(supabase_client.settings, "supabase_key", key)
        SupabaseClient.reset_client()
        with pytest.raises(ConfigurationError):
            get_supabase()
        assert SupabaseClient._client is None

    def test_reset(self, configured):
        first = get_supabase()
        SupabaseClient.reset_client()
        assert get_supabase() is not first
        assert len(configured) == 2


class TestUnconfiguredApp:
    @pytest.fixture
    def unconfigured(self, monkeypatch):
        monkeypatch.setattr(supabase_client.settings, "supabase_url", "")
        monkeypatch.setattr(supabase_client.settings, "supabase_key", "")
        SupabaseClient.reset_client()
        yield
        SupabaseClient.reset_client()

    def test_request_reports_configuration_error(self, unconfigured):
        response = TestClient(app).get("/api/v1/public/alice")
        assert response.status_code == 500
        assert response.json() == {"detail": "Server is not configured"}

    def test_ready_reports_not_configured(self, unconfigured):
        assert TestClient(app).get("/ready").status_code == 503

"""
App-level behaviour (health, headers, validation errors) and the admin seed script.
"""

import pytest

from portal.config import settings
from portal.database import supabase_client
from portal.scripts import seed_admin as seed_script


class TestAppEndpoints:

    def test_root(self, client):
        response = client.get("/")
        assert response.status_code == 200
        assert response.json() == {"message": f"Welcome to {settings.app_name}", "status": "healthy"}

    @pytest.mark.parametrize("path,status", [("/health", "healthy"), ("/ready", "ready")])
    def test_health_endpoints(self, client, path, status):
        assert client.get(path).json() == {"status": status}

    def test_security_headers(self, client):
        response = client.get("/health")
        assert response.headers["X-Content-Type-Options"] == "nosniff"
        assert response.headers["X-Frame-Options"] == "SAMEORIGIN"
        assert response.headers["Referrer-Policy"] == "strict-origin-when-cross-origin"

    def test_validation_errors_are_bad_requests(self, client):
        response = client.post("/api/auth/login", json={"email": "not-an-email"})
        assert response.status_code == 400
        assert "email" in response.json()["detail"]
        assert "password" in response.json()["detail"]


class TestSeedAdmin:

    def test_creates_admin(self, fake_db):
        user_id = seed_script.seed_admin(fake_db, "root@example.com", "secret123", "Root")

        user = fake_db.auth.users[user_id]
        assert user.email == "root@example.com"
        profile = fake_db.rows("profiles")[0]
        assert profile["id"] == user_id
        assert profile["role"] == "admin"
        assert profile["name"] == "Root"

    def test_promotes_existing_user(self, fake_db, member):
        user, _ = member
        user_id = seed_script.seed_admin(fake_db, "MEMBER@example.com", "n3w-secret")

        assert user_id == user.id
        assert user.password == "n3w-secret"
        profiles = fake_db.rows("profiles")
        assert len(profiles) == 1
        assert profiles[0]["role"] == "admin"

    def test_main_requires_service_key(self, monkeypatch):
        monkeypatch.setattr(settings, "supabase_service_role_key", None)
        with pytest.raises(SystemExit):
            seed_script.main(["--email", "root@example.com", "--password", "secret123"])

    def test_main_rejects_short_password(self, monkeypatch):
        monkeypatch.setattr(settings, "supabase_service_role_key", "service-key")
        with pytest.raises(SystemExit):
            seed_script.main(["--email", "root@example.com", "--password", "123"])

    def test_main_seeds_through_service_client(self, monkeypatch, fake_db):
        monkeypatch.setattr(settings, "supabase_service_role_key", "service-key")
        monkeypatch.setattr(seed_script, "get_service_supabase", lambda: fake_db)

        seed_script.main(["--email", "root@example.com", "--password", "secret123"])
        assert fake_db.rows("profiles")[0]["role"] == "admin"


class TestSupabaseClients:

    @pytest.fixture(autouse=True)
    def fresh_clients(self, monkeypatch):
        created = []

        def create_client(url, key):
            created.append((url, key))
            return (url, key)

        monkeypatch.setattr(supabase_client, "create_client", create_client)
        monkeypatch.setattr(settings, "supabase_url", "https://project.supabase.co")
        monkeypatch.setattr(settings, "supabase_key", "anon-key")
        supabase_client.SupabaseClient.reset_client()
        yield created
        supabase_client.SupabaseClient.reset_client()

    def test_service_client_uses_service_key(self, monkeypatch, fresh_clients):
        monkeypatch.setattr(settings, "supabase_service_role_key", "service-key")
        assert supabase_client.get_service_supabase() == ("https://project.supabase.co", "service-key")
        assert supabase_client.get_service_supabase() is supabase_client.get_service_supabase()
        assert fresh_clients == [("https://project.supabase.co", "service-key")]

    def test_service_client_falls_back_to_anon(self, monkeypatch):
        monkeypatch.setattr(settings, "supabase_service_role_key", None)
        assert supabase_client.get_service_supabase() == ("https://project.supabase.co", "anon-key")
        assert supabase_client.get_service_supabase() is supabase_client.get_supabase()

    def test_missing_url_is_reported(self, monkeypatch):
        monkeypatch.setattr(settings, "supabase_url", "")
        with pytest.raises(RuntimeError):
            supabase_client.get_supabase()

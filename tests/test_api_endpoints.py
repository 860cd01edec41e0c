"""Integration tests for API endpoints.

These tests verify API endpoints work correctly end-to-end against an
in-memory SQLite database.
"""

from unittest.mock import MagicMock, patch

import requests

from multizone.database.user_repository import UserRepository
from multizone.errors import InternalError

ZONE_MAIN_URL = "http://zone-main.test"
ZONE_ADMIN_URL = "http://zone-admin.test/admin"


def _create_flag(test_client, key="beta_features", name="Beta Features", **extra):
    return test_client.post("/api/feature-flags", json={"key": key, "name": name, **extra})


class TestHealthEndpoints:
    """Test liveness and zone status endpoints."""

    def test_health(self, test_client):
        response = test_client.get("/health")

        assert response.status_code == 200
        assert response.json() == {"status": "ok", "service": "backend-api"}

    def test_zone_status_mixed(self, test_client):
        """A 503 zone is degraded and an unreachable zone unhealthy, in one response."""
        def fake_get(url, timeout):
            if url == ZONE_MAIN_URL:
                response = MagicMock()
                response.status_code = 503
                return response
            raise requests.ConnectionError("connection refused")

        with patch("multizone.health.zone_checker.requests.get", side_effect=fake_get):
            response = test_client.get("/api/zones/status")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "ok"
        zones = {zone["name"]: zone for zone in data["zones"]}
        assert zones["zone-main"]["status"] == "degraded"
        assert "503" in zones["zone-main"]["message"]
        assert zones["zone-main"]["url"] == ZONE_MAIN_URL
        assert zones["zone-admin"]["status"] == "unhealthy"
        assert zones["zone-admin"]["url"] == ZONE_ADMIN_URL
        assert "lastCheck" in zones["zone-admin"]

    def test_zone_status_all_healthy(self, test_client):
        response_200 = MagicMock()
        response_200.status_code = 200
        with patch("multizone.health.zone_checker.requests.get", return_value=response_200):
            data = test_client.get("/api/zones/status").json()

        assert [zone["status"] for zone in data["zones"]] == ["healthy", "healthy"]
        assert all(zone["message"] == "Zone is responding" for zone in data["zones"])


class TestUserEndpoints:
    """Test user CRUD API endpoints."""

    def test_create_user(self, test_client):
        response = test_client.post("/api/users", json={"email": "alice@example.com", "name": "Alice Johnson"})

        assert response.status_code == 201
        user = response.json()
        assert user["id"] >= 1
        assert user["email"] == "alice@example.com"
        assert user["name"] == "Alice Johnson"
        assert "createdAt" in user
        assert "updatedAt" in user

    def test_timestamps_carry_utc_offset(self, test_client):
        user = test_client.post("/api/users", json={"email": "alice@example.com", "name": "Alice"}).json()
        with patch("multizone.health.zone_checker.requests.get", side_effect=requests.ConnectionError("down")):
            zones = test_client.get("/api/zones/status").json()["zones"]

        timestamps = [user["createdAt"], user["updatedAt"]] + [zone["lastCheck"] for zone in zones]
        assert all(ts.endswith("Z") or ts.endswith("+00:00") for ts in timestamps), timestamps

    def test_create_user_missing_fields(self, test_client):
        assert test_client.post("/api/users", json={"email": "alice@example.com"}).status_code == 400
        assert test_client.post("/api/users", json={"email": "", "name": "Alice"}).status_code == 400
        assert test_client.get("/api/users").json() == []

    def test_create_user_malformed_body(self, test_client):
        response = test_client.post(
            "/api/users", content="{not json", headers={"Content-Type": "application/json"}
        )

        assert response.status_code == 400
        assert response.json()["detail"] == "Invalid request body"

    def test_create_user_duplicate_email(self, test_client):
        """Duplicate emails fail with 500 and the original record is unaffected."""
        first = test_client.post("/api/users", json={"email": "alice@example.com", "name": "Alice"}).json()

        response = test_client.post("/api/users", json={"email": "alice@example.com", "name": "Imposter"})

        assert response.status_code == 500
        assert response.json()["detail"].startswith("Failed to create user:")
        users = test_client.get("/api/users").json()
        assert len(users) == 1
        assert users[0]["id"] == first["id"]
        assert users[0]["name"] == "Alice"

    def test_list_users(self, test_client):
        test_client.post("/api/users", json={"email": "a@example.com", "name": "A"})
        test_client.post("/api/users", json={"email": "b@example.com", "name": "B"})

        response = test_client.get("/api/users")

        assert response.status_code == 200
        assert [u["email"] for u in response.json()] == ["a@example.com", "b@example.com"]

    def test_get_user(self, test_client):
        user_id = test_client.post("/api/users", json={"email": "bob@example.com", "name": "Bob"}).json()["id"]

        response = test_client.get(f"/api/users/{user_id}")

        assert response.status_code == 200
        assert response.json()["email"] == "bob@example.com"

    def test_get_nonexistent_user(self, test_client):
        response = test_client.get("/api/users/9999")

        assert response.status_code == 404
        assert response.json()["detail"] == "User not found"

    def test_get_user_non_numeric_id(self, test_client):
        assert test_client.get("/api/users/abc").status_code == 400

    def test_delete_user_twice(self, test_client):
        user_id = test_client.post("/api/users", json={"email": "eve@example.com", "name": "Eve"}).json()["id"]

        first = test_client.delete(f"/api/users/{user_id}")
        assert first.status_code == 200
        assert first.json() == {"message": "User deleted successfully"}

        second = test_client.delete(f"/api/users/{user_id}")
        assert second.status_code == 404

    def test_delete_nonexistent_user(self, test_client):
        assert test_client.delete("/api/users/424242").status_code == 404


class TestSeedEndpoint:
    """Test POST /api/seed."""

    def test_seed_twice(self, test_client):
        first = test_client.post("/api/seed")
        assert first.status_code == 200
        assert first.json() == {
            "message": "Database seeding completed",
            "totalUsers": 5,
            "created": 5,
            "skipped": 0,
            "errors": [],
            "errorCount": 0,
        }

        second = test_client.post("/api/seed").json()
        assert second["created"] == 0
        assert second["skipped"] == 5
        assert len(test_client.get("/api/users").json()) == 5

    def test_seed_all_failed_returns_500(self, test_client):
        with patch(
            "multizone.database.user_repository.UserRepository.find_or_create",
            side_effect=InternalError("database is down"),
        ):
            response = test_client.post("/api/seed")

        assert response.status_code == 500
        data = response.json()
        assert data["errorCount"] == 5
        assert data["created"] == 0

    def test_seed_partial_failure_returns_200(self, test_client):
        """Skipped users plus errors with nothing created is a 200; only an all-failed batch is 500."""
        for email, name in [("alice@example.com", "Alice Johnson"), ("bob@example.com", "Bob Smith"),
                            ("charlie@example.com", "Charlie Brown")]:
            test_client.post("/api/users", json={"email": email, "name": name})

        real_find_or_create = UserRepository.find_or_create

        def flaky_find_or_create(self, email, name):
            if email in ("diana@example.com", "eve@example.com"):
                raise InternalError("database is down")
            return real_find_or_create(self, email, name)

        with patch.object(UserRepository, "find_or_create", autospec=True, side_effect=flaky_find_or_create):
            response = test_client.post("/api/seed")

        assert response.status_code == 200
        data = response.json()
        assert data["totalUsers"] == 5
        assert data["created"] == 0
        assert data["skipped"] == 3
        assert data["errorCount"] == 2
        assert data["errors"][0].startswith("Error creating user diana@example.com:")


class TestFeatureFlagEndpoints:
    """Test feature flag CRUD API endpoints and cache behaviour."""

    def test_create_flag_forces_disabled(self, test_client):
        response = _create_flag(test_client, description="Beta access", enabled=True)

        assert response.status_code == 201
        assert response.json()["enabled"] is False

        fetched = test_client.get("/api/feature-flags/beta_features")
        assert fetched.status_code == 200
        assert fetched.json()["enabled"] is False
        assert fetched.json()["description"] == "Beta access"

    def test_create_flag_missing_fields(self, test_client):
        assert test_client.post("/api/feature-flags", json={"key": "x"}).status_code == 400
        assert test_client.post("/api/feature-flags", json={"name": "X"}).status_code == 400

    def test_create_flag_duplicate_key(self, test_client):
        _create_flag(test_client)

        response = _create_flag(test_client, name="Again")

        assert response.status_code == 500
        assert response.json()["detail"].startswith("Failed to create feature flag:")

    def test_get_missing_flag(self, test_client):
        response = test_client.get("/api/feature-flags/nope")

        assert response.status_code == 404
        assert response.json()["detail"] == "Feature flag not found"

    def test_patch_enabled_keeps_other_fields(self, test_client):
        _create_flag(test_client, description="Beta access")

        response = test_client.patch("/api/feature-flags/beta_features", json={"enabled": True})
        assert response.status_code == 200
        assert response.json()["enabled"] is True

        flag = test_client.get("/api/feature-flags/beta_features").json()
        assert flag["enabled"] is True
        assert flag["name"] == "Beta Features"
        assert flag["description"] == "Beta access"

    def test_patch_after_cached_read_is_visible(self, test_client):
        """The writer's next point read never returns the pre-update cached value."""
        _create_flag(test_client)
        assert test_client.get("/api/feature-flags/beta_features").json()["enabled"] is False

        test_client.patch("/api/feature-flags/beta_features", json={"enabled": True})
        assert test_client.get("/api/feature-flags/beta_features").json()["enabled"] is True

        test_client.patch("/api/feature-flags/beta_features", json={"enabled": False})
        assert test_client.get("/api/feature-flags/beta_features").json()["enabled"] is False

    def test_patch_name_and_description(self, test_client):
        _create_flag(test_client, description="old")

        flag = test_client.patch(
            "/api/feature-flags/beta_features", json={"name": "Beta Program", "description": "new"}
        ).json()

        assert flag["name"] == "Beta Program"
        assert flag["description"] == "new"
        assert flag["enabled"] is False

    def test_patch_missing_flag(self, test_client):
        assert test_client.patch("/api/feature-flags/nope", json={"enabled": True}).status_code == 404

    def test_patch_unknown_field(self, test_client):
        _create_flag(test_client)

        response = test_client.patch("/api/feature-flags/beta_features", json={"key": "other"})

        assert response.status_code == 400
        assert test_client.get("/api/feature-flags/beta_features").status_code == 200

    def test_list_flags_refreshes_cache(self, test_client, app):
        _create_flag(test_client, key="a", name="A")
        _create_flag(test_client, key="b", name="B")
        app.state.flag_cache.clear()

        response = test_client.get("/api/feature-flags")

        assert response.status_code == 200
        assert [f["key"] for f in response.json()] == ["a", "b"]
        assert "a" in app.state.flag_cache
        assert "b" in app.state.flag_cache

    def test_point_read_served_from_cache(self, test_client, app):
        _create_flag(test_client)

        with patch(
            "multizone.database.feature_flag_repository.FeatureFlagRepository.get_by_key"
        ) as mock_get:
            response = test_client.get("/api/feature-flags/beta_features")

        assert response.status_code == 200
        mock_get.assert_not_called()

    def test_delete_flag(self, test_client, app):
        _create_flag(test_client)

        response = test_client.delete("/api/feature-flags/beta_features")
        assert response.status_code == 200
        assert response.json() == {"message": "Feature flag deleted successfully"}
        assert "beta_features" not in app.state.flag_cache

        assert test_client.get("/api/feature-flags/beta_features").status_code == 404
        assert test_client.delete("/api/feature-flags/beta_features").status_code == 404


class TestDatastoreErrors:
    """Datastore failures surface as 500 with the error text in the detail."""

    def test_list_users_error(self, test_client):
        with patch(
            "multizone.database.user_repository.UserRepository.get_all",
            side_effect=InternalError("database is down"),
        ):
            response = test_client.get("/api/users")

        assert response.status_code == 500
        assert response.json()["detail"] == "Database error: database is down"

    def test_get_user_error(self, test_client):
        with patch(
            "multizone.database.user_repository.UserRepository.get",
            side_effect=InternalError("database is down"),
        ):
            response = test_client.get("/api/users/1")

        assert response.status_code == 500
        assert response.json()["detail"].startswith("Database error:")

    def test_list_flags_error(self, test_client):
        with patch(
            "multizone.database.feature_flag_repository.FeatureFlagRepository.get_all",
            side_effect=InternalError("database is down"),
        ):
            response = test_client.get("/api/feature-flags")

        assert response.status_code == 500
        assert response.json()["detail"].startswith("Database error:")

    def test_update_flag_error_keeps_cached_value(self, test_client):
        _create_flag(test_client)

        with patch(
            "multizone.database.feature_flag_repository.FeatureFlagRepository.update",
            side_effect=InternalError("database is down"),
        ):
            response = test_client.patch("/api/feature-flags/beta_features", json={"enabled": True})

        assert response.status_code == 500
        assert response.json()["detail"] == "Failed to update feature flag: database is down"
        assert test_client.get("/api/feature-flags/beta_features").json()["enabled"] is False


class TestCors:
    """Test the open CORS policy."""

    def test_preflight(self, test_client):
        response = test_client.options(
            "/api/feature-flags/x",
            headers={
                "Origin": "http://localhost:3000",
                "Access-Control-Request-Method": "PATCH",
                "Access-Control-Request-Headers": "Content-Type",
            },
        )

        assert response.status_code == 200
        assert response.headers["access-control-allow-origin"] == "*"
        assert "PATCH" in response.headers["access-control-allow-methods"]

"""Integration tests for throttling, headers and health probes."""

from api.config.settings import settings


class TestThrottling:
    def test_api_requests_throttled_per_user(self, client, world, monkeypatch):
        monkeypatch.setattr(settings, "THROTTLE_LIMIT", 3)

        statuses = [client.get("/api/v1/clients", headers=world.admin.headers).status_code for _ in range(4)]

        assert statuses == [200, 200, 200, 429]

    def test_throttled_response_shape(self, client, world, monkeypatch):
        monkeypatch.setattr(settings, "THROTTLE_LIMIT", 1)
        client.get("/api/v1/clients", headers=world.admin.headers)

        response = client.get("/api/v1/clients", headers=world.admin.headers)

        assert response.status_code == 429
        assert response.headers["Retry-After"] == str(settings.THROTTLE_TTL)
        assert response.json()["error"]["code"] == "TOO_MANY_REQUESTS"

    def test_users_have_separate_buckets(self, client, world, monkeypatch):
        monkeypatch.setattr(settings, "THROTTLE_LIMIT", 1)

        assert client.get("/api/v1/clients", headers=world.admin.headers).status_code == 200
        assert client.get("/api/v1/clients", headers=world.employee.headers).status_code == 200
        assert client.get("/api/v1/clients", headers=world.admin.headers).status_code == 429

    def test_login_has_its_own_stricter_bucket(self, client, world, monkeypatch):
        monkeypatch.setattr(settings, "AUTH_THROTTLE_LIMIT", 2)
        body = {"email": "admin@acme.test", "password": "wrong"}

        statuses = [client.post("/api/v1/auth/login", json=body).status_code for _ in range(3)]

        assert statuses == [401, 401, 429]
        assert client.get("/health").status_code == 200

    def test_throttling_can_be_disabled(self, client, world, monkeypatch):
        monkeypatch.setattr(settings, "THROTTLE_ENABLED", False)
        monkeypatch.setattr(settings, "THROTTLE_LIMIT", 1)

        statuses = {client.get("/api/v1/clients", headers=world.admin.headers).status_code for _ in range(3)}

        assert statuses == {200}


class TestResponseHeaders:
    def test_security_headers(self, client, world):
        response = client.get("/api/v1/clients", headers=world.admin.headers)

        assert response.headers["X-Content-Type-Options"] == "nosniff"
        assert response.headers["X-Frame-Options"] == "DENY"
        assert "Strict-Transport-Security" not in response.headers

    def test_request_id(self, client, world):
        response = client.get("/health")
        assert len(response.headers["X-Request-ID"]) == 8


class TestHealth:
    def test_root_health(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json() == {"status": "ok", "version": settings.APP_VERSION, "database": "connected"}

    def test_probes_skip_auth(self, client):
        assert client.get("/api/v1/health").json()["status"] == "healthy"
        assert client.get("/api/v1/health/ready").json() == {"ready": True}
        assert client.get("/api/v1/health/live").json() == {"alive": True}

    def test_root_info(self, client):
        assert client.get("/").json()["name"] == settings.APP_NAME

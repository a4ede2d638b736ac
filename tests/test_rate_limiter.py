"""Tests for the action-endpoint rate limiter."""
import redis
from unittest.mock import patch, MagicMock
from uuid import uuid4
from fastapi.testclient import TestClient

from app.auth import require_admin
from app.database import get_supabase
from app.main import app
from app.middleware.rate_limiter import (
    MAX_REQUESTS,
    RATE_LIMITED_PATHS,
    WINDOW_SECONDS,
    is_rate_limited_path,
)


class TestRateLimiterConfig:
    def test_rate_limited_paths_exist(self):
        assert "/confirm" in RATE_LIMITED_PATHS
        assert "/cancel" in RATE_LIMITED_PATHS
        assert "/complete" in RATE_LIMITED_PATHS
        assert "/unlock-account" in RATE_LIMITED_PATHS

    def test_rate_limit_values(self):
        assert MAX_REQUESTS == 10
        assert WINDOW_SECONDS == 60

    def test_listing_paths_not_limited(self):
        assert not is_rate_limited_path("/api/strategy-calls/admin")
        assert is_rate_limited_path(f"/api/strategy-calls/admin/{uuid4()}/confirm")


class TestRateLimitMiddleware:
    def _client(self, fake_db):
        app.dependency_overrides[get_supabase] = lambda: fake_db
        app.dependency_overrides[require_admin] = lambda: {"user_id": str(uuid4()), "role": "admin"}
        return TestClient(app)

    def teardown_method(self):
        app.dependency_overrides.clear()

    @patch("app.middleware.rate_limiter.redis.from_url")
    def test_over_limit_returns_429(self, mock_from_url, fake_db):
        pipe = MagicMock()
        pipe.execute.return_value = [0, MAX_REQUESTS, 1, True]
        mock_from_url.return_value.pipeline.return_value = pipe

        resp = self._client(fake_db).post(
            "/api/client-actions/unlock-account", json={"client_id": str(uuid4())}
        )

        assert resp.status_code == 429
        assert resp.json()["code"] == "RATE_LIMIT_EXCEEDED"
        assert resp.headers["retry-after"] == str(WINDOW_SECONDS)
        assert fake_db.executed == []

    @patch("app.middleware.rate_limiter.redis.from_url")
    def test_under_limit_passes(self, mock_from_url, fake_db):
        pipe = MagicMock()
        pipe.execute.return_value = [0, 3, 1, True]
        mock_from_url.return_value.pipeline.return_value = pipe

        resp = self._client(fake_db).post(
            "/api/client-actions/unlock-account", json={"client_id": str(uuid4())}
        )
        assert resp.status_code == 404

    @patch("app.middleware.rate_limiter.redis.from_url", side_effect=redis.ConnectionError("refused"))
    def test_redis_down_allows_request(self, _mock_from_url, fake_db):
        resp = self._client(fake_db).post(
            "/api/client-actions/unlock-account", json={"client_id": str(uuid4())}
        )
        assert resp.status_code == 404

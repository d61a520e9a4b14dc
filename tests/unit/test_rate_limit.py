"""
Tests for the API middleware: auth rate limiting and security headers.
"""

from fastapi import FastAPI
from fastapi.testclient import TestClient

from processhub.api.app import RateLimitMiddleware, SecurityHeadersMiddleware


def _limited_app(max_requests: int = 2) -> FastAPI:
    app = FastAPI()
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(
        RateLimitMiddleware, max_requests=max_requests, window_seconds=60
    )

    @app.post("/api/auth/signin")
    async def signin() -> dict:
        return {"ok": True}

    @app.get("/api/kpis")
    async def kpis() -> dict:
        return {"ok": True}

    return app


class TestRateLimitMiddleware:
    """Test per-client limits on auth endpoints."""

    def test_auth_requests_over_limit_are_rejected(self) -> None:
        """The request after the limit gets a 429 envelope."""
        client = TestClient(_limited_app(max_requests=2))

        assert client.post("/api/auth/signin").status_code == 200
        assert client.post("/api/auth/signin").status_code == 200

        response = client.post("/api/auth/signin")
        assert response.status_code == 429
        body = response.json()
        assert body["success"] is False
        assert "Too many requests" in body["error"]
        assert body["path"] == "/api/auth/signin"

    def test_other_paths_are_not_limited(self) -> None:
        """Only the auth prefix is counted."""
        client = TestClient(_limited_app(max_requests=1))
        for _ in range(5):
            assert client.get("/api/kpis").status_code == 200


class TestSecurityHeaders:
    """Test headers added to every response."""

    def test_headers(self) -> None:
        """Responses carry the hardening headers."""
        client = TestClient(_limited_app())
        response = client.get("/api/kpis")
        assert response.headers["X-Content-Type-Options"] == "nosniff"
        assert response.headers["X-Frame-Options"] == "DENY"
        assert response.headers["Referrer-Policy"] == "strict-origin-when-cross-origin"

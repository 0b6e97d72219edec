"""Tests for the health probe and the security middleware stack."""

from httpx import AsyncClient

from app.middleware.security import RateLimitMiddleware
from app.core.security import create_access_token


async def test_health_reports_database(client: AsyncClient) -> None:
    resp = await client.get("/health")
    assert resp.status_code == 200
    body = resp.json()
    assert body["status"] == "healthy"
    assert body["service"] == "esg-api"
    assert body["checks"]["database"] == {"status": "healthy"}
    # Redis is only probed when rate limiting is on
    assert "redis" not in body["checks"]


async def test_security_headers_present(client: AsyncClient) -> None:
    resp = await client.get("/v1/esg/metadata")
    assert resp.headers["x-content-type-options"] == "nosniff"
    assert resp.headers["x-frame-options"] == "DENY"
    assert resp.headers["x-api-version"] == "v1"
    assert "strict-transport-security" not in resp.headers


async def test_oversized_body_is_rejected(client: AsyncClient) -> None:
    resp = await client.post(
        "/v1/esg/responses",
        content=b"x" * 20_000,
        headers={"content-type": "application/json"},
    )
    assert resp.status_code == 413


async def test_unknown_route_uses_error_envelope(client: AsyncClient) -> None:
    resp = await client.get("/v1/nothing-here")
    assert resp.status_code == 404
    body = resp.json()
    assert body["error"] == "http_404"
    assert body["request_id"] == "unknown"


def test_rate_limiter_reads_subject_from_bearer_token() -> None:
    token = create_access_token({"sub": "user-123"})
    headers = {b"authorization": f"Bearer {token}".encode()}
    assert RateLimitMiddleware._extract_user_id(headers) == "user-123"


def test_rate_limiter_reads_subject_from_cookie() -> None:
    token = create_access_token({"sub": "user-456"})
    headers = {b"cookie": f"theme=dark; accessToken={token}".encode()}
    assert RateLimitMiddleware._extract_user_id(headers) == "user-456"


def test_rate_limiter_ignores_malformed_token() -> None:
    assert RateLimitMiddleware._extract_user_id({b"authorization": b"Bearer junk"}) is None
    assert RateLimitMiddleware._extract_user_id({}) is None

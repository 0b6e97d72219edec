"""Tests for registration, login, logout and token handling."""

import uuid
from datetime import timedelta

import pytest
from httpx import AsyncClient
from jose import JWTError
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth import service as auth_service
from app.core.security import (
    create_access_token,
    create_refresh_token,
    decode_token,
    hash_password,
    verify_password,
)
from app.models.core import User
from tests.conftest import SAMPLE_PASSWORD, SAMPLE_USER_ID

REGISTER_BODY = {
    "fullName": "Jane Doe",
    "email": "Jane@Example.com",
    "username": "JaneD",
    "password": "s3cret-pass",
}


async def _login(client: AsyncClient, **identity: str) -> dict:
    resp = await client.post("/v1/auth/login", json={**identity, "password": SAMPLE_PASSWORD})
    assert resp.status_code == 200, resp.text
    return resp.json()


class TestRegister:
    async def test_register_creates_user(self, client: AsyncClient) -> None:
        resp = await client.post("/v1/auth/register", json=REGISTER_BODY)
        assert resp.status_code == 201, resp.text
        body = resp.json()
        assert body["message"] == "User registered successfully"
        user = body["user"]
        assert user["username"] == "janed"
        assert user["email"] == "jane@example.com"
        assert user["fullName"] == "Jane Doe"
        assert "password" not in user
        assert "passwordHash" not in user
        assert "refreshToken" not in user

    async def test_duplicate_username_is_rejected(
        self, client: AsyncClient, sample_user: User
    ) -> None:
        resp = await client.post(
            "/v1/auth/register",
            json={**REGISTER_BODY, "username": "TestUser", "email": "new@example.com"},
        )
        assert resp.status_code == 409
        assert resp.json()["detail"] == "User already exists"

    async def test_duplicate_email_is_rejected(
        self, client: AsyncClient, sample_user: User
    ) -> None:
        resp = await client.post(
            "/v1/auth/register",
            json={**REGISTER_BODY, "email": "test@example.com"},
        )
        assert resp.status_code == 409

    async def test_unique_violation_on_insert_maps_to_409(
        self,
        client: AsyncClient,
        sample_user: User,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        """A registration that slips past the lookup still fails on the unique index."""

        async def _nobody(*_args: object) -> None:
            return None

        monkeypatch.setattr(auth_service, "find_by_email_or_username", _nobody)
        resp = await client.post(
            "/v1/auth/register",
            json={**REGISTER_BODY, "username": "testuser", "email": "test@example.com"},
        )
        assert resp.status_code == 409
        assert resp.json()["detail"] == "User already exists"

    @pytest.mark.parametrize("field", ["fullName", "username", "password"])
    async def test_blank_field_is_rejected(self, client: AsyncClient, field: str) -> None:
        resp = await client.post("/v1/auth/register", json={**REGISTER_BODY, field: "  "})
        assert resp.status_code == 422
        assert "All fields are required" in resp.json()["message"]

    async def test_invalid_email_is_rejected(self, client: AsyncClient) -> None:
        resp = await client.post(
            "/v1/auth/register", json={**REGISTER_BODY, "email": "not-an-email"}
        )
        assert resp.status_code == 422

    async def test_password_is_stored_hashed(
        self, client: AsyncClient, db: AsyncSession
    ) -> None:
        resp = await client.post("/v1/auth/register", json=REGISTER_BODY)
        user = await db.get(User, uuid.UUID(resp.json()["user"]["id"]))
        assert user is not None
        assert user.password_hash != REGISTER_BODY["password"]
        assert verify_password(REGISTER_BODY["password"], user.password_hash)


class TestLogin:
    async def test_login_by_email(self, client: AsyncClient, sample_user: User) -> None:
        body = await _login(client, email="TEST@example.com")
        assert body["message"] == "User logged in successfully"
        assert body["user"]["id"] == str(SAMPLE_USER_ID)
        payload = decode_token(body["accessToken"])
        assert payload["sub"] == str(SAMPLE_USER_ID)

    async def test_login_by_username_sets_cookies(
        self, client: AsyncClient, sample_user: User
    ) -> None:
        resp = await client.post(
            "/v1/auth/login", json={"username": "testuser", "password": SAMPLE_PASSWORD}
        )
        assert resp.status_code == 200
        set_cookie = resp.headers.get_list("set-cookie")
        assert any(c.startswith("accessToken=") and "HttpOnly" in c for c in set_cookie)
        assert any(c.startswith("refreshToken=") for c in set_cookie)
        assert sample_user.refresh_token is not None
        decode_token(sample_user.refresh_token, expected_type="refresh")

    async def test_wrong_password(self, client: AsyncClient, sample_user: User) -> None:
        resp = await client.post(
            "/v1/auth/login", json={"email": "test@example.com", "password": "nope"}
        )
        assert resp.status_code == 401
        assert resp.json()["detail"] == "Invalid credentials"

    async def test_unknown_user(self, client: AsyncClient) -> None:
        resp = await client.post(
            "/v1/auth/login", json={"email": "ghost@example.com", "password": "whatever"}
        )
        assert resp.status_code == 404
        assert resp.json()["detail"] == "User not found"

    async def test_missing_identity(self, client: AsyncClient) -> None:
        resp = await client.post("/v1/auth/login", json={"password": "whatever"})
        assert resp.status_code == 400


class TestSession:
    async def test_me_with_bearer_token(self, client: AsyncClient, sample_user: User) -> None:
        token = (await _login(client, username="testuser"))["accessToken"]
        resp = await client.get("/v1/auth/me", headers={"Authorization": f"Bearer {token}"})
        assert resp.status_code == 200
        assert resp.json()["username"] == "testuser"

    async def test_esg_route_accepts_real_token(
        self, client: AsyncClient, sample_user: User
    ) -> None:
        token = (await _login(client, username="testuser"))["accessToken"]
        resp = await client.get("/v1/esg/years", headers={"Authorization": f"Bearer {token}"})
        assert resp.status_code == 200
        assert resp.json()["data"] == []

    async def test_logout_clears_refresh_token(
        self, client: AsyncClient, sample_user: User
    ) -> None:
        token = (await _login(client, username="testuser"))["accessToken"]
        resp = await client.post(
            "/v1/auth/logout", headers={"Authorization": f"Bearer {token}"}
        )
        assert resp.status_code == 200
        assert resp.json()["message"] == "User logged out successfully"
        assert sample_user.refresh_token is None

    async def test_garbage_token_is_rejected(self, client: AsyncClient) -> None:
        resp = await client.get("/v1/auth/me", headers={"Authorization": "Bearer not.a.jwt"})
        assert resp.status_code == 401

    async def test_refresh_token_cannot_be_used_as_access_token(
        self, client: AsyncClient, sample_user: User
    ) -> None:
        token = create_refresh_token({"sub": str(SAMPLE_USER_ID)})
        resp = await client.get("/v1/auth/me", headers={"Authorization": f"Bearer {token}"})
        assert resp.status_code == 401

    async def test_token_for_deleted_user_is_rejected(self, client: AsyncClient) -> None:
        token = create_access_token({"sub": str(SAMPLE_USER_ID)})
        resp = await client.get("/v1/auth/me", headers={"Authorization": f"Bearer {token}"})
        assert resp.status_code == 401


class TestTokens:
    def test_expired_token_fails_to_decode(self) -> None:
        token = create_access_token({"sub": "abc"}, expires_delta=timedelta(seconds=-1))
        with pytest.raises(JWTError):
            decode_token(token)

    def test_token_without_subject_fails_to_decode(self) -> None:
        with pytest.raises(JWTError):
            decode_token(create_access_token({"username": "x"}))

    def test_hash_round_trip(self) -> None:
        hashed = hash_password("pw")
        assert verify_password("pw", hashed)
        assert not verify_password("other", hashed)

"""
Storefront Backend - Auth Route Tests
=======================================

What we test:
    ✅ signup: token + userData, email stored encrypted, password hashed
    ✅ signup validation: missing fields, password mismatch, duplicate email
    ✅ login: success, unknown user, wrong password, missing fields
    ✅ unconfigured encryption fails the request instead of storing plaintext
"""

import pytest
from sqlalchemy import select

from app.models.user import User

SIGNUP = {
    "username": "ada",
    "password": "analytical",
    "confirmPassword": "analytical",
    "email": "ada@example.com",
}


class TestSignup:
    @pytest.mark.asyncio
    async def test_signup(self, client, db_session, codec, tokens):
        response = await client.post("/auth/signup", json=SIGNUP)
        assert response.status_code == 201
        body = response.json()
        assert body["success"] is True
        assert body["userData"] == {"username": "ada", "email": "ada@example.com", "role": "user"}

        user = (await db_session.execute(select(User))).scalar_one()
        assert tokens.verify(body["token"])["userId"] == user.id
        assert user.email != "ada@example.com"
        assert codec.decrypt(user.email) == "ada@example.com"
        assert user.password != "analytical"
        assert codec.compare_password("analytical", user.password)
        assert user.provider == "local"

    @pytest.mark.asyncio
    async def test_signup_with_role(self, client):
        response = await client.post("/auth/signup", json={**SIGNUP, "role": "admin"})
        assert response.status_code == 201
        assert response.json()["userData"]["role"] == "admin"

    @pytest.mark.asyncio
    async def test_password_mismatch(self, client):
        response = await client.post("/auth/signup", json={**SIGNUP, "confirmPassword": "nope"})
        assert response.status_code == 400
        assert response.json()["message"] == "Passwords do not match"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("missing", ["username", "password"])
    async def test_missing_credentials(self, client, missing):
        payload = {k: v for k, v in SIGNUP.items() if k != missing}
        response = await client.post("/auth/signup", json=payload)
        assert response.status_code == 400
        assert response.json()["message"] == "Username and password are required"

    @pytest.mark.asyncio
    async def test_missing_email(self, client):
        payload = {k: v for k, v in SIGNUP.items() if k != "email"}
        response = await client.post("/auth/signup", json=payload)
        assert response.status_code == 400
        assert response.json()["message"] == "Email is required"

    @pytest.mark.asyncio
    async def test_invalid_email(self, client):
        response = await client.post("/auth/signup", json={**SIGNUP, "email": "not-an-email"})
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_duplicate_email(self, client):
        assert (await client.post("/auth/signup", json=SIGNUP)).status_code == 201
        response = await client.post("/auth/signup", json={**SIGNUP, "username": "other"})
        assert response.status_code == 409
        assert response.json()["message"] == "User already exists"


class TestLogin:
    @pytest.mark.asyncio
    async def test_login(self, client, tokens):
        signup = (await client.post("/auth/signup", json=SIGNUP)).json()

        response = await client.post(
            "/auth/login", json={"email": "ada@example.com", "password": "analytical"}
        )
        assert response.status_code == 200
        body = response.json()
        user = body["userData"]
        assert user["email"] == "ada@example.com"
        assert user["username"] == "ada"
        assert "password" not in user
        assert tokens.verify(body["token"])["userId"] == user["id"]
        assert tokens.verify(signup["token"])["userId"] == user["id"]

    @pytest.mark.asyncio
    async def test_unknown_user(self, client):
        response = await client.post(
            "/auth/login", json={"email": "nobody@example.com", "password": "x"}
        )
        assert response.status_code == 401
        assert response.json()["message"] == "User does not exist"

    @pytest.mark.asyncio
    async def test_wrong_password(self, client):
        await client.post("/auth/signup", json=SIGNUP)
        response = await client.post(
            "/auth/login", json={"email": "ada@example.com", "password": "wrong"}
        )
        assert response.status_code == 401
        assert response.json()["error"] == "authentication_error"
        assert response.json()["message"] == "Invalid password"

    @pytest.mark.asyncio
    async def test_missing_fields(self, client):
        response = await client.post("/auth/login", json={"email": "ada@example.com"})
        assert response.status_code == 400
        assert response.json()["message"] == "Email and password are required"


class TestUnconfiguredEncryption:
    @pytest.mark.asyncio
    async def test_signup_fails_without_aes_settings(self, client, storefront_app, db_session):
        from app.services.credential_codec import CredentialCodec

        storefront_app.state.auth_service.codec = CredentialCodec("", "", "")

        response = await client.post("/auth/signup", json=SIGNUP)

        assert response.status_code == 500
        assert response.json()["error"] == "server_error"
        assert (await db_session.execute(select(User))).first() is None

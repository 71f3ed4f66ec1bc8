# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Integration tests for the account endpoints.

Requests go through the full application in process, against an
in-memory database and a fake mailer.
"""

import re
from datetime import timedelta

import httpx
import pytest
from sqlalchemy import func, select

from zimlearn.api.app import create_app
from zimlearn.core.config.settings import RateLimitSettings
from zimlearn.infrastructure.database.models import User

pytestmark = pytest.mark.integration


async def _register(client: httpx.AsyncClient, email: str = "a@x.com", password: str = "p"):
    return await client.post(
        "/api/auth/register",
        json={"name": "A", "email": email, "password": password},
    )


async def _verified_token(client: httpx.AsyncClient, mailer, email: str = "a@x.com") -> str:
    await _register(client, email=email)
    await client.post(
        "/api/auth/verify-email",
        json={"email": email, "code": mailer.last_code_for(email)},
    )
    response = await client.post("/api/auth/login", json={"email": email, "password": "p"})
    return response.json()["token"]


class TestRegistrationFlow:
    """Tests for register, verify and login together."""

    async def test_register_verify_login(self, client: httpx.AsyncClient, mailer) -> None:
        """Test that login is refused until the emailed code is confirmed."""
        response = await _register(client)
        assert response.status_code == 201
        body = response.json()
        assert body["message"] == (
            "Registration successful. Please check your email for the verification code."
        )
        assert body["user"]["email"] == "a@x.com"
        assert body["user"]["isVerified"] is False
        assert "token" not in body

        response = await client.post("/api/auth/login", json={"email": "a@x.com", "password": "p"})
        assert response.status_code == 400
        assert response.json()["detail"] == "Please verify your email"

        code = mailer.last_code_for("a@x.com")
        assert re.fullmatch(r"\d{6}", code)
        response = await client.post(
            "/api/auth/verify-email",
            json={"email": "a@x.com", "code": code},
        )
        assert response.status_code == 200
        assert response.json() == {"message": "Email verified successfully"}

        response = await client.post("/api/auth/login", json={"email": "a@x.com", "password": "p"})
        assert response.status_code == 200
        body = response.json()
        assert body["token"]
        assert body["tokenType"] == "Bearer"
        assert body["expiresIn"] > 0
        assert body["user"]["isVerified"] is True
        assert body["user"]["role"] == "student"

    async def test_response_never_exposes_secrets(self, client: httpx.AsyncClient) -> None:
        """Test that hashes and codes stay server side."""
        body = (await _register(client)).json()

        assert set(body["user"]) == {"id", "name", "email", "role", "isVerified", "createdAt"}


class TestRegister:
    """Tests for POST /api/auth/register."""

    async def test_duplicate_email(self, client: httpx.AsyncClient, db_session) -> None:
        """Test that a second registration with the same email is refused."""
        await _register(client)

        response = await _register(client)

        assert response.status_code == 400
        assert response.json()["detail"] == "User already exists"
        assert await db_session.scalar(select(func.count()).select_from(User)) == 1

    async def test_unknown_field_rejected(self, client: httpx.AsyncClient) -> None:
        """Test that unexpected body fields are a validation error."""
        response = await client.post(
            "/api/auth/register",
            json={"name": "A", "email": "a@x.com", "password": "p", "role": "admin"},
        )

        assert response.status_code == 400
        assert response.json()["errors"][0]["field"] == "body.role"

    async def test_invalid_email_rejected(self, client: httpx.AsyncClient) -> None:
        """Test that a malformed email is a validation error."""
        response = await client.post(
            "/api/auth/register",
            json={"name": "A", "email": "not-an-email", "password": "p"},
        )

        assert response.status_code == 400
        assert "email" in response.json()["detail"]

    async def test_mail_outage_still_registers(self, client: httpx.AsyncClient, mailer) -> None:
        """Test that registration succeeds when the code could not be sent."""
        mailer.fail = True

        response = await _register(client)

        assert response.status_code == 201


class TestVerifyEmail:
    """Tests for POST /api/auth/verify-email."""

    async def test_unknown_email(self, client: httpx.AsyncClient) -> None:
        """Test verifying an email nobody registered."""
        response = await client.post(
            "/api/auth/verify-email",
            json={"email": "nobody@x.com", "code": "123456"},
        )

        assert response.status_code == 404

    async def test_wrong_code(self, client: httpx.AsyncClient, mailer) -> None:
        """Test that a wrong code is refused."""
        await _register(client)
        code = mailer.last_code_for("a@x.com")
        wrong = "000000" if code != "000000" else "111111"

        response = await client.post(
            "/api/auth/verify-email",
            json={"email": "a@x.com", "code": wrong},
        )

        assert response.status_code == 400
        assert response.json()["detail"] == "Invalid verification code"

    async def test_malformed_code(self, client: httpx.AsyncClient) -> None:
        """Test that a code that is not six digits fails validation."""
        response = await client.post(
            "/api/auth/verify-email",
            json={"email": "a@x.com", "code": "12ab"},
        )

        assert response.status_code == 400

    async def test_non_ascii_digits_rejected(self, client: httpx.AsyncClient) -> None:
        """Test that digits outside 0-9 fail validation instead of erroring."""
        await _register(client)

        response = await client.post(
            "/api/auth/verify-email",
            json={"email": "a@x.com", "code": "١٢٣٤٥٦"},
        )

        assert response.status_code == 400
        assert response.json()["errors"][0]["field"] == "body.code"

    async def test_already_verified(self, client: httpx.AsyncClient, mailer) -> None:
        """Test verifying twice."""
        await _verified_token(client, mailer)

        response = await client.post(
            "/api/auth/verify-email",
            json={"email": "a@x.com", "code": "123456"},
        )

        assert response.status_code == 400
        assert response.json()["detail"] == "Email already verified"


class TestLogin:
    """Tests for POST /api/auth/login."""

    async def test_wrong_password(self, client: httpx.AsyncClient, mailer) -> None:
        """Test that wrong credentials are 401."""
        await _verified_token(client, mailer)

        response = await client.post(
            "/api/auth/login",
            json={"email": "a@x.com", "password": "wrong"},
        )

        assert response.status_code == 401
        assert response.json()["detail"] == "Invalid credentials"

    async def test_unknown_user(self, client: httpx.AsyncClient) -> None:
        """Test that an unknown email is 401."""
        response = await client.post(
            "/api/auth/login",
            json={"email": "nobody@x.com", "password": "p"},
        )

        assert response.status_code == 401


class TestResendVerification:
    """Tests for POST /api/auth/resend-verification."""

    async def test_resend_sends_new_code(self, client: httpx.AsyncClient, mailer) -> None:
        """Test that a fresh code is emailed."""
        await _register(client)

        response = await client.post("/api/auth/resend-verification", json={"email": "a@x.com"})

        assert response.status_code == 200
        assert response.json() == {"message": "Verification code sent"}
        assert len(mailer.sent) == 2

    async def test_resend_unknown_email(self, client: httpx.AsyncClient) -> None:
        """Test resending to nobody."""
        response = await client.post(
            "/api/auth/resend-verification",
            json={"email": "nobody@x.com"},
        )

        assert response.status_code == 404

    async def test_resend_to_verified_account(self, client: httpx.AsyncClient, mailer) -> None:
        """Test resending after verification."""
        await _verified_token(client, mailer)

        response = await client.post("/api/auth/resend-verification", json={"email": "a@x.com"})

        assert response.status_code == 400

    async def test_resend_mail_outage(self, client: httpx.AsyncClient, mailer) -> None:
        """Test that a failed resend is a server error."""
        await _register(client)
        mailer.fail = True

        response = await client.post("/api/auth/resend-verification", json={"email": "a@x.com"})

        assert response.status_code == 500
        assert response.json()["detail"] == "Failed to send verification code"


class TestProfile:
    """Tests for GET /api/auth/profile and /api/auth/me."""

    @pytest.mark.parametrize("path", ["/api/auth/profile", "/api/auth/me"])
    async def test_profile(self, client: httpx.AsyncClient, mailer, path: str) -> None:
        """Test that the token's owner is returned."""
        token = await _verified_token(client, mailer)

        response = await client.get(path, headers={"Authorization": f"Bearer {token}"})

        assert response.status_code == 200
        assert response.json()["email"] == "a@x.com"
        assert response.json()["name"] == "A"

    async def test_profile_requires_token(self, client: httpx.AsyncClient) -> None:
        """Test that the profile is not public."""
        response = await client.get("/api/auth/profile")

        assert response.status_code == 401
        assert response.json()["detail"] == "Authentication token required"
        assert response.headers["WWW-Authenticate"] == "Bearer"

    async def test_profile_with_bad_token(self, client: httpx.AsyncClient) -> None:
        """Test that a garbage token is 401."""
        response = await client.get(
            "/api/auth/profile",
            headers={"Authorization": "Bearer garbage"},
        )

        assert response.status_code == 401
        assert response.json()["detail"] == "Invalid or expired token"

    async def test_profile_with_expired_token(
        self, client: httpx.AsyncClient, mailer, jwt_manager
    ) -> None:
        """Test that an expired token for a real account is 401."""
        await _verified_token(client, mailer)
        login = await client.post("/api/auth/login", json={"email": "a@x.com", "password": "p"})
        user_id = login.json()["user"]["id"]
        expired = jwt_manager.create_access_token(
            user_id=user_id,
            email="a@x.com",
            expires_delta=timedelta(minutes=-1),
        )

        response = await client.get(
            "/api/auth/profile",
            headers={"Authorization": f"Bearer {expired}"},
        )

        assert response.status_code == 401
        assert response.json()["detail"] == "Invalid or expired token"

    async def test_profile_of_deleted_user(self, client: httpx.AsyncClient, student_headers) -> None:
        """Test that a valid token for a missing account is 404."""
        response = await client.get("/api/auth/profile", headers=student_headers)

        assert response.status_code == 404


class TestRateLimit:
    """Tests for per-application rate limiting of the public auth routes."""

    @pytest.fixture
    def limited_settings(self, settings):
        """Test settings with rate limiting switched on."""
        return settings.model_copy(update={"rate_limit": RateLimitSettings(enabled=True)})

    @staticmethod
    def _client(app) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.ASGITransport(app=app), base_url="http://test")

    async def _login_attempts(self, http_client: httpx.AsyncClient, count: int) -> list[int]:
        codes = []
        for _ in range(count):
            response = await http_client.post(
                "/api/auth/login",
                json={"email": "nobody@x.com", "password": "p"},
            )
            codes.append(response.status_code)
        return codes

    async def test_login_limited_per_app(self, container, limited_settings) -> None:
        """Test that the 21st attempt is refused and a second app keeps its own counters."""
        first = create_app(settings=limited_settings, container=container)
        second = create_app(settings=limited_settings, container=container)

        async with self._client(first) as http_client:
            codes = await self._login_attempts(http_client, 21)
            assert codes[:20] == [401] * 20
            assert codes[20] == 429

            response = await http_client.post(
                "/api/auth/login",
                json={"email": "nobody@x.com", "password": "p"},
            )
            assert response.json()["detail"] == "Too many requests. Please try again later."
            assert response.headers["Retry-After"] == "60"

        async with self._client(second) as http_client:
            assert await self._login_attempts(http_client, 1) == [401]

    async def test_other_routes_not_limited(self, container, limited_settings) -> None:
        """Test that catalog reads are exempt from the auth limit."""
        app = create_app(settings=limited_settings, container=container)

        async with self._client(app) as http_client:
            for _ in range(25):
                response = await http_client.get("/api/resources")
                assert response.status_code == 200

    async def test_disabled_limiter(self, client: httpx.AsyncClient) -> None:
        """Test that no limit applies when rate limiting is switched off."""
        codes = await self._login_attempts(client, 25)

        assert set(codes) == {401}

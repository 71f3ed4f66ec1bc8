# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for access token handling."""

from datetime import timedelta

import pytest
from jose import jwt

from zimlearn.core.config.settings import JWTSettings
from zimlearn.domains.auth.jwt import InvalidTokenError, JWTManager, TokenExpiredError


class TestJWTManager:
    """Tests for JWTManager."""

    def test_create_and_decode(self, jwt_manager: JWTManager) -> None:
        """Test that a token round-trips its claims."""
        token = jwt_manager.create_access_token(
            user_id="user-123",
            email="tariro@example.co.zw",
            role="admin",
        )

        payload = jwt_manager.decode_token(token)

        assert payload.sub == "user-123"
        assert payload.email == "tariro@example.co.zw"
        assert payload.role == "admin"
        assert payload.type == "access"
        assert payload.exp - payload.iat == jwt_manager.expires_in

    def test_default_role_is_student(self, jwt_manager: JWTManager) -> None:
        """Test the role claim default."""
        token = jwt_manager.create_access_token(user_id="user-123")

        assert jwt_manager.decode_token(token).role == "student"

    def test_expired_token(self, jwt_manager: JWTManager) -> None:
        """Test that an expired token raises TokenExpiredError."""
        token = jwt_manager.create_access_token(
            user_id="user-123",
            expires_delta=timedelta(minutes=-5),
        )

        with pytest.raises(TokenExpiredError):
            jwt_manager.decode_token(token)
        assert jwt_manager.verify_token(token) is False

    def test_wrong_secret(self, jwt_manager: JWTManager) -> None:
        """Test that a token signed with another secret is rejected."""
        other = JWTManager(JWTSettings(secret_key="some-other-secret"))
        token = other.create_access_token(user_id="user-123")

        with pytest.raises(InvalidTokenError):
            jwt_manager.decode_token(token)

    def test_malformed_token(self, jwt_manager: JWTManager) -> None:
        """Test that garbage is rejected."""
        with pytest.raises(InvalidTokenError):
            jwt_manager.decode_token("not.a.token")

    def test_wrong_token_type(self, jwt_manager: JWTManager) -> None:
        """Test that a non-access token is rejected."""
        token = jwt.encode(
            {"sub": "user-123", "type": "refresh", "exp": 9999999999, "iat": 0, "jti": "x"},
            "test-secret-key-for-jwt-testing",
            algorithm="HS256",
        )

        with pytest.raises(InvalidTokenError):
            jwt_manager.decode_token(token)

    def test_verify_token(self, jwt_manager: JWTManager) -> None:
        """Test the boolean check."""
        assert jwt_manager.verify_token(jwt_manager.create_access_token(user_id="u")) is True
        assert jwt_manager.verify_token("invalid") is False

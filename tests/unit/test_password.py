# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for password hashing."""

import pytest

from zimlearn.domains.auth.password import PasswordHasher


class TestPasswordHasher:
    """Tests for PasswordHasher."""

    def test_hash_and_verify(self, password_hasher: PasswordHasher) -> None:
        """Test that a hashed password verifies."""
        hashed = password_hasher.hash("secret1")

        assert hashed != "secret1"
        assert hashed.startswith("$2")
        assert password_hasher.verify("secret1", hashed) is True

    def test_wrong_password_fails(self, password_hasher: PasswordHasher) -> None:
        """Test that a different password does not verify."""
        hashed = password_hasher.hash("secret1")

        assert password_hasher.verify("secret2", hashed) is False

    def test_hashes_are_salted(self, password_hasher: PasswordHasher) -> None:
        """Test that the same password hashes differently each time."""
        assert password_hasher.hash("secret1") != password_hasher.hash("secret1")

    def test_empty_password_rejected(self, password_hasher: PasswordHasher) -> None:
        """Test that an empty password cannot be hashed."""
        with pytest.raises(ValueError):
            password_hasher.hash("")

    def test_verify_against_garbage_hash(self, password_hasher: PasswordHasher) -> None:
        """Test that a malformed hash does not verify."""
        assert password_hasher.verify("secret1", "not-a-bcrypt-hash") is False
        assert password_hasher.verify("secret1", "") is False

    def test_long_passwords_are_truncated(self, password_hasher: PasswordHasher) -> None:
        """Test that passwords beyond the bcrypt limit still hash."""
        password = "x" * 100

        hashed = password_hasher.hash(password)

        assert password_hasher.verify(password, hashed) is True

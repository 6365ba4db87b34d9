"""Unit tests for authentication service."""

from __future__ import annotations

import pytest
from perftrack.domain.services.auth_service import hash_password, verify_password
from pydantic import ValidationError


class TestPasswordHashing:
    """Tests for password hashing functions."""

    def test_hash_password_returns_bcrypt_hash(self) -> None:
        hashed = hash_password("test_password_123")

        assert hashed.startswith("$2b$")
        assert len(hashed) == 60

    def test_hash_password_unique_per_call(self) -> None:
        """Same password should produce different hashes (due to salt)."""
        assert hash_password("test_password_123") != hash_password("test_password_123")

    def test_verify_password_correct(self) -> None:
        hashed = hash_password("test_password_123")

        assert verify_password("test_password_123", hashed) is True

    def test_verify_password_incorrect(self) -> None:
        hashed = hash_password("test_password_123")

        assert verify_password("wrong_password", hashed) is False
        assert verify_password("TEST_PASSWORD_123", hashed) is False


class TestAuthSchemas:
    """Tests for auth request/response schemas."""

    def test_register_request_defaults_to_employee(self) -> None:
        from perftrack.api.schemas.auth import RegisterRequest, UserRole

        request = RegisterRequest(email="test@example.com", password="password123")

        assert request.role == UserRole.EMPLOYEE
        assert request.full_name is None

    def test_register_request_rejects_short_password(self) -> None:
        from perftrack.api.schemas.auth import RegisterRequest

        with pytest.raises(ValidationError):
            RegisterRequest(email="test@example.com", password="short")

    def test_register_request_rejects_unknown_role(self) -> None:
        from perftrack.api.schemas.auth import RegisterRequest

        with pytest.raises(ValidationError):
            RegisterRequest(email="test@example.com", password="password123", role="student")

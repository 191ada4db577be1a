"""Tests for password hashing and access tokens."""
from datetime import timedelta

import pytest
from jose import jwt

from app.core.auth import create_access_token
from app.core.config import settings
from app.core.security import hash_password, verify_password


class TestPasswordHashing:
    """Test password hashing and verification."""

    def test_hash_is_salted(self):
        """Same password, different hashes."""
        assert hash_password("FrontDesk2024") != hash_password("FrontDesk2024")

    def test_verify_password_correct(self):
        hashed = hash_password("FrontDesk2024")

        assert verify_password("FrontDesk2024", hashed) is True

    @pytest.mark.parametrize("attempt", ["frontdesk2024", "", "FrontDesk"])
    def test_verify_password_incorrect(self, attempt):
        hashed = hash_password("FrontDesk2024")

        assert verify_password(attempt, hashed) is False

    def test_unicode_password(self):
        password = "Karibu-Hoteli-ñ-密码"
        hashed = hash_password(password)

        assert verify_password(password, hashed) is True
        assert verify_password("Karibu-Hoteli", hashed) is False


class TestAccessToken:
    def test_token_carries_user_id(self):
        token = create_access_token("user-123")
        payload = jwt.decode(token, settings.JWT_SECRET, algorithms=[settings.JWT_ALGORITHM])

        assert payload["sub"] == "user-123"
        assert payload["exp"] > payload["iat"]

    def test_custom_expiry(self):
        token = create_access_token("user-123", expires_delta=timedelta(minutes=5))
        payload = jwt.decode(token, settings.JWT_SECRET, algorithms=[settings.JWT_ALGORITHM])

        assert payload["exp"] - payload["iat"] == 300

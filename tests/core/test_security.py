"""
Tests for security utilities.
"""

from datetime import datetime, timedelta, timezone

import pytest
from jose import JWTError, jwt

from billboard_api.core.config import settings
from billboard_api.core.security import (
    create_access_token,
    create_refresh_token,
    decode_token,
    get_password_hash,
    pwd_context,
    subject_from_token,
    verify_password,
)


@pytest.mark.unit
class TestSecurity:
    """Test security utilities."""

    def test_password_hashing(self):
        """Test password hashing and verification."""
        password = "testpassword123"
        hashed = get_password_hash(password)

        assert hashed != password
        assert hashed.startswith("$2")
        assert verify_password(password, hashed) is True
        assert verify_password("wrongpassword", hashed) is False

    def test_hashes_are_salted(self):
        assert get_password_hash("same-password") != get_password_hash("same-password")

    def test_hash_uses_configured_rounds(self):
        hashed = get_password_hash("rounds-check")
        assert pwd_context.identify(hashed) == "bcrypt"
        assert hashed.split("$")[2] == f"{settings.bcrypt_rounds:02d}"

    def test_create_access_token(self):
        """Test access token creation."""
        token = create_access_token("123")

        payload = jwt.decode(
            token,
            settings.jwt_secret_key,
            algorithms=[settings.jwt_algorithm],
        )

        assert payload["sub"] == "123"
        assert payload["type"] == "access"
        exp_datetime = datetime.fromtimestamp(payload["exp"], tz=timezone.utc)
        assert exp_datetime > datetime.now(timezone.utc)

    def test_create_access_token_with_custom_expiry(self):
        """Test access token creation with custom expiry."""
        expires_delta = timedelta(minutes=5)
        token = create_access_token("123", expires_delta)

        payload = decode_token(token)
        exp_datetime = datetime.fromtimestamp(payload["exp"], tz=timezone.utc)
        expected_exp = datetime.now(timezone.utc) + expires_delta

        # JWT exp has one second resolution
        assert abs((exp_datetime - expected_exp).total_seconds()) < 2

    def test_create_access_token_with_additional_claims(self):
        token = create_access_token("123", additional_claims={"scope": "bookings"})
        assert decode_token(token)["scope"] == "bookings"

    def test_create_refresh_token(self):
        """Test refresh token creation."""
        token = create_refresh_token("123")
        payload = decode_token(token)

        assert payload["sub"] == "123"
        assert payload["type"] == "refresh"

        exp_datetime = datetime.fromtimestamp(payload["exp"], tz=timezone.utc)
        time_until_expiry = exp_datetime - datetime.now(timezone.utc)
        expected_days = settings.refresh_token_expire_days
        assert expected_days - 1 <= time_until_expiry.days <= expected_days

    def test_decode_invalid_token(self):
        with pytest.raises(JWTError):
            decode_token("invalid.token.here")

    def test_decode_expired_token(self):
        token = create_access_token("123", timedelta(seconds=-1))

        with pytest.raises(JWTError):
            decode_token(token)

    def test_decode_token_with_wrong_algorithm(self):
        token = jwt.encode(
            {"sub": "123", "exp": datetime.now(timezone.utc) + timedelta(hours=1)},
            settings.jwt_secret_key,
            algorithm="HS512",
        )

        with pytest.raises(JWTError):
            decode_token(token)

    def test_token_subject_as_integer(self):
        token = create_access_token(456)
        assert decode_token(token)["sub"] == "456"

    def test_subject_from_token(self):
        assert subject_from_token(create_access_token(42)) == 42
        assert subject_from_token(create_refresh_token(42), "refresh") == 42

    def test_subject_from_token_rejects_wrong_type(self):
        with pytest.raises(JWTError):
            subject_from_token(create_refresh_token(42), "access")

    def test_subject_from_token_rejects_non_numeric_subject(self):
        with pytest.raises(JWTError):
            subject_from_token(create_access_token("not-a-number"))

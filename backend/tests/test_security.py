"""
Postboard Backend: Password and Token Tests
=============================================

What we test:
    ✅ bcrypt hashes verify only with the right password
    ✅ unrecognizable stored hashes fail closed
    ✅ tokens carry sub/email and round-trip
    ✅ expired, tampered and sub-less tokens are rejected
    ✅ request schemas enforce the password policy
    ✅ malformed email addresses are rejected
"""

from datetime import timedelta

import pytest
from jose import jwt
from pydantic import ValidationError as PydanticValidationError

from app.config import settings
from app.exceptions import AuthenticationError
from app.schemas.auth import ChangePasswordRequest, LoginRequest
from app.schemas.user import UserCreate
from app.security import (
    create_access_token,
    decode_access_token,
    hash_password,
    verify_password,
)


class TestPasswords:
    def test_hash_and_verify(self):
        hashed = hash_password("Secret123")
        assert hashed != "Secret123"
        assert verify_password("Secret123", hashed) is True
        assert verify_password("secret123", hashed) is False

    def test_empty_or_garbage_hash_fails(self):
        assert verify_password("Secret123", None) is False
        assert verify_password("Secret123", "") is False
        assert verify_password("Secret123", "plain-text") is False


class TestTokens:
    def test_round_trip(self):
        token = create_access_token(5, claims={"email": "ann@example.com"})
        payload = decode_access_token(token)
        assert payload["sub"] == "5"
        assert payload["email"] == "ann@example.com"
        assert payload["exp"] > payload["iat"]

    def test_expired_token(self):
        token = create_access_token(5, expires_delta=timedelta(seconds=-1))
        with pytest.raises(AuthenticationError, match="expired"):
            decode_access_token(token)

    def test_wrong_signature(self):
        token = jwt.encode({"sub": "5"}, "another-secret", algorithm=settings.jwt_algorithm)
        with pytest.raises(AuthenticationError):
            decode_access_token(token)

    def test_missing_subject(self):
        token = jwt.encode({"email": "x"}, settings.jwt_secret, algorithm=settings.jwt_algorithm)
        with pytest.raises(AuthenticationError):
            decode_access_token(token)

    def test_not_a_token(self):
        with pytest.raises(AuthenticationError):
            decode_access_token("not.a.token")


class TestRequestSchemas:
    def valid(self, **overrides):
        data = {
            "name": "Ann",
            "email": "Ann@Example.COM",
            "password": "Secret123",
            "password_confirmation": "Secret123",
        }
        data.update(overrides)
        return data

    def test_email_is_normalized(self):
        user = UserCreate(**self.valid())
        assert user.email == "ann@example.com"
        assert "password_confirmation" not in user.to_attributes()

    @pytest.mark.parametrize("password", ["s1A", "alllower123", "ALLUPPER123", "NoDigitsHere"])
    def test_weak_passwords(self, password):
        with pytest.raises(PydanticValidationError):
            UserCreate(**self.valid(password=password, password_confirmation=password))

    def test_confirmation_must_match(self):
        with pytest.raises(PydanticValidationError):
            UserCreate(**self.valid(password_confirmation="Secret124"))

    @pytest.mark.parametrize("email", ["not-an-email", "a@b..c", "ann@", "ann@-bad-.com"])
    def test_invalid_email(self, email):
        with pytest.raises(PydanticValidationError):
            UserCreate(**self.valid(email=email))

    def test_login_email_is_validated_and_lowered(self):
        assert LoginRequest(email="ANN@example.com", password="x").email == "ann@example.com"
        with pytest.raises(PydanticValidationError):
            LoginRequest(email="ann@b..c", password="x")

    def test_change_password_policy(self):
        with pytest.raises(PydanticValidationError):
            ChangePasswordRequest(current_password="x", new_password="weak")

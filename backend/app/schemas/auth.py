"""
Postboard Backend: Authentication Schemas
===========================================
"""

from typing import Any, Dict

from pydantic import BaseModel, EmailStr, Field, field_validator

from app.schemas.user import check_password_strength, normalize_email


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(min_length=1)

    @field_validator("email")
    @classmethod
    def lower_email(cls, v: str) -> str:
        return normalize_email(v)


class ChangePasswordRequest(BaseModel):
    current_password: str = Field(min_length=1)
    new_password: str = Field(min_length=6, max_length=72)

    @field_validator("new_password")
    @classmethod
    def validate_new_password(cls, v: str) -> str:
        return check_password_strength(v)


class TokenPayload(BaseModel):
    """What login, register and refresh return inside the `data` envelope."""

    user: Dict[str, Any]
    access_token: str
    token_type: str = "bearer"
    expires_in: int = Field(description="Token lifetime in seconds")


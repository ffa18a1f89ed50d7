"""
Postboard Backend: User Request Schemas
=========================================

What:  Validation rules for creating and updating users.
How:   FastAPI validates request bodies against these models and answers
       422 with the standard error envelope when they fail.

Password policy: at least 6 characters with one lowercase letter, one
uppercase letter and one digit; `password_confirmation` must match.
"""

import re
from typing import Literal, Optional

from pydantic import BaseModel, EmailStr, Field, field_validator, model_validator


def check_password_strength(value: str) -> str:
    if not (
        re.search(r"[a-z]", value)
        and re.search(r"[A-Z]", value)
        and re.search(r"\d", value)
    ):
        raise ValueError(
            "The password must contain at least one uppercase letter, "
            "one lowercase letter, and one number."
        )
    return value


def normalize_email(value: str) -> str:
    # EmailStr only lowercases the domain; lookups compare whole addresses
    return value.lower()


class UserCreate(BaseModel):
    name: str = Field(min_length=2, max_length=100)
    email: EmailStr
    password: str = Field(min_length=6, max_length=72)
    password_confirmation: str
    status: Literal["active", "inactive"] = "active"

    @field_validator("email")
    @classmethod
    def validate_email(cls, v: str) -> str:
        return normalize_email(v)

    @field_validator("password")
    @classmethod
    def validate_password(cls, v: str) -> str:
        return check_password_strength(v)

    @model_validator(mode="after")
    def passwords_match(self) -> "UserCreate":
        if self.password != self.password_confirmation:
            raise ValueError("The password confirmation does not match.")
        return self

    def to_attributes(self) -> dict:
        return self.model_dump(exclude={"password_confirmation"})


class UserUpdate(BaseModel):
    """Partial update; only the fields present in the body are written."""

    name: Optional[str] = Field(default=None, min_length=2, max_length=100)
    email: Optional[EmailStr] = None
    password: Optional[str] = Field(default=None, min_length=6, max_length=72)
    status: Optional[Literal["active", "inactive"]] = None

    @field_validator("email")
    @classmethod
    def validate_email(cls, v: Optional[str]) -> Optional[str]:
        return normalize_email(v) if v is not None else v

    @field_validator("password")
    @classmethod
    def validate_password(cls, v: Optional[str]) -> Optional[str]:
        return check_password_strength(v) if v is not None else v

    def to_attributes(self) -> dict:
        return self.model_dump(exclude_unset=True, exclude_none=True)

"""User schema definitions.

This module defines the User data model and the authentication request and
response payloads.
"""

import secrets
from datetime import datetime
from typing import List, Optional

import pytz
from pydantic import Field, field_validator

from core.choices import UserRole
from schemas.common import APIModel, UtcDatetime


class User(APIModel):
    """Internal user representation, including the password hash."""

    user_id: str = Field(
        description="The unique identifier for the user.",
        default_factory=lambda: secrets.token_hex(8),
        frozen=True,
    )
    email: str
    name: str
    role: UserRole
    password_hash: str = Field(exclude=True)
    create_at: UtcDatetime = Field(default_factory=lambda: datetime.now(pytz.utc))


class UserPublic(APIModel):
    """User information safe to return to clients."""

    user_id: str
    email: str
    name: str
    role: UserRole
    create_at: UtcDatetime


class UserSummary(APIModel):
    """Compact user reference embedded in other resources."""

    user_id: str
    name: str
    email: str


class RegisterRequest(APIModel):
    email: str
    password: str = Field(min_length=6)
    name: str
    role: UserRole

    @field_validator("email")
    @classmethod
    def normalize_email(cls, value: str) -> str:
        normalized = value.strip().lower()
        if not normalized or "@" not in normalized:
            raise ValueError("A valid email is required.")
        return normalized

    @field_validator("name")
    @classmethod
    def validate_name(cls, value: str) -> str:
        normalized = value.strip()
        if not normalized:
            raise ValueError("Name is required.")
        return normalized


class LoginRequest(APIModel):
    email: str
    password: str

    @field_validator("email")
    @classmethod
    def normalize_email(cls, value: str) -> str:
        return value.strip().lower()


class AuthResponse(APIModel):
    token: str
    user: UserPublic


class UpdateProfileRequest(APIModel):
    name: str

    @field_validator("name")
    @classmethod
    def validate_name(cls, value: str) -> str:
        normalized = value.strip()
        if not normalized:
            raise ValueError("Name is required.")
        return normalized


class CourseReference(APIModel):
    course_id: str
    name: str
    code: str


class UserProfile(UserPublic):
    enrolled_courses: List[CourseReference] = Field(default_factory=list)
    teaching_courses: List[CourseReference] = Field(default_factory=list)


class ProfileUpdateResponse(APIModel):
    message: str
    user: Optional[UserPublic] = None

"""Auth schemas: CurrentUser, registration, login, profile."""

import uuid
from datetime import datetime

from pydantic import BaseModel, ConfigDict, EmailStr, field_validator
from pydantic.alias_generators import to_camel


class CurrentUser(BaseModel):
    """Lightweight user context resolved from the access token + DB lookup."""

    user_id: uuid.UUID
    username: str
    email: str


class _CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class RegisterRequest(_CamelModel):
    full_name: str
    email: EmailStr
    username: str
    password: str

    @field_validator("full_name", "username")
    @classmethod
    def _strip_required(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("All fields are required")
        return value

    @field_validator("password")
    @classmethod
    def _password_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("All fields are required")
        return value


class LoginRequest(_CamelModel):
    email: str | None = None
    username: str | None = None
    password: str


class UserProfileResponse(_CamelModel):
    id: uuid.UUID
    username: str
    email: str
    full_name: str
    created_at: datetime
    updated_at: datetime


class RegisterResponse(BaseModel):
    message: str
    user: UserProfileResponse


class LoginResponse(_CamelModel):
    message: str
    user: UserProfileResponse
    access_token: str

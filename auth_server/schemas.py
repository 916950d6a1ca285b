"""Request/response schemas for /auth endpoints. JSON uses camelCase."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator
from pydantic.alias_generators import to_camel

from auth_server.config import EMAIL_MAX_LEN, PASSWORD_MAX_LEN, PASSWORD_MIN_LEN, USERNAME_MAX_LEN


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


class LoginRequest(_CamelModel):
    username: str = Field(..., min_length=1, max_length=USERNAME_MAX_LEN)
    password: str = Field(..., min_length=1, max_length=PASSWORD_MAX_LEN)


class RegisterRequest(_CamelModel):
    username: str = Field(..., min_length=1, max_length=USERNAME_MAX_LEN, pattern=r"^\S+$")
    password: str = Field(..., min_length=PASSWORD_MIN_LEN, max_length=PASSWORD_MAX_LEN)
    email: EmailStr | None = None

    @field_validator("email")
    @classmethod
    def validate_email_length(cls, v: str | None) -> str | None:
        if v is not None and len(v) > EMAIL_MAX_LEN:
            raise ValueError(f"email must be at most {EMAIL_MAX_LEN} characters")
        return v


class PrivilegedRegisterRequest(RegisterRequest):
    role: str = Field(..., min_length=1, max_length=50)


class LoginResponse(_CamelModel):
    token: str
    username: str
    roles: list[str]
    expires_at: datetime


class UserResponse(_CamelModel):
    user_id: int
    username: str
    email: str | None = None
    roles: list[str]


class MessageResponse(_CamelModel):
    message: str

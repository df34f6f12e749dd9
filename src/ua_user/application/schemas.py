"""Pydantic request/response schemas for ua_user and the auth endpoints.

All responses are wrapped in ApiResponse at the router layer.
UserResponse is the only outward shape of a user: it has no password field.
"""

from datetime import datetime
from typing import Annotated

from pydantic import AfterValidator, BaseModel, EmailStr, Field, model_validator

from src.ua_gateway.auth.password import BCRYPT_MAX_PASSWORD_BYTES
from src.ua_user.domain.models import User


def _password_fits_bcrypt(v: str) -> str:
    if len(v.encode("utf-8")) > BCRYPT_MAX_PASSWORD_BYTES:
        raise ValueError(f"Password must be at most {BCRYPT_MAX_PASSWORD_BYTES} bytes")
    return v


Name = Annotated[str, Field(min_length=2, max_length=100)]
Password = Annotated[str, Field(min_length=6), AfterValidator(_password_fits_bcrypt)]
Age = Annotated[int, Field(ge=0, le=150)]


# ---------------------------------------------------------------------------
# Requests
# ---------------------------------------------------------------------------


class CreateUserRequest(BaseModel):
    name: Name
    email: EmailStr
    password: Password
    age: Age | None = None
    is_active: bool | None = None


class SignupRequest(BaseModel):
    name: Name
    email: EmailStr
    password: Password
    age: Age | None = None


class LoginRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1)


class UpdateUserRequest(BaseModel):
    """Partial update body. Only keys present in the JSON are applied.

    age may be sent as null to clear it; the other fields cannot be nulled.
    """

    name: Name | None = None
    email: EmailStr | None = None
    age: Age | None = None
    is_active: bool | None = None

    @model_validator(mode="after")
    def reject_null_required_fields(self) -> "UpdateUserRequest":
        for name in ("name", "email", "is_active"):
            if name in self.model_fields_set and getattr(self, name) is None:
                raise ValueError(f"{name} cannot be null")
        return self


# ---------------------------------------------------------------------------
# Public projection
# ---------------------------------------------------------------------------


class UserResponse(BaseModel):
    id: int
    name: str
    email: str
    age: int | None = None
    is_active: bool
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_domain(cls, u: User) -> "UserResponse":
        return cls(
            id=u.id,
            name=u.name,
            email=u.email,
            age=u.age,
            is_active=u.is_active,
            created_at=u.created_at,
            updated_at=u.updated_at,
        )

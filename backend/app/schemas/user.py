# app/schemas/user.py
"""
Pydantic schemas for the user account endpoints.
Defines registration, login and profile update payloads and the public
representation of a user (no password hash, tokens or avatar bytes).
"""
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator, model_validator

from app.core.security import check_password_policy

__all__ = [
    "UPDATABLE_FIELDS",
    "UserCreate",
    "LoginRequest",
    "UserUpdate",
    "UserOut",
    "AuthOut",
]

# Keys a client may send to PATCH /users/me
UPDATABLE_FIELDS = frozenset({"name", "email", "password", "age"})


def _clean_name(value: str) -> str:
    value = value.strip()
    if not value:
        raise ValueError("Name is required")
    return value


def _strip(value: Any) -> Any:
    return value.strip() if isinstance(value, str) else value


class UserCreate(BaseModel):
    """
    Request model for registration.
    The password is validated here and hashed by the router before storage.
    """
    name: str
    email: EmailStr
    password: str
    age: Optional[int] = Field(default=None, ge=0)

    @field_validator("name")
    @classmethod
    def validate_name(cls, value: str) -> str:
        return _clean_name(value)

    @field_validator("email", mode="before")
    @classmethod
    def strip_email(cls, value: Any) -> Any:
        return _strip(value)

    @field_validator("email")
    @classmethod
    def lower_email(cls, value: str) -> str:
        return value.lower()

    @field_validator("password")
    @classmethod
    def validate_password(cls, value: str) -> str:
        return check_password_policy(value)


class LoginRequest(BaseModel):
    """
    Credentials for POST /users/login.
    Missing fields default to empty so they fail like a wrong password.
    """
    email: str = ""
    password: str = ""


class UserUpdate(BaseModel):
    """
    Profile update with one optional field per updatable attribute.
    Only the fields the client actually sent are applied
    (see `model_fields_set`).
    """
    model_config = ConfigDict(extra="forbid")

    name: Optional[str] = None
    email: Optional[EmailStr] = None
    password: Optional[str] = None
    age: Optional[int] = Field(default=None, ge=0)

    @field_validator("name")
    @classmethod
    def validate_name(cls, value: Optional[str]) -> Optional[str]:
        return None if value is None else _clean_name(value)

    @field_validator("email", mode="before")
    @classmethod
    def strip_email(cls, value: Any) -> Any:
        return _strip(value)

    @field_validator("email")
    @classmethod
    def lower_email(cls, value: Optional[str]) -> Optional[str]:
        return None if value is None else value.lower()

    @field_validator("password")
    @classmethod
    def validate_password(cls, value: Optional[str]) -> Optional[str]:
        return None if value is None else check_password_policy(value)

    @model_validator(mode="after")
    def required_fields_not_null(self) -> "UserUpdate":
        # age may be cleared; the other attributes are mandatory on the record
        for field in ("name", "email", "password"):
            if field in self.model_fields_set and getattr(self, field) is None:
                raise ValueError(f"{field} cannot be null")
        return self


class UserOut(BaseModel):
    """
    Public user representation.
    Never includes the password hash, session tokens or avatar bytes.
    """
    id: str
    name: str
    email: str
    age: Optional[int] = None
    createdAt: Optional[str] = None
    updatedAt: Optional[str] = None

    @classmethod
    def from_model(cls, user) -> "UserOut":
        return cls(
            id=str(user.id),
            name=user.name,
            email=user.email,
            age=user.age,
            createdAt=user.created_at.isoformat() if user.created_at else None,
            updatedAt=user.updated_at.isoformat() if user.updated_at else None,
        )


class AuthOut(BaseModel):
    """Response of registration and login: the user plus a fresh session token."""
    user: UserOut
    token: str

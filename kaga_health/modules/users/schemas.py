# kaga_health/modules/users/schemas.py
from __future__ import annotations

import re
from datetime import date, datetime
from enum import Enum
from typing import Annotated, List, Literal, Optional
from uuid import UUID

from pydantic import (
    BaseModel,
    ConfigDict,
    EmailStr,
    Field,
    SecretStr,
    StringConstraints,
    field_validator,
    model_validator,
)


class Role(str, Enum):
    patient = "patient"
    doctor = "doctor"
    admin = "admin"


Gender = Literal["Male", "Female"]

NameStr = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=50)]
PhoneStr = Annotated[str, StringConstraints(pattern=r"^\+?[1-9]\d{1,14}$")]  # E.164 simple

PASSWORD_RE = re.compile(r"^(?=.*[A-Za-z])(?=.*\d)[A-Za-z\d\S]{8,64}$")


def _check_password(v: SecretStr) -> SecretStr:
    if not PASSWORD_RE.match(v.get_secret_value()):
        raise ValueError(
            "Password must be 8–64 chars and include at least one letter and one digit"
        )
    return v


def reject_nulls(model: BaseModel, *fields: str) -> BaseModel:
    """
    PATCH bodies may omit a field but not null out a required column.
    """
    nulled = [f for f in fields if f in model.model_fields_set and getattr(model, f) is None]
    if nulled:
        raise ValueError(f"may not be null: {', '.join(nulled)}")
    return model


class _EmailNormalized(BaseModel):
    @field_validator("email", mode="before", check_fields=False)
    @classmethod
    def normalize_email(cls, v):
        return v.strip().lower() if isinstance(v, str) else v


class RegisterRequest(_EmailNormalized):
    """
    Self-service sign-up. Always creates a `patient` user together with
    its patient profile; staff accounts are created by an admin.
    """
    email: EmailStr = Field(...)
    password: SecretStr = Field(..., description="8–64 chars, at least one letter and one digit")
    first_name: NameStr
    last_name: NameStr
    phone: Optional[PhoneStr] = None

    # patient profile
    date_of_birth: Optional[date] = None
    gender: Optional[Gender] = None
    address: Optional[str] = Field(default=None, max_length=255)

    check_password_strength = field_validator("password")(_check_password)


class UserPublic(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    email: EmailStr
    role: Role
    first_name: str
    last_name: str
    phone: Optional[str] = None
    is_active: bool
    created_at: datetime
    updated_at: datetime


RegisterResponse = UserPublic
MeResponse = UserPublic


class ErrorResponse(BaseModel):
    error: str
    message: str
    status: int


class MessageResponse(BaseModel):
    message: str


# --- Login / Refresh ---

class LoginRequest(_EmailNormalized):
    email: EmailStr
    password: SecretStr


class DoctorLoginRequest(BaseModel):
    username: Annotated[str, StringConstraints(strip_whitespace=True, min_length=2, max_length=101)]
    password: SecretStr


class TokenPair(BaseModel):
    access_token: str
    token_type: str = "bearer"
    expires_in: int
    refresh_token: str | None = None
    user: UserPublic | None = None


LoginResponse = TokenPair


class RefreshRequest(BaseModel):
    refresh_token: str


# --- Admin user management ---

class UserCreateRequest(_EmailNormalized):
    email: EmailStr
    password: SecretStr
    first_name: NameStr
    last_name: NameStr
    phone: Optional[PhoneStr] = None
    role: Role = Role.patient
    is_active: bool = True

    check_password_strength = field_validator("password")(_check_password)


class UserUpdateRequest(_EmailNormalized):
    email: Optional[EmailStr] = None
    password: Optional[SecretStr] = None
    first_name: Optional[NameStr] = None
    last_name: Optional[NameStr] = None
    phone: Optional[PhoneStr] = None
    role: Optional[Role] = None
    is_active: Optional[bool] = None

    @field_validator("password")
    @classmethod
    def password_strength(cls, v: Optional[SecretStr]) -> Optional[SecretStr]:
        return _check_password(v) if v is not None else v

    @model_validator(mode="after")
    def required_columns_set(self) -> "UserUpdateRequest":
        return reject_nulls(self, "email", "password", "first_name", "last_name", "role", "is_active")


class UserListParams(BaseModel):
    q: Optional[str] = Field(
        default=None,
        description="Case-insensitive search over email, first_name, last_name",
    )
    role: Optional[Role] = None
    is_active: Optional[bool] = None

    limit: int = Field(default=20, ge=1, le=100)
    offset: int = Field(default=0, ge=0)

    order_by: str = Field(default="created_at", pattern="^(created_at|last_name|email)$")
    order_dir: str = Field(default="desc", pattern="^(asc|desc)$")


class UserPage(BaseModel):
    items: List[UserPublic]
    total: int
    limit: int
    offset: int
    has_next: bool

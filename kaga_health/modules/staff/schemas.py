# kaga_health/modules/staff/schemas.py
from __future__ import annotations

from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator, model_validator

from kaga_health.modules.staff.models import DEPARTMENTS
from kaga_health.modules.users.schemas import PhoneStr, reject_nulls


def check_department(value: Optional[str]) -> Optional[str]:
    if value is None:
        return value
    value = value.strip()
    for name in DEPARTMENTS:
        if name.lower() == value.lower():
            return name
    raise ValueError(f"department must be one of: {', '.join(DEPARTMENTS)}")


class StaffCreateRequest(BaseModel):
    user_id: UUID
    department: str
    phone_number: Optional[PhoneStr] = None
    email: Optional[EmailStr] = Field(default=None, description="Defaults to the user's email")
    bio: Optional[str] = None

    department_valid = field_validator("department")(check_department)


class StaffUpdateRequest(BaseModel):
    department: Optional[str] = None
    phone_number: Optional[PhoneStr] = None
    email: Optional[EmailStr] = None
    bio: Optional[str] = None

    department_valid = field_validator("department")(check_department)

    @model_validator(mode="after")
    def required_columns_set(self) -> "StaffUpdateRequest":
        return reject_nulls(self, "department", "email")


class StaffPublic(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    user_id: UUID
    name: str
    department: str
    phone_number: Optional[str] = None
    email: str
    bio: Optional[str] = None
    created_at: datetime


class StaffPage(BaseModel):
    items: List[StaffPublic]
    total: int
    limit: int
    offset: int
    has_next: bool


class DepartmentList(BaseModel):
    departments: List[str]

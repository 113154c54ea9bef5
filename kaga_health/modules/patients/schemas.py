# kaga_health/modules/patients/schemas.py
from __future__ import annotations

from datetime import date, datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from kaga_health.modules.users.schemas import Gender, PhoneStr


class PatientCreateRequest(BaseModel):
    """
    Attach a profile to an existing `patient` user (admin flow).
    Self sign-up creates the profile automatically.
    """
    user_id: UUID
    date_of_birth: Optional[date] = None
    gender: Optional[Gender] = None
    phone_number: Optional[PhoneStr] = None
    address: Optional[str] = Field(default=None, max_length=255)
    medical_history: Optional[str] = None


class PatientUpdateRequest(BaseModel):
    date_of_birth: Optional[date] = None
    gender: Optional[Gender] = None
    phone_number: Optional[PhoneStr] = None
    address: Optional[str] = Field(default=None, max_length=255)
    medical_history: Optional[str] = None


class PatientPublic(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    user_id: UUID
    first_name: str
    last_name: str
    email: str
    date_of_birth: Optional[date] = None
    gender: Optional[Gender] = None
    phone_number: Optional[str] = None
    address: Optional[str] = None
    medical_history: Optional[str] = None
    created_at: datetime


class PatientListParams(BaseModel):
    q: Optional[str] = Field(
        default=None,
        description="Case-insensitive search over email, first_name, last_name",
    )
    limit: int = Field(default=20, ge=1, le=100)
    offset: int = Field(default=0, ge=0)


class PatientPage(BaseModel):
    items: List[PatientPublic]
    total: int
    limit: int
    offset: int
    has_next: bool

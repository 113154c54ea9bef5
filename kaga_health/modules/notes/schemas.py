# kaga_health/modules/notes/schemas.py
from __future__ import annotations

from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class Medicine(BaseModel):
    name: str = Field(min_length=1, max_length=200)
    dose: Optional[str] = Field(default=None, max_length=100)
    frequency: Optional[str] = Field(default=None, max_length=100)
    duration: Optional[str] = Field(default=None, max_length=100)


class NoteCreateRequest(BaseModel):
    """
    doctor_id / patient_id are taken from the appointment; when sent they must match it.
    """

    appointment_id: UUID = Field(validation_alias=AliasChoices("appointment_id", "appointment"))
    doctor_id: Optional[UUID] = Field(default=None, validation_alias=AliasChoices("doctor_id", "doctor"))
    patient_id: Optional[UUID] = Field(default=None, validation_alias=AliasChoices("patient_id", "patient"))
    notes: Optional[str] = None
    medicines: List[Medicine] = Field(default_factory=list)


class NoteUpdateRequest(BaseModel):
    notes: Optional[str] = None
    medicines: Optional[List[Medicine]] = None


class NotePublic(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    appointment_id: UUID
    doctor_id: UUID
    patient_id: UUID
    notes: Optional[str] = None
    medicines: List[Medicine]
    created_at: datetime
    updated_at: datetime

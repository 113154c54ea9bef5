# kaga_health/modules/appointments/schemas.py
from __future__ import annotations

from datetime import date, datetime, time
from typing import Any, List, Literal, Optional
from uuid import UUID

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator, model_validator

from kaga_health.modules.schedules.schemas import normalize_slot
from kaga_health.modules.staff.schemas import check_department
from kaga_health.modules.users.schemas import reject_nulls

AppointmentStatus = Literal["Pending", "Confirmed", "Cancelled", "Completed"]

_DATE_KEYS = ("appointment_date", "appointmentDate")


def split_timestamp(data: Any) -> Any:
    """
    Accept a full timestamp for appointment_date. The date part becomes the
    appointment date and a non-midnight time part becomes the slot label.
    A slot sent alongside a timestamp must name the same time.
    """
    if not isinstance(data, dict):
        return data
    key = next((k for k in _DATE_KEYS if k in data), None)
    if key is None:
        return data

    raw = data[key]
    if isinstance(raw, str) and ("T" in raw or " " in raw.strip()):
        try:
            raw = datetime.fromisoformat(raw.strip().replace("Z", "+00:00"))
        except ValueError:
            return data  # field validation reports the bad value
    if not isinstance(raw, datetime):
        return data

    if raw.second or raw.microsecond:
        raise ValueError("appointment_date time must fall on a whole minute")

    data = dict(data)
    data[key] = raw.date()
    if raw.time() == time(0, 0):
        return data

    label = raw.strftime("%H:%M")
    given = data.get("slot")
    if given is None:
        data["slot"] = label
    elif not isinstance(given, str) or normalize_slot(given) != label:
        raise ValueError("slot does not match the time of appointment_date")
    return data


def _optional_slot(value: Optional[str]) -> Optional[str]:
    return None if value is None else normalize_slot(value)


class AppointmentCreateRequest(BaseModel):
    """
    Payload to create an appointment.
    - patient_id is taken from the current user when a patient books for themselves.
    - doctor_id may be omitted; a doctor of the department with the slot free is assigned.
    """

    patient_id: Optional[UUID] = Field(
        default=None, validation_alias=AliasChoices("patient_id", "patient", "patientId")
    )
    department: str
    doctor_id: Optional[UUID] = Field(
        default=None, validation_alias=AliasChoices("doctor_id", "doctor", "doctorId")
    )
    appointment_date: date = Field(validation_alias=AliasChoices(*_DATE_KEYS))
    slot: str
    reason: Optional[str] = Field(default=None, max_length=1000)
    status: AppointmentStatus = "Pending"

    @model_validator(mode="before")
    @classmethod
    def timestamp_split(cls, data: Any) -> Any:
        return split_timestamp(data)

    department_valid = field_validator("department")(check_department)
    slot_valid = field_validator("slot")(normalize_slot)


class AppointmentUpdateRequest(BaseModel):
    department: Optional[str] = None
    doctor_id: Optional[UUID] = Field(
        default=None, validation_alias=AliasChoices("doctor_id", "doctor", "doctorId")
    )
    appointment_date: Optional[date] = Field(
        default=None, validation_alias=AliasChoices(*_DATE_KEYS)
    )
    slot: Optional[str] = None
    reason: Optional[str] = Field(default=None, max_length=1000)
    status: Optional[AppointmentStatus] = None

    @model_validator(mode="before")
    @classmethod
    def timestamp_split(cls, data: Any) -> Any:
        return split_timestamp(data)

    department_valid = field_validator("department")(check_department)
    slot_valid = field_validator("slot")(_optional_slot)

    # doctor_id may be null: that asks for automatic assignment
    @model_validator(mode="after")
    def required_columns_set(self) -> "AppointmentUpdateRequest":
        return reject_nulls(self, "department", "appointment_date", "slot")


class StatusChangeRequest(BaseModel):
    status: AppointmentStatus


class AppointmentPublic(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    patient_id: UUID
    doctor_id: UUID
    department: str
    appointment_date: date
    slot: str
    reason: Optional[str] = None
    status: str
    created_at: datetime
    updated_at: datetime


class AppointmentListParams(BaseModel):
    status: Optional[AppointmentStatus] = None
    department: Optional[str] = None
    doctor_id: Optional[UUID] = None
    patient_id: Optional[UUID] = None
    date_from: Optional[date] = None
    date_to: Optional[date] = None
    limit: int = Field(20, ge=1, le=100)
    offset: int = Field(0, ge=0)

    department_valid = field_validator("department")(check_department)


class AppointmentListPage(BaseModel):
    """
    Page the appointments list (with pagination).
    """

    items: List[AppointmentPublic]
    total: int
    limit: int
    offset: int
    has_next: bool

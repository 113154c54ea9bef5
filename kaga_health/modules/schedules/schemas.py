# kaga_health/modules/schedules/schemas.py
from __future__ import annotations

import re
from datetime import date, datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, Field, field_validator

WEEKDAYS: tuple[str, ...] = (
    "Monday",
    "Tuesday",
    "Wednesday",
    "Thursday",
    "Friday",
    "Saturday",
    "Sunday",
)

SLOT_RE = re.compile(r"^([01]?\d|2[0-3]):([0-5]\d)(?::00)?$")


def normalize_day(value: str) -> str:
    """'monday' / 'Mon' -> 'Monday'."""
    v = value.strip().lower()
    for name in WEEKDAYS:
        if v == name.lower() or v == name[:3].lower():
            return name
    raise ValueError(f"day must be one of: {', '.join(WEEKDAYS)}")


def normalize_slot(value: str) -> str:
    """'9:00' / '09:00:00' -> '09:00'."""
    m = SLOT_RE.match(value.strip())
    if not m:
        raise ValueError("slot must be a 24h time label like '10:00'")
    return f"{int(m.group(1)):02d}:{m.group(2)}"


def weekday_name(d: date) -> str:
    return WEEKDAYS[d.weekday()]


class DaySlots(BaseModel):
    day: str
    slots: List[str] = Field(default_factory=list)

    @field_validator("day")
    @classmethod
    def day_valid(cls, v: str) -> str:
        return normalize_day(v)

    @field_validator("slots")
    @classmethod
    def slots_valid(cls, v: List[str]) -> List[str]:
        return sorted({normalize_slot(s) for s in v})


def merge_days(items: List[DaySlots]) -> List[DaySlots]:
    """Collapse repeated days and order Monday..Sunday."""
    merged: dict[str, set[str]] = {}
    for item in items:
        merged.setdefault(item.day, set()).update(item.slots)
    return [
        DaySlots(day=day, slots=sorted(merged[day]))
        for day in WEEKDAYS
        if merged.get(day)
    ]


class WorkScheduleCreate(BaseModel):
    doctor_id: Optional[UUID] = Field(
        default=None, description="Omit when a doctor publishes their own schedule"
    )
    available_slots: List[DaySlots] = Field(default_factory=list)

    @field_validator("available_slots")
    @classmethod
    def merge(cls, v: List[DaySlots]) -> List[DaySlots]:
        return merge_days(v)


class WorkScheduleUpdate(BaseModel):
    available_slots: List[DaySlots]

    @field_validator("available_slots")
    @classmethod
    def merge(cls, v: List[DaySlots]) -> List[DaySlots]:
        return merge_days(v)


class WorkSchedulePublic(BaseModel):
    id: UUID
    doctor_id: UUID
    available_slots: List[DaySlots]
    created_at: datetime
    updated_at: datetime


class OpenSlots(BaseModel):
    doctor_id: UUID
    for_date: date
    day: str
    slots: List[str]

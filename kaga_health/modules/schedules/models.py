# kaga_health/modules/schedules/models.py
from __future__ import annotations

import uuid
from typing import List

from sqlalchemy import ForeignKey, Index, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from kaga_health.db.base import Base, TimestampMixin, UUIDPKMixin


class WorkSchedule(UUIDPKMixin, TimestampMixin, Base):
    """
    A doctor's published weekly availability. One schedule per doctor;
    each (day, slot) pair it offers is a WorkScheduleSlot row.
    """

    __tablename__ = "work_schedules"

    doctor_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("medical_staff.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
    )

    slots: Mapped[List["WorkScheduleSlot"]] = relationship(
        back_populates="schedule",
        cascade="all, delete-orphan",
        passive_deletes=True,
        lazy="selectin",
        order_by=lambda: [WorkScheduleSlot.day_index, WorkScheduleSlot.slot],
    )


class WorkScheduleSlot(UUIDPKMixin, Base):
    __tablename__ = "work_schedule_slots"

    schedule_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("work_schedules.id", ondelete="CASCADE"),
        nullable=False,
    )
    day: Mapped[str] = mapped_column(String(9), nullable=False)        # "Monday"
    day_index: Mapped[int] = mapped_column(nullable=False)             # 0 = Monday
    slot: Mapped[str] = mapped_column(String(5), nullable=False)       # "HH:MM"

    schedule: Mapped[WorkSchedule] = relationship(back_populates="slots")

    __table_args__ = (
        UniqueConstraint("schedule_id", "day", "slot", name="uq_schedule_day_slot"),
        Index("ix_schedule_slot_lookup", "schedule_id", "day_index", "slot"),
    )

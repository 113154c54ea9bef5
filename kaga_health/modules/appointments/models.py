# kaga_health/modules/appointments/models.py
from __future__ import annotations

import uuid
from datetime import date
from enum import Enum as PyEnum
from typing import Optional

from sqlalchemy import CheckConstraint, Date, ForeignKey, Index, String, Text, text
from sqlalchemy.orm import Mapped, mapped_column

from kaga_health.db.base import Base, TimestampMixin, UUIDPKMixin


class ApptStatus(PyEnum):
    PENDING = "Pending"
    CONFIRMED = "Confirmed"
    CANCELLED = "Cancelled"
    COMPLETED = "Completed"


# Only non-cancelled rows hold a slot; a cancelled booking frees it for rebooking
_ACTIVE_ONLY = text("status <> 'Cancelled'")


class Appointment(UUIDPKMixin, TimestampMixin, Base):
    """
    A scheduled visit. Booking identity is (doctor, appointment_date, slot).
    """

    __tablename__ = "appointments"

    patient_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("patients.id", ondelete="RESTRICT"),
        nullable=False,
    )
    doctor_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("medical_staff.id", ondelete="RESTRICT"),
        nullable=False,
    )
    department: Mapped[str] = mapped_column(String(50), nullable=False)

    appointment_date: Mapped[date] = mapped_column(Date, nullable=False)
    slot: Mapped[str] = mapped_column(String(5), nullable=False)  # "HH:MM"
    reason: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=ApptStatus.PENDING.value,
        server_default=ApptStatus.PENDING.value,
    )

    __table_args__ = (
        CheckConstraint(
            "status IN ('Pending', 'Confirmed', 'Cancelled', 'Completed')",
            name="status_valid",
        ),
        # Avoid double booking: 1 doctor, same day, same slot (active rows only)
        Index(
            "uq_appt_doctor_date_slot_active",
            "doctor_id",
            "appointment_date",
            "slot",
            unique=True,
            postgresql_where=_ACTIVE_ONLY,
            sqlite_where=_ACTIVE_ONLY,
        ),
        Index("ix_appt_patient_date", "patient_id", "appointment_date"),
        Index("ix_appt_doctor_date", "doctor_id", "appointment_date"),
    )

# kaga_health/modules/notes/models.py
from __future__ import annotations

import uuid
from typing import Any, Optional

from sqlalchemy import JSON, ForeignKey, Index, Text
from sqlalchemy.orm import Mapped, mapped_column

from kaga_health.db.base import Base, TimestampMixin, UUIDPKMixin


class DoctorNote(UUIDPKMixin, TimestampMixin, Base):
    """
    Clinical note and prescription written by the appointment's doctor.
    """

    __tablename__ = "doctor_notes"

    appointment_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("appointments.id", ondelete="CASCADE"),
        nullable=False,
    )
    doctor_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("medical_staff.id", ondelete="RESTRICT"),
        nullable=False,
    )
    patient_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("patients.id", ondelete="RESTRICT"),
        nullable=False,
    )
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    # [{"name": ..., "dose": ..., "frequency": ..., "duration": ...}]
    medicines: Mapped[list[dict[str, Any]]] = mapped_column(JSON, nullable=False, default=list)

    __table_args__ = (
        Index("ix_doctor_notes_appointment", "appointment_id"),
        Index("ix_doctor_notes_doctor", "doctor_id"),
    )

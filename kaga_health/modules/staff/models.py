# kaga_health/modules/staff/models.py
from __future__ import annotations

import uuid
from typing import Optional

from sqlalchemy import ForeignKey, Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from kaga_health.db.base import Base, TimestampMixin, UUIDPKMixin
from kaga_health.modules.users.models import User

DEPARTMENTS: tuple[str, ...] = (
    "Cardiology",
    "General Medicine",
    "Dental",
    "Pediatrics",
    "Orthopedics",
    "Dermatology",
    "Neurology",
    "Gynecology",
)


class MedicalStaff(UUIDPKMixin, TimestampMixin, Base):
    """
    Doctor profile: the entity appointments, schedules and notes point at.
    """

    __tablename__ = "medical_staff"

    user_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
    )
    department: Mapped[str] = mapped_column(String(50), nullable=False)
    phone_number: Mapped[Optional[str]] = mapped_column(String(32), nullable=True)
    email: Mapped[str] = mapped_column(String(320), nullable=False)
    bio: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    user: Mapped[User] = relationship("User", lazy="joined")

    __table_args__ = (Index("ix_medical_staff_department", "department"),)

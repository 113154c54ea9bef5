# kaga_health/modules/patients/models.py
from __future__ import annotations

import uuid
from datetime import date
from typing import Optional

from sqlalchemy import CheckConstraint, Date, ForeignKey, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from kaga_health.db.base import Base, TimestampMixin, UUIDPKMixin
from kaga_health.modules.users.models import User


class Patient(UUIDPKMixin, TimestampMixin, Base):
    """
    Patient profile, 1:1 with a `patient` user.
    """

    __tablename__ = "patients"

    user_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
    )

    date_of_birth: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    gender: Mapped[Optional[str]] = mapped_column(String(10), nullable=True)
    phone_number: Mapped[Optional[str]] = mapped_column(String(32), nullable=True)
    address: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    medical_history: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    user: Mapped[User] = relationship("User", lazy="joined")

    __table_args__ = (
        CheckConstraint("gender IS NULL OR gender IN ('Male', 'Female')", name="gender_valid"),
    )

# kaga_health/modules/bookings/models.py
from __future__ import annotations

import uuid
from decimal import Decimal
from enum import Enum as PyEnum

from sqlalchemy import CheckConstraint, ForeignKey, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column

from kaga_health.db.base import Base, TimestampMixin, UUIDPKMixin


class PaymentMethod(PyEnum):
    CARD = "card"
    MOBILE_MONEY = "mobile_money"


class PaymentStatus(PyEnum):
    PENDING = "Pending"
    PAID = "Paid"
    FAILED = "Failed"


class Booking(UUIDPKMixin, TimestampMixin, Base):
    """
    Payment record for an appointment. At most one per appointment.
    """

    __tablename__ = "bookings"

    appointment_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("appointments.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
    )
    amount: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    method: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=PaymentMethod.MOBILE_MONEY.value,
        server_default=PaymentMethod.MOBILE_MONEY.value,
    )
    status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default=PaymentStatus.PENDING.value,
        server_default=PaymentStatus.PENDING.value,
    )

    __table_args__ = (
        CheckConstraint("amount > 0", name="amount_positive"),
        CheckConstraint("method IN ('card', 'mobile_money')", name="method_valid"),
        CheckConstraint("status IN ('Pending', 'Paid', 'Failed')", name="status_valid"),
    )

# kaga_health/modules/bookings/schemas.py
from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import List, Literal, Optional
from uuid import UUID

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

PaymentMethodStr = Literal["card", "mobile_money"]
PaymentStatusStr = Literal["Pending", "Paid", "Failed"]


class BookingCreateRequest(BaseModel):
    appointment_id: UUID = Field(validation_alias=AliasChoices("appointment_id", "appointment"))
    amount: Decimal = Field(gt=0, max_digits=10, decimal_places=2)
    method: PaymentMethodStr = "mobile_money"
    status: PaymentStatusStr = "Pending"


class BookingUpdateRequest(BaseModel):
    amount: Optional[Decimal] = Field(default=None, gt=0, max_digits=10, decimal_places=2)
    method: Optional[PaymentMethodStr] = None
    status: Optional[PaymentStatusStr] = None


class BookingPublic(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    appointment_id: UUID
    amount: Decimal
    method: str
    status: str
    created_at: datetime
    updated_at: datetime


class BookingPage(BaseModel):
    items: List[BookingPublic]
    total: int
    limit: int
    offset: int
    has_next: bool

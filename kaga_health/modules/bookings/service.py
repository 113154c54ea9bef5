# kaga_health/modules/bookings/service.py
from __future__ import annotations

import logging
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from kaga_health.core.errors import ConflictError, NotFoundError, ValidationError
from kaga_health.modules.appointments.models import Appointment, ApptStatus
from kaga_health.modules.appointments.service import load_for_participant
from kaga_health.modules.bookings.models import Booking
from kaga_health.modules.bookings.schemas import (
    BookingCreateRequest,
    BookingPage,
    BookingPublic,
    BookingUpdateRequest,
)
from kaga_health.modules.log import write_audit_log
from kaga_health.modules.patients.service import get_own_patient
from kaga_health.modules.staff.service import get_own_staff
from kaga_health.modules.users.models import User, UserRole

logger = logging.getLogger("kaga_health.bookings")


class BookingNotFound(NotFoundError):
    def __init__(self, code: str = "booking_not_found"):
        super().__init__(code)


def _to_public(booking: Booking) -> BookingPublic:
    return BookingPublic.model_validate(booking)


async def _get_or_404(session: AsyncSession, booking_id: UUID) -> Booking:
    booking = await session.get(Booking, booking_id)
    if not booking:
        raise BookingNotFound()
    return booking


async def create_booking(
    session: AsyncSession, payload: BookingCreateRequest, current_user: User
) -> BookingPublic:
    """
    Record the payment for an appointment.
    - appointment must exist and be visible to the caller
    - a cancelled appointment cannot be paid for
    - one booking per appointment
    """
    appt = await load_for_participant(session, payload.appointment_id, current_user)
    if appt.status == ApptStatus.CANCELLED.value:
        raise ValidationError("appointment_cancelled")

    exists_stmt = select(Booking.id).where(Booking.appointment_id == appt.id)
    if (await session.execute(exists_stmt)).scalar_one_or_none():
        raise ConflictError("booking_already_exists")

    booking = Booking(
        appointment_id=appt.id,
        amount=payload.amount,
        method=payload.method,
        status=payload.status,
    )
    session.add(booking)
    try:
        await session.flush()
    except IntegrityError as exc:
        raise ConflictError("booking_already_exists") from exc
    await session.refresh(booking)

    await write_audit_log(
        session,
        current_user.id,
        "CREATE_BOOKING",
        f"booking={booking.id} appointment={appt.id} amount={booking.amount}",
    )
    logger.info("booking %s recorded for appointment %s", booking.id, appt.id)
    return _to_public(booking)


async def list_bookings(
    session: AsyncSession, current_user: User, limit: int, offset: int
) -> BookingPage:
    """
    - patient => bookings for their appointments
    - doctor => bookings for appointments they are assigned to
    - admin => all
    """
    stmt = select(Booking).join(Appointment, Booking.appointment_id == Appointment.id)
    if current_user.role == UserRole.PATIENT.value:
        own = await get_own_patient(session, current_user)
        stmt = stmt.where(Appointment.patient_id == own.id)
    elif current_user.role == UserRole.DOCTOR.value:
        own_staff = await get_own_staff(session, current_user)
        if own_staff is None:
            raise NotFoundError("staff_profile_missing")
        stmt = stmt.where(Appointment.doctor_id == own_staff.id)

    total = (
        await session.execute(select(func.count()).select_from(stmt.subquery()))
    ).scalar_one()
    rows = (
        await session.execute(
            stmt.order_by(Booking.created_at.desc(), Booking.id).limit(limit).offset(offset)
        )
    ).scalars().all()

    return BookingPage(
        items=[_to_public(b) for b in rows],
        total=total,
        limit=limit,
        offset=offset,
        has_next=offset + limit < total,
    )


async def get_booking(session: AsyncSession, booking_id: UUID, current_user: User) -> BookingPublic:
    booking = await _get_or_404(session, booking_id)
    await load_for_participant(session, booking.appointment_id, current_user)
    return _to_public(booking)


async def update_booking(
    session: AsyncSession, booking_id: UUID, payload: BookingUpdateRequest, current_user: User
) -> BookingPublic:
    booking = await _get_or_404(session, booking_id)
    previous = booking.status
    for field, value in payload.model_dump(exclude_unset=True, exclude_none=True).items():
        setattr(booking, field, value)
    await session.flush()
    await session.refresh(booking)

    details = f"booking={booking.id}"
    if booking.status != previous:
        details += f" status={previous}->{booking.status}"
    await write_audit_log(session, current_user.id, "UPDATE_BOOKING", details)
    return _to_public(booking)


async def delete_booking(session: AsyncSession, booking_id: UUID, current_user: User) -> None:
    booking = await _get_or_404(session, booking_id)
    await session.delete(booking)
    await session.flush()
    await write_audit_log(session, current_user.id, "DELETE_BOOKING", f"booking={booking_id}")

# kaga_health/modules/appointments/service.py
from __future__ import annotations

import logging
from datetime import date
from typing import Optional
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from kaga_health.core.config import settings
from kaga_health.core.errors import (
    ConflictError,
    InvalidTransitionError,
    NotFoundError,
    PermissionDenied,
    ValidationError,
)
from kaga_health.modules.appointments import lifecycle
from kaga_health.modules.appointments import repository as appts_repo
from kaga_health.modules.appointments.models import Appointment, ApptStatus
from kaga_health.modules.appointments.schemas import (
    AppointmentCreateRequest,
    AppointmentListPage,
    AppointmentListParams,
    AppointmentPublic,
    AppointmentUpdateRequest,
)
from kaga_health.modules.log import write_audit_log
from kaga_health.modules.patients.service import get_own_patient, get_patient_or_404
from kaga_health.modules.schedules.service import is_slot_published
from kaga_health.modules.staff import repository as staff_repo
from kaga_health.modules.staff.service import get_doctor_or_404, get_own_staff
from kaga_health.modules.users.models import User, UserRole

logger = logging.getLogger("kaga_health.appointments")

_SCHEDULING_FIELDS = ("department", "doctor_id", "appointment_date", "slot")


class AppointmentNotFound(NotFoundError):
    def __init__(self, code: str = "appointment_not_found"):
        super().__init__(code)


class SlotAlreadyBooked(ConflictError):
    """Another active appointment holds the same doctor, date and slot."""

    def __init__(self, code: str = "slot_already_booked"):
        super().__init__(code)


def _to_public(appt: Appointment) -> AppointmentPublic:
    return AppointmentPublic.model_validate(appt)


async def _flush_guarded(session: AsyncSession) -> None:
    """
    Flush pending writes. The partial unique index is the last line against
    double booking when two requests pass the pre-check at the same time.
    """
    try:
        await session.flush()
    except IntegrityError as exc:
        if "unique" in str(exc.orig).lower():
            raise SlotAlreadyBooked() from exc
        raise ValidationError("invalid_appointment_data") from exc


async def _check_bookable(
    session: AsyncSession,
    *,
    doctor_id: UUID,
    on: date,
    slot: str,
    exclude_id: Optional[UUID] = None,
) -> None:
    if settings.REQUIRE_PUBLISHED_AVAILABILITY and not await is_slot_published(
        session, doctor_id, on, slot
    ):
        raise ValidationError("slot_not_in_availability")
    if await appts_repo.slot_taken(
        session, doctor_id=doctor_id, on=on, slot=slot, exclude_id=exclude_id
    ):
        raise SlotAlreadyBooked()


async def _auto_assign(
    session: AsyncSession,
    *,
    department: str,
    on: date,
    slot: str,
    exclude_id: Optional[UUID] = None,
) -> UUID:
    """
    First doctor of the department (by last name, first name) who publishes
    the slot and has it free on that date.
    """
    for doctor in await staff_repo.list_by_department(session, department):
        if settings.REQUIRE_PUBLISHED_AVAILABILITY and not await is_slot_published(
            session, doctor.id, on, slot
        ):
            continue
        if await appts_repo.slot_taken(
            session, doctor_id=doctor.id, on=on, slot=slot, exclude_id=exclude_id
        ):
            continue
        return doctor.id
    logger.warning("no doctor available in %s on %s at %s", department, on, slot)
    raise ConflictError("no_doctor_available")


async def _resolve_doctor(
    session: AsyncSession,
    *,
    department: str,
    doctor_id: Optional[UUID],
    on: date,
    slot: str,
    exclude_id: Optional[UUID] = None,
) -> UUID:
    if doctor_id is None:
        return await _auto_assign(
            session, department=department, on=on, slot=slot, exclude_id=exclude_id
        )

    doctor = await get_doctor_or_404(session, doctor_id)
    if doctor.department != department:
        raise ValidationError("doctor_department_mismatch")
    await _check_bookable(session, doctor_id=doctor.id, on=on, slot=slot, exclude_id=exclude_id)
    return doctor.id


async def _resolve_patient_id(
    session: AsyncSession, patient_id: Optional[UUID], current_user: User
) -> UUID:
    if current_user.role == UserRole.PATIENT.value:
        own = await get_own_patient(session, current_user)
        if patient_id is not None and patient_id != own.id:
            raise PermissionDenied("not_owner")
        return own.id

    if patient_id is None:
        raise ValidationError("patient_id_required")
    return (await get_patient_or_404(session, patient_id)).id


async def _get_or_404(session: AsyncSession, appointment_id: UUID) -> Appointment:
    appt = await appts_repo.get_by_id(session, appointment_id)
    if not appt:
        raise AppointmentNotFound()
    return appt


async def _ensure_participant(session: AsyncSession, appt: Appointment, current_user: User) -> None:
    """
    - patient may only touch their own appointments
    - doctor may only touch appointments in which they are the doctor
    - admin has full access
    """
    if current_user.role == UserRole.ADMIN.value:
        return
    if current_user.role == UserRole.PATIENT.value:
        own_patient = await get_own_patient(session, current_user)
        if appt.patient_id != own_patient.id:
            raise PermissionDenied("not_owner")
        return
    own_staff = await get_own_staff(session, current_user)
    if own_staff is None or appt.doctor_id != own_staff.id:
        raise PermissionDenied("not_owner")


# CREATE
async def create_appointment(
    session: AsyncSession,
    payload: AppointmentCreateRequest,
    current_user: User,
) -> AppointmentPublic:
    """
    Book a slot.

    - Patients book for themselves and always start at Pending.
    - Doctors and admins may book for any patient and choose the initial status.
    - A doctor booking without doctor_id books into their own calendar.
    """
    status = ApptStatus(payload.status)
    if status is ApptStatus.CANCELLED:
        raise ValidationError("cannot_create_cancelled")
    if current_user.role == UserRole.PATIENT.value and status is not ApptStatus.PENDING:
        raise PermissionDenied("patients_create_pending_only")

    patient_id = await _resolve_patient_id(session, payload.patient_id, current_user)

    doctor_id = payload.doctor_id
    if doctor_id is None:
        own_staff = await get_own_staff(session, current_user)
        if own_staff is not None:
            doctor_id = own_staff.id

    doctor_id = await _resolve_doctor(
        session,
        department=payload.department,
        doctor_id=doctor_id,
        on=payload.appointment_date,
        slot=payload.slot,
    )

    appt = Appointment(
        patient_id=patient_id,
        doctor_id=doctor_id,
        department=payload.department,
        appointment_date=payload.appointment_date,
        slot=payload.slot,
        reason=payload.reason,
        status=status.value,
    )
    session.add(appt)
    await _flush_guarded(session)
    await session.refresh(appt)

    await write_audit_log(
        session,
        current_user.id,
        "CREATE_APPOINTMENT",
        f"appointment={appt.id} doctor={doctor_id} date={appt.appointment_date} slot={appt.slot}",
    )
    logger.info(
        "appointment %s booked with doctor %s on %s at %s",
        appt.id,
        doctor_id,
        appt.appointment_date,
        appt.slot,
    )
    return _to_public(appt)


# LIST
async def list_appointments(
    session: AsyncSession,
    params: AppointmentListParams,
    current_user: User,
) -> AppointmentListPage:
    """
    - patient => only their appointments
    - doctor => only appointments they are assigned to
    - admin => all, filtered by patient_id / doctor_id when given
    """
    patient_id, doctor_id = params.patient_id, params.doctor_id
    if current_user.role == UserRole.PATIENT.value:
        patient_id = (await get_own_patient(session, current_user)).id
    elif current_user.role == UserRole.DOCTOR.value:
        own_staff = await get_own_staff(session, current_user)
        if own_staff is None:
            raise NotFoundError("staff_profile_missing")
        doctor_id = own_staff.id

    rows, total = await appts_repo.list_appointments_repo(
        session,
        patient_id=patient_id,
        doctor_id=doctor_id,
        status=params.status,
        department=params.department,
        date_from=params.date_from,
        date_to=params.date_to,
        limit=params.limit,
        offset=params.offset,
    )
    return AppointmentListPage(
        items=[_to_public(a) for a in rows],
        total=total,
        limit=params.limit,
        offset=params.offset,
        has_next=params.offset + params.limit < total,
    )


async def load_for_participant(
    session: AsyncSession, appointment_id: UUID, current_user: User
) -> Appointment:
    appt = await _get_or_404(session, appointment_id)
    await _ensure_participant(session, appt, current_user)
    return appt


async def get_appointment(
    session: AsyncSession, appointment_id: UUID, current_user: User
) -> AppointmentPublic:
    return _to_public(await load_for_participant(session, appointment_id, current_user))


# UPDATE
async def update_appointment(
    session: AsyncSession,
    appointment_id: UUID,
    payload: AppointmentUpdateRequest,
    current_user: User,
) -> AppointmentPublic:
    """
    Reschedule, edit the reason, or move the status along the lifecycle.

    Re-sending the current status is a no-op. A terminal appointment
    (Cancelled / Completed) can no longer be rescheduled or re-statused.
    Patients may only edit the reason of, or cancel, their own appointments.
    """
    appt = await _get_or_404(session, appointment_id)
    await _ensure_participant(session, appt, current_user)

    data = payload.model_dump(exclude_unset=True)
    target = data.pop("status", None)
    if target == appt.status:
        target = None

    if current_user.role == UserRole.PATIENT.value:
        if any(f in data for f in _SCHEDULING_FIELDS):
            raise PermissionDenied("patients_cannot_reschedule")
        if target is not None and target != ApptStatus.CANCELLED.value:
            raise PermissionDenied("patients_can_only_cancel")

    moved = {
        f: v for f, v in data.items() if f in _SCHEDULING_FIELDS and v != getattr(appt, f)
    }
    # an explicit null doctor asks for auto-assignment
    if "doctor_id" in data and data["doctor_id"] is None:
        moved["doctor_id"] = None

    if target is not None:
        try:
            lifecycle.ensure_transition(appt.status, target)
        except InvalidTransitionError:
            logger.warning(
                "rejected status change %s -> %s for appointment %s", appt.status, target, appt.id
            )
            raise

    if moved and lifecycle.is_terminal(appt.status):
        raise InvalidTransitionError("appointment_is_final")

    if moved and lifecycle.is_active(target or appt.status):
        department = moved.get("department", appt.department)
        on = moved.get("appointment_date", appt.appointment_date)
        slot = moved.get("slot", appt.slot)
        doctor_id = moved["doctor_id"] if "doctor_id" in moved else appt.doctor_id
        moved["doctor_id"] = await _resolve_doctor(
            session,
            department=department,
            doctor_id=doctor_id,
            on=on,
            slot=slot,
            exclude_id=appt.id,
        )
    elif moved.get("doctor_id", appt.doctor_id) is None:
        moved.pop("doctor_id")

    previous = appt.status
    for field, value in moved.items():
        setattr(appt, field, value)
    if "reason" in data:
        appt.reason = data["reason"]
    if target is not None:
        appt.status = target

    await _flush_guarded(session)
    await session.refresh(appt)

    details = f"appointment={appt.id}"
    if target is not None:
        details += f" status={previous}->{target}"
    if moved:
        details += f" doctor={appt.doctor_id} date={appt.appointment_date} slot={appt.slot}"
    action = "UPDATE_APPOINTMENT_STATUS" if target is not None and not moved else "UPDATE_APPOINTMENT"
    await write_audit_log(session, current_user.id, action, details)
    return _to_public(appt)


async def change_status(
    session: AsyncSession, appointment_id: UUID, status: str, current_user: User
) -> AppointmentPublic:
    return await update_appointment(
        session, appointment_id, AppointmentUpdateRequest(status=status), current_user
    )


# CANCEL
async def cancel_appointment(
    session: AsyncSession,
    appointment_id: UUID,
    current_user: User,
) -> AppointmentPublic:
    """
    Cancelling frees the slot. Cancelling twice returns the appointment as is;
    a Completed appointment cannot be cancelled.
    """
    appt = await _get_or_404(session, appointment_id)
    await _ensure_participant(session, appt, current_user)

    if appt.status == ApptStatus.CANCELLED.value:
        return _to_public(appt)

    lifecycle.ensure_transition(appt.status, ApptStatus.CANCELLED)
    appt.status = ApptStatus.CANCELLED.value
    await session.flush()
    await session.refresh(appt)

    await write_audit_log(session, current_user.id, "CANCEL_APPOINTMENT", f"appointment={appt.id}")
    logger.info("appointment %s cancelled", appt.id)
    return _to_public(appt)


# DELETE
async def delete_appointment(session: AsyncSession, appointment_id: UUID, current_user: User) -> None:
    appt = await _get_or_404(session, appointment_id)
    await session.delete(appt)
    await session.flush()
    await write_audit_log(session, current_user.id, "DELETE_APPOINTMENT", f"appointment={appointment_id}")

# kaga_health/routers/appointments.py
from __future__ import annotations

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from kaga_health.db.sql import get_session
from kaga_health.dependencies import get_current_user, require_roles
from kaga_health.modules.appointments.schemas import (
    AppointmentCreateRequest,
    AppointmentListPage,
    AppointmentListParams,
    AppointmentPublic,
    AppointmentUpdateRequest,
    StatusChangeRequest,
)
from kaga_health.modules.appointments.service import (
    cancel_appointment,
    change_status,
    create_appointment,
    delete_appointment,
    get_appointment,
    list_appointments,
    update_appointment,
)
from kaga_health.modules.users.models import User, UserRole
from kaga_health.modules.users.schemas import ErrorResponse

router = APIRouter(tags=["appointments"])

_conflict = {409: {"model": ErrorResponse, "description": "Slot already booked or invalid transition"}}


@router.post(
    "/appointments",
    response_model=AppointmentPublic,
    status_code=status.HTTP_201_CREATED,
    summary="Book an appointment slot",
    responses=_conflict,
)
async def appointments_create(
    payload: AppointmentCreateRequest,
    session: AsyncSession = Depends(get_session),
    current_user: User = Depends(get_current_user),
):
    """
    `appointment_date` accepts a date or a full timestamp; the time part of a
    timestamp becomes the slot. Omit `doctor_id` to be assigned any free
    doctor of the department.
    """
    return await create_appointment(session, payload, current_user)


@router.get("/appointments", response_model=AppointmentListPage)
async def appointments_list(
    params: Annotated[AppointmentListParams, Query()],
    session: AsyncSession = Depends(get_session),
    current_user: User = Depends(get_current_user),
):
    return await list_appointments(session, params, current_user)


@router.get("/appointments/{appointment_id}", response_model=AppointmentPublic)
async def appointments_get(
    appointment_id: UUID,
    session: AsyncSession = Depends(get_session),
    current_user: User = Depends(get_current_user),
):
    return await get_appointment(session, appointment_id, current_user)


@router.patch("/appointments/{appointment_id}", response_model=AppointmentPublic, responses=_conflict)
async def appointments_update(
    appointment_id: UUID,
    payload: AppointmentUpdateRequest,
    session: AsyncSession = Depends(get_session),
    current_user: User = Depends(get_current_user),
):
    return await update_appointment(session, appointment_id, payload, current_user)


@router.put(
    "/appointments/{appointment_id}/status",
    response_model=AppointmentPublic,
    responses=_conflict,
)
async def appointments_status(
    appointment_id: UUID,
    payload: StatusChangeRequest,
    session: AsyncSession = Depends(get_session),
    current_user: User = Depends(get_current_user),
):
    return await change_status(session, appointment_id, payload.status, current_user)


@router.put(
    "/appointments/{appointment_id}/cancel",
    response_model=AppointmentPublic,
    summary="Cancel an appointment",
    responses=_conflict,
)
async def appointments_cancel(
    appointment_id: UUID,
    session: AsyncSession = Depends(get_session),
    current_user: User = Depends(get_current_user),
):
    return await cancel_appointment(session, appointment_id, current_user)


@router.delete("/appointments/{appointment_id}", status_code=status.HTTP_204_NO_CONTENT)
async def appointments_delete(
    appointment_id: UUID,
    session: AsyncSession = Depends(get_session),
    current_user: User = Depends(require_roles(UserRole.ADMIN)),
):
    await delete_appointment(session, appointment_id, current_user)
    return Response(status_code=status.HTTP_204_NO_CONTENT)

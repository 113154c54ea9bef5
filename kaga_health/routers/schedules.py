# kaga_health/routers/schedules.py
from __future__ import annotations

from datetime import date
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from kaga_health.db.sql import get_session
from kaga_health.dependencies import get_current_user, require_roles
from kaga_health.modules.schedules.schemas import (
    OpenSlots,
    WorkScheduleCreate,
    WorkSchedulePublic,
    WorkScheduleUpdate,
)
from kaga_health.modules.schedules.service import (
    create_schedule,
    delete_schedule,
    get_schedule,
    get_schedule_for_doctor,
    list_schedules,
    open_slots,
    update_schedule,
)
from kaga_health.modules.users.models import User, UserRole

router = APIRouter(tags=["work-schedules"])

doctor_or_admin = require_roles(UserRole.DOCTOR, UserRole.ADMIN)


@router.post(
    "/work-schedules",
    response_model=WorkSchedulePublic,
    status_code=status.HTTP_201_CREATED,
    summary="Publish a doctor's weekly availability",
)
async def schedules_create(
    payload: WorkScheduleCreate,
    session: AsyncSession = Depends(get_session),
    current_user: User = Depends(doctor_or_admin),
):
    return await create_schedule(session, payload, current_user)


@router.get("/work-schedules", response_model=List[WorkSchedulePublic])
async def schedules_list(
    doctor_id: Optional[UUID] = Query(None),
    session: AsyncSession = Depends(get_session),
    _: User = Depends(get_current_user),
):
    return await list_schedules(session, doctor_id=doctor_id)


@router.get("/work-schedules/{schedule_id}", response_model=WorkSchedulePublic)
async def schedules_get(
    schedule_id: UUID,
    session: AsyncSession = Depends(get_session),
    _: User = Depends(get_current_user),
):
    return await get_schedule(session, schedule_id)


@router.put("/work-schedules/{schedule_id}", response_model=WorkSchedulePublic)
async def schedules_update(
    schedule_id: UUID,
    payload: WorkScheduleUpdate,
    session: AsyncSession = Depends(get_session),
    current_user: User = Depends(doctor_or_admin),
):
    return await update_schedule(session, schedule_id, payload, current_user)


@router.delete("/work-schedules/{schedule_id}", status_code=status.HTTP_204_NO_CONTENT)
async def schedules_delete(
    schedule_id: UUID,
    session: AsyncSession = Depends(get_session),
    current_user: User = Depends(doctor_or_admin),
):
    await delete_schedule(session, schedule_id, current_user)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/doctors/{doctor_id}/work-schedule", response_model=WorkSchedulePublic)
async def doctor_schedule(
    doctor_id: UUID,
    session: AsyncSession = Depends(get_session),
    _: User = Depends(get_current_user),
):
    return await get_schedule_for_doctor(session, doctor_id)


@router.get(
    "/doctors/{doctor_id}/open-slots",
    response_model=OpenSlots,
    summary="Published slots still free on a given date",
)
async def doctor_open_slots(
    doctor_id: UUID,
    on: date = Query(..., alias="date"),
    session: AsyncSession = Depends(get_session),
    _: User = Depends(get_current_user),
):
    return await open_slots(session, doctor_id, on)

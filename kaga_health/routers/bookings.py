# kaga_health/routers/bookings.py
from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from kaga_health.db.sql import get_session
from kaga_health.dependencies import get_current_user, require_roles
from kaga_health.modules.bookings.schemas import (
    BookingCreateRequest,
    BookingPage,
    BookingPublic,
    BookingUpdateRequest,
)
from kaga_health.modules.bookings.service import (
    create_booking,
    delete_booking,
    get_booking,
    list_bookings,
    update_booking,
)
from kaga_health.modules.users.models import User, UserRole

router = APIRouter(tags=["bookings"])

admin_only = require_roles(UserRole.ADMIN)


@router.post("/bookings", response_model=BookingPublic, status_code=status.HTTP_201_CREATED)
async def bookings_create(
    payload: BookingCreateRequest,
    session: AsyncSession = Depends(get_session),
    current_user: User = Depends(require_roles(UserRole.PATIENT, UserRole.ADMIN)),
):
    return await create_booking(session, payload, current_user)


@router.get("/bookings", response_model=BookingPage)
async def bookings_list(
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
    session: AsyncSession = Depends(get_session),
    current_user: User = Depends(get_current_user),
):
    return await list_bookings(session, current_user, limit, offset)


@router.get("/bookings/{booking_id}", response_model=BookingPublic)
async def bookings_get(
    booking_id: UUID,
    session: AsyncSession = Depends(get_session),
    current_user: User = Depends(get_current_user),
):
    return await get_booking(session, booking_id, current_user)


@router.patch("/bookings/{booking_id}", response_model=BookingPublic)
async def bookings_update(
    booking_id: UUID,
    payload: BookingUpdateRequest,
    session: AsyncSession = Depends(get_session),
    current_user: User = Depends(admin_only),
):
    return await update_booking(session, booking_id, payload, current_user)


@router.delete("/bookings/{booking_id}", status_code=status.HTTP_204_NO_CONTENT)
async def bookings_delete(
    booking_id: UUID,
    session: AsyncSession = Depends(get_session),
    current_user: User = Depends(admin_only),
):
    await delete_booking(session, booking_id, current_user)
    return Response(status_code=status.HTTP_204_NO_CONTENT)

# kaga_health/routers/staff.py
from __future__ import annotations

from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from kaga_health.core.errors import ValidationError
from kaga_health.db.sql import get_session
from kaga_health.dependencies import get_current_user, require_roles
from kaga_health.modules.staff.models import DEPARTMENTS
from kaga_health.modules.staff.schemas import (
    DepartmentList,
    StaffCreateRequest,
    StaffPage,
    StaffPublic,
    StaffUpdateRequest,
    check_department,
)
from kaga_health.modules.staff.service import (
    create_staff,
    delete_staff,
    get_staff,
    list_staff,
    update_staff,
)
from kaga_health.modules.users.models import User, UserRole

router = APIRouter(tags=["medical-staff"])

admin_only = require_roles(UserRole.ADMIN)


@router.get("/departments", response_model=DepartmentList, summary="List hospital departments")
async def departments_list():
    return DepartmentList(departments=list(DEPARTMENTS))


@router.post("/medical-staff", response_model=StaffPublic, status_code=status.HTTP_201_CREATED)
async def staff_create(
    payload: StaffCreateRequest,
    session: AsyncSession = Depends(get_session),
    current_user: User = Depends(admin_only),
):
    return await create_staff(session, payload, current_user)


@router.get("/medical-staff", response_model=StaffPage)
async def staff_list(
    department: Optional[str] = Query(None, description="Filter by department name"),
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
    session: AsyncSession = Depends(get_session),
    _: User = Depends(get_current_user),
):
    if department is not None:
        try:
            department = check_department(department)
        except ValueError as exc:
            raise ValidationError("unknown_department") from exc
    return await list_staff(session, department=department, limit=limit, offset=offset)


@router.get("/medical-staff/{staff_id}", response_model=StaffPublic)
async def staff_get(
    staff_id: UUID,
    session: AsyncSession = Depends(get_session),
    _: User = Depends(get_current_user),
):
    return await get_staff(session, staff_id)


@router.patch("/medical-staff/{staff_id}", response_model=StaffPublic)
async def staff_update(
    staff_id: UUID,
    payload: StaffUpdateRequest,
    session: AsyncSession = Depends(get_session),
    current_user: User = Depends(admin_only),
):
    return await update_staff(session, staff_id, payload, current_user)


@router.delete("/medical-staff/{staff_id}", status_code=status.HTTP_204_NO_CONTENT)
async def staff_delete(
    staff_id: UUID,
    session: AsyncSession = Depends(get_session),
    current_user: User = Depends(admin_only),
):
    await delete_staff(session, staff_id, current_user)
    return Response(status_code=status.HTTP_204_NO_CONTENT)

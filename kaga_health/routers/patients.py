# kaga_health/routers/patients.py
from __future__ import annotations

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from kaga_health.db.sql import get_session
from kaga_health.dependencies import get_current_user, require_roles
from kaga_health.modules.patients.schemas import (
    PatientCreateRequest,
    PatientListParams,
    PatientPage,
    PatientPublic,
    PatientUpdateRequest,
)
from kaga_health.modules.patients.service import (
    create_patient,
    delete_patient,
    get_own_patient,
    get_patient,
    list_patients,
    to_public,
    update_patient,
)
from kaga_health.modules.users.models import User, UserRole

router = APIRouter(tags=["patients"])


@router.post("/patients", response_model=PatientPublic, status_code=status.HTTP_201_CREATED)
async def patients_create(
    payload: PatientCreateRequest,
    session: AsyncSession = Depends(get_session),
    current_user: User = Depends(require_roles(UserRole.ADMIN)),
):
    """Attach a profile to an existing patient user."""
    return await create_patient(session, payload, current_user)


@router.get("/patients", response_model=PatientPage)
async def patients_list(
    params: Annotated[PatientListParams, Query()],
    session: AsyncSession = Depends(get_session),
    _: User = Depends(require_roles(UserRole.DOCTOR, UserRole.ADMIN)),
):
    return await list_patients(session, params)


@router.get("/patients/me", response_model=PatientPublic)
async def patients_me(
    session: AsyncSession = Depends(get_session),
    current_user: User = Depends(require_roles(UserRole.PATIENT)),
):
    return to_public(await get_own_patient(session, current_user))


@router.get("/patients/{patient_id}", response_model=PatientPublic)
async def patients_get(
    patient_id: UUID,
    session: AsyncSession = Depends(get_session),
    current_user: User = Depends(get_current_user),
):
    return await get_patient(session, patient_id, current_user)


@router.patch("/patients/{patient_id}", response_model=PatientPublic)
async def patients_update(
    patient_id: UUID,
    payload: PatientUpdateRequest,
    session: AsyncSession = Depends(get_session),
    current_user: User = Depends(get_current_user),
):
    return await update_patient(session, patient_id, payload, current_user)


@router.delete("/patients/{patient_id}", status_code=status.HTTP_204_NO_CONTENT)
async def patients_delete(
    patient_id: UUID,
    session: AsyncSession = Depends(get_session),
    current_user: User = Depends(require_roles(UserRole.ADMIN)),
):
    await delete_patient(session, patient_id, current_user)
    return Response(status_code=status.HTTP_204_NO_CONTENT)

# kaga_health/routers/notes.py
from __future__ import annotations

from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from kaga_health.db.sql import get_session
from kaga_health.dependencies import require_roles
from kaga_health.modules.notes.schemas import NoteCreateRequest, NotePublic, NoteUpdateRequest
from kaga_health.modules.notes.service import (
    create_note,
    delete_note,
    get_note,
    list_notes,
    update_note,
)
from kaga_health.modules.users.models import User, UserRole

router = APIRouter(tags=["doctor-notes"])

doctor_or_admin = require_roles(UserRole.DOCTOR, UserRole.ADMIN)


@router.post("/doctor-notes", response_model=NotePublic, status_code=status.HTTP_201_CREATED)
async def notes_create(
    payload: NoteCreateRequest,
    session: AsyncSession = Depends(get_session),
    current_user: User = Depends(doctor_or_admin),
):
    return await create_note(session, payload, current_user)


@router.get("/doctor-notes", response_model=List[NotePublic])
async def notes_list(
    appointment_id: Optional[UUID] = Query(None),
    session: AsyncSession = Depends(get_session),
    current_user: User = Depends(doctor_or_admin),
):
    return await list_notes(session, current_user, appointment_id=appointment_id)


@router.get("/doctor-notes/{note_id}", response_model=NotePublic)
async def notes_get(
    note_id: UUID,
    session: AsyncSession = Depends(get_session),
    current_user: User = Depends(doctor_or_admin),
):
    return await get_note(session, note_id, current_user)


@router.patch("/doctor-notes/{note_id}", response_model=NotePublic)
async def notes_update(
    note_id: UUID,
    payload: NoteUpdateRequest,
    session: AsyncSession = Depends(get_session),
    current_user: User = Depends(doctor_or_admin),
):
    return await update_note(session, note_id, payload, current_user)


@router.delete("/doctor-notes/{note_id}", status_code=status.HTTP_204_NO_CONTENT)
async def notes_delete(
    note_id: UUID,
    session: AsyncSession = Depends(get_session),
    current_user: User = Depends(doctor_or_admin),
):
    await delete_note(session, note_id, current_user)
    return Response(status_code=status.HTTP_204_NO_CONTENT)

# kaga_health/modules/notes/service.py
from __future__ import annotations

from typing import List, Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from kaga_health.core.errors import NotFoundError, PermissionDenied, ValidationError
from kaga_health.modules.appointments.service import load_for_participant
from kaga_health.modules.log import write_audit_log
from kaga_health.modules.notes.models import DoctorNote
from kaga_health.modules.notes.schemas import NoteCreateRequest, NotePublic, NoteUpdateRequest
from kaga_health.modules.staff.service import get_own_staff
from kaga_health.modules.users.models import User, UserRole


class NoteNotFound(NotFoundError):
    def __init__(self, code: str = "note_not_found"):
        super().__init__(code)


def _to_public(note: DoctorNote) -> NotePublic:
    return NotePublic.model_validate(note)


async def _get_or_404(session: AsyncSession, note_id: UUID, current_user: User) -> DoctorNote:
    note = await session.get(DoctorNote, note_id)
    if not note:
        raise NoteNotFound()
    if current_user.role != UserRole.ADMIN.value:
        own_staff = await get_own_staff(session, current_user)
        if own_staff is None or note.doctor_id != own_staff.id:
            raise PermissionDenied("not_owner")
    return note


async def create_note(session: AsyncSession, payload: NoteCreateRequest, current_user: User) -> NotePublic:
    appt = await load_for_participant(session, payload.appointment_id, current_user)
    if payload.doctor_id is not None and payload.doctor_id != appt.doctor_id:
        raise ValidationError("note_doctor_mismatch")
    if payload.patient_id is not None and payload.patient_id != appt.patient_id:
        raise ValidationError("note_patient_mismatch")

    note = DoctorNote(
        appointment_id=appt.id,
        doctor_id=appt.doctor_id,
        patient_id=appt.patient_id,
        notes=payload.notes,
        medicines=[m.model_dump() for m in payload.medicines],
    )
    session.add(note)
    await session.flush()
    await session.refresh(note)

    await write_audit_log(
        session, current_user.id, "CREATE_DOCTOR_NOTE", f"note={note.id} appointment={appt.id}"
    )
    return _to_public(note)


async def list_notes(
    session: AsyncSession, current_user: User, appointment_id: Optional[UUID] = None
) -> List[NotePublic]:
    stmt = select(DoctorNote).order_by(DoctorNote.created_at.desc(), DoctorNote.id)
    if appointment_id is not None:
        stmt = stmt.where(DoctorNote.appointment_id == appointment_id)
    if current_user.role != UserRole.ADMIN.value:
        own_staff = await get_own_staff(session, current_user)
        if own_staff is None:
            raise PermissionDenied("doctors_only")
        stmt = stmt.where(DoctorNote.doctor_id == own_staff.id)
    rows = (await session.execute(stmt)).scalars().all()
    return [_to_public(n) for n in rows]


async def get_note(session: AsyncSession, note_id: UUID, current_user: User) -> NotePublic:
    return _to_public(await _get_or_404(session, note_id, current_user))


async def update_note(
    session: AsyncSession, note_id: UUID, payload: NoteUpdateRequest, current_user: User
) -> NotePublic:
    note = await _get_or_404(session, note_id, current_user)
    data = payload.model_dump(exclude_unset=True)
    if "notes" in data:
        note.notes = data["notes"]
    if data.get("medicines") is not None:
        note.medicines = data["medicines"]
    await session.flush()
    await session.refresh(note)

    await write_audit_log(session, current_user.id, "UPDATE_DOCTOR_NOTE", f"note={note.id}")
    return _to_public(note)


async def delete_note(session: AsyncSession, note_id: UUID, current_user: User) -> None:
    note = await _get_or_404(session, note_id, current_user)
    await session.delete(note)
    await session.flush()
    await write_audit_log(session, current_user.id, "DELETE_DOCTOR_NOTE", f"note={note_id}")

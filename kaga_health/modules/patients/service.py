# kaga_health/modules/patients/service.py
from __future__ import annotations

from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from kaga_health.core.errors import ConflictError, NotFoundError, PermissionDenied, ValidationError
from kaga_health.modules.log import write_audit_log
from kaga_health.modules.patients import repository as patients_repo
from kaga_health.modules.patients.models import Patient
from kaga_health.modules.patients.schemas import (
    PatientCreateRequest,
    PatientListParams,
    PatientPage,
    PatientPublic,
    PatientUpdateRequest,
)
from kaga_health.modules.users import repository as users_repo
from kaga_health.modules.users.models import User, UserRole


class PatientNotFound(NotFoundError):
    def __init__(self, code: str = "patient_not_found"):
        super().__init__(code)


def to_public(patient: Patient) -> PatientPublic:
    return PatientPublic.model_validate(
        {
            "id": patient.id,
            "user_id": patient.user_id,
            "first_name": patient.user.first_name,
            "last_name": patient.user.last_name,
            "email": patient.user.email,
            "date_of_birth": patient.date_of_birth,
            "gender": patient.gender,
            "phone_number": patient.phone_number,
            "address": patient.address,
            "medical_history": patient.medical_history,
            "created_at": patient.created_at,
        }
    )


async def get_patient_or_404(session: AsyncSession, patient_id: UUID) -> Patient:
    patient = await patients_repo.get_by_id(session, patient_id)
    if not patient:
        raise PatientNotFound()
    return patient


async def get_own_patient(session: AsyncSession, current_user: User) -> Patient:
    """
    Patient profile linked to the logged-in user.
    """
    patient = await patients_repo.get_by_user_id(session, current_user.id)
    if not patient:
        raise PatientNotFound("patient_profile_missing")
    return patient


def ensure_can_view(current_user: User, patient: Patient) -> None:
    if current_user.role == UserRole.PATIENT.value and patient.user_id != current_user.id:
        raise PermissionDenied("not_owner")


async def create_patient(
    session: AsyncSession, payload: PatientCreateRequest, current_user: User
) -> PatientPublic:
    user = await users_repo.get_by_id(session, payload.user_id)
    if not user:
        raise NotFoundError("user_not_found")
    if user.role != UserRole.PATIENT.value:
        raise ValidationError("user_is_not_a_patient")
    if await patients_repo.get_by_user_id(session, user.id):
        raise ConflictError("patient_profile_exists")

    try:
        patient = await patients_repo.create_patient(
            session, user_id=user.id, **payload.model_dump(exclude={"user_id"})
        )
    except IntegrityError as exc:
        raise ConflictError("patient_profile_exists") from exc

    await write_audit_log(session, current_user.id, "CREATE_PATIENT", f"patient={patient.id}")
    return to_public(patient)


async def list_patients(session: AsyncSession, params: PatientListParams) -> PatientPage:
    """List patients with search and pagination."""
    rows, total = await patients_repo.list_patients_repo(
        session, q=params.q, limit=params.limit, offset=params.offset
    )
    return PatientPage(
        items=[to_public(p) for p in rows],
        total=total,
        limit=params.limit,
        offset=params.offset,
        has_next=params.offset + params.limit < total,
    )


async def get_patient(session: AsyncSession, patient_id: UUID, current_user: User) -> PatientPublic:
    patient = await get_patient_or_404(session, patient_id)
    ensure_can_view(current_user, patient)
    return to_public(patient)


async def update_patient(
    session: AsyncSession,
    patient_id: UUID,
    payload: PatientUpdateRequest,
    current_user: User,
) -> PatientPublic:
    patient = await get_patient_or_404(session, patient_id)
    ensure_can_view(current_user, patient)

    for field, value in payload.model_dump(exclude_unset=True).items():
        setattr(patient, field, value)
    await session.flush()
    await session.refresh(patient)

    await write_audit_log(session, current_user.id, "UPDATE_PATIENT", f"patient={patient.id}")
    return to_public(patient)


async def delete_patient(session: AsyncSession, patient_id: UUID, current_user: User) -> None:
    patient = await get_patient_or_404(session, patient_id)
    await session.delete(patient)
    try:
        await session.flush()
    except IntegrityError as exc:
        raise ConflictError("patient_has_appointments") from exc
    await write_audit_log(session, current_user.id, "DELETE_PATIENT", f"patient={patient_id}")

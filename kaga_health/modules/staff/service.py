# kaga_health/modules/staff/service.py
from __future__ import annotations

from typing import Optional
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from kaga_health.core.errors import ConflictError, NotFoundError, ValidationError
from kaga_health.modules.appointments import repository as appts_repo
from kaga_health.modules.log import write_audit_log
from kaga_health.modules.staff import repository as staff_repo
from kaga_health.modules.staff.models import MedicalStaff
from kaga_health.modules.staff.schemas import StaffCreateRequest, StaffPage, StaffPublic, StaffUpdateRequest
from kaga_health.modules.users import repository as users_repo
from kaga_health.modules.users.models import User, UserRole


class DoctorNotFound(NotFoundError):
    def __init__(self, code: str = "doctor_not_found"):
        super().__init__(code)


def to_public(staff: MedicalStaff) -> StaffPublic:
    return StaffPublic.model_validate(
        {
            "id": staff.id,
            "user_id": staff.user_id,
            "name": staff.user.full_name,
            "department": staff.department,
            "phone_number": staff.phone_number,
            "email": staff.email,
            "bio": staff.bio,
            "created_at": staff.created_at,
        }
    )


async def get_doctor_or_404(session: AsyncSession, staff_id: UUID) -> MedicalStaff:
    staff = await staff_repo.get_by_id(session, staff_id)
    if not staff:
        raise DoctorNotFound()
    return staff


async def get_own_staff(session: AsyncSession, current_user: User) -> Optional[MedicalStaff]:
    if current_user.role != UserRole.DOCTOR.value:
        return None
    return await staff_repo.get_by_user_id(session, current_user.id)


async def create_staff(session: AsyncSession, payload: StaffCreateRequest, current_user: User) -> StaffPublic:
    user = await users_repo.get_by_id(session, payload.user_id)
    if not user:
        raise NotFoundError("user_not_found")
    if user.role != UserRole.DOCTOR.value:
        raise ValidationError("user_is_not_a_doctor")
    if await staff_repo.get_by_user_id(session, user.id):
        raise ConflictError("staff_profile_exists")

    try:
        staff = await staff_repo.create_staff(
            session,
            user_id=user.id,
            department=payload.department,
            phone_number=payload.phone_number,
            email=(payload.email or user.email).lower(),
            bio=payload.bio,
        )
    except IntegrityError as exc:
        raise ConflictError("staff_profile_exists") from exc

    await write_audit_log(
        session, current_user.id, "CREATE_STAFF", f"staff={staff.id} department={staff.department}"
    )
    return to_public(staff)


async def list_staff(
    session: AsyncSession, *, department: Optional[str], limit: int, offset: int
) -> StaffPage:
    rows, total = await staff_repo.list_staff_repo(
        session, department=department, limit=limit, offset=offset
    )
    return StaffPage(
        items=[to_public(s) for s in rows],
        total=total,
        limit=limit,
        offset=offset,
        has_next=offset + limit < total,
    )


async def get_staff(session: AsyncSession, staff_id: UUID) -> StaffPublic:
    return to_public(await get_doctor_or_404(session, staff_id))


async def update_staff(
    session: AsyncSession, staff_id: UUID, payload: StaffUpdateRequest, current_user: User
) -> StaffPublic:
    staff = await get_doctor_or_404(session, staff_id)
    data = payload.model_dump(exclude_unset=True)
    moving = data.get("department", staff.department) != staff.department
    # appointments keep the department they were booked in
    if moving and await appts_repo.doctor_has_active(session, staff.id):
        raise ConflictError("doctor_has_active_appointments")
    if data.get("email"):
        data["email"] = data["email"].lower()
    for field, value in data.items():
        setattr(staff, field, value)
    await session.flush()
    await session.refresh(staff)

    await write_audit_log(session, current_user.id, "UPDATE_STAFF", f"staff={staff.id}")
    return to_public(staff)


async def delete_staff(session: AsyncSession, staff_id: UUID, current_user: User) -> None:
    staff = await get_doctor_or_404(session, staff_id)
    await session.delete(staff)
    try:
        await session.flush()
    except IntegrityError as exc:
        raise ConflictError("doctor_has_appointments") from exc
    await write_audit_log(session, current_user.id, "DELETE_STAFF", f"staff={staff_id}")

# kaga_health/modules/users/repository.py
from __future__ import annotations

from typing import Optional, Sequence
from uuid import UUID

from sqlalchemy import asc, desc, func, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from kaga_health.modules.users.models import User, UserRole


class EmailAlreadyExistsError(Exception):
    """Raised when trying to insert a user with an email that already exists."""


class InvalidUserDataError(Exception):
    """Raised when DB-level constraints fail (e.g., bad CHECK constraints)."""


async def get_by_id(session: AsyncSession, user_id: UUID) -> Optional[User]:
    return await session.get(User, user_id)


async def get_by_email(session: AsyncSession, email: str) -> Optional[User]:
    """
    Returns a User by email (normalized to lowercase) or None.
    """
    email = email.strip().lower()
    result = await session.execute(select(User).where(User.email == email))
    return result.scalar_one_or_none()


async def flush_user(session: AsyncSession, user: User) -> User:
    """
    Flush pending INSERT/UPDATE for `user` and map constraint violations
    to repository errors. Refreshes server-side defaults.
    """
    try:
        await session.flush()
    except IntegrityError as exc:
        message = str(exc.orig).lower() if exc.orig else str(exc).lower()
        if "uq_users_email" in message or "unique" in message:
            raise EmailAlreadyExistsError("Email already registered") from exc
        raise InvalidUserDataError("User data violates DB constraints") from exc
    await session.refresh(user)
    return user


async def create_user(
    session: AsyncSession,
    *,
    email: str,
    password_hash: str,
    first_name: str,
    last_name: str,
    phone: Optional[str] = None,
    role: UserRole | str = UserRole.PATIENT,
    is_active: bool = True,
) -> User:
    """
    Insert a new user row and return the persisted ORM instance.
    Expects an already *hashed* password.
    """
    user = User(
        email=email.strip().lower(),
        password_hash=password_hash,
        first_name=first_name.strip(),
        last_name=last_name.strip(),
        phone=phone,
        role=role.value if isinstance(role, UserRole) else str(role),
        is_active=is_active,
    )
    session.add(user)
    return await flush_user(session, user)


async def list_users_repo(
    session: AsyncSession,
    *,
    q: Optional[str],
    role: Optional[str],
    is_active: Optional[bool],
    order_by: str,
    order_dir: str,
    limit: int,
    offset: int,
) -> tuple[Sequence[User], int]:
    conditions = []
    if role is not None:
        conditions.append(User.role == role)
    if is_active is not None:
        conditions.append(User.is_active == is_active)
    if q:
        term = f"%{q.strip().lower()}%"
        conditions.append(
            or_(
                func.lower(User.email).like(term),
                func.lower(User.first_name).like(term),
                func.lower(User.last_name).like(term),
            )
        )

    col_map = {
        "created_at": User.created_at,
        "last_name": User.last_name,
        "email": User.email,
    }
    col = col_map.get(order_by, User.created_at)
    ordering = asc(col) if order_dir == "asc" else desc(col)

    total = (
        await session.execute(select(func.count()).select_from(User).where(*conditions))
    ).scalar_one()

    stmt = (
        select(User)
        .where(*conditions)
        .order_by(ordering, User.id)  # tie-breaker for stable paging
        .limit(limit)
        .offset(offset)
    )
    rows = (await session.execute(stmt)).scalars().all()
    return rows, total


async def find_doctors_by_name(session: AsyncSession, username: str) -> Sequence[User]:
    """
    Doctors whose "first last" name contains `username` (case-insensitive).
    """
    term = f"%{username.strip().lower()}%"
    full_name = func.lower(User.first_name + " " + User.last_name)
    stmt = (
        select(User)
        .where(User.role == UserRole.DOCTOR.value, full_name.like(term))
        .order_by(User.last_name, User.first_name)
    )
    return (await session.execute(stmt)).scalars().all()

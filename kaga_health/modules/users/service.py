# kaga_health/modules/users/service.py
from __future__ import annotations

import logging
from uuid import UUID

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from kaga_health.core.config import settings
from kaga_health.core.errors import AuthenticationError, ConflictError, NotFoundError, ValidationError
from kaga_health.core.security import (
    InvalidTokenError,
    create_access_token,
    create_refresh_token,
    decode_token,
    hash_password,
    is_refresh_token,
    verify_password,
)
from kaga_health.modules.log import write_audit_log
from kaga_health.modules.patients import repository as patients_repo
from kaga_health.modules.users import repository as users_repo
from kaga_health.modules.users.models import User, UserRole
from kaga_health.modules.users.schemas import (
    DoctorLoginRequest,
    LoginRequest,
    LoginResponse,
    RegisterRequest,
    UserCreateRequest,
    UserListParams,
    UserPage,
    UserPublic,
    UserUpdateRequest,
)

logger = logging.getLogger("kaga_health.users")


# Service-level errors, rendered by the app-wide ServiceError handler
class EmailAlreadyExists(ConflictError):
    def __init__(self, code: str = "email_already_exists"):
        super().__init__(code)


class InvalidCredentials(AuthenticationError):
    def __init__(self, code: str = "invalid_credentials"):
        super().__init__(code)


class UserNotFound(NotFoundError):
    def __init__(self, code: str = "user_not_found"):
        super().__init__(code)


def to_public(user: User) -> UserPublic:
    return UserPublic.model_validate(user)


def _issue_tokens(user: User) -> LoginResponse:
    access = create_access_token(subject=str(user.id), email=user.email, role=user.role)
    return LoginResponse(
        access_token=access,
        expires_in=settings.ACCESS_EXPIRES_MIN * 60,
        refresh_token=create_refresh_token(subject=str(user.id)),
        user=to_public(user),
    )


async def _insert_user(session: AsyncSession, **fields) -> User:
    try:
        return await users_repo.create_user(session, **fields)
    except users_repo.EmailAlreadyExistsError as exc:
        raise EmailAlreadyExists() from exc
    except users_repo.InvalidUserDataError as exc:
        raise ValidationError("invalid_user_data") from exc


async def register_user(session: AsyncSession, payload: RegisterRequest) -> UserPublic:
    """
    Business flow for self-service registration:
      1) Check email uniqueness (early 409).
      2) Hash password and persist a `patient` user.
      3) Create the linked patient profile in the same transaction.
    """
    if await users_repo.get_by_email(session, payload.email):
        raise EmailAlreadyExists()

    user = await _insert_user(
        session,
        email=payload.email,
        password_hash=hash_password(payload.password.get_secret_value()),
        first_name=payload.first_name,
        last_name=payload.last_name,
        phone=payload.phone,
        role=UserRole.PATIENT,
    )
    await patients_repo.create_patient(
        session,
        user_id=user.id,
        date_of_birth=payload.date_of_birth,
        gender=payload.gender,
        phone_number=payload.phone,
        address=payload.address,
        medical_history="",
    )

    await write_audit_log(session, user.id, "REGISTER", f"email={user.email}")
    logger.info("registered patient user %s", user.id)
    return to_public(user)


async def login_user(session: AsyncSession, payload: LoginRequest) -> LoginResponse:
    user = await users_repo.get_by_email(session, payload.email)
    if not user or not verify_password(payload.password.get_secret_value(), user.password_hash):
        raise InvalidCredentials()
    if not user.is_active:
        raise InvalidCredentials("user_inactive")
    return _issue_tokens(user)


async def doctor_login(session: AsyncSession, payload: DoctorLoginRequest) -> LoginResponse:
    """
    Doctors sign in with a name fragment (e.g. "sarah") instead of an email.
    The fragment must identify exactly one doctor.
    """
    candidates = await users_repo.find_doctors_by_name(session, payload.username)
    if len(candidates) != 1:
        raise InvalidCredentials("invalid_doctor_credentials")
    user = candidates[0]
    if not verify_password(payload.password.get_secret_value(), user.password_hash):
        raise InvalidCredentials("invalid_doctor_credentials")
    if not user.is_active:
        raise InvalidCredentials("user_inactive")
    return _issue_tokens(user)


async def refresh_tokens(session: AsyncSession, refresh_token: str) -> LoginResponse:
    """
    Exchange a refresh token for a new access token. The refresh token is
    returned unchanged (no rotation).
    """
    try:
        payload = decode_token(refresh_token)
        user_id = UUID(str(payload.get("sub")))
    except (InvalidTokenError, ValueError) as exc:
        raise AuthenticationError("invalid_token") from exc
    if not is_refresh_token(payload):
        raise AuthenticationError("invalid_token_type")

    user = await users_repo.get_by_id(session, user_id)
    if not user or not user.is_active:
        raise AuthenticationError("user_not_found")

    return LoginResponse(
        access_token=create_access_token(subject=str(user.id), email=user.email, role=user.role),
        expires_in=settings.ACCESS_EXPIRES_MIN * 60,
        refresh_token=refresh_token,
        user=to_public(user),
    )


async def create_user(session: AsyncSession, payload: UserCreateRequest, current_user: User) -> UserPublic:
    if await users_repo.get_by_email(session, payload.email):
        raise EmailAlreadyExists()

    user = await _insert_user(
        session,
        email=payload.email,
        password_hash=hash_password(payload.password.get_secret_value()),
        first_name=payload.first_name,
        last_name=payload.last_name,
        phone=payload.phone,
        role=payload.role.value,
        is_active=payload.is_active,
    )
    await write_audit_log(session, current_user.id, "CREATE_USER", f"user={user.id} role={user.role}")
    return to_public(user)


async def list_users(session: AsyncSession, params: UserListParams) -> UserPage:
    users, total = await users_repo.list_users_repo(
        session,
        q=params.q,
        role=params.role.value if params.role else None,
        is_active=params.is_active,
        order_by=params.order_by,
        order_dir=params.order_dir,
        limit=params.limit,
        offset=params.offset,
    )
    return UserPage(
        items=[to_public(u) for u in users],
        total=total,
        limit=params.limit,
        offset=params.offset,
        has_next=params.offset + params.limit < total,
    )


async def get_user(session: AsyncSession, user_id: UUID) -> UserPublic:
    user = await users_repo.get_by_id(session, user_id)
    if not user:
        raise UserNotFound()
    return to_public(user)


async def update_user(
    session: AsyncSession, user_id: UUID, payload: UserUpdateRequest, current_user: User
) -> UserPublic:
    user = await users_repo.get_by_id(session, user_id)
    if not user:
        raise UserNotFound()

    data = payload.model_dump(exclude_unset=True)
    if "password" in data:
        user.password_hash = hash_password(payload.password.get_secret_value())
        data.pop("password")
    if "email" in data and data["email"] != user.email:
        if await users_repo.get_by_email(session, data["email"]):
            raise EmailAlreadyExists()
    if "role" in data:
        data["role"] = data["role"].value

    for field, value in data.items():
        setattr(user, field, value)

    try:
        await users_repo.flush_user(session, user)
    except users_repo.EmailAlreadyExistsError as exc:
        raise EmailAlreadyExists() from exc
    except users_repo.InvalidUserDataError as exc:
        raise ValidationError("invalid_user_data") from exc

    await write_audit_log(session, current_user.id, "UPDATE_USER", f"user={user.id}")
    return to_public(user)


async def delete_user(session: AsyncSession, user_id: UUID, current_user: User) -> None:
    user = await users_repo.get_by_id(session, user_id)
    if not user:
        raise UserNotFound()
    await session.delete(user)
    try:
        await session.flush()
    except IntegrityError as exc:
        raise ConflictError("user_has_dependents") from exc
    await write_audit_log(session, current_user.id, "DELETE_USER", f"user={user_id}")

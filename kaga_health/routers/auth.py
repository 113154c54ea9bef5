# kaga_health/routers/auth.py
from __future__ import annotations

from fastapi import APIRouter, Depends, status
from fastapi.security import OAuth2PasswordRequestForm
from sqlalchemy.ext.asyncio import AsyncSession

from kaga_health.db.sql import get_session
from kaga_health.dependencies import get_current_user
from kaga_health.modules.users.models import User
from kaga_health.modules.users.schemas import (
    DoctorLoginRequest,
    ErrorResponse,
    LoginRequest,
    LoginResponse,
    MeResponse,
    MessageResponse,
    RefreshRequest,
    RegisterRequest,
    RegisterResponse,
)
from kaga_health.modules.users.service import (
    doctor_login,
    login_user,
    refresh_tokens,
    register_user,
    to_public,
)

router = APIRouter(tags=["auth"])


@router.post(
    "/auth/register",
    response_model=RegisterResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a new patient account",
    responses={
        201: {"description": "User and patient profile created"},
        409: {"model": ErrorResponse, "description": "Email already registered"},
        422: {"model": ErrorResponse, "description": "Invalid payload"},
    },
)
async def auth_register(
    payload: RegisterRequest,
    session: AsyncSession = Depends(get_session),
):
    """
    Register a new user with role `patient` and its patient profile.

    Notes:
    - Email is normalized to lowercase.
    - Password must pass strength checks (8-64 chars, at least 1 letter and 1 digit).
    """
    return await register_user(session, payload)


@router.post(
    "/auth/login",
    response_model=LoginResponse,
    summary="Obtain a Bearer token with email and password (JSON body)",
    responses={401: {"model": ErrorResponse, "description": "Invalid credentials"}},
)
async def auth_login(
    payload: LoginRequest,
    session: AsyncSession = Depends(get_session),
):
    return await login_user(session, payload)


@router.post(
    "/auth/doctor-login",
    response_model=LoginResponse,
    summary="Doctor login with a name fragment and password",
    responses={401: {"model": ErrorResponse, "description": "Invalid credentials"}},
)
async def auth_doctor_login(
    payload: DoctorLoginRequest,
    session: AsyncSession = Depends(get_session),
):
    return await doctor_login(session, payload)


@router.post(
    "/auth/token",
    response_model=LoginResponse,
    summary="OAuth2 password flow login (for Swagger UI)",
    responses={401: {"model": ErrorResponse, "description": "Invalid credentials"}},
)
async def auth_token(
    form_data: OAuth2PasswordRequestForm = Depends(),
    session: AsyncSession = Depends(get_session),
):
    """
    Swagger sends form data:
    - username: user email
    - password: user password
    """
    return await login_user(
        session, LoginRequest(email=form_data.username, password=form_data.password)
    )


@router.post(
    "/auth/refresh",
    response_model=LoginResponse,
    summary="Exchange a refresh token for a new access token",
    responses={401: {"model": ErrorResponse, "description": "Invalid refresh token"}},
)
async def auth_refresh(
    request: RefreshRequest,
    session: AsyncSession = Depends(get_session),
):
    return await refresh_tokens(session, request.refresh_token)


@router.get(
    "/auth/me",
    response_model=MeResponse,
    summary="Return the current user's profile",
)
async def auth_me(current_user: User = Depends(get_current_user)):
    return to_public(current_user)


@router.post(
    "/auth/logout",
    response_model=MessageResponse,
    summary="Log out (tokens are stateless; the client drops them)",
)
async def auth_logout(current_user: User = Depends(get_current_user)):
    return MessageResponse(message="logged_out")

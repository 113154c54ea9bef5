# kaga_health/routers/users.py
from __future__ import annotations

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from kaga_health.db.sql import get_session
from kaga_health.dependencies import require_roles
from kaga_health.modules.users.models import User, UserRole
from kaga_health.modules.users.schemas import (
    UserCreateRequest,
    UserListParams,
    UserPage,
    UserPublic,
    UserUpdateRequest,
)
from kaga_health.modules.users.service import (
    create_user,
    delete_user,
    get_user,
    list_users,
    update_user,
)

router = APIRouter(tags=["users"])

admin_only = require_roles(UserRole.ADMIN)


@router.post("/users", response_model=UserPublic, status_code=status.HTTP_201_CREATED)
async def users_create(
    payload: UserCreateRequest,
    session: AsyncSession = Depends(get_session),
    current_user: User = Depends(admin_only),
):
    return await create_user(session, payload, current_user)


@router.get("/users", response_model=UserPage)
async def users_list(
    params: Annotated[UserListParams, Query()],
    session: AsyncSession = Depends(get_session),
    _: User = Depends(admin_only),
):
    return await list_users(session, params)


@router.get("/users/{user_id}", response_model=UserPublic)
async def users_get(
    user_id: UUID,
    session: AsyncSession = Depends(get_session),
    _: User = Depends(admin_only),
):
    return await get_user(session, user_id)


@router.patch("/users/{user_id}", response_model=UserPublic)
async def users_update(
    user_id: UUID,
    payload: UserUpdateRequest,
    session: AsyncSession = Depends(get_session),
    current_user: User = Depends(admin_only),
):
    return await update_user(session, user_id, payload, current_user)


@router.delete("/users/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
async def users_delete(
    user_id: UUID,
    session: AsyncSession = Depends(get_session),
    current_user: User = Depends(admin_only),
):
    await delete_user(session, user_id, current_user)
    return Response(status_code=status.HTTP_204_NO_CONTENT)

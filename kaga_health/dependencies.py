# kaga_health/dependencies.py
from __future__ import annotations

import uuid

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.ext.asyncio import AsyncSession

from kaga_health.core.config import settings
from kaga_health.core.security import InvalidTokenError, decode_token, is_access_token
from kaga_health.db.sql import get_session
from kaga_health.modules.users.models import User, UserRole
from kaga_health.modules.users.repository import get_by_id

# use /auth/token here so Swagger sends username/password to that endpoint
oauth2_scheme = OAuth2PasswordBearer(tokenUrl=f"{settings.API_PREFIX}/auth/token")


async def get_current_user(
    token: str = Depends(oauth2_scheme),
    session: AsyncSession = Depends(get_session),
) -> User:
    try:
        payload = decode_token(token)
        user_id = uuid.UUID(str(payload.get("sub")))
    except (InvalidTokenError, ValueError):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="invalid_token",
            headers={"WWW-Authenticate": "Bearer"},
        )

    if not is_access_token(payload):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="invalid_token_type",
            headers={"WWW-Authenticate": "Bearer"},
        )

    user = await get_by_id(session, user_id)
    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="user_not_found",
        )
    if not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="user_inactive",
        )
    return user


def require_roles(*roles: UserRole | str):
    """
    Role guard factory. Example: Depends(require_roles(UserRole.ADMIN, UserRole.DOCTOR))
    """
    allowed = {r.value if isinstance(r, UserRole) else r for r in roles}

    async def _guard(user: User = Depends(get_current_user)) -> User:
        if user.role not in allowed:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="insufficient_role",
            )
        return user

    return _guard

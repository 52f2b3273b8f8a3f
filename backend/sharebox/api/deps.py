"""FastAPI dependency injection: auth, store & domain error mapping."""

from __future__ import annotations

import logging
from datetime import timedelta
from typing import NoReturn, Optional

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError, jwt
from sqlalchemy.ext.asyncio import AsyncSession

from sharebox.config import settings
from sharebox.database import get_db
from sharebox.errors import (
    AlreadyShared,
    InvalidRequest,
    InvalidTarget,
    NotFound,
    PermissionDenied,
    ShareboxError,
)
from sharebox.models.user import User
from sharebox.services.record_store import RecordStore
from sharebox.utils.clock import utcnow

logger = logging.getLogger(__name__)

oauth2_scheme = OAuth2PasswordBearer(
    tokenUrl=f"{settings.api_prefix}/auth/login",
    auto_error=False,
)

_STATUS_BY_ERROR: list[tuple[type[ShareboxError], int]] = [
    (NotFound, status.HTTP_404_NOT_FOUND),
    (AlreadyShared, status.HTTP_409_CONFLICT),
    (InvalidTarget, status.HTTP_400_BAD_REQUEST),
    (InvalidRequest, status.HTTP_400_BAD_REQUEST),
    (PermissionDenied, status.HTTP_403_FORBIDDEN),
]


def raise_http(exc: ShareboxError) -> NoReturn:
    """Translate a domain error into the matching HTTPException."""
    for error_type, code in _STATUS_BY_ERROR:
        if isinstance(exc, error_type):
            raise HTTPException(
                status_code=code,
                detail=str(exc),
                headers={"X-Sharebox-Error": type(exc).__name__},
            ) from exc
    raise HTTPException(status_code=500, detail=str(exc)) from exc


def create_access_token(user: User) -> str:
    expire = utcnow() + timedelta(minutes=settings.token_expire_minutes)
    return jwt.encode(
        {"sub": user.id, "email": user.email, "exp": expire},
        settings.secret_key,
        algorithm=settings.token_algorithm,
    )


async def get_store(db: AsyncSession = Depends(get_db)) -> RecordStore:
    return RecordStore(db)


async def get_current_user(
    request: Request,
    token: Optional[str] = Depends(oauth2_scheme),
    store: RecordStore = Depends(get_store),
) -> User:
    """Validate the Bearer token and load its user."""
    if not token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="No authentication token provided",
            headers={"WWW-Authenticate": "Bearer"},
        )

    try:
        payload = jwt.decode(
            token,
            settings.secret_key,
            algorithms=[settings.token_algorithm],
        )
        user_id: str | None = payload.get("sub")
        if not user_id:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Invalid token: no subject claim",
            )
    except JWTError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
        )

    try:
        return await store.get_by_id(User, user_id)
    except NotFound:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User no longer exists",
        )

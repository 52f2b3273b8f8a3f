"""Auth routes: signup and plaintext login issuing bearer tokens."""

import logging

from fastapi import APIRouter, Depends, HTTPException, status

from sharebox.api.deps import create_access_token, get_current_user, get_store, raise_http
from sharebox.errors import InvalidRequest, PermissionDenied
from sharebox.models.user import User
from sharebox.schemas.auth import LoginRequest, SignupRequest, TokenResponse, UserInfo
from sharebox.services import accounts
from sharebox.services.record_store import RecordStore

logger = logging.getLogger(__name__)
router = APIRouter()


@router.post("/signup", response_model=UserInfo, status_code=status.HTTP_201_CREATED)
async def signup(body: SignupRequest, store: RecordStore = Depends(get_store)):
    try:
        user = await accounts.create_user(store, body.email, body.password)
    except InvalidRequest as exc:
        raise_http(exc)
    return UserInfo(id=user.id, email=user.email, created_at=user.created_at)


@router.post("/login", response_model=TokenResponse)
async def login(body: LoginRequest, store: RecordStore = Depends(get_store)):
    """Compare the stored plaintext password and hand out a token."""
    try:
        user = await accounts.authenticate(store, body.email, body.password)
    except PermissionDenied as exc:
        logger.info("Failed login for %s", body.email)
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=str(exc))
    return TokenResponse(access_token=create_access_token(user))


@router.get("/me", response_model=UserInfo)
async def me(current_user: User = Depends(get_current_user)):
    return UserInfo(id=current_user.id, email=current_user.email, created_at=current_user.created_at)

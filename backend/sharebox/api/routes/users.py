"""User lookup routes."""

from fastapi import APIRouter, Depends

from sharebox.api.deps import get_current_user, get_store, raise_http
from sharebox.errors import NotFound
from sharebox.schemas.auth import UserInfo
from sharebox.services import accounts
from sharebox.services.record_store import RecordStore

router = APIRouter()


@router.get("/email/{email}", response_model=UserInfo)
async def get_user_by_email(
    email: str,
    store: RecordStore = Depends(get_store),
    current_user=Depends(get_current_user),
):
    """Resolve a grantee before sharing. Never returns the password."""
    try:
        user = await accounts.find_user_by_email(store, email)
    except NotFound as exc:
        raise_http(exc)
    return UserInfo(id=user.id, email=user.email, created_at=user.created_at)

"""User accounts: signup and plaintext credential check."""

from __future__ import annotations

import logging
import uuid

from sharebox.errors import InvalidRequest, NotFound, PermissionDenied
from sharebox.models.user import User
from sharebox.services.record_store import RecordStore
from sharebox.utils.clock import to_naive_utc, utcnow

logger = logging.getLogger(__name__)


class EmailTaken(InvalidRequest):
    """Signup with an email that already has an account."""


async def find_user_by_email(store: RecordStore, email: str) -> User:
    user = await store.find_one(User, User.email == email)
    if user is None:
        raise NotFound(f"User {email} not found")
    return user


async def create_user(store: RecordStore, email: str, password: str) -> User:
    if not email or not password:
        raise InvalidRequest("Email and password are required")
    if await store.find_one(User, User.email == email) is not None:
        raise EmailTaken("User already exists")

    user = User(
        id=str(uuid.uuid4()),
        email=email,
        password=password,
        created_at=to_naive_utc(utcnow()),
    )
    await store.append(user)
    logger.info("Created user %s", user.id)
    return user


async def authenticate(store: RecordStore, email: str, password: str) -> User:
    """Return the user if the stored password matches exactly."""
    user = await store.find_one(User, User.email == email)
    if user is None or user.password != password:
        raise PermissionDenied("Invalid email or password")
    return user


"""Test fixtures: in-memory SQLite database, FastAPI test client, API clients."""

import uuid
from datetime import datetime, timezone

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from sharebox.api.deps import create_access_token
from sharebox.client.api import ShareboxClient
from sharebox.database import MEMORY_URL, create_tables, get_db, make_engine, make_session_factory
from sharebox.main import create_app
from sharebox.models.user import User
from sharebox.services.record_store import RecordStore


@pytest_asyncio.fixture
async def db_session():
    """Provide an async in-memory SQLite session for tests."""
    engine = make_engine(MEMORY_URL)
    await create_tables(engine)

    session_factory = make_session_factory(engine)
    async with session_factory() as session:
        yield session

    await engine.dispose()


@pytest.fixture
def store(db_session: AsyncSession) -> RecordStore:
    return RecordStore(db_session)


async def seed_user(db: AsyncSession, email: str, password: str = "secret") -> User:
    """Insert a user directly into the test DB."""
    user = User(
        id=str(uuid.uuid4()),
        email=email,
        password=password,
        created_at=datetime.now(timezone.utc).replace(tzinfo=None),
    )
    db.add(user)
    await db.commit()
    await db.refresh(user)
    return user


def auth_headers(user: User) -> dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token(user)}"}


@pytest_asyncio.fixture
async def owner(db_session: AsyncSession) -> User:
    return await seed_user(db_session, "owner@example.com")


@pytest_asyncio.fixture
async def guest(db_session: AsyncSession) -> User:
    return await seed_user(db_session, "guest@example.com")


@pytest_asyncio.fixture
async def client(db_session: AsyncSession):
    """Provide an async test client with overridden DB dependency."""
    app = create_app()

    async def _override_db():
        yield db_session

    app.dependency_overrides[get_db] = _override_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as c:
        yield c


@pytest_asyncio.fixture
async def owner_api(client: AsyncClient, owner: User) -> ShareboxClient:
    api = ShareboxClient(http=client)
    await api.login(owner.email, "secret")
    return api


@pytest_asyncio.fixture
async def guest_api(client: AsyncClient, guest: User) -> ShareboxClient:
    api = ShareboxClient(http=client)
    await api.login(guest.email, "secret")
    return api

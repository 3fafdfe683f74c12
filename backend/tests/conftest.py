import os

# Keep the application engine off any real database while the app is imported.
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")

import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from db.database import Base, User, get_async_session
from db.seed import seed_measurements
from main import app


@pytest_asyncio.fixture
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
async def session_maker(engine):
    maker = async_sessionmaker(engine, expire_on_commit=False)
    async with maker() as session:
        await seed_measurements(session)
    return maker


@pytest_asyncio.fixture
async def db(session_maker):
    async with session_maker() as session:
        yield session


async def make_user(session_maker, email="client@example.com"):
    async with session_maker() as session:
        user = User(
            email=email,
            hashed_password="not-a-real-hash",
            is_active=True,
            is_superuser=False,
            is_verified=True,
            first_name="Ada",
            last_name="Client",
        )
        session.add(user)
        await session.commit()
        return user.id


@pytest_asyncio.fixture
async def user_id(session_maker):
    return await make_user(session_maker)


@pytest_asyncio.fixture
async def client(session_maker):
    async def override_session():
        async with session_maker() as session:
            yield session

    app.dependency_overrides[get_async_session] = override_session
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
    app.dependency_overrides.clear()

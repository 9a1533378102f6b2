"""Shared test fixtures for OrgDesk tests."""

import pytest
import pytest_asyncio
from fastapi import FastAPI
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker

from orgdesk.api.rpc import router as rpc_router
from orgdesk.database import Base, get_session
from orgdesk.models.organization import Organization, User
from orgdesk.models import blog, lms, notes, organization, taxonomy  # noqa: F401


@pytest_asyncio.fixture
async def db_session():
    """Create a fresh in-memory database per test."""
    engine = create_async_engine("sqlite+aiosqlite://", echo=False)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    async with session_factory() as session:
        yield session

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest_asyncio.fixture
async def org(db_session: AsyncSession) -> Organization:
    organization = Organization(name="Acme", slug="acme", description=None)
    db_session.add(organization)
    await db_session.commit()
    return organization


@pytest_asyncio.fixture
async def other_org(db_session: AsyncSession) -> Organization:
    organization = Organization(name="Globex", slug="globex", description="Competitor")
    db_session.add(organization)
    await db_session.commit()
    return organization


@pytest_asyncio.fixture
async def user(db_session: AsyncSession) -> User:
    account = User(email="owner@example.com", name="Owner", password_hash="not-a-real-hash")
    db_session.add(account)
    await db_session.commit()
    return account


@pytest.fixture
def rpc_app(db_session: AsyncSession):
    app = FastAPI()

    async def _override_session():
        yield db_session

    app.dependency_overrides[get_session] = _override_session
    app.include_router(rpc_router)
    return app

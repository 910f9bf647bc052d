"""
Shared fixtures: in-memory SQLite database, app client with the session
dependency swapped, and employee/rush-order factories.
"""

from __future__ import annotations

import os

# Must be set before app.core.config is first imported.
os.environ.setdefault("SF_DATABASE_URL", "sqlite+aiosqlite://")
os.environ.setdefault("SF_LOG_FORMAT", "text")
os.environ.setdefault("SF_LOG_LEVEL", "warning")

from datetime import datetime, timedelta, timezone

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel

import app.models  # noqa: F401
from app.core.auth import create_jwt
from app.core.database import get_session
from app.main import app as fastapi_app
from app.models.employee import Employee
from app.models.rush_order import RushOrder


@pytest.fixture
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def session(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
async def client(session_factory):
    async def _get_session():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    fastapi_app.dependency_overrides[get_session] = _get_session
    async with AsyncClient(transport=ASGITransport(app=fastapi_app), base_url="http://test") as ac:
        yield ac
    fastapi_app.dependency_overrides.clear()


@pytest.fixture
def make_employee(session_factory):
    async def _make(name: str = "Worker", role: str = "worker", **kwargs) -> Employee:
        async with session_factory() as session:
            employee = Employee(name=name, role=role, **kwargs)
            session.add(employee)
            await session.commit()
            return employee

    return _make


@pytest.fixture
def make_rush_order(session_factory):
    async def _make(created_by: Employee, title: str = "Replace spindle") -> RushOrder:
        async with session_factory() as session:
            rush_order = RushOrder(
                title=title,
                description="Line 2 is down",
                deadline=datetime.now(timezone.utc) + timedelta(days=1),
                created_by=created_by.id,
            )
            session.add(rush_order)
            await session.commit()
            return rush_order

    return _make


@pytest.fixture
def auth_headers():
    def _headers(employee: Employee) -> dict[str, str]:
        return {"Authorization": f"Bearer {create_jwt(employee.id, employee.role)}"}

    return _headers

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from leave_ledger.db import engine_options, get_session
from leave_ledger.main import app
from leave_ledger.models import SQLModel
from leave_ledger.services.employee import InMemoryEmployeeService, set_employee_service
from leave_ledger.services.settings_store import InMemorySettingsStore, set_settings_store

if TYPE_CHECKING:
    from collections.abc import AsyncIterator, Iterator

    from sqlalchemy.ext.asyncio import AsyncEngine

PLANNING_SETTINGS = {
    "dayStart": "08:00",
    "dayEnd": "17:00",
    "breaks": [{"start": "12:00", "end": "12:30"}],
}
LEAVE_SETTINGS = {
    "roundingMinutes": 15,
    "allowNegativeBalance": True,
    "deductionOrder": ["CARRYOVER", "NON_LEGAL", "LEGAL"],
}


@pytest.fixture
async def engine() -> AsyncIterator[AsyncEngine]:
    """Create a fresh in-memory database with every table for one test."""
    url = "sqlite+aiosqlite:///:memory:"
    _engine = create_async_engine(url, **engine_options(url))
    async with _engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    yield _engine
    await _engine.dispose()


@pytest.fixture
async def db_session(engine: AsyncEngine) -> AsyncIterator[AsyncSession]:
    """Yield a session on the per-test database."""
    factory = async_sessionmaker(engine, expire_on_commit=False)
    async with factory() as session:
        yield session


@pytest.fixture(autouse=True)
def employee_service() -> Iterator[InMemoryEmployeeService]:
    """Install an empty in-memory employee service for every test."""
    svc = InMemoryEmployeeService()
    set_employee_service(svc)
    yield svc
    set_employee_service(InMemoryEmployeeService())


@pytest.fixture(autouse=True)
def settings_store() -> Iterator[InMemorySettingsStore]:
    """Install a settings store with an 08:00-17:00 roster and a 30 minute lunch break."""
    store = InMemorySettingsStore(planning=PLANNING_SETTINGS, leave=LEAVE_SETTINGS)
    set_settings_store(store)
    yield store
    set_settings_store(InMemorySettingsStore())


@pytest.fixture
async def async_client(db_session: AsyncSession) -> AsyncIterator[AsyncClient]:
    """Async HTTP client with the database session dependency overridden."""

    async def _override_get_session() -> AsyncIterator[AsyncSession]:
        yield db_session

    app.dependency_overrides[get_session] = _override_get_session
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()

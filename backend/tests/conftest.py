"""Pytest configuration and fixtures for MandiLedger tests.

Database tests run on one shared in-memory SQLite connection (aiosqlite +
StaticPool).  Tenant schemas are attached in-memory databases, so the same
``"tenant_x".table`` addressing and schema_translate_map behaviour used on
PostgreSQL is exercised here.
"""

import os

# Must be set before mandi.config is imported
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")
os.environ.setdefault("DEBUG", "false")
os.environ.setdefault("SECRET_KEY", "test-secret-key")

import uuid
from types import SimpleNamespace
from typing import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

import mandi.models  # noqa: F401 registers every table
from mandi import database
from mandi.auth.jwt import create_access_token
from mandi.database import PublicBase, tenant_session
from mandi.main import app
from mandi.models.public.tenant import Tenant
from mandi.schemas.settings import TenantSettings
from mandi.services.tenants import onboard_tenant
from mandi.tenancy import clear_tenant_context, create_tenant_schema, generate_schema_name


# ── Test Database Setup ──────────────────────────────────────────

@pytest_asyncio.fixture
async def test_engine(monkeypatch):
    """Fresh in-memory database per test, swapped into mandi.database."""
    engine = create_async_engine("sqlite+aiosqlite://", poolclass=StaticPool)
    monkeypatch.setattr(database, "engine", engine)
    monkeypatch.setattr(
        database,
        "async_session",
        async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False),
    )

    async with engine.begin() as conn:
        await conn.run_sync(PublicBase.metadata.create_all)

    yield engine

    clear_tenant_context()
    await engine.dispose()


@pytest_asyncio.fixture
async def tenant_schema(test_engine) -> str:
    """A provisioned tenant schema with no public tenant row."""
    schema = generate_schema_name()
    await create_tenant_schema(schema)
    return schema


@pytest_asyncio.fixture
async def db_session(tenant_schema) -> AsyncGenerator[AsyncSession, None]:
    """Session scoped to ``tenant_schema``."""
    async with tenant_session(tenant_schema) as session:
        yield session
        await session.rollback()


@pytest.fixture
def rates() -> TenantSettings:
    return TenantSettings()


@pytest.fixture
def user_id() -> str:
    return str(uuid.uuid4())


# ── HTTP client ──────────────────────────────────────────────────

@pytest_asyncio.fixture
async def client(test_engine) -> AsyncGenerator[AsyncClient, None]:
    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test"
    ) as client:
        yield client


@pytest_asyncio.fixture
async def test_tenant(test_engine) -> Tenant:
    """An onboarded, active tenant with default rates."""
    async with database.async_session() as db:
        return await onboard_tenant(db, {
            "name": "Sri Lakshmi Traders",
            "apmc_code": "APMC-GNT-001",
            "place": "Guntur",
        })


def make_token(role: str = "tenant_admin", tenant_schema: str | None = None, sub: str | None = None) -> str:
    return create_access_token(
        user_id=sub or str(uuid.uuid4()),
        role=role,
        tenant_schema=tenant_schema,
    )


@pytest.fixture
def auth_headers(test_tenant: Tenant) -> dict:
    """Authorization headers for a user of ``test_tenant``."""
    return {"Authorization": f"Bearer {make_token(tenant_schema=test_tenant.schema_name)}"}


@pytest.fixture
def admin_headers() -> dict:
    """Authorization headers for a platform admin (no tenant)."""
    return {"Authorization": f"Bearer {make_token(role='platform_admin')}"}


# ── In-memory lot builders (engine unit tests) ───────────────────

def make_lot(
    bags,
    lot_price=None,
    number_of_bags=None,
    lot_number="LOT-1",
    created_at=None,
    **extra,
):
    """A duck-typed lot: ``bags`` is a list of weights or (number, weight) pairs."""
    bag_rows = []
    for i, item in enumerate(bags, start=1):
        number, weight = item if isinstance(item, tuple) else (i, item)
        bag_rows.append(SimpleNamespace(bag_number=number, weight=weight))

    fields = {
        "id": str(uuid.uuid4()),
        "lot_number": lot_number,
        "lot_price": lot_price,
        "number_of_bags": number_of_bags if number_of_bags is not None else len(bag_rows),
        "variety_grade": "Teja",
        "vehicle_rent": None,
        "advance": None,
        "unload_hamali": None,
        "status": "completed",
        "created_at": created_at,
        "farmer": SimpleNamespace(name="Ramaiah"),
        "buyer": None,
        "bags": bag_rows,
    }
    fields.update(extra)
    return SimpleNamespace(**fields)


@pytest.fixture
def lot_factory():
    return make_lot


@pytest.fixture
def token_factory():
    return make_token


# ── Test Markers ─────────────────────────────────────────────────

def pytest_configure(config):
    """Configure custom markers."""
    config.addinivalue_line("markers", "unit: Pure engine tests (no database)")
    config.addinivalue_line("markers", "integration: Store and tenancy tests on SQLite")
    config.addinivalue_line("markers", "api: HTTP endpoint tests")

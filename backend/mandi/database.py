"""Database engine, session factories, and base classes.

Two separate DeclarativeBase classes:
  - PublicBase  → tables in the shared namespace (tenants)
  - TenantBase  → tables duplicated into every tenant schema (farmers, lots, bags, …)

Tenant tables are declared without a schema.  A tenant session renders
them against the tenant's schema through SQLAlchemy's
``schema_translate_map``, so every ORM statement is scoped by construction
and no schema name is ever spliced into query text.

Two session dependencies for FastAPI:
  - get_db()         → public namespace (tenant lookup, onboarding)
  - get_tenant_db()  → the current tenant's schema
"""

from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import (
    AsyncSession,
    create_async_engine,
    async_sessionmaker,
)
from sqlalchemy.orm import DeclarativeBase

from mandi.config import settings


def _engine_options(url: str) -> dict:
    """Pool options for ``url``.

    SQLite is accepted only as an in-memory database for the test suite;
    tenant schemas there are attached ``:memory:`` databases and do not
    survive a reconnect.
    """
    parsed = make_url(url)
    if parsed.get_backend_name() == "sqlite":
        if parsed.database not in (None, "", ":memory:"):
            raise ValueError(
                f"SQLite is only supported in memory for tests, not {parsed.database!r}"
            )
        return {}
    return {"pool_size": 20, "max_overflow": 10}


engine = create_async_engine(
    settings.database_url,
    echo=settings.debug,
    **_engine_options(settings.database_url),
)

async_session = async_sessionmaker(
    engine, class_=AsyncSession, expire_on_commit=False
)


# ── Base classes ────────────────────────────────────────────

class PublicBase(DeclarativeBase):
    """Models that live in the public namespace only."""
    pass


class TenantBase(DeclarativeBase):
    """Models duplicated per tenant schema."""
    pass


# ── Session helpers ─────────────────────────────────────────

def tenant_session(schema: str) -> AsyncSession:
    """Return a session whose tenant tables resolve inside ``schema``."""
    from mandi.tenancy import validate_schema_name  # deferred to avoid circular

    validate_schema_name(schema)
    bind = engine.execution_options(schema_translate_map={None: schema})
    return async_session(bind=bind)


async def get_db() -> AsyncSession:
    """Yield a session on the public namespace."""
    async with async_session() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


async def get_tenant_db() -> AsyncSession:
    """Yield a session pinned to the current tenant's schema.

    Reads the tenant schema name from the request-scoped ContextVar.
    Raises TenantContextError if no tenant was resolved from the JWT.
    """
    from mandi.tenancy import get_current_tenant_schema  # deferred to avoid circular

    schema = get_current_tenant_schema()  # raises if missing

    async with tenant_session(schema) as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise

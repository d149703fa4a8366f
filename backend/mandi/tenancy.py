"""Multi-tenancy: schema-per-tenant isolation.

Key components:
  - _tenant_ctx      ContextVar holding the schema name for the current request
  - set / get / clear helpers for the ContextVar
  - generate_schema_name()   random, never derived from user input
  - validate_schema_name()   allow-list check before any DDL interpolation
  - create_tenant_schema()   provisions a new schema + all TenantBase tables
  - drop_tenant_schema()     destroys a tenant schema (admin-only, irreversible)

On PostgreSQL a tenant is a real schema.  On in-memory SQLite (tests only)
the tenant is an attached in-memory database of the same name, which
gives the same `"schema".table` addressing.
"""

import logging
import re
import uuid
from contextvars import ContextVar

from sqlalchemy import inspect, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncConnection

from mandi.middleware.exceptions import ProvisioningError, TenantContextError

logger = logging.getLogger(__name__)

# ── Request-scoped tenant context ───────────────────────────

_tenant_ctx: ContextVar[str | None] = ContextVar("_tenant_ctx", default=None)


def set_current_tenant_schema(schema: str) -> None:
    _tenant_ctx.set(schema)


def get_current_tenant_schema() -> str:
    """Return the current tenant schema or raise if unset."""
    schema = _tenant_ctx.get()
    if schema is None:
        raise TenantContextError(
            "No tenant context: this endpoint requires a tenant-scoped token"
        )
    return schema


def clear_tenant_context() -> None:
    _tenant_ctx.set(None)


# ── Naming ──────────────────────────────────────────────────

_SCHEMA_RE = re.compile(r"^tenant_[a-z0-9]{6,36}$")


def generate_schema_name() -> str:
    """Return a fresh `tenant_<12 hex>` schema name."""
    return f"tenant_{uuid.uuid4().hex[:12]}"


def validate_schema_name(schema: str) -> str:
    """Ensure schema names are safe for SQL interpolation.

    Only allows the pattern `tenant_<lowercase-alphanum>`.
    """
    if not isinstance(schema, str) or not _SCHEMA_RE.match(schema):
        raise ValueError(f"Invalid tenant schema name: {schema!r}")
    return schema


# ── Namespace primitives ────────────────────────────────────

async def _sqlite_attached(conn: AsyncConnection) -> set[str]:
    result = await conn.exec_driver_sql("PRAGMA database_list")
    return {row[1] for row in result}


async def _create_namespace(conn: AsyncConnection, schema: str) -> None:
    if conn.dialect.name == "sqlite":
        if schema not in await _sqlite_attached(conn):
            await conn.exec_driver_sql(f"ATTACH DATABASE ':memory:' AS \"{schema}\"")
    else:
        await conn.execute(text(f'CREATE SCHEMA IF NOT EXISTS "{schema}"'))


async def _drop_namespace(conn: AsyncConnection, schema: str) -> None:
    if conn.dialect.name == "sqlite":
        if schema in await _sqlite_attached(conn):
            await conn.exec_driver_sql(f'DETACH DATABASE "{schema}"')
    else:
        await conn.execute(text(f'DROP SCHEMA IF EXISTS "{schema}" CASCADE'))


def _verify_structure(sync_conn, schema: str) -> None:
    """Fail if a pre-existing table in the schema lacks expected columns."""
    from mandi.database import TenantBase

    inspector = inspect(sync_conn)
    for table in TenantBase.metadata.sorted_tables:
        existing = {col["name"] for col in inspector.get_columns(table.name, schema=schema)}
        missing = {col.name for col in table.columns} - existing
        if missing:
            raise ProvisioningError(
                f"Schema {schema} already has a '{table.name}' table with a "
                f"different structure (missing: {', '.join(sorted(missing))})"
            )


# ── Schema provisioning ────────────────────────────────────

async def create_tenant_schema(schema: str) -> None:
    """Create a schema and provision all TenantBase tables inside it.

    Safe to call again for an existing tenant: the schema and tables are
    created only if absent, then the resulting structure is verified.
    """
    from mandi import database
    import mandi.models  # noqa: F401 registers every TenantBase table

    try:
        validate_schema_name(schema)
    except ValueError as exc:
        raise ProvisioningError(str(exc)) from exc

    try:
        async with database.engine.connect() as conn:
            await _create_namespace(conn, schema)
            conn = await conn.execution_options(schema_translate_map={None: schema})
            await conn.run_sync(database.TenantBase.metadata.create_all)
            await conn.run_sync(_verify_structure, schema)
            await conn.commit()
    except SQLAlchemyError as exc:
        logger.error("Provisioning failed for %s: %s", schema, exc)
        raise ProvisioningError(f"Could not provision tenant schema {schema}") from exc

    logger.info("Provisioned tenant schema %s", schema)


async def drop_tenant_schema(schema: str) -> None:
    """Drop a tenant schema and all its contents. IRREVERSIBLE."""
    from mandi import database

    try:
        validate_schema_name(schema)
    except ValueError as exc:
        raise ProvisioningError(str(exc)) from exc

    try:
        async with database.engine.connect() as conn:
            await _drop_namespace(conn, schema)
            await conn.commit()
    except SQLAlchemyError as exc:
        logger.error("Dropping %s failed: %s", schema, exc)
        raise ProvisioningError(f"Could not drop tenant schema {schema}") from exc

    logger.warning("Dropped tenant schema %s", schema)

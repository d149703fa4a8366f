"""Management CLI for tenant operations.

Usage:
    python -m mandi.cli migrate-tenants            # Run Alembic on every tenant schema
    python -m mandi.cli list-tenants               # Show all tenant schemas
    python -m mandi.cli provision-tenant <schema>  # (Re)create one tenant schema
"""

import asyncio
import subprocess
import sys

from sqlalchemy import create_engine, select

from mandi.config import settings
from mandi.models.public.tenant import Tenant
from mandi.tenancy import create_tenant_schema, validate_schema_name


def get_tenant_schemas(active_only: bool = True) -> list[str]:
    engine = create_engine(settings.database_url_sync)
    stmt = select(Tenant.schema_name).order_by(Tenant.schema_name)
    if active_only:
        stmt = stmt.where(Tenant.is_active == True)  # noqa: E712
    with engine.connect() as conn:
        return [row[0] for row in conn.execute(stmt)]


def migrate_tenants() -> int:
    """Run Alembic upgrade on the tenant branch for every active tenant."""
    schemas = get_tenant_schemas()
    if not schemas:
        print("No tenant schemas found.")
        return 0

    failures = 0
    for schema in schemas:
        print(f"  Migrating {schema}...")
        result = subprocess.run(
            [
                sys.executable, "-m", "alembic", "upgrade", "tenant@head",
                "-x", "schema=tenant",
                "-x", f"tenant_schema={schema}",
            ],
            capture_output=True, text=True,
        )
        if result.returncode != 0:
            failures += 1
            print(f"  FAILED: {result.stderr}")
        else:
            print("  OK")
    return 1 if failures else 0


def list_tenants() -> int:
    schemas = get_tenant_schemas(active_only=False)
    for s in schemas:
        print(f"  {s}")
    print(f"\n{len(schemas)} tenant(s)")
    return 0


def provision_tenant(schema: str) -> int:
    try:
        validate_schema_name(schema)
    except ValueError as exc:
        print(str(exc))
        return 2
    asyncio.run(create_tenant_schema(schema))
    print(f"  {schema} provisioned")
    return 0


def main(argv: list[str]) -> int:
    cmd = argv[0] if argv else ""
    if cmd == "migrate-tenants":
        return migrate_tenants()
    if cmd == "list-tenants":
        return list_tenants()
    if cmd == "provision-tenant" and len(argv) == 2:
        return provision_tenant(argv[1])
    print("Usage: python -m mandi.cli [migrate-tenants|list-tenants|provision-tenant <schema>]")
    return 2


if __name__ == "__main__":
    sys.exit(main(sys.argv[1:]))

"""Schema-per-tenant provisioning and isolation."""

import pytest
from sqlalchemy import select

from mandi import database
from mandi.database import tenant_session
from mandi.middleware.exceptions import ProvisioningError, TenantContextError
from mandi.models.tenant.farmer import Farmer
from mandi.services import store
from mandi.tenancy import (
    clear_tenant_context,
    create_tenant_schema,
    drop_tenant_schema,
    generate_schema_name,
    get_current_tenant_schema,
    set_current_tenant_schema,
    validate_schema_name,
)


async def _attached(schema: str) -> bool:
    async with database.engine.connect() as conn:
        rows = await conn.exec_driver_sql("PRAGMA database_list")
        return schema in {row[1] for row in rows}


def _farmer(mobile: str = "9876543210", name: str = "Ramaiah") -> dict:
    return {"name": name, "mobile": mobile, "place": "Guntur"}


@pytest.mark.unit
class TestEngineOptions:
    @pytest.mark.parametrize("url", ["sqlite+aiosqlite://", "sqlite+aiosqlite:///:memory:"])
    def test_in_memory_sqlite(self, url):
        assert database._engine_options(url) == {}

    @pytest.mark.parametrize("url", ["sqlite+aiosqlite:///mandi.db", "sqlite:////var/lib/mandi.db"])
    def test_file_sqlite_is_rejected(self, url):
        with pytest.raises(ValueError):
            database._engine_options(url)

    def test_postgres_pool(self):
        opts = database._engine_options("postgresql+asyncpg://u:p@db/mandi")
        assert opts == {"pool_size": 20, "max_overflow": 10}


@pytest.mark.unit
class TestSchemaNames:
    def test_generated_names_are_valid_and_distinct(self):
        names = {generate_schema_name() for _ in range(50)}
        assert len(names) == 50
        for name in names:
            assert validate_schema_name(name) == name

    @pytest.mark.parametrize("bad", [
        "public",
        "tenant_",
        "tenant_ABC123",
        'tenant_abc123"; DROP SCHEMA public; --',
        "tenant_abc",
        "tenant_" + "a" * 37,
        None,
    ])
    def test_rejects_unsafe_names(self, bad):
        with pytest.raises(ValueError):
            validate_schema_name(bad)

    def test_context_var(self):
        clear_tenant_context()
        with pytest.raises(TenantContextError):
            get_current_tenant_schema()
        set_current_tenant_schema("tenant_abc123")
        assert get_current_tenant_schema() == "tenant_abc123"
        clear_tenant_context()


@pytest.mark.integration
@pytest.mark.asyncio
class TestProvisioning:
    async def test_create_is_idempotent(self, test_engine, user_id):
        schema = generate_schema_name()
        await create_tenant_schema(schema)

        async with tenant_session(schema) as db:
            await store.create_farmer(db, user_id, _farmer())
            await db.commit()

        await create_tenant_schema(schema)

        async with tenant_session(schema) as db:
            farmers, total = await store.list_farmers(db)
        assert total == 1
        assert farmers[0].name == "Ramaiah"

    async def test_invalid_name_is_provisioning_error(self, test_engine):
        with pytest.raises(ProvisioningError):
            await create_tenant_schema("public")

    async def test_mismatched_existing_table(self, test_engine):
        schema = generate_schema_name()
        async with database.engine.connect() as conn:
            await conn.exec_driver_sql(f"ATTACH DATABASE ':memory:' AS \"{schema}\"")
            await conn.exec_driver_sql(
                f'CREATE TABLE "{schema}".farmers (id VARCHAR(36) PRIMARY KEY)'
            )
            await conn.commit()

        with pytest.raises(ProvisioningError) as exc:
            await create_tenant_schema(schema)
        assert "farmers" in exc.value.message

    async def test_drop_removes_schema(self, test_engine):
        schema = generate_schema_name()
        await create_tenant_schema(schema)
        assert await _attached(schema)

        await drop_tenant_schema(schema)
        assert not await _attached(schema)

    async def test_drop_rejects_invalid_name(self, test_engine):
        with pytest.raises(ProvisioningError):
            await drop_tenant_schema("main")


@pytest.mark.integration
@pytest.mark.asyncio
class TestIsolation:
    async def test_same_mobile_in_two_tenants(self, test_engine, user_id):
        schema_a, schema_b = generate_schema_name(), generate_schema_name()
        await create_tenant_schema(schema_a)
        await create_tenant_schema(schema_b)

        async with tenant_session(schema_a) as db:
            await store.create_farmer(db, user_id, _farmer(name="Farmer A"))
            await db.commit()
        async with tenant_session(schema_b) as db:
            await store.create_farmer(db, user_id, _farmer(name="Farmer B"))
            await db.commit()

        async with tenant_session(schema_a) as db:
            names_a = (await db.execute(select(Farmer.name))).scalars().all()
        async with tenant_session(schema_b) as db:
            names_b = (await db.execute(select(Farmer.name))).scalars().all()

        assert names_a == ["Farmer A"]
        assert names_b == ["Farmer B"]

    async def test_session_rejects_unsafe_schema(self, test_engine):
        with pytest.raises(ValueError):
            tenant_session("tenant_x; DROP TABLE farmers")

"""Tenant lifecycle: onboarding, settings, deactivation, teardown.

Operates on the public namespace only.  The tenant's own schema is
provisioned/dropped through ``mandi.tenancy``; this module keeps the
public ``tenants`` row and the namespace consistent with each other.
"""

import logging

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from mandi.middleware.exceptions import NotFoundError, ValidationError
from mandi.models.public.tenant import Tenant
from mandi.schemas.settings import TenantSettings
from mandi.tenancy import create_tenant_schema, drop_tenant_schema, generate_schema_name

logger = logging.getLogger(__name__)


async def list_tenants(db: AsyncSession, include_inactive: bool = False) -> list[Tenant]:
    stmt = select(Tenant).order_by(Tenant.name)
    if not include_inactive:
        stmt = stmt.where(Tenant.is_active == True)  # noqa: E712
    result = await db.execute(stmt)
    return list(result.scalars().all())


async def get_tenant(db: AsyncSession, tenant_id: str) -> Tenant:
    tenant = await db.get(Tenant, tenant_id)
    if not tenant:
        raise NotFoundError("Tenant", tenant_id)
    return tenant


async def onboard_tenant(db: AsyncSession, data: dict) -> Tenant:
    """Register a trading business and provision its schema.

    The schema is created first; if the tenant row then fails to persist,
    the schema is dropped again so no orphan namespace is left behind.
    """
    apmc_code = data["apmc_code"]
    taken = await db.scalar(select(Tenant.id).where(Tenant.apmc_code == apmc_code))
    if taken:
        raise ValidationError(
            f"APMC code {apmc_code} is already registered",
            details={"apmc_code": apmc_code},
        )

    rates = TenantSettings.load(data.pop("settings", None))
    schema_name = generate_schema_name()

    # DDL runs on its own connection; nothing may be pending on this one
    await db.commit()
    await create_tenant_schema(schema_name)

    try:
        tenant = Tenant(
            **data,
            schema_name=schema_name,
            settings=rates.to_persisted(),
            is_active=True,
        )
        db.add(tenant)
        await db.commit()
        await db.refresh(tenant)
    except SQLAlchemyError:
        logger.error("Tenant insert failed; dropping fresh schema %s", schema_name)
        await db.rollback()
        await drop_tenant_schema(schema_name)
        raise

    logger.info("Onboarded tenant %s (%s) → %s", tenant.name, apmc_code, schema_name)
    return tenant


async def update_tenant_settings(db: AsyncSession, tenant: Tenant, updates: dict) -> TenantSettings:
    """Merge rate changes into the tenant's settings and validate the result."""
    current = TenantSettings.load(tenant.settings)
    merged = TenantSettings.load({**current.model_dump(), **updates})
    tenant.settings = merged.to_persisted()
    await db.flush()

    logger.info("Updated rate settings for tenant %s", tenant.schema_name)
    return merged


async def deactivate_tenant(db: AsyncSession, tenant_id: str) -> Tenant:
    tenant = await get_tenant(db, tenant_id)
    tenant.is_active = False
    await db.flush()
    await db.refresh(tenant)

    logger.warning("Deactivated tenant %s (%s)", tenant.name, tenant.schema_name)
    return tenant


async def destroy_tenant_schema(db: AsyncSession, tenant_id: str) -> Tenant:
    """Drop the tenant's schema (IRREVERSIBLE) and deactivate the row."""
    tenant = await get_tenant(db, tenant_id)
    tenant.is_active = False
    await db.commit()

    await drop_tenant_schema(tenant.schema_name)
    await db.refresh(tenant)
    return tenant

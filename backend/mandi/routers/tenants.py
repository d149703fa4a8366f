"""Platform-admin tenant management: onboarding, listing, deactivation, teardown."""

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from mandi.auth.deps import require_platform_admin
from mandi.database import get_db
from mandi.schemas.tenant import TenantCreate, TenantOut
from mandi.services import tenants as tenant_service

router = APIRouter()


@router.post("/", response_model=TenantOut, status_code=status.HTTP_201_CREATED)
async def onboard_tenant(
    body: TenantCreate,
    db: AsyncSession = Depends(get_db),
    _admin: dict = Depends(require_platform_admin),
):
    """Register a trading business and provision its isolated schema."""
    tenant = await tenant_service.onboard_tenant(db, body.model_dump())
    return TenantOut.model_validate(tenant)


@router.get("/", response_model=list[TenantOut])
async def list_tenants(
    include_inactive: bool = Query(False),
    db: AsyncSession = Depends(get_db),
    _admin: dict = Depends(require_platform_admin),
):
    tenants = await tenant_service.list_tenants(db, include_inactive=include_inactive)
    return [TenantOut.model_validate(t) for t in tenants]


@router.post("/{tenant_id}/deactivate", response_model=TenantOut)
async def deactivate_tenant(
    tenant_id: str,
    db: AsyncSession = Depends(get_db),
    _admin: dict = Depends(require_platform_admin),
):
    tenant = await tenant_service.deactivate_tenant(db, tenant_id)
    return TenantOut.model_validate(tenant)


@router.delete("/{tenant_id}/schema", response_model=TenantOut)
async def drop_tenant_schema(
    tenant_id: str,
    db: AsyncSession = Depends(get_db),
    _admin: dict = Depends(require_platform_admin),
):
    """Drop every table of the tenant. IRREVERSIBLE."""
    tenant = await tenant_service.destroy_tenant_schema(db, tenant_id)
    return TenantOut.model_validate(tenant)

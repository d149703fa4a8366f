"""Tenant rate settings (GST, CESS, commission, per-bag fees)."""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from mandi.auth.deps import get_current_tenant, get_tenant_settings
from mandi.database import get_db
from mandi.models.public.tenant import Tenant
from mandi.schemas.settings import TenantSettings, TenantSettingsOut, TenantSettingsUpdate
from mandi.services import tenants as tenant_service

router = APIRouter()


@router.get("/", response_model=TenantSettingsOut, response_model_by_alias=True)
async def get_settings(rates: TenantSettings = Depends(get_tenant_settings)):
    return TenantSettingsOut.from_settings(rates)


@router.put("/", response_model=TenantSettingsOut, response_model_by_alias=True)
async def update_settings(
    body: TenantSettingsUpdate,
    db: AsyncSession = Depends(get_db),
    tenant: Tenant = Depends(get_current_tenant),
):
    rates = await tenant_service.update_tenant_settings(
        db, tenant, body.model_dump(exclude_unset=True, exclude_none=True)
    )
    return TenantSettingsOut.from_settings(rates)

"""Yard dashboard counts."""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from mandi.auth.deps import get_current_tenant
from mandi.database import get_tenant_db
from mandi.schemas.reports import DashboardStatsOut
from mandi.services import store

router = APIRouter(dependencies=[Depends(get_current_tenant)])


@router.get("/stats", response_model=DashboardStatsOut)
async def dashboard_stats(db: AsyncSession = Depends(get_tenant_db)):
    return DashboardStatsOut.model_validate(await store.get_dashboard_stats(db))

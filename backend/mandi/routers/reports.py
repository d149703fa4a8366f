"""Tax, CESS and GST reports, single-lot amounts and missing-bag analysis.

All routes are read-only; rates come from the tenant's settings on every
request.
"""

from datetime import date, datetime

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from mandi.auth.deps import get_current_tenant, get_tenant_settings
from mandi.database import get_tenant_db
from mandi.schemas.reports import (
    CessReportOut,
    GstReportOut,
    LotAmountsOut,
    MissingBagsOut,
    TaxReportOut,
)
from mandi.schemas.settings import TenantSettings
from mandi.services import reports as report_service

router = APIRouter(dependencies=[Depends(get_current_tenant)])


@router.get("/tax", response_model=TaxReportOut)
async def tax_report(
    report_type: str = Query("daily", description="daily | weekly | monthly | yearly | custom"),
    on: date | None = Query(None, description="Reference date (defaults to today)"),
    start_date: date | None = Query(None),
    end_date: date | None = Query(None),
    db: AsyncSession = Depends(get_tenant_db),
    rates: TenantSettings = Depends(get_tenant_settings),
):
    """GST / CESS summary and per-lot transactions for a period."""
    report = await report_service.generate_tax_report(
        db, rates, report_type, on=on, start=start_date, end=end_date
    )
    return TaxReportOut.model_validate(report)


@router.get("/cess", response_model=CessReportOut)
async def cess_report(
    report_type: str = Query("daily", description="daily | weekly | monthly | yearly | custom"),
    on: date | None = Query(None, description="Reference date (defaults to today)"),
    start_date: date | None = Query(None),
    end_date: date | None = Query(None),
    db: AsyncSession = Depends(get_tenant_db),
    rates: TenantSettings = Depends(get_tenant_settings),
):
    """Market-fee (CESS) collected on basic amounts for a period."""
    report = await report_service.generate_cess_report(
        db, rates, report_type, on=on, start=start_date, end=end_date
    )
    return CessReportOut.model_validate(report)


@router.get("/gst", response_model=GstReportOut)
async def gst_report(
    report_type: str = Query("daily", description="daily | weekly | monthly | yearly | custom"),
    on: date | None = Query(None, description="Reference date (defaults to today)"),
    start_date: date | None = Query(None),
    end_date: date | None = Query(None),
    db: AsyncSession = Depends(get_tenant_db),
    rates: TenantSettings = Depends(get_tenant_settings),
):
    """SGST and CGST on taxable amounts for a period."""
    report = await report_service.generate_gst_report(
        db, rates, report_type, on=on, start=start_date, end=end_date
    )
    return GstReportOut.model_validate(report)


@router.post("/lot-amounts/{lot_id}", response_model=LotAmountsOut)
async def lot_amounts(
    lot_id: str,
    db: AsyncSession = Depends(get_tenant_db),
    rates: TenantSettings = Depends(get_tenant_settings),
):
    amounts = await report_service.get_lot_amounts(db, rates, lot_id)
    return LotAmountsOut.model_validate(amounts)


@router.get("/missing-bags", response_model=MissingBagsOut)
async def missing_bags(
    on: date | None = Query(None, description="Lot creation date (defaults to today)"),
    db: AsyncSession = Depends(get_tenant_db),
):
    report = await report_service.detect_missing_bags(db, on or datetime.utcnow().date())
    return MissingBagsOut.model_validate(report)

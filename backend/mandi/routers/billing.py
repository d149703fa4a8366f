"""Settlement: farmer day bills, saved patti bills and buyer tax invoices."""

from datetime import date
from decimal import Decimal

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from mandi.auth.deps import get_current_tenant, get_current_user_id, get_tenant_settings
from mandi.database import get_tenant_db
from mandi.schemas.common import PaginatedResponse
from mandi.schemas.reports import (
    BuyerInvoiceOut,
    BuyerInvoiceRequest,
    DeductionsIn,
    FarmerBillCreate,
    FarmerBillDeductionsUpdate,
    FarmerBillOut,
    FarmerDayBillOut,
    FarmerDayBillRequest,
    TaxInvoiceOut,
)
from mandi.schemas.settings import TenantSettings
from mandi.services import bills as bill_service
from mandi.services import invoices as invoice_service
from mandi.services import reports as report_service
from mandi.services.billing import ManualDeductions, to_decimal

router = APIRouter(dependencies=[Depends(get_current_tenant)])


def _manual(body: DeductionsIn) -> ManualDeductions:
    def _opt(value) -> Decimal | None:
        return None if value is None else to_decimal(value)

    return ManualDeductions(
        hamali=_opt(body.hamali),
        vehicle_rent=_opt(body.vehicle_rent),
        advance=_opt(body.advance),
        empty_bag_charges=to_decimal(body.empty_bag_charges),
        rok=to_decimal(body.rok),
        other=to_decimal(body.other),
    )


# ── Computed bills (not persisted) ───────────────────────────

@router.post("/farmer-day", response_model=FarmerDayBillOut)
async def farmer_day_bill(
    body: FarmerDayBillRequest,
    db: AsyncSession = Depends(get_tenant_db),
    rates: TenantSettings = Depends(get_tenant_settings),
):
    bill = await report_service.generate_farmer_day_bill(
        db, rates, body.farmer_id, body.bill_date, _manual(body.deductions)
    )
    return FarmerDayBillOut.model_validate(bill)


@router.get("/farmer-day", response_model=list[FarmerDayBillOut])
async def day_bills(
    bill_date: date = Query(..., alias="date"),
    db: AsyncSession = Depends(get_tenant_db),
    rates: TenantSettings = Depends(get_tenant_settings),
):
    """Bills for every farmer with completed lots on the date."""
    bills = await report_service.generate_day_bills(db, rates, bill_date)
    return [FarmerDayBillOut.model_validate(b) for b in bills]


# ── Persisted patti bills ────────────────────────────────────

@router.post("/bills", response_model=FarmerBillOut, status_code=status.HTTP_201_CREATED)
async def save_bill(
    body: FarmerBillCreate,
    db: AsyncSession = Depends(get_tenant_db),
    rates: TenantSettings = Depends(get_tenant_settings),
    user_id: str = Depends(get_current_user_id),
):
    row = await bill_service.save_farmer_bill(
        db, rates, user_id, body.farmer_id, body.bill_date,
        deductions=_manual(body.deductions),
        patti_number=body.patti_number,
    )
    return FarmerBillOut.model_validate(row)


@router.get("/bills", response_model=PaginatedResponse[FarmerBillOut])
async def list_bills(
    farmer_id: str | None = Query(None),
    limit: int = Query(50, ge=1, le=500),
    offset: int = Query(0, ge=0),
    db: AsyncSession = Depends(get_tenant_db),
):
    items, total = await bill_service.list_farmer_bills(
        db, farmer_id=farmer_id, limit=limit, offset=offset
    )
    return PaginatedResponse(
        items=[FarmerBillOut.model_validate(b) for b in items],
        total=total,
        limit=limit,
        offset=offset,
    )


@router.get("/bills/{bill_id}", response_model=FarmerBillOut)
async def get_bill(
    bill_id: str,
    db: AsyncSession = Depends(get_tenant_db),
):
    return FarmerBillOut.model_validate(await bill_service.get_farmer_bill(db, bill_id))


@router.patch("/bills/{bill_id}", response_model=FarmerBillOut)
async def update_bill(
    bill_id: str,
    body: FarmerBillDeductionsUpdate,
    db: AsyncSession = Depends(get_tenant_db),
    user_id: str = Depends(get_current_user_id),
):
    row = await bill_service.update_bill_deductions(
        db, user_id, bill_id, body.model_dump(exclude_unset=True, exclude_none=True)
    )
    return FarmerBillOut.model_validate(row)


# ── Buyer tax invoices ───────────────────────────────────────

@router.post("/buyer-invoice", response_model=BuyerInvoiceOut)
async def buyer_invoice(
    body: BuyerInvoiceRequest,
    db: AsyncSession = Depends(get_tenant_db),
    rates: TenantSettings = Depends(get_tenant_settings),
):
    """Invoice preview for one buyer's completed lots on a date."""
    invoice = await report_service.generate_buyer_invoice(
        db, rates, body.buyer_id, body.invoice_date
    )
    return BuyerInvoiceOut.model_validate(invoice)


@router.post(
    "/tax-invoices", response_model=TaxInvoiceOut, status_code=status.HTTP_201_CREATED
)
async def save_tax_invoice(
    body: BuyerInvoiceRequest,
    db: AsyncSession = Depends(get_tenant_db),
    rates: TenantSettings = Depends(get_tenant_settings),
    user_id: str = Depends(get_current_user_id),
):
    row = await invoice_service.save_buyer_invoice(
        db, rates, user_id, body.buyer_id, body.invoice_date
    )
    return TaxInvoiceOut.model_validate(row)


@router.get("/tax-invoices", response_model=PaginatedResponse[TaxInvoiceOut])
async def list_tax_invoices(
    buyer_id: str | None = Query(None),
    invoice_date: date | None = Query(None, alias="date"),
    limit: int = Query(50, ge=1, le=500),
    offset: int = Query(0, ge=0),
    db: AsyncSession = Depends(get_tenant_db),
):
    items, total = await invoice_service.list_tax_invoices(
        db, buyer_id=buyer_id, invoice_date=invoice_date, limit=limit, offset=offset
    )
    return PaginatedResponse(
        items=[TaxInvoiceOut.model_validate(i) for i in items],
        total=total,
        limit=limit,
        offset=offset,
    )


@router.get("/tax-invoices/{invoice_id}", response_model=TaxInvoiceOut)
async def get_tax_invoice(
    invoice_id: str,
    db: AsyncSession = Depends(get_tenant_db),
):
    return TaxInvoiceOut.model_validate(
        await invoice_service.get_tax_invoice(db, invoice_id)
    )

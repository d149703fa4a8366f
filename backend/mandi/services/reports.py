"""Report queries: load tenant data, hand it to the billing engine.

Everything here is read-only.  Lots are fetched with bags, farmer and buyer
eager-loaded so the engine never triggers lazy loads, and the tenant's
rates arrive as an explicit ``TenantSettings`` argument.
"""

import logging
from datetime import date, datetime

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from mandi.models.tenant.lot import Lot
from mandi.schemas.settings import TenantSettings
from mandi.services import store
from mandi.services.billing import (
    BuyerInvoice,
    BuyerPurchase,
    CessReport,
    FarmerDayBill,
    GstReport,
    LotAmounts,
    ManualDeductions,
    MissingBagsReport,
    TaxReport,
    analyse_missing_bags,
    build_buyer_invoice,
    build_cess_report,
    build_farmer_day_bill,
    build_gst_report,
    build_tax_report,
    buyer_purchase,
    compute_lot_amounts,
    resolve_date_range,
)

logger = logging.getLogger(__name__)


def _lots_query(start: datetime, end: datetime):
    return (
        select(Lot)
        .where(Lot.created_at.between(start, end))
        .options(
            selectinload(Lot.bags),
            selectinload(Lot.farmer),
            selectinload(Lot.buyer),
        )
        .execution_options(populate_existing=True)
    )


async def list_completed_lots(
    db: AsyncSession,
    start: datetime,
    end: datetime,
    farmer_id: str | None = None,
    buyer_id: str | None = None,
) -> list[Lot]:
    stmt = _lots_query(start, end).where(Lot.status == "completed")
    if farmer_id:
        stmt = stmt.where(Lot.farmer_id == farmer_id)
    if buyer_id:
        stmt = stmt.where(Lot.buyer_id == buyer_id)
    result = await db.execute(stmt.order_by(Lot.created_at))
    return list(result.scalars().all())


async def generate_tax_report(
    db: AsyncSession,
    settings: TenantSettings,
    report_type: str,
    on: date | None = None,
    start: date | datetime | None = None,
    end: date | datetime | None = None,
) -> TaxReport:
    """GST/CESS report over completed lots in the requested period."""
    window = resolve_date_range(report_type, on=on, start=start, end=end)
    lots = await list_completed_lots(db, window.start, window.end)
    report = build_tax_report(lots, settings, window)

    logger.info(
        "Tax report %s (%s): %d transactions",
        window.period, window.report_type.value, report.summary.total_transactions,
    )
    return report


async def generate_cess_report(
    db: AsyncSession,
    settings: TenantSettings,
    report_type: str,
    on: date | None = None,
    start: date | datetime | None = None,
    end: date | datetime | None = None,
) -> CessReport:
    report = await generate_tax_report(db, settings, report_type, on=on, start=start, end=end)
    return build_cess_report(report, settings)


async def generate_gst_report(
    db: AsyncSession,
    settings: TenantSettings,
    report_type: str,
    on: date | None = None,
    start: date | datetime | None = None,
    end: date | datetime | None = None,
) -> GstReport:
    report = await generate_tax_report(db, settings, report_type, on=on, start=start, end=end)
    return build_gst_report(report, settings)


async def get_lot_amounts(
    db: AsyncSession, settings: TenantSettings, lot_id: str
) -> LotAmounts:
    """Amounts for a single lot, whatever its status (billing preview)."""
    lot = await store.get_lot(db, lot_id)
    return compute_lot_amounts(lot, settings)


async def generate_farmer_day_bill(
    db: AsyncSession,
    settings: TenantSettings,
    farmer_id: str,
    bill_date: date,
    deductions: ManualDeductions | None = None,
) -> FarmerDayBill:
    """Settlement for one farmer's completed lots created on ``bill_date``."""
    farmer = await store.get_farmer(db, farmer_id)
    window = resolve_date_range("daily", on=bill_date)
    lots = await list_completed_lots(db, window.start, window.end, farmer_id=farmer_id)
    return build_farmer_day_bill(farmer, lots, settings, bill_date, deductions)


async def generate_day_bills(
    db: AsyncSession,
    settings: TenantSettings,
    bill_date: date,
) -> list[FarmerDayBill]:
    """One bill per farmer who had completed lots on ``bill_date``."""
    window = resolve_date_range("daily", on=bill_date)
    lots = await list_completed_lots(db, window.start, window.end)

    by_farmer: dict[str, list[Lot]] = {}
    for lot in lots:
        by_farmer.setdefault(lot.farmer_id, []).append(lot)

    farmers = {lot.farmer_id: lot.farmer for lot in lots}
    bills = [
        build_farmer_day_bill(farmers[fid], farmer_lots, settings, bill_date)
        for fid, farmer_lots in by_farmer.items()
    ]
    return sorted(bills, key=lambda b: b.farmer_name)


async def detect_missing_bags(db: AsyncSession, on: date) -> MissingBagsReport:
    """Bag-entry gaps for every lot (any status) created on ``on``."""
    window = resolve_date_range("daily", on=on)
    result = await db.execute(_lots_query(window.start, window.end))
    return analyse_missing_bags(list(result.scalars().all()), on)



async def generate_buyer_invoice(
    db: AsyncSession,
    settings: TenantSettings,
    buyer_id: str,
    invoice_date: date,
) -> BuyerInvoice:
    """Invoice preview over the buyer's completed lots created on ``invoice_date``."""
    buyer = await store.get_buyer(db, buyer_id)
    window = resolve_date_range("daily", on=invoice_date)
    lots = await list_completed_lots(db, window.start, window.end, buyer_id=buyer_id)
    return build_buyer_invoice(buyer, lots, settings, invoice_date)


async def get_buyer_purchases(
    db: AsyncSession,
    settings: TenantSettings,
    buyer_id: str,
    limit: int = 50,
    offset: int = 0,
) -> tuple[list[BuyerPurchase], int]:
    """The buyer's completed lots, newest first, with payment balances."""
    await store.get_buyer(db, buyer_id)
    stmt = select(Lot).where(Lot.buyer_id == buyer_id, Lot.status == "completed")

    total = await db.scalar(select(func.count()).select_from(stmt.subquery())) or 0
    result = await db.execute(
        stmt.options(selectinload(Lot.bags), selectinload(Lot.farmer))
        .execution_options(populate_existing=True)
        .order_by(Lot.created_at.desc())
        .limit(limit).offset(offset)
    )
    return [buyer_purchase(lot, settings) for lot in result.scalars()], total

"""Persisted farmer settlements ("patti" bills).

A bill freezes the output of the farmer-day computation, rounded to paise:
totals and commission are copied onto the row and never recomputed from lots
again.  Only the manual deductions can be edited afterwards; each edit
recomputes ``total_deductions`` and ``net_payable`` from the stored values.
"""

import logging
from datetime import date

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from mandi.middleware.exceptions import NotFoundError, ValidationError
from mandi.models.tenant.farmer_bill import FarmerBill
from mandi.schemas.settings import TenantSettings
from mandi.services.billing import ManualDeductions, money, to_decimal, total_deductions
from mandi.services.reports import generate_farmer_day_bill
from mandi.utils.audit import log_audit, snapshot
from mandi.utils.numbering import generate_code

logger = logging.getLogger(__name__)

EDITABLE_DEDUCTIONS = (
    "hamali", "vehicle_rent", "empty_bag_charges", "advance", "rok", "other_charges",
)


async def save_farmer_bill(
    db: AsyncSession,
    settings: TenantSettings,
    user_id: str,
    farmer_id: str,
    bill_date: date,
    deductions: ManualDeductions | None = None,
    patti_number: str | None = None,
) -> FarmerBill:
    """Compute and persist the day bill for one farmer.

    One bill per farmer per day; patti numbers are unique per tenant.
    """
    bill = await generate_farmer_day_bill(db, settings, farmer_id, bill_date, deductions)
    if not bill.lots:
        raise ValidationError(
            "No completed lots for this farmer on the bill date",
            details={"farmer_id": farmer_id, "bill_date": bill_date.isoformat()},
        )

    existing = await db.scalar(
        select(FarmerBill.patti_number).where(
            FarmerBill.farmer_id == farmer_id, FarmerBill.bill_date == bill_date
        )
    )
    if existing:
        raise ValidationError(
            f"Farmer already has bill {existing} for {bill_date.isoformat()}",
            details={"patti_number": existing},
        )

    if patti_number:
        clash = await db.scalar(
            select(FarmerBill.id).where(FarmerBill.patti_number == patti_number)
        )
        if clash:
            raise ValidationError(
                f"Patti number {patti_number} is already in use",
                details={"patti_number": patti_number},
            )
    else:
        patti_number = await generate_code(db, "patti", on=bill_date)

    s = bill.summary
    row = FarmerBill(
        patti_number=patti_number,
        farmer_id=farmer_id,
        bill_date=bill_date,
        lot_ids=[line.lot_id for line in bill.lots],
        total_bags=s.total_bags,
        total_weight=money(s.total_weight),
        gross_amount=money(s.gross_amount),
        commission=money(s.commission),
        hamali=money(s.hamali),
        vehicle_rent=money(s.vehicle_rent),
        empty_bag_charges=money(s.empty_bag_charges),
        advance=money(s.advance),
        rok=money(s.rok),
        other_charges=money(s.other),
        created_by=user_id,
    )
    _settle(row)
    db.add(row)
    await db.flush()
    await db.refresh(row)

    await log_audit(
        db, user_id, action="created", entity_type="farmer_bill",
        entity_id=row.id, new_data=snapshot(row),
    )
    logger.info(
        "Saved patti %s for farmer %s (%d lots, net %s)",
        patti_number, farmer_id, len(bill.lots), row.net_payable,
    )
    return row


def _settle(row: FarmerBill) -> None:
    """Recompute totals from the stored (paise-rounded) amounts."""
    row.total_deductions = total_deductions(
        hamali=row.hamali,
        vehicle_rent=row.vehicle_rent,
        advance=row.advance,
        empty_bag_charges=row.empty_bag_charges,
        rok=row.rok,
        other=row.other_charges,
        commission=row.commission,
    )
    row.net_payable = money(row.gross_amount) - row.total_deductions


async def get_farmer_bill(db: AsyncSession, bill_id: str) -> FarmerBill:
    row = await db.get(FarmerBill, bill_id)
    if not row:
        raise NotFoundError("Farmer bill", bill_id)
    return row


async def list_farmer_bills(
    db: AsyncSession,
    farmer_id: str | None = None,
    limit: int = 50,
    offset: int = 0,
) -> tuple[list[FarmerBill], int]:
    """Bills newest first, optionally for one farmer."""
    stmt = select(FarmerBill)
    if farmer_id:
        stmt = stmt.where(FarmerBill.farmer_id == farmer_id)

    total = await db.scalar(select(func.count()).select_from(stmt.subquery())) or 0
    result = await db.execute(
        stmt.order_by(FarmerBill.bill_date.desc(), FarmerBill.created_at.desc())
        .limit(limit).offset(offset)
    )
    return list(result.scalars().all()), total


async def update_bill_deductions(
    db: AsyncSession, user_id: str, bill_id: str, updates: dict
) -> FarmerBill:
    row = await get_farmer_bill(db, bill_id)

    unknown = set(updates) - set(EDITABLE_DEDUCTIONS)
    if unknown:
        raise ValidationError(
            "Only manual deductions can be changed on a saved bill",
            details={"fields": sorted(unknown)},
        )
    negative = sorted(k for k, v in updates.items() if v is not None and to_decimal(v) < 0)
    if negative:
        raise ValidationError(
            "Deductions must not be negative", details={"fields": negative}
        )

    before = snapshot(row)
    for key, value in updates.items():
        setattr(row, key, money(value))
    _settle(row)

    await db.flush()
    await db.refresh(row)
    await log_audit(
        db, user_id, action="updated", entity_type="farmer_bill",
        entity_id=row.id, old_data=before, new_data=snapshot(row),
    )
    return row

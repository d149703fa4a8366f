"""Buyer GST tax invoices.

Saving an invoice freezes the engine's paise-rounded totals on a
``TaxInvoice`` row and marks every lot it covers as billed, fixing the
lot's ``amount_due`` for payment tracking.  One invoice per buyer per day.
"""

import logging
from datetime import date, datetime

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from mandi.middleware.exceptions import NotFoundError, ValidationError
from mandi.models.tenant.tax_invoice import TaxInvoice
from mandi.schemas.settings import TenantSettings
from mandi.services.billing import (
    compute_lot_amounts,
    money,
    resolve_date_range,
    settle_lot_amounts,
)
from mandi.services.reports import generate_buyer_invoice, list_completed_lots
from mandi.utils.audit import log_audit, snapshot
from mandi.utils.numbering import generate_code

logger = logging.getLogger(__name__)


async def save_buyer_invoice(
    db: AsyncSession,
    settings: TenantSettings,
    user_id: str,
    buyer_id: str,
    invoice_date: date,
) -> TaxInvoice:
    invoice = await generate_buyer_invoice(db, settings, buyer_id, invoice_date)
    if not invoice.items:
        raise ValidationError(
            "No completed lots for this buyer on the invoice date",
            details={"buyer_id": buyer_id, "invoice_date": invoice_date.isoformat()},
        )

    existing = await db.scalar(
        select(TaxInvoice.invoice_number).where(
            TaxInvoice.buyer_id == buyer_id, TaxInvoice.invoice_date == invoice_date
        )
    )
    if existing:
        raise ValidationError(
            f"Buyer already has invoice {existing} for {invoice_date.isoformat()}",
            details={"invoice_number": existing},
        )

    t = invoice.totals
    if t.total_amount <= 0:
        raise ValidationError(
            "Invoice total must be greater than zero",
            details={"total_amount": str(t.total_amount)},
        )

    row = TaxInvoice(
        invoice_number=await generate_code(db, "invoice", on=invoice_date),
        buyer_id=buyer_id,
        invoice_date=invoice_date,
        lot_ids=[item.lot_id for item in invoice.items],
        total_bags=t.total_bags,
        total_weight=money(t.total_weight),
        basic_amount=t.basic_amount,
        packaging=t.packaging,
        weighing_charges=t.weighing_charges,
        commission=t.commission,
        taxable_amount=t.taxable_amount,
        cess_amount=t.cess_amount,
        sgst_amount=t.sgst_amount,
        cgst_amount=t.cgst_amount,
        total_tax_amount=t.total_tax_amount,
        total_amount=t.total_amount,
        created_by=user_id,
    )
    db.add(row)

    window = resolve_date_range("daily", on=invoice_date)
    billed_at = datetime.utcnow()
    for lot in await list_completed_lots(db, window.start, window.end, buyer_id=buyer_id):
        lot.amount_due = settle_lot_amounts(compute_lot_amounts(lot, settings)).total_amount
        lot.bill_generated = True
        lot.bill_generated_at = billed_at
        lot.updated_by = user_id

    await db.flush()
    await db.refresh(row)
    await log_audit(
        db, user_id, action="created", entity_type="tax_invoice",
        entity_id=row.id, new_data=snapshot(row),
    )
    logger.info(
        "Saved invoice %s for buyer %s (%d lots, total %s)",
        row.invoice_number, buyer_id, len(invoice.items), row.total_amount,
    )
    return row


async def get_tax_invoice(db: AsyncSession, invoice_id: str) -> TaxInvoice:
    row = await db.get(TaxInvoice, invoice_id)
    if not row:
        raise NotFoundError("Tax invoice", invoice_id)
    return row


async def list_tax_invoices(
    db: AsyncSession,
    buyer_id: str | None = None,
    invoice_date: date | None = None,
    limit: int = 50,
    offset: int = 0,
) -> tuple[list[TaxInvoice], int]:
    """Invoices newest first, optionally for one buyer or one day."""
    stmt = select(TaxInvoice)
    if buyer_id:
        stmt = stmt.where(TaxInvoice.buyer_id == buyer_id)
    if invoice_date:
        stmt = stmt.where(TaxInvoice.invoice_date == invoice_date)

    total = await db.scalar(select(func.count()).select_from(stmt.subquery())) or 0
    result = await db.execute(
        stmt.order_by(TaxInvoice.invoice_date.desc(), TaxInvoice.created_at.desc())
        .limit(limit).offset(offset)
    )
    return list(result.scalars().all()), total

"""TaxInvoice: the GST invoice raised on one buyer for one day's purchases.

Like a patti, an invoice freezes the engine's paise-rounded totals at save
time.  Saving also fixes ``amount_due`` on every lot it covers.
"""

import uuid
from datetime import date, datetime
from decimal import Decimal

from sqlalchemy import (
    Date, DateTime, ForeignKey, Integer, JSON, Numeric, String, UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from mandi.database import TenantBase


class TaxInvoice(TenantBase):
    __tablename__ = "tax_invoices"
    __table_args__ = (
        UniqueConstraint("buyer_id", "invoice_date", name="uq_tax_invoices_buyer_date"),
    )

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    invoice_number: Mapped[str] = mapped_column(String(50), unique=True, nullable=False)
    buyer_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("buyers.id"), nullable=False, index=True
    )
    invoice_date: Mapped[date] = mapped_column(Date, nullable=False, index=True)
    lot_ids: Mapped[list] = mapped_column(JSON, default=list)

    # ── Quantities ───────────────────────────────────────────
    total_bags: Mapped[int] = mapped_column(Integer, default=0)
    total_weight: Mapped[Decimal] = mapped_column(Numeric(12, 2), default=0)

    # ── Amounts ──────────────────────────────────────────────
    basic_amount: Mapped[Decimal] = mapped_column(Numeric(14, 2), default=0)
    packaging: Mapped[Decimal] = mapped_column(Numeric(12, 2), default=0)
    weighing_charges: Mapped[Decimal] = mapped_column(Numeric(12, 2), default=0)
    commission: Mapped[Decimal] = mapped_column(Numeric(12, 2), default=0)
    taxable_amount: Mapped[Decimal] = mapped_column(Numeric(14, 2), default=0)
    cess_amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), default=0)
    sgst_amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), default=0)
    cgst_amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), default=0)
    total_tax_amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), default=0)
    total_amount: Mapped[Decimal] = mapped_column(Numeric(14, 2), default=0)

    created_by: Mapped[str | None] = mapped_column(String(36))
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)

    buyer = relationship("Buyer")

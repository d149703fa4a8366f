"""FarmerBill: a saved settlement ("patti") for one farmer on one day.

Totals are copied from the billing engine at save time so a patti stays
reproducible even if the tenant later changes its rates.  Only the manual
deduction columns may change afterwards, and every change recomputes
`total_deductions` and `net_payable`.
"""

import uuid
from datetime import date, datetime
from decimal import Decimal

from sqlalchemy import (
    Date, DateTime, ForeignKey, Integer, JSON, Numeric, String, UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from mandi.database import TenantBase


class FarmerBill(TenantBase):
    __tablename__ = "farmer_bills"
    __table_args__ = (
        UniqueConstraint("farmer_id", "bill_date", name="uq_farmer_bills_farmer_date"),
    )

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    patti_number: Mapped[str] = mapped_column(String(50), unique=True, nullable=False)
    farmer_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("farmers.id"), nullable=False, index=True
    )
    bill_date: Mapped[date] = mapped_column(Date, nullable=False, index=True)
    lot_ids: Mapped[list] = mapped_column(JSON, default=list)

    # ── Quantities ───────────────────────────────────────────
    total_bags: Mapped[int] = mapped_column(Integer, default=0)
    total_weight: Mapped[Decimal] = mapped_column(Numeric(12, 2), default=0)

    # ── Amounts ──────────────────────────────────────────────
    gross_amount: Mapped[Decimal] = mapped_column(Numeric(14, 2), default=0)
    commission: Mapped[Decimal] = mapped_column(Numeric(12, 2), default=0)
    hamali: Mapped[Decimal] = mapped_column(Numeric(10, 2), default=0)
    vehicle_rent: Mapped[Decimal] = mapped_column(Numeric(10, 2), default=0)
    empty_bag_charges: Mapped[Decimal] = mapped_column(Numeric(10, 2), default=0)
    advance: Mapped[Decimal] = mapped_column(Numeric(10, 2), default=0)
    rok: Mapped[Decimal] = mapped_column(Numeric(10, 2), default=0)
    other_charges: Mapped[Decimal] = mapped_column(Numeric(10, 2), default=0)
    total_deductions: Mapped[Decimal] = mapped_column(Numeric(14, 2), default=0)
    net_payable: Mapped[Decimal] = mapped_column(Numeric(14, 2), default=0)

    created_by: Mapped[str | None] = mapped_column(String(36))
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, onupdate=datetime.utcnow
    )

    farmer = relationship("Farmer")

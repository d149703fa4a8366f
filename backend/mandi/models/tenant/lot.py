"""Lot: one farmer's delivered batch of produce.

A Lot is opened when the farmer unloads at the yard with a declared number
of bags.  Bags are weighed one by one; once every bag number in
[1..number_of_bags] has a weight and the auction price is set, the lot is
completed and becomes an immutable input to billing.

Lifecycle:  active → completed
            active → cancelled

The buyer-settlement columns (payment_*, amount_*, bill_generated*) are the
only ones that keep changing after completion.
"""

import uuid
from datetime import date, datetime
from decimal import Decimal

from sqlalchemy import Boolean, Date, DateTime, ForeignKey, Integer, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from mandi.database import TenantBase

LOT_STATUSES = ("active", "completed", "cancelled")
PAYMENT_STATUSES = ("pending", "partial", "paid")


class Lot(TenantBase):
    __tablename__ = "lots"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    lot_number: Mapped[str] = mapped_column(String(50), unique=True, nullable=False)

    # ── Parties ──────────────────────────────────────────────
    farmer_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("farmers.id"), nullable=False, index=True
    )
    buyer_id: Mapped[str | None] = mapped_column(String(36), ForeignKey("buyers.id"))

    # ── Produce ──────────────────────────────────────────────
    number_of_bags: Mapped[int] = mapped_column(Integer, nullable=False)
    variety_grade: Mapped[str] = mapped_column(String(100), nullable=False)

    # Auction price per quintal; null until the lot is sold
    lot_price: Mapped[Decimal | None] = mapped_column(Numeric(10, 2))

    # ── Ancillary charges recorded at unloading ──────────────
    vehicle_rent: Mapped[Decimal | None] = mapped_column(Numeric(10, 2))
    advance: Mapped[Decimal | None] = mapped_column(Numeric(10, 2))
    unload_hamali: Mapped[Decimal | None] = mapped_column(Numeric(10, 2))

    # active | completed | cancelled
    status: Mapped[str] = mapped_column(String(20), default="active", index=True)
    completed_at: Mapped[datetime | None] = mapped_column(DateTime)

    # ── Buyer settlement ─────────────────────────────────────
    # amount_due is fixed when the lot goes onto a buyer tax invoice
    payment_status: Mapped[str] = mapped_column(String(20), default="pending")
    amount_due: Mapped[Decimal | None] = mapped_column(Numeric(12, 2))
    amount_paid: Mapped[Decimal] = mapped_column(Numeric(12, 2), default=0)
    payment_date: Mapped[date | None] = mapped_column(Date)
    bill_generated: Mapped[bool] = mapped_column(Boolean, default=False)
    bill_generated_at: Mapped[datetime | None] = mapped_column(DateTime)

    created_by: Mapped[str | None] = mapped_column(String(36))
    updated_by: Mapped[str | None] = mapped_column(String(36))
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, index=True)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, onupdate=datetime.utcnow
    )

    # ── Relationships ────────────────────────────────────────
    # lazy="select" (default); use explicit selectinload() in queries
    farmer = relationship("Farmer")
    buyer = relationship("Buyer")
    bags = relationship(
        "Bag", back_populates="lot", order_by="Bag.bag_number",
        cascade="all, delete-orphan",
    )

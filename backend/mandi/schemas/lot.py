"""Pydantic schemas for Lot and Bag operations."""

from datetime import date, datetime

from pydantic import BaseModel, Field


# ── Lot ──────────────────────────────────────────────────────

class LotCreate(BaseModel):
    farmer_id: str
    number_of_bags: int = Field(..., ge=1)
    variety_grade: str = Field(..., min_length=1, max_length=100)

    # Optional; generated as LOT-YYYYMMDD-NNN when omitted
    lot_number: str | None = Field(None, max_length=50)
    buyer_id: str | None = None
    lot_price: float | None = Field(None, ge=0)
    vehicle_rent: float | None = Field(None, ge=0)
    advance: float | None = Field(None, ge=0)
    unload_hamali: float | None = Field(None, ge=0)


class LotUpdate(BaseModel):
    """Partial update; fields sent as null are left unchanged."""

    buyer_id: str | None = None
    number_of_bags: int | None = Field(None, ge=1)
    variety_grade: str | None = Field(None, min_length=1, max_length=100)
    lot_price: float | None = Field(None, ge=0)
    vehicle_rent: float | None = Field(None, ge=0)
    advance: float | None = Field(None, ge=0)
    unload_hamali: float | None = Field(None, ge=0)


class LotOut(BaseModel):
    id: str
    lot_number: str
    farmer_id: str
    buyer_id: str | None
    number_of_bags: int
    variety_grade: str
    lot_price: float | None
    vehicle_rent: float | None
    advance: float | None
    unload_hamali: float | None
    status: str
    completed_at: datetime | None
    payment_status: str
    amount_due: float | None
    amount_paid: float | None
    payment_date: date | None
    bill_generated: bool | None
    created_at: datetime

    model_config = {"from_attributes": True}


class LotPaymentUpdate(BaseModel):
    """Buyer payment against a completed lot.

    When ``payment_status`` is omitted it is derived from the amounts.
    """
    amount_paid: float | None = Field(None, ge=0)
    payment_date: date | None = None
    payment_status: str | None = Field(None, pattern="^(pending|partial|paid)$")


# ── Bag ──────────────────────────────────────────────────────

class BagCreate(BaseModel):
    bag_number: int = Field(..., ge=1)
    weight: float | None = Field(None, ge=0)
    grade: str | None = Field(None, max_length=50)
    notes: str | None = None


class BagUpdate(BaseModel):
    weight: float | None = Field(None, ge=0)
    grade: str | None = Field(None, max_length=50)
    notes: str | None = None


class BagOut(BaseModel):
    id: str
    lot_id: str
    bag_number: int
    weight: float | None
    grade: str | None
    notes: str | None
    created_at: datetime

    model_config = {"from_attributes": True}


class LotDetailOut(LotOut):
    """Lot with its bags (for the bag-entry screen)."""
    bags: list[BagOut] = []

"""Pydantic schemas for Farmer CRUD operations."""

from datetime import datetime

from pydantic import BaseModel, Field


# ── Farmer ───────────────────────────────────────────────────

class FarmerCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    name_as_in_bank: str | None = Field(None, max_length=255)
    mobile: str = Field(..., min_length=1, max_length=20)
    place: str = Field(..., min_length=1, max_length=255)
    bank_name: str | None = Field(None, max_length=255)
    account_number: str | None = Field(None, max_length=50)
    ifsc_code: str | None = Field(None, max_length=20)


class FarmerUpdate(BaseModel):
    name: str | None = Field(None, min_length=1, max_length=255)
    name_as_in_bank: str | None = None
    mobile: str | None = Field(None, min_length=1, max_length=20)
    place: str | None = Field(None, min_length=1, max_length=255)
    bank_name: str | None = None
    account_number: str | None = None
    ifsc_code: str | None = None


class FarmerOut(BaseModel):
    id: str
    name: str
    name_as_in_bank: str | None
    mobile: str
    place: str
    bank_name: str | None
    account_number: str | None
    ifsc_code: str | None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}

"""Pydantic schemas for Buyer CRUD operations."""

from datetime import datetime

from pydantic import BaseModel, Field


class BuyerCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    contact_person: str | None = Field(None, max_length=255)
    mobile: str | None = Field(None, max_length=20)
    address: str | None = None


class BuyerUpdate(BaseModel):
    name: str | None = Field(None, min_length=1, max_length=255)
    contact_person: str | None = None
    mobile: str | None = None
    address: str | None = None


class BuyerOut(BaseModel):
    id: str
    name: str
    contact_person: str | None
    mobile: str | None
    address: str | None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}

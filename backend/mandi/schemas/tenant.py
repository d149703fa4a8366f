"""Pydantic schemas for tenant onboarding (platform admin)."""

from datetime import datetime

from pydantic import BaseModel, Field


class TenantCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    apmc_code: str = Field(..., min_length=1, max_length=50)
    place: str | None = None
    mobile_number: str | None = Field(None, max_length=20)
    gst_number: str | None = Field(None, max_length=20)
    pan_number: str | None = Field(None, max_length=20)
    address: str | None = None
    # Persisted camelCase rate layout; defaults apply for omitted keys
    settings: dict | None = None


class TenantOut(BaseModel):
    id: str
    name: str
    apmc_code: str
    schema_name: str
    place: str | None
    mobile_number: str | None
    gst_number: str | None
    pan_number: str | None
    is_active: bool
    created_at: datetime

    model_config = {"from_attributes": True}

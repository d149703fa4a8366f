"""Tenant: one trading business (APMC commission agent) on the platform.

Lives in the public namespace.  Each tenant owns exactly one schema that
holds its farmers, buyers, lots and bags.  Tenants are never physically
deleted in normal operation; `is_active` is the soft-deactivation switch.
"""

import uuid
from datetime import datetime

from sqlalchemy import Boolean, DateTime, JSON, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from mandi.database import PublicBase


class Tenant(PublicBase):
    __tablename__ = "tenants"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    apmc_code: Mapped[str] = mapped_column(String(50), unique=True, nullable=False)
    schema_name: Mapped[str] = mapped_column(
        String(50), unique=True, nullable=False, index=True
    )

    place: Mapped[str | None] = mapped_column(String(255))
    mobile_number: Mapped[str | None] = mapped_column(String(20))
    gst_number: Mapped[str | None] = mapped_column(String(20))
    pan_number: Mapped[str | None] = mapped_column(String(20))
    address: Mapped[str | None] = mapped_column(Text)

    # JSON: {"sgstRate": "2.5", "cgstRate": "2.5", "cessRate": "0.6", ...}
    # Parsed through schemas.settings.TenantSettings, never read by key.
    settings: Mapped[dict | None] = mapped_column(JSON, default=dict)

    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, onupdate=datetime.utcnow
    )

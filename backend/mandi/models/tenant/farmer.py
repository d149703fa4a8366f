"""Farmer: the producer who brings lots to the yard and is settled by patti."""

import uuid
from datetime import datetime

from sqlalchemy import DateTime, String
from sqlalchemy.orm import Mapped, mapped_column

from mandi.database import TenantBase


class Farmer(TenantBase):
    __tablename__ = "farmers"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    name_as_in_bank: Mapped[str | None] = mapped_column(String(255))
    # Indexed for lookup; not unique (one phone may front a family)
    mobile: Mapped[str] = mapped_column(String(20), nullable=False, index=True)
    place: Mapped[str] = mapped_column(String(255), nullable=False)

    # Bank details (for settlement transfers)
    bank_name: Mapped[str | None] = mapped_column(String(255))
    account_number: Mapped[str | None] = mapped_column(String(50))
    ifsc_code: Mapped[str | None] = mapped_column(String(20))

    created_by: Mapped[str | None] = mapped_column(String(36))
    updated_by: Mapped[str | None] = mapped_column(String(36))
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, onupdate=datetime.utcnow
    )

"""AuditLog: immutable trail of create/update/delete actions.

Rows are only ever inserted; nothing in the application updates or deletes
them.  `old_data` / `new_data` hold JSON snapshots of the entity before and
after the change.
"""

import uuid
from datetime import datetime

from sqlalchemy import DateTime, Index, JSON, String
from sqlalchemy.orm import Mapped, mapped_column

from mandi.database import TenantBase


class AuditLog(TenantBase):
    __tablename__ = "audit_logs"
    __table_args__ = (
        Index("ix_audit_logs_entity", "entity_type", "entity_id"),
    )

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )

    # ── Who ────────────────────────────────────────────────────
    user_id: Mapped[str] = mapped_column(String(36), nullable=False, index=True)

    # ── What ───────────────────────────────────────────────────
    # created | updated | deleted | completed | cancelled | payment_updated
    action: Mapped[str] = mapped_column(String(50), nullable=False)

    # ── Target ─────────────────────────────────────────────────
    # farmer | buyer | lot | bag | farmer_bill | tax_invoice
    entity_type: Mapped[str | None] = mapped_column(String(50))
    entity_id: Mapped[str | None] = mapped_column(String(36))

    # ── Snapshots ──────────────────────────────────────────────
    old_data: Mapped[dict | None] = mapped_column(JSON)
    new_data: Mapped[dict | None] = mapped_column(JSON)

    created_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, nullable=False
    )

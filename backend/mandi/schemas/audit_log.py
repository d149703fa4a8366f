"""Pydantic schemas for reading the audit trail."""

from datetime import datetime

from pydantic import BaseModel


class AuditLogOut(BaseModel):
    id: str
    user_id: str
    action: str
    entity_type: str | None
    entity_id: str | None
    old_data: dict | None
    new_data: dict | None
    created_at: datetime

    model_config = {"from_attributes": True}

"""Lightweight helper for recording audit log entries.

Usage:
    before = snapshot(lot)
    ... mutate lot ...
    await log_audit(
        db, user_id, action="updated", entity_type="lot",
        entity_id=lot.id, old_data=before, new_data=snapshot(lot),
    )

The row is added to the current session and committed with the
enclosing transaction; no extra flush is performed.
"""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal

from sqlalchemy import inspect
from sqlalchemy.ext.asyncio import AsyncSession

from mandi.models.tenant.audit_log import AuditLog


def _jsonable(value):
    if isinstance(value, Decimal):
        return str(value)
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return value


def snapshot(obj) -> dict:
    """Column values of an ORM object as a JSON-safe dict."""
    mapper = inspect(obj).mapper
    return {attr.key: _jsonable(getattr(obj, attr.key)) for attr in mapper.column_attrs}


async def log_audit(
    db: AsyncSession,
    user_id: str,
    *,
    action: str,
    entity_type: str,
    entity_id: str | None = None,
    old_data: dict | None = None,
    new_data: dict | None = None,
) -> None:
    """Append an audit log entry to the current DB session."""
    entry = AuditLog(
        user_id=user_id,
        action=action,
        entity_type=entity_type,
        entity_id=entity_id,
        old_data=old_data,
        new_data=new_data,
    )
    db.add(entry)

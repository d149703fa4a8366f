"""Read-only access to the tenant's audit trail."""

from fastapi import APIRouter, Depends, Query
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from mandi.auth.deps import get_current_tenant
from mandi.database import get_tenant_db
from mandi.models.tenant.audit_log import AuditLog
from mandi.schemas.audit_log import AuditLogOut
from mandi.schemas.common import PaginatedResponse

router = APIRouter(dependencies=[Depends(get_current_tenant)])


@router.get("/", response_model=PaginatedResponse[AuditLogOut])
async def list_audit_logs(
    entity_type: str | None = Query(None),
    entity_id: str | None = Query(None),
    action: str | None = Query(None),
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
    db: AsyncSession = Depends(get_tenant_db),
):
    """Audit entries newest first, optionally filtered by entity or action."""
    query = select(AuditLog)
    count_query = select(func.count()).select_from(AuditLog)

    if entity_type:
        query = query.where(AuditLog.entity_type == entity_type)
        count_query = count_query.where(AuditLog.entity_type == entity_type)
    if entity_id:
        query = query.where(AuditLog.entity_id == entity_id)
        count_query = count_query.where(AuditLog.entity_id == entity_id)
    if action:
        query = query.where(AuditLog.action == action)
        count_query = count_query.where(AuditLog.action == action)

    total = await db.scalar(count_query) or 0
    result = await db.execute(
        query.order_by(AuditLog.created_at.desc())
        .offset(offset)
        .limit(limit)
    )
    return PaginatedResponse(
        items=[AuditLogOut.model_validate(a) for a in result.scalars().all()],
        total=total,
        limit=limit,
        offset=offset,
    )

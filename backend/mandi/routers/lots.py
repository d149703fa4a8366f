"""Tenant-scoped lot routes: lots, their bags, the complete/cancel transitions
and buyer payments against completed lots.
"""

from datetime import date

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from mandi.auth.deps import get_current_tenant, get_current_user_id
from mandi.database import get_tenant_db
from mandi.middleware.exceptions import NotFoundError
from mandi.schemas.common import PaginatedResponse
from mandi.schemas.lot import (
    BagCreate,
    BagOut,
    BagUpdate,
    LotCreate,
    LotDetailOut,
    LotOut,
    LotPaymentUpdate,
    LotUpdate,
)
from mandi.services import store
from mandi.services.billing import resolve_date_range

router = APIRouter(dependencies=[Depends(get_current_tenant)])


# ── Lots ─────────────────────────────────────────────────────

@router.get("/", response_model=PaginatedResponse[LotOut])
async def list_lots(
    status_filter: str | None = Query(None, alias="status", pattern="^(active|completed|cancelled)$"),
    farmer_id: str | None = Query(None),
    date_from: date | None = Query(None),
    date_to: date | None = Query(None),
    limit: int = Query(50, ge=1, le=500),
    offset: int = Query(0, ge=0),
    db: AsyncSession = Depends(get_tenant_db),
):
    start = end = None
    if date_from or date_to:
        window = resolve_date_range(
            "custom", start=date_from or date.min, end=date_to or date.max
        )
        start, end = window.start, window.end

    items, total = await store.list_lots(
        db, status=status_filter, farmer_id=farmer_id,
        start=start, end=end, limit=limit, offset=offset,
    )
    return PaginatedResponse(
        items=[LotOut.model_validate(lot) for lot in items],
        total=total,
        limit=limit,
        offset=offset,
    )


@router.post("/", response_model=LotOut, status_code=status.HTTP_201_CREATED)
async def create_lot(
    body: LotCreate,
    db: AsyncSession = Depends(get_tenant_db),
    user_id: str = Depends(get_current_user_id),
):
    lot = await store.create_lot(db, user_id, body.model_dump())
    return LotOut.model_validate(lot)


@router.get("/{lot_id}", response_model=LotDetailOut)
async def get_lot(
    lot_id: str,
    db: AsyncSession = Depends(get_tenant_db),
):
    return LotDetailOut.model_validate(await store.get_lot(db, lot_id))


@router.patch("/{lot_id}", response_model=LotOut)
async def update_lot(
    lot_id: str,
    body: LotUpdate,
    db: AsyncSession = Depends(get_tenant_db),
    user_id: str = Depends(get_current_user_id),
):
    lot = await store.update_lot(
        db, user_id, lot_id, body.model_dump(exclude_unset=True, exclude_none=True)
    )
    return LotOut.model_validate(lot)


@router.post("/{lot_id}/complete", response_model=LotOut)
async def complete_lot(
    lot_id: str,
    db: AsyncSession = Depends(get_tenant_db),
    user_id: str = Depends(get_current_user_id),
):
    """Freeze a fully weighed and priced lot for billing."""
    return LotOut.model_validate(await store.complete_lot(db, user_id, lot_id))


@router.post("/{lot_id}/cancel", response_model=LotOut)
async def cancel_lot(
    lot_id: str,
    db: AsyncSession = Depends(get_tenant_db),
    user_id: str = Depends(get_current_user_id),
):
    return LotOut.model_validate(await store.cancel_lot(db, user_id, lot_id))


@router.patch("/{lot_id}/payment", response_model=LotOut)
async def update_payment(
    lot_id: str,
    body: LotPaymentUpdate,
    db: AsyncSession = Depends(get_tenant_db),
    user_id: str = Depends(get_current_user_id),
):
    lot = await store.update_lot_payment(
        db, user_id, lot_id, body.model_dump(exclude_unset=True, exclude_none=True)
    )
    return LotOut.model_validate(lot)


# ── Bags ─────────────────────────────────────────────────────

@router.get("/{lot_id}/bags", response_model=list[BagOut])
async def list_bags(
    lot_id: str,
    db: AsyncSession = Depends(get_tenant_db),
):
    bags = await store.get_bags_by_lot(db, lot_id)
    return [BagOut.model_validate(b) for b in bags]


@router.post("/{lot_id}/bags", response_model=BagOut, status_code=status.HTTP_201_CREATED)
async def create_bag(
    lot_id: str,
    body: BagCreate,
    db: AsyncSession = Depends(get_tenant_db),
    user_id: str = Depends(get_current_user_id),
):
    bag = await store.create_bag(db, user_id, lot_id, body.model_dump())
    return BagOut.model_validate(bag)


async def _bag_in_lot(db: AsyncSession, lot_id: str, bag_id: str):
    bag = await store.get_bag(db, bag_id)
    if bag.lot_id != lot_id:
        raise NotFoundError("Bag", bag_id)
    return bag


@router.patch("/{lot_id}/bags/{bag_id}", response_model=BagOut)
async def update_bag(
    lot_id: str,
    bag_id: str,
    body: BagUpdate,
    db: AsyncSession = Depends(get_tenant_db),
    user_id: str = Depends(get_current_user_id),
):
    await _bag_in_lot(db, lot_id, bag_id)
    bag = await store.update_bag(db, user_id, bag_id, body.model_dump(exclude_unset=True))
    return BagOut.model_validate(bag)


@router.delete("/{lot_id}/bags/{bag_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_bag(
    lot_id: str,
    bag_id: str,
    db: AsyncSession = Depends(get_tenant_db),
    user_id: str = Depends(get_current_user_id),
):
    await _bag_in_lot(db, lot_id, bag_id)
    await store.delete_bag(db, user_id, bag_id)

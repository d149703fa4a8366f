"""Tenant-scoped buyer routes: searchable list, CRUD and purchase history."""

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from mandi.auth.deps import get_current_tenant, get_current_user_id, get_tenant_settings
from mandi.database import get_tenant_db
from mandi.schemas.common import PaginatedResponse
from mandi.schemas.buyer import BuyerCreate, BuyerOut, BuyerUpdate
from mandi.schemas.reports import BuyerPurchaseOut
from mandi.schemas.settings import TenantSettings
from mandi.services import reports as report_service
from mandi.services import store

router = APIRouter(dependencies=[Depends(get_current_tenant)])


@router.get("/", response_model=PaginatedResponse[BuyerOut])
async def list_buyers(
    search: str | None = Query(None, max_length=100),
    limit: int = Query(50, ge=1, le=500),
    offset: int = Query(0, ge=0),
    db: AsyncSession = Depends(get_tenant_db),
):
    items, total = await store.list_buyers(db, search=search, limit=limit, offset=offset)
    return PaginatedResponse(
        items=[BuyerOut.model_validate(b) for b in items],
        total=total,
        limit=limit,
        offset=offset,
    )


@router.post("/", response_model=BuyerOut, status_code=status.HTTP_201_CREATED)
async def create_buyer(
    body: BuyerCreate,
    db: AsyncSession = Depends(get_tenant_db),
    user_id: str = Depends(get_current_user_id),
):
    buyer = await store.create_buyer(db, user_id, body.model_dump())
    return BuyerOut.model_validate(buyer)


@router.get("/{buyer_id}", response_model=BuyerOut)
async def get_buyer(
    buyer_id: str,
    db: AsyncSession = Depends(get_tenant_db),
):
    return BuyerOut.model_validate(await store.get_buyer(db, buyer_id))


@router.patch("/{buyer_id}", response_model=BuyerOut)
async def update_buyer(
    buyer_id: str,
    body: BuyerUpdate,
    db: AsyncSession = Depends(get_tenant_db),
    user_id: str = Depends(get_current_user_id),
):
    buyer = await store.update_buyer(
        db, user_id, buyer_id, body.model_dump(exclude_unset=True)
    )
    return BuyerOut.model_validate(buyer)


@router.delete("/{buyer_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_buyer(
    buyer_id: str,
    db: AsyncSession = Depends(get_tenant_db),
    user_id: str = Depends(get_current_user_id),
):
    await store.delete_buyer(db, user_id, buyer_id)


@router.get("/{buyer_id}/purchases", response_model=PaginatedResponse[BuyerPurchaseOut])
async def buyer_purchases(
    buyer_id: str,
    limit: int = Query(50, ge=1, le=500),
    offset: int = Query(0, ge=0),
    db: AsyncSession = Depends(get_tenant_db),
    rates: TenantSettings = Depends(get_tenant_settings),
):
    """Completed lots bought by the buyer, newest first, with payment balances."""
    items, total = await report_service.get_buyer_purchases(
        db, rates, buyer_id, limit=limit, offset=offset
    )
    return PaginatedResponse(
        items=[BuyerPurchaseOut.model_validate(p) for p in items],
        total=total,
        limit=limit,
        offset=offset,
    )

"""Tenant-scoped farmer routes: searchable list + CRUD."""

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from mandi.auth.deps import get_current_tenant, get_current_user_id
from mandi.database import get_tenant_db
from mandi.schemas.common import PaginatedResponse
from mandi.schemas.farmer import FarmerCreate, FarmerOut, FarmerUpdate
from mandi.services import store

router = APIRouter(dependencies=[Depends(get_current_tenant)])


@router.get("/", response_model=PaginatedResponse[FarmerOut])
async def list_farmers(
    search: str | None = Query(None, max_length=100),
    limit: int = Query(50, ge=1, le=500),
    offset: int = Query(0, ge=0),
    db: AsyncSession = Depends(get_tenant_db),
):
    items, total = await store.list_farmers(db, search=search, limit=limit, offset=offset)
    return PaginatedResponse(
        items=[FarmerOut.model_validate(f) for f in items],
        total=total,
        limit=limit,
        offset=offset,
    )


@router.post("/", response_model=FarmerOut, status_code=status.HTTP_201_CREATED)
async def create_farmer(
    body: FarmerCreate,
    db: AsyncSession = Depends(get_tenant_db),
    user_id: str = Depends(get_current_user_id),
):
    farmer = await store.create_farmer(db, user_id, body.model_dump())
    return FarmerOut.model_validate(farmer)


@router.get("/{farmer_id}", response_model=FarmerOut)
async def get_farmer(
    farmer_id: str,
    db: AsyncSession = Depends(get_tenant_db),
):
    return FarmerOut.model_validate(await store.get_farmer(db, farmer_id))


@router.patch("/{farmer_id}", response_model=FarmerOut)
async def update_farmer(
    farmer_id: str,
    body: FarmerUpdate,
    db: AsyncSession = Depends(get_tenant_db),
    user_id: str = Depends(get_current_user_id),
):
    farmer = await store.update_farmer(
        db, user_id, farmer_id, body.model_dump(exclude_unset=True)
    )
    return FarmerOut.model_validate(farmer)


@router.delete("/{farmer_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_farmer(
    farmer_id: str,
    db: AsyncSession = Depends(get_tenant_db),
    user_id: str = Depends(get_current_user_id),
):
    await store.delete_farmer(db, user_id, farmer_id)

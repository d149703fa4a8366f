"""Tenant store: every read and write against a tenant's farmers, buyers,
lots and bags.

All functions take a tenant-scoped session (``database.tenant_session`` or
the ``get_tenant_db`` dependency); the session's schema translation is what
confines them to one tenant, so nothing here mentions a schema.

Every mutation appends an AuditLog row with before/after snapshots in the
same transaction.  Lots move through:

    active ──complete──▶ completed      (frozen: bags and lot fields locked)
       └────cancel─────▶ cancelled

Once completed, only the buyer-payment columns change (``update_lot_payment``).
"""

import logging
from dataclasses import dataclass
from datetime import date, datetime

from sqlalchemy import func, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from mandi.middleware.exceptions import NotFoundError, ValidationError
from mandi.models.tenant.bag import Bag
from mandi.models.tenant.buyer import Buyer
from mandi.models.tenant.farmer import Farmer
from mandi.models.tenant.lot import Lot
from mandi.services.billing import (
    derive_payment_status,
    money,
    resolve_date_range,
    to_decimal,
)
from mandi.utils.audit import log_audit, snapshot
from mandi.utils.numbering import generate_code

logger = logging.getLogger(__name__)

_LOT_MONEY_FIELDS = ("lot_price", "vehicle_rent", "advance", "unload_hamali")


def _as_decimals(values: dict, keys) -> dict:
    for key in keys:
        if values.get(key) is not None:
            values[key] = to_decimal(values[key])
    return values


# ── Farmers ──────────────────────────────────────────────────

async def list_farmers(
    db: AsyncSession,
    search: str | None = None,
    limit: int = 50,
    offset: int = 0,
) -> tuple[list[Farmer], int]:
    """Farmers ordered by name; ``search`` matches name, mobile or place."""
    stmt = select(Farmer)
    if search:
        pattern = f"%{search.strip()}%"
        stmt = stmt.where(or_(
            Farmer.name.ilike(pattern),
            Farmer.mobile.ilike(pattern),
            Farmer.place.ilike(pattern),
        ))

    total = await db.scalar(select(func.count()).select_from(stmt.subquery())) or 0
    result = await db.execute(stmt.order_by(Farmer.name).limit(limit).offset(offset))
    return list(result.scalars().all()), total


async def get_farmer(db: AsyncSession, farmer_id: str) -> Farmer:
    farmer = await db.get(Farmer, farmer_id)
    if not farmer:
        raise NotFoundError("Farmer", farmer_id)
    return farmer


async def create_farmer(db: AsyncSession, user_id: str, data: dict) -> Farmer:
    farmer = Farmer(**data, created_by=user_id, updated_by=user_id)
    db.add(farmer)
    await db.flush()
    await db.refresh(farmer)

    await log_audit(
        db, user_id, action="created", entity_type="farmer",
        entity_id=farmer.id, new_data=snapshot(farmer),
    )
    return farmer


async def update_farmer(
    db: AsyncSession, user_id: str, farmer_id: str, updates: dict
) -> Farmer:
    farmer = await get_farmer(db, farmer_id)
    before = snapshot(farmer)

    for key, value in updates.items():
        setattr(farmer, key, value)
    farmer.updated_by = user_id

    await db.flush()
    await db.refresh(farmer)
    await log_audit(
        db, user_id, action="updated", entity_type="farmer",
        entity_id=farmer.id, old_data=before, new_data=snapshot(farmer),
    )
    return farmer


async def delete_farmer(db: AsyncSession, user_id: str, farmer_id: str) -> None:
    farmer = await get_farmer(db, farmer_id)
    lot_count = await db.scalar(
        select(func.count(Lot.id)).where(Lot.farmer_id == farmer_id)
    )
    if lot_count:
        raise ValidationError(
            "Farmer has lots and cannot be deleted",
            details={"lots": lot_count},
        )

    before = snapshot(farmer)
    await db.delete(farmer)
    await db.flush()
    await log_audit(
        db, user_id, action="deleted", entity_type="farmer",
        entity_id=farmer_id, old_data=before,
    )


# ── Buyers ───────────────────────────────────────────────────

async def list_buyers(
    db: AsyncSession,
    search: str | None = None,
    limit: int = 50,
    offset: int = 0,
) -> tuple[list[Buyer], int]:
    stmt = select(Buyer)
    if search:
        pattern = f"%{search.strip()}%"
        stmt = stmt.where(or_(Buyer.name.ilike(pattern), Buyer.mobile.ilike(pattern)))

    total = await db.scalar(select(func.count()).select_from(stmt.subquery())) or 0
    result = await db.execute(stmt.order_by(Buyer.name).limit(limit).offset(offset))
    return list(result.scalars().all()), total


async def get_buyer(db: AsyncSession, buyer_id: str) -> Buyer:
    buyer = await db.get(Buyer, buyer_id)
    if not buyer:
        raise NotFoundError("Buyer", buyer_id)
    return buyer


async def create_buyer(db: AsyncSession, user_id: str, data: dict) -> Buyer:
    buyer = Buyer(**data, created_by=user_id, updated_by=user_id)
    db.add(buyer)
    await db.flush()
    await db.refresh(buyer)

    await log_audit(
        db, user_id, action="created", entity_type="buyer",
        entity_id=buyer.id, new_data=snapshot(buyer),
    )
    return buyer


async def update_buyer(
    db: AsyncSession, user_id: str, buyer_id: str, updates: dict
) -> Buyer:
    buyer = await get_buyer(db, buyer_id)
    before = snapshot(buyer)

    for key, value in updates.items():
        setattr(buyer, key, value)
    buyer.updated_by = user_id

    await db.flush()
    await db.refresh(buyer)
    await log_audit(
        db, user_id, action="updated", entity_type="buyer",
        entity_id=buyer.id, old_data=before, new_data=snapshot(buyer),
    )
    return buyer


async def delete_buyer(db: AsyncSession, user_id: str, buyer_id: str) -> None:
    buyer = await get_buyer(db, buyer_id)
    lot_count = await db.scalar(
        select(func.count(Lot.id)).where(Lot.buyer_id == buyer_id)
    )
    if lot_count:
        raise ValidationError(
            "Buyer is assigned to lots and cannot be deleted",
            details={"lots": lot_count},
        )

    before = snapshot(buyer)
    await db.delete(buyer)
    await db.flush()
    await log_audit(
        db, user_id, action="deleted", entity_type="buyer",
        entity_id=buyer_id, old_data=before,
    )


# ── Lots ─────────────────────────────────────────────────────

def _require_active(lot: Lot) -> None:
    if lot.status != "active":
        raise ValidationError(
            f"Lot {lot.lot_number} is {lot.status} and can no longer be changed",
            details={"lot_id": lot.id, "status": lot.status},
        )


async def list_lots(
    db: AsyncSession,
    status: str | None = None,
    farmer_id: str | None = None,
    start: datetime | None = None,
    end: datetime | None = None,
    limit: int = 50,
    offset: int = 0,
) -> tuple[list[Lot], int]:
    """Lots newest first, filtered by status / farmer / creation window."""
    stmt = select(Lot)
    if status:
        stmt = stmt.where(Lot.status == status)
    if farmer_id:
        stmt = stmt.where(Lot.farmer_id == farmer_id)
    if start:
        stmt = stmt.where(Lot.created_at >= start)
    if end:
        stmt = stmt.where(Lot.created_at <= end)

    total = await db.scalar(select(func.count()).select_from(stmt.subquery())) or 0
    result = await db.execute(
        stmt.order_by(Lot.created_at.desc()).limit(limit).offset(offset)
    )
    return list(result.scalars().all()), total


async def get_lot(db: AsyncSession, lot_id: str) -> Lot:
    """Lot with bags, farmer and buyer freshly loaded."""
    result = await db.execute(
        select(Lot)
        .where(Lot.id == lot_id)
        .options(
            selectinload(Lot.bags),
            selectinload(Lot.farmer),
            selectinload(Lot.buyer),
        )
        .execution_options(populate_existing=True)
    )
    lot = result.scalar_one_or_none()
    if not lot:
        raise NotFoundError("Lot", lot_id)
    return lot


async def create_lot(db: AsyncSession, user_id: str, data: dict) -> Lot:
    await get_farmer(db, data["farmer_id"])
    if data.get("buyer_id"):
        await get_buyer(db, data["buyer_id"])

    lot_number = data.pop("lot_number", None)
    if lot_number:
        clash = await db.scalar(select(Lot.id).where(Lot.lot_number == lot_number))
        if clash:
            raise ValidationError(
                f"Lot number {lot_number} already exists",
                details={"lot_number": lot_number},
            )
    else:
        lot_number = await generate_code(db, "lot")

    lot = Lot(
        **_as_decimals(data, _LOT_MONEY_FIELDS),
        lot_number=lot_number,
        status="active",
        created_by=user_id,
        updated_by=user_id,
    )
    db.add(lot)
    await db.flush()
    await db.refresh(lot)

    await log_audit(
        db, user_id, action="created", entity_type="lot",
        entity_id=lot.id, new_data=snapshot(lot),
    )
    return lot


async def update_lot(db: AsyncSession, user_id: str, lot_id: str, updates: dict) -> Lot:
    lot = await get_lot(db, lot_id)
    _require_active(lot)

    if updates.get("buyer_id"):
        await get_buyer(db, updates["buyer_id"])

    new_count = updates.get("number_of_bags")
    if new_count is not None:
        highest = max((b.bag_number for b in lot.bags), default=0)
        if new_count < highest:
            raise ValidationError(
                f"Lot already has bag number {highest}; "
                f"number_of_bags cannot drop to {new_count}",
                details={"highest_bag_number": highest},
            )

    before = snapshot(lot)
    for key, value in _as_decimals(updates, _LOT_MONEY_FIELDS).items():
        setattr(lot, key, value)
    lot.updated_by = user_id

    await db.flush()
    await db.refresh(lot)
    await log_audit(
        db, user_id, action="updated", entity_type="lot",
        entity_id=lot.id, old_data=before, new_data=snapshot(lot),
    )
    return lot


async def complete_lot(db: AsyncSession, user_id: str, lot_id: str) -> Lot:
    """Freeze a fully weighed, priced lot so billing can use it.

    The lot row is locked for the rest of the transaction and the status
    flip only matches an ``active`` row, so two concurrent completions
    cannot both succeed.
    """
    result = await db.execute(
        select(Lot).where(Lot.id == lot_id).with_for_update()
    )
    lot = result.scalar_one_or_none()
    if not lot:
        raise NotFoundError("Lot", lot_id)
    _require_active(lot)

    bags = (await db.execute(select(Bag).where(Bag.lot_id == lot_id))).scalars().all()
    weighed = {b.bag_number for b in bags if to_decimal(b.weight) > 0}
    unweighed = [n for n in range(1, lot.number_of_bags + 1) if n not in weighed]
    problems = {}
    if unweighed:
        problems["unweighed_bags"] = unweighed
    if lot.lot_price is None:
        problems["lot_price"] = "not set"
    if problems:
        raise ValidationError(
            f"Lot {lot.lot_number} cannot be completed yet", details=problems
        )

    before = snapshot(lot)
    flipped = await db.execute(
        update(Lot)
        .where(Lot.id == lot_id, Lot.status == "active")
        .values(status="completed", completed_at=datetime.utcnow(), updated_by=user_id)
    )
    if flipped.rowcount != 1:
        raise ValidationError(f"Lot {lot.lot_number} was completed by another request")

    await db.refresh(lot)
    await log_audit(
        db, user_id, action="completed", entity_type="lot",
        entity_id=lot.id, old_data=before, new_data=snapshot(lot),
    )
    logger.info("Completed lot %s (%d bags)", lot.lot_number, lot.number_of_bags)
    return lot


async def cancel_lot(db: AsyncSession, user_id: str, lot_id: str) -> Lot:
    lot = await get_lot(db, lot_id)
    _require_active(lot)

    before = snapshot(lot)
    lot.status = "cancelled"
    lot.updated_by = user_id
    await db.flush()
    await db.refresh(lot)

    await log_audit(
        db, user_id, action="cancelled", entity_type="lot",
        entity_id=lot.id, old_data=before, new_data=snapshot(lot),
    )
    return lot


async def update_lot_payment(
    db: AsyncSession, user_id: str, lot_id: str, updates: dict
) -> Lot:
    """Record the buyer's payment against a completed lot.

    Without an explicit ``payment_status`` the status follows the amounts:
    nothing paid is pending, paid in full against ``amount_due`` is paid,
    anything in between is partial.
    """
    lot = await get_lot(db, lot_id)
    if lot.status != "completed":
        raise ValidationError(
            f"Lot {lot.lot_number} is {lot.status}; payments apply to completed lots only",
            details={"lot_id": lot.id, "status": lot.status},
        )

    before = snapshot(lot)
    if updates.get("amount_paid") is not None:
        lot.amount_paid = money(updates["amount_paid"])
    if updates.get("payment_date") is not None:
        lot.payment_date = updates["payment_date"]
    lot.payment_status = updates.get("payment_status") or derive_payment_status(
        lot.amount_due, lot.amount_paid
    )
    lot.updated_by = user_id

    await db.flush()
    await db.refresh(lot)
    await log_audit(
        db, user_id, action="payment_updated", entity_type="lot",
        entity_id=lot.id, old_data=before, new_data=snapshot(lot),
    )
    logger.info(
        "Lot %s payment: %s paid, status %s",
        lot.lot_number, lot.amount_paid, lot.payment_status,
    )
    return lot


# ── Bags ─────────────────────────────────────────────────────

async def get_bags_by_lot(db: AsyncSession, lot_id: str) -> list[Bag]:
    if not await db.get(Lot, lot_id):
        raise NotFoundError("Lot", lot_id)
    result = await db.execute(
        select(Bag).where(Bag.lot_id == lot_id).order_by(Bag.bag_number)
    )
    return list(result.scalars().all())


async def get_bag(db: AsyncSession, bag_id: str) -> Bag:
    result = await db.execute(
        select(Bag).where(Bag.id == bag_id).options(selectinload(Bag.lot))
    )
    bag = result.scalar_one_or_none()
    if not bag:
        raise NotFoundError("Bag", bag_id)
    return bag


async def create_bag(db: AsyncSession, user_id: str, lot_id: str, data: dict) -> Bag:
    """Record one bag; its number must lie in 1..number_of_bags and be unused."""
    lot = await db.get(Lot, lot_id)
    if not lot:
        raise NotFoundError("Lot", lot_id)
    _require_active(lot)

    bag_number = data["bag_number"]
    if not 1 <= bag_number <= lot.number_of_bags:
        raise ValidationError(
            f"Bag number {bag_number} is outside 1..{lot.number_of_bags}",
            details={"bag_number": bag_number, "number_of_bags": lot.number_of_bags},
        )
    taken = await db.scalar(
        select(Bag.id).where(Bag.lot_id == lot_id, Bag.bag_number == bag_number)
    )
    if taken:
        raise ValidationError(
            f"Bag number {bag_number} already exists in lot {lot.lot_number}",
            details={"bag_number": bag_number},
        )

    bag = Bag(
        **_as_decimals(data, ("weight",)),
        lot_id=lot_id,
        created_by=user_id,
        updated_by=user_id,
    )
    db.add(bag)
    await db.flush()
    await db.refresh(bag)

    await log_audit(
        db, user_id, action="created", entity_type="bag",
        entity_id=bag.id, new_data=snapshot(bag),
    )
    return bag


async def update_bag(db: AsyncSession, user_id: str, bag_id: str, updates: dict) -> Bag:
    bag = await get_bag(db, bag_id)
    _require_active(bag.lot)

    before = snapshot(bag)
    for key, value in _as_decimals(updates, ("weight",)).items():
        setattr(bag, key, value)
    bag.updated_by = user_id

    await db.flush()
    await db.refresh(bag)
    await log_audit(
        db, user_id, action="updated", entity_type="bag",
        entity_id=bag.id, old_data=before, new_data=snapshot(bag),
    )
    return bag


async def delete_bag(db: AsyncSession, user_id: str, bag_id: str) -> None:
    bag = await get_bag(db, bag_id)
    _require_active(bag.lot)

    before = snapshot(bag)
    await db.delete(bag)
    await db.flush()
    await log_audit(
        db, user_id, action="deleted", entity_type="bag",
        entity_id=bag_id, old_data=before,
    )


# ── Dashboard ────────────────────────────────────────────────

@dataclass(frozen=True)
class DashboardStats:
    total_farmers: int
    active_lots: int
    bags_today: int
    completed_lots_today: int


async def get_dashboard_stats(db: AsyncSession, today: date | None = None) -> DashboardStats:
    """Headline counts for the yard dashboard (read-only)."""
    window = resolve_date_range("daily", on=today or datetime.utcnow().date())

    total_farmers = await db.scalar(select(func.count(Farmer.id)))
    active_lots = await db.scalar(
        select(func.count(Lot.id)).where(Lot.status == "active")
    )
    bags_today = await db.scalar(
        select(func.count(Bag.id)).where(Bag.created_at.between(window.start, window.end))
    )
    completed_today = await db.scalar(
        select(func.count(Lot.id)).where(
            Lot.status == "completed",
            Lot.completed_at.between(window.start, window.end),
        )
    )
    return DashboardStats(
        total_farmers=total_farmers or 0,
        active_lots=active_lots or 0,
        bags_today=bags_today or 0,
        completed_lots_today=completed_today or 0,
    )

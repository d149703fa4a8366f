"""Tenant store: CRUD, bag validation, lot lifecycle, audit trail."""

from datetime import datetime
from decimal import Decimal

import pytest
from sqlalchemy import select, update

from mandi.middleware.exceptions import NotFoundError, ValidationError
from mandi.database import tenant_session
from mandi.models.tenant.audit_log import AuditLog
from mandi.models.tenant.lot import Lot
from mandi.services import reports, store


async def _farmer(db, user_id, **overrides):
    data = {"name": "Ramaiah", "mobile": "9876543210", "place": "Guntur"}
    data.update(overrides)
    return await store.create_farmer(db, user_id, data)


async def _lot(db, user_id, farmer_id, bags=3, **overrides):
    data = {"farmer_id": farmer_id, "number_of_bags": bags, "variety_grade": "Teja"}
    data.update(overrides)
    return await store.create_lot(db, user_id, data)


async def _weigh_all(db, user_id, lot, weight=45.0):
    for n in range(1, lot.number_of_bags + 1):
        await store.create_bag(db, user_id, lot.id, {"bag_number": n, "weight": weight})


@pytest.mark.integration
@pytest.mark.asyncio
class TestFarmersAndBuyers:
    async def test_crud_with_audit(self, db_session, user_id):
        farmer = await _farmer(db_session, user_id)
        await store.update_farmer(db_session, user_id, farmer.id, {"place": "Tenali"})
        await store.delete_farmer(db_session, user_id, farmer.id)
        await db_session.flush()

        with pytest.raises(NotFoundError):
            await store.get_farmer(db_session, farmer.id)

        logs = (await db_session.execute(
            select(AuditLog).where(AuditLog.entity_id == farmer.id)
        )).scalars().all()
        assert sorted(log.action for log in logs) == ["created", "deleted", "updated"]
        updated = next(log for log in logs if log.action == "updated")
        assert updated.old_data["place"] == "Guntur"
        assert updated.new_data["place"] == "Tenali"
        assert updated.user_id == user_id

    async def test_search(self, db_session, user_id):
        await _farmer(db_session, user_id, name="Ramaiah")
        await _farmer(db_session, user_id, name="Suresh", mobile="9000000001", place="Narasaraopet")

        items, total = await store.list_farmers(db_session, search="nara")
        assert total == 1
        assert items[0].name == "Suresh"

    async def test_farmer_with_lots_cannot_be_deleted(self, db_session, user_id):
        farmer = await _farmer(db_session, user_id)
        await _lot(db_session, user_id, farmer.id)
        with pytest.raises(ValidationError):
            await store.delete_farmer(db_session, user_id, farmer.id)

    async def test_buyer_crud(self, db_session, user_id):
        buyer = await store.create_buyer(db_session, user_id, {"name": "Kisan Exports"})
        buyer = await store.update_buyer(db_session, user_id, buyer.id, {"mobile": "9111111111"})
        items, total = await store.list_buyers(db_session)
        assert total == 1
        assert items[0].mobile == "9111111111"


@pytest.mark.integration
@pytest.mark.asyncio
class TestLots:
    async def test_lot_numbers_are_sequential(self, db_session, user_id):
        farmer = await _farmer(db_session, user_id)
        first = await _lot(db_session, user_id, farmer.id)
        second = await _lot(db_session, user_id, farmer.id)

        today = datetime.utcnow().strftime("%Y%m%d")
        assert first.lot_number == f"LOT-{today}-001"
        assert second.lot_number == f"LOT-{today}-002"

    async def test_numbering_skips_past_supplied_numbers(self, db_session, user_id):
        farmer = await _farmer(db_session, user_id)
        today = datetime.utcnow().strftime("%Y%m%d")
        await _lot(db_session, user_id, farmer.id, lot_number=f"LOT-{today}-001")

        generated = await _lot(db_session, user_id, farmer.id)
        assert generated.lot_number == f"LOT-{today}-002"

        await _lot(db_session, user_id, farmer.id, lot_number=f"LOT-{today}-005")
        await _lot(db_session, user_id, farmer.id, lot_number=f"LOT-{today}-extra")
        after_gap = await _lot(db_session, user_id, farmer.id)
        assert after_gap.lot_number == f"LOT-{today}-006"

    async def test_duplicate_lot_number(self, db_session, user_id):
        farmer = await _farmer(db_session, user_id)
        await _lot(db_session, user_id, farmer.id, lot_number="L-7")
        with pytest.raises(ValidationError):
            await _lot(db_session, user_id, farmer.id, lot_number="L-7")

    async def test_unknown_farmer(self, db_session, user_id):
        with pytest.raises(NotFoundError):
            await _lot(db_session, user_id, "no-such-farmer")

    async def test_filters(self, db_session, user_id):
        a = await _farmer(db_session, user_id)
        b = await _farmer(db_session, user_id, name="Suresh")
        await _lot(db_session, user_id, a.id)
        lot_b = await _lot(db_session, user_id, b.id)
        await store.cancel_lot(db_session, user_id, lot_b.id)

        _, total_a = await store.list_lots(db_session, farmer_id=a.id)
        cancelled, total_cancelled = await store.list_lots(db_session, status="cancelled")
        assert total_a == 1
        assert total_cancelled == 1
        assert cancelled[0].id == lot_b.id


@pytest.mark.integration
@pytest.mark.asyncio
class TestBags:
    async def test_bag_number_out_of_range(self, db_session, user_id):
        farmer = await _farmer(db_session, user_id)
        lot = await _lot(db_session, user_id, farmer.id, bags=3)

        for bad in (0, 4):
            with pytest.raises(ValidationError):
                await store.create_bag(db_session, user_id, lot.id, {"bag_number": bad, "weight": 40})

    async def test_duplicate_bag_number(self, db_session, user_id):
        farmer = await _farmer(db_session, user_id)
        lot = await _lot(db_session, user_id, farmer.id, bags=3)
        await store.create_bag(db_session, user_id, lot.id, {"bag_number": 2, "weight": 40})

        with pytest.raises(ValidationError):
            await store.create_bag(db_session, user_id, lot.id, {"bag_number": 2, "weight": 41})

    async def test_bag_for_unknown_lot(self, db_session, user_id):
        with pytest.raises(NotFoundError):
            await store.create_bag(db_session, user_id, "missing", {"bag_number": 1})

    async def test_update_and_delete(self, db_session, user_id):
        farmer = await _farmer(db_session, user_id)
        lot = await _lot(db_session, user_id, farmer.id, bags=2)
        bag = await store.create_bag(db_session, user_id, lot.id, {"bag_number": 1, "weight": 40})

        bag = await store.update_bag(db_session, user_id, bag.id, {"weight": 42.5})
        assert bag.weight == Decimal("42.5")

        await store.delete_bag(db_session, user_id, bag.id)
        assert await store.get_bags_by_lot(db_session, lot.id) == []

    async def test_cannot_shrink_lot_below_entered_bags(self, db_session, user_id):
        farmer = await _farmer(db_session, user_id)
        lot = await _lot(db_session, user_id, farmer.id, bags=5)
        await store.create_bag(db_session, user_id, lot.id, {"bag_number": 4, "weight": 40})

        with pytest.raises(ValidationError):
            await store.update_lot(db_session, user_id, lot.id, {"number_of_bags": 3})


@pytest.mark.integration
@pytest.mark.asyncio
class TestCompletion:
    async def test_complete_fully_weighed_priced_lot(self, db_session, user_id):
        farmer = await _farmer(db_session, user_id)
        lot = await _lot(db_session, user_id, farmer.id, bags=3, lot_price=9000)
        await _weigh_all(db_session, user_id, lot)

        done = await store.complete_lot(db_session, user_id, lot.id)
        assert done.status == "completed"
        assert done.completed_at is not None

        stats = await store.get_dashboard_stats(db_session)
        assert stats.completed_lots_today == 1
        assert stats.active_lots == 0
        assert stats.bags_today == 3
        assert stats.total_farmers == 1

    async def test_missing_bags_block_completion(self, db_session, user_id):
        farmer = await _farmer(db_session, user_id)
        lot = await _lot(db_session, user_id, farmer.id, bags=3, lot_price=9000)
        await store.create_bag(db_session, user_id, lot.id, {"bag_number": 1, "weight": 45})
        await store.create_bag(db_session, user_id, lot.id, {"bag_number": 2, "weight": 0})

        with pytest.raises(ValidationError) as exc:
            await store.complete_lot(db_session, user_id, lot.id)
        assert exc.value.details["unweighed_bags"] == [2, 3]

    async def test_price_required(self, db_session, user_id):
        farmer = await _farmer(db_session, user_id)
        lot = await _lot(db_session, user_id, farmer.id, bags=1)
        await _weigh_all(db_session, user_id, lot)

        with pytest.raises(ValidationError) as exc:
            await store.complete_lot(db_session, user_id, lot.id)
        assert "lot_price" in exc.value.details

    async def test_completed_lot_is_frozen(self, db_session, user_id):
        farmer = await _farmer(db_session, user_id)
        lot = await _lot(db_session, user_id, farmer.id, bags=2, lot_price=9000)
        await _weigh_all(db_session, user_id, lot)
        await store.complete_lot(db_session, user_id, lot.id)
        bag = (await store.get_bags_by_lot(db_session, lot.id))[0]

        with pytest.raises(ValidationError):
            await store.complete_lot(db_session, user_id, lot.id)
        with pytest.raises(ValidationError):
            await store.update_bag(db_session, user_id, bag.id, {"weight": 50})
        with pytest.raises(ValidationError):
            await store.delete_bag(db_session, user_id, bag.id)
        with pytest.raises(ValidationError):
            await store.update_lot(db_session, user_id, lot.id, {"lot_price": 1})
        with pytest.raises(ValidationError):
            await store.cancel_lot(db_session, user_id, lot.id)

    async def test_lost_race_fails_and_lot_is_billed_once(
        self, db_session, user_id, tenant_schema, rates
    ):
        farmer = await _farmer(db_session, user_id)
        lot = await _lot(db_session, user_id, farmer.id, bags=2, lot_price=9000)
        await _weigh_all(db_session, user_id, lot)

        # another request completes the lot first; this session still holds it as active
        async with tenant_session(tenant_schema) as other:
            await other.execute(
                update(Lot)
                .where(Lot.id == lot.id)
                .values(status="completed", completed_at=datetime.utcnow())
            )
            await other.commit()
        assert lot.status == "active"

        with pytest.raises(ValidationError) as exc:
            await store.complete_lot(db_session, user_id, lot.id)
        assert "another request" in exc.value.message

        report = await reports.generate_tax_report(
            db_session, rates, "daily", on=datetime.utcnow().date()
        )
        assert report.summary.total_transactions == 1


@pytest.mark.integration
@pytest.mark.asyncio
class TestPayments:
    async def _completed(self, db, user_id):
        farmer = await _farmer(db, user_id)
        lot = await _lot(db, user_id, farmer.id, bags=2, lot_price=9000)
        await _weigh_all(db, user_id, lot)
        return await store.complete_lot(db, user_id, lot.id)

    async def test_status_follows_amounts(self, db_session, user_id):
        lot = await self._completed(db_session, user_id)
        assert lot.payment_status == "pending"

        lot.amount_due = Decimal("8000")
        await db_session.flush()
        partial = await store.update_lot_payment(
            db_session, user_id, lot.id, {"amount_paid": 3000}
        )
        assert partial.payment_status == "partial"
        assert partial.amount_paid == Decimal("3000")

        paid = await store.update_lot_payment(
            db_session, user_id, lot.id,
            {"amount_paid": 8000, "payment_date": datetime(2024, 3, 20).date()},
        )
        assert paid.payment_status == "paid"
        assert str(paid.payment_date) == "2024-03-20"

        logs = (await db_session.execute(
            select(AuditLog).where(
                AuditLog.entity_id == lot.id, AuditLog.action == "payment_updated"
            )
        )).scalars().all()
        assert len(logs) == 2

    async def test_explicit_status_wins(self, db_session, user_id):
        lot = await self._completed(db_session, user_id)
        marked = await store.update_lot_payment(
            db_session, user_id, lot.id, {"amount_paid": 100, "payment_status": "paid"}
        )
        assert marked.payment_status == "paid"

    async def test_active_lot_takes_no_payment(self, db_session, user_id):
        farmer = await _farmer(db_session, user_id)
        lot = await _lot(db_session, user_id, farmer.id)
        with pytest.raises(ValidationError):
            await store.update_lot_payment(db_session, user_id, lot.id, {"amount_paid": 10})

"""Farmer day bill computation (pure)."""

from datetime import date, datetime
from decimal import Decimal
from types import SimpleNamespace

import pytest

from mandi.middleware.exceptions import ValidationError
from mandi.services.billing import ManualDeductions, build_farmer_day_bill

FARMER = SimpleNamespace(id="f-1", name="Ramaiah", mobile="9876543210")
BILL_DATE = date(2024, 1, 15)


@pytest.fixture
def day_lots(lot_factory):
    return [
        lot_factory([Decimal("45")] * 10, lot_price=Decimal("9000"), lot_number="LOT-001",
                    created_at=datetime(2024, 1, 15, 9), vehicle_rent=Decimal("500"),
                    advance=Decimal("1000"), unload_hamali=Decimal("30")),
        lot_factory([Decimal("50"), Decimal("50"), None], lot_price=Decimal("8000"),
                    lot_number="LOT-002", created_at=datetime(2024, 1, 15, 11),
                    unload_hamali=Decimal("9")),
    ]


@pytest.mark.unit
class TestFarmerDayBill:
    def test_lines_and_totals(self, day_lots, rates):
        bill = build_farmer_day_bill(FARMER, day_lots, rates, BILL_DATE)
        s = bill.summary

        assert [line.lot_number for line in bill.lots] == ["LOT-001", "LOT-002"]
        assert bill.lots[1].weighed_bags == 2
        assert s.total_lots == 2
        assert s.total_bags == 13
        assert s.total_weighed_bags == 12
        assert s.total_weight == Decimal("550")
        assert s.total_weight_quintals == Decimal("5.5")
        assert s.gross_amount == Decimal("40500") + Decimal("8000")
        assert s.commission == Decimal("1215") + Decimal("240")

    def test_omitted_deductions_fall_back_to_lots(self, day_lots, rates):
        s = build_farmer_day_bill(FARMER, day_lots, rates, BILL_DATE).summary

        assert s.hamali == Decimal("39")
        assert s.vehicle_rent == Decimal("500")
        assert s.advance == Decimal("1000")
        assert s.total_deductions == Decimal("39") + 500 + 1000 + s.commission
        assert s.net_amount == s.gross_amount - s.total_deductions

    def test_manual_values_override(self, day_lots, rates):
        manual = ManualDeductions(
            hamali=Decimal("100"), vehicle_rent=Decimal("0"), advance=None,
            empty_bag_charges=Decimal("26"), rok=Decimal("2000"), other=Decimal("15"),
        )
        s = build_farmer_day_bill(FARMER, day_lots, rates, BILL_DATE, manual).summary

        assert s.hamali == Decimal("100")
        assert s.vehicle_rent == 0
        assert s.advance == Decimal("1000")
        assert s.total_deductions == Decimal("100") + 1000 + 26 + 2000 + 15 + s.commission

    def test_no_lots(self, rates):
        bill = build_farmer_day_bill(FARMER, [], rates, BILL_DATE)
        assert bill.lots == []
        assert bill.summary.net_amount == 0

    def test_negative_deduction_rejected(self):
        with pytest.raises(ValidationError):
            ManualDeductions(rok=Decimal("-1"))

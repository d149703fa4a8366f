"""Per-lot amounts and period tax report aggregation."""

from datetime import date, datetime
from decimal import Decimal

import pytest

from mandi.schemas.settings import TenantSettings
from mandi.services.billing import (
    ReportType,
    build_tax_report,
    compute_lot_amounts,
    resolve_date_range,
)


@pytest.mark.unit
class TestComputeLotAmounts:
    def test_ten_bags_at_9000(self, lot_factory, rates):
        lot = lot_factory([Decimal("45")] * 10, lot_price=Decimal("9000"))

        a = compute_lot_amounts(lot, rates)

        assert a.bag_count == 10
        assert a.total_weight == Decimal("450")
        assert a.total_weight_quintals == Decimal("4.5")
        assert a.basic_amount == Decimal("40500")
        assert a.packaging == Decimal("50")
        assert a.weighing_charges == Decimal("20")
        assert a.commission == Decimal("1215")
        assert a.taxable_amount == Decimal("41785")
        assert a.cess_amount == Decimal("243")
        assert a.sgst_amount == Decimal("1044.625")
        assert a.cgst_amount == Decimal("1044.625")
        assert a.total_tax_amount == Decimal("2332.25")
        assert a.total_amount == Decimal("44117.25")

    def test_idempotent(self, lot_factory, rates):
        lot = lot_factory(["41.35", "39.9", "44.05"], lot_price="8725.50")
        assert compute_lot_amounts(lot, rates) == compute_lot_amounts(lot, rates)

    def test_tax_composition_is_exact(self, lot_factory, rates):
        lot = lot_factory([Decimal("47.37"), Decimal("52.11"), Decimal("38.29")],
                          lot_price=Decimal("11234.75"))
        a = compute_lot_amounts(lot, rates)
        assert a.total_amount == (
            a.basic_amount + a.packaging + a.weighing_charges + a.commission
            + a.cess_amount + a.sgst_amount + a.cgst_amount
        )

    def test_weight_grows_by_new_bag(self, lot_factory, rates):
        lot = lot_factory([Decimal("40"), Decimal("42.5")], lot_price=Decimal("9000"))
        before = compute_lot_amounts(lot, rates).total_weight

        lot.bags.append(type(lot.bags[0])(bag_number=3, weight=Decimal("43.25")))
        after = compute_lot_amounts(lot, rates).total_weight

        assert before == Decimal("82.5")
        assert after - before == Decimal("43.25")

    def test_null_weights_count_as_zero(self, lot_factory, rates):
        lot = lot_factory([Decimal("50"), None], lot_price=Decimal("1000"))
        a = compute_lot_amounts(lot, rates)
        assert a.total_weight == Decimal("50")
        assert a.bag_count == 2

    @pytest.mark.parametrize("price", [None, Decimal("0")])
    def test_zero_price_keeps_per_bag_charges(self, lot_factory, rates, price):
        lot = lot_factory([Decimal("45")] * 4, lot_price=price)
        a = compute_lot_amounts(lot, rates)

        assert a.basic_amount == 0
        assert a.commission == 0
        assert a.cess_amount == 0
        assert a.packaging == Decimal("20")
        assert a.weighing_charges == Decimal("8")
        # GST still applies to the per-bag charges
        assert a.sgst_amount == Decimal("28") * Decimal("2.5") / 100

    def test_no_bags_means_no_charges(self, lot_factory, rates):
        lot = lot_factory([], lot_price=Decimal("9000"), number_of_bags=5)
        a = compute_lot_amounts(lot, rates)
        assert a.bag_count == 0
        assert a.total_amount == 0

    def test_uses_supplied_rates(self, lot_factory):
        custom = TenantSettings(sgst_rate=9, cgst_rate=9, cess_rate=0,
                                packaging_per_bag=0, weighing_fee_per_bag=0,
                                apmc_commission_percentage=0)
        lot = lot_factory([Decimal("100")], lot_price=Decimal("1000"))
        a = compute_lot_amounts(lot, custom)
        assert a.total_amount == Decimal("1180")


@pytest.mark.unit
class TestBuildTaxReport:
    def test_daily_boundary(self, lot_factory, rates):
        late = lot_factory([Decimal("45")] * 10, lot_price=Decimal("9000"),
                           created_at=datetime(2024, 1, 15, 23, 59, 59, 998000))
        day = resolve_date_range("daily", on=date(2024, 1, 15))
        next_day = resolve_date_range("daily", on=date(2024, 1, 16))

        assert build_tax_report([late], rates, day).summary.total_transactions == 1
        assert build_tax_report([late], rates, next_day).summary.total_transactions == 0

    def test_summary_sums_transactions(self, lot_factory, rates):
        lots = [
            lot_factory([Decimal("45")] * 10, lot_price=Decimal("9000"), lot_number="LOT-A",
                        created_at=datetime(2024, 3, 4, 9, 0)),
            lot_factory([Decimal("50")] * 2, lot_price=Decimal("8000"), lot_number="LOT-B",
                        created_at=datetime(2024, 3, 6, 15, 30)),
            # unpriced: contributes zero basic amount, report still builds
            lot_factory([Decimal("30")], lot_price=None, lot_number="LOT-C",
                        created_at=datetime(2024, 3, 7, 8, 0)),
        ]
        window = resolve_date_range(ReportType.MONTHLY, on=date(2024, 3, 20))

        report = build_tax_report(lots, rates, window)
        s = report.summary

        assert s.period == "March 2024"
        assert s.report_type == "monthly"
        assert s.total_transactions == 3
        assert [t.lot_number for t in report.transactions] == ["LOT-A", "LOT-B", "LOT-C"]
        assert s.total_weight == Decimal("580")
        assert s.total_weight_quintals == Decimal("5.8")
        assert s.basic_amount == Decimal("40500") + Decimal("8000")
        assert s.total_amount == sum(t.total_amount for t in report.transactions)
        assert report.transactions[2].basic_amount == 0
        assert report.transactions[0].farmer_name == "Ramaiah"

    def test_empty_period(self, rates):
        window = resolve_date_range("yearly", on=date(2023, 6, 1))
        report = build_tax_report([], rates, window)
        assert report.summary.total_transactions == 0
        assert report.summary.total_amount == 0
        assert report.summary.period == "2023"

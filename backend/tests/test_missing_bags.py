"""Missing-bag detection."""

from datetime import date
from decimal import Decimal

import pytest

from mandi.services.billing import analyse_missing_bags, lot_bag_status


@pytest.mark.unit
class TestMissingBags:
    def test_gaps_in_bag_numbers(self, lot_factory):
        lot = lot_factory(
            [(1, Decimal("45")), (2, Decimal("44")), (4, Decimal("46"))],
            number_of_bags=5,
        )
        status = lot_bag_status(lot)

        assert status.missing_bag_numbers == [3, 5]
        assert status.missing_count == 2
        assert status.entered_bags == 3
        assert status.completion_percentage == 60
        assert not status.is_complete

    def test_empty_weight_bags(self, lot_factory):
        lot = lot_factory(
            [(1, Decimal("45")), (2, None), (3, Decimal("0"))],
            number_of_bags=3,
        )
        status = lot_bag_status(lot)

        assert status.missing_bag_numbers == []
        assert status.empty_weight_bags == [2, 3]
        assert status.completion_percentage == 100
        assert not status.is_complete

    def test_zero_declared_bags(self, lot_factory):
        status = lot_bag_status(lot_factory([], number_of_bags=0))
        assert status.completion_percentage == 0
        assert status.missing_bag_numbers == []

    def test_report_summary(self, lot_factory):
        complete = lot_factory([Decimal("40")] * 3, lot_number="LOT-001")
        gappy = lot_factory([(1, Decimal("40")), (3, None)], number_of_bags=4,
                            lot_number="LOT-002", status="active")

        report = analyse_missing_bags([gappy, complete], date(2024, 1, 15))
        s = report.summary

        assert s.date == date(2024, 1, 15)
        assert s.total_lots == 2
        assert s.lots_complete == 1
        assert s.lots_with_missing_bags == 1
        assert s.total_missing_bags == 2
        assert s.total_empty_weight_bags == 1
        assert [d.lot_number for d in report.missing_bags_details] == ["LOT-002"]
        assert [l.lot_number for l in report.lots] == ["LOT-001", "LOT-002"]
        assert report.lots[0].is_complete

    def test_empty_weight_only_lot_counts_as_incomplete(self, lot_factory):
        lot = lot_factory([None, Decimal("40")])

        report = analyse_missing_bags([lot], date(2024, 1, 15))
        s = report.summary

        assert s.total_lots == 1
        assert s.lots_with_missing_bags == 1
        assert s.lots_complete == 0
        assert s.lots_with_missing_bags + s.lots_complete == s.total_lots
        assert s.total_missing_bags == 0
        assert s.total_empty_weight_bags == 1

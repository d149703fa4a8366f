"""Typed tenant rate settings."""

from decimal import Decimal

import pytest

from mandi.middleware.exceptions import ValidationError
from mandi.schemas.settings import TenantSettings


@pytest.mark.unit
class TestTenantSettings:
    def test_defaults(self):
        s = TenantSettings.load(None)
        assert s.sgst_rate == Decimal("2.5")
        assert s.cgst_rate == Decimal("2.5")
        assert s.cess_rate == Decimal("0.6")
        assert s.unload_hamali_per_bag == Decimal("3")
        assert s.packaging_per_bag == Decimal("5")
        assert s.weighing_fee_per_bag == Decimal("2")
        assert s.apmc_commission_percentage == Decimal("3")

    def test_loads_camel_case_strings_and_numbers(self):
        s = TenantSettings.load({"sgstRate": "9", "cessRate": 1, "packagingPerBag": "4.5"})
        assert s.sgst_rate == Decimal("9")
        assert s.cess_rate == Decimal("1")
        assert s.packaging_per_bag == Decimal("4.5")
        assert s.cgst_rate == Decimal("2.5")

    def test_round_trips_persisted_layout(self):
        persisted = TenantSettings(sgst_rate=Decimal("6")).to_persisted()
        assert persisted["sgstRate"] == "6"
        assert set(persisted) == {
            "sgstRate", "cgstRate", "cessRate", "unloadHamaliPerBag",
            "packagingPerBag", "weighingFeePerBag", "apmcCommissionPercentage",
        }

    @pytest.mark.parametrize("raw", [
        {"sgstRate": "101"},
        {"cessRate": -1},
        {"packagingPerBag": "-2"},
        {"cgstRate": "abc"},
    ])
    def test_invalid_values(self, raw):
        with pytest.raises(ValidationError) as exc:
            TenantSettings.load(raw)
        assert exc.value.details["errors"]

    def test_frozen(self):
        s = TenantSettings()
        with pytest.raises(Exception):
            s.sgst_rate = Decimal("1")

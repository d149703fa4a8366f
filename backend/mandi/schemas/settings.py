"""Typed tenant rate settings.

Tenants store their rates as a camelCase JSON object on the Tenant row:

    {"sgstRate": "2.5", "cgstRate": "2.5", "cessRate": "0.6",
     "unloadHamaliPerBag": "3", "packagingPerBag": "5",
     "weighingFeePerBag": "2", "apmcCommissionPercentage": "3"}

Older rows hold plain numbers instead of strings; both load.  Every billing
computation receives a validated ``TenantSettings`` explicitly; nothing
reads the raw JSON by key.
"""

from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError
from pydantic.alias_generators import to_camel

from mandi.middleware.exceptions import ValidationError

_PERCENT = {"ge": 0, "le": 100}


class TenantSettings(BaseModel):
    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )

    # Percentages, applied as rate / 100
    sgst_rate: Decimal = Field(Decimal("2.5"), **_PERCENT)
    cgst_rate: Decimal = Field(Decimal("2.5"), **_PERCENT)
    cess_rate: Decimal = Field(Decimal("0.6"), **_PERCENT)
    apmc_commission_percentage: Decimal = Field(Decimal("3"), **_PERCENT)

    # Flat fees, per bag
    unload_hamali_per_bag: Decimal = Field(Decimal("3"), ge=0)
    packaging_per_bag: Decimal = Field(Decimal("5"), ge=0)
    weighing_fee_per_bag: Decimal = Field(Decimal("2"), ge=0)

    @classmethod
    def load(cls, raw: dict | None) -> "TenantSettings":
        """Parse the persisted layout; invalid values raise ValidationError."""
        try:
            return cls.model_validate(raw or {})
        except PydanticValidationError as exc:
            raise ValidationError(
                "Invalid tenant settings",
                details={"errors": [
                    {"field": ".".join(str(p) for p in err["loc"]), "message": err["msg"]}
                    for err in exc.errors()
                ]},
            ) from exc

    def to_persisted(self) -> dict:
        """camelCase JSON with decimals as strings (no float drift)."""
        return self.model_dump(by_alias=True, mode="json")


class TenantSettingsOut(BaseModel):
    """API view of the rates (numbers, camelCase)."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    sgst_rate: float
    cgst_rate: float
    cess_rate: float
    apmc_commission_percentage: float
    unload_hamali_per_bag: float
    packaging_per_bag: float
    weighing_fee_per_bag: float

    @classmethod
    def from_settings(cls, settings: TenantSettings) -> "TenantSettingsOut":
        return cls.model_validate(settings.model_dump())


class TenantSettingsUpdate(BaseModel):
    """Partial rate update; accepts camelCase or snake_case keys."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    sgst_rate: Decimal | None = Field(None, **_PERCENT)
    cgst_rate: Decimal | None = Field(None, **_PERCENT)
    cess_rate: Decimal | None = Field(None, **_PERCENT)
    apmc_commission_percentage: Decimal | None = Field(None, **_PERCENT)
    unload_hamali_per_bag: Decimal | None = Field(None, ge=0)
    packaging_per_bag: Decimal | None = Field(None, ge=0)
    weighing_fee_per_bag: Decimal | None = Field(None, ge=0)

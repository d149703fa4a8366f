"""Response schemas for billing & report endpoints.

The engine returns dataclasses holding ``Decimal``; these models read them
via ``from_attributes`` and emit plain JSON numbers.
"""

from datetime import date, datetime

from pydantic import BaseModel, Field

_ORM = {"from_attributes": True}


# ── Lot amounts ──────────────────────────────────────────────

class LotAmountsOut(BaseModel):
    bag_count: int
    total_weight: float
    total_weight_quintals: float
    lot_price: float
    basic_amount: float
    packaging: float
    weighing_charges: float
    commission: float
    taxable_amount: float
    cess_amount: float
    sgst_amount: float
    cgst_amount: float
    total_tax_amount: float
    total_amount: float

    model_config = _ORM


# ── Tax report ───────────────────────────────────────────────

class TaxTransactionOut(BaseModel):
    date: datetime
    lot_id: str
    lot_number: str
    farmer_name: str | None
    buyer_name: str | None
    bag_count: int
    weight: float
    weight_quintals: float
    lot_price: float
    basic_amount: float
    packaging: float
    weighing_charges: float
    commission: float
    taxable_amount: float
    cess_amount: float
    sgst_amount: float
    cgst_amount: float
    total_tax_amount: float
    total_amount: float

    model_config = _ORM


class TaxSummaryOut(BaseModel):
    period: str
    report_type: str
    start_date: datetime
    end_date: datetime
    total_transactions: int
    total_weight: float
    total_weight_quintals: float
    basic_amount: float
    packaging: float
    weighing_charges: float
    commission: float
    cess_amount: float
    sgst_amount: float
    cgst_amount: float
    total_tax_amount: float
    total_amount: float

    model_config = _ORM


class TaxReportOut(BaseModel):
    summary: TaxSummaryOut
    transactions: list[TaxTransactionOut]

    model_config = _ORM


# ── Farmer day bill ──────────────────────────────────────────

class DeductionsIn(BaseModel):
    """Manual deductions; omit hamali / vehicle_rent / advance to use the lots' own."""
    hamali: float | None = Field(None, ge=0)
    vehicle_rent: float | None = Field(None, ge=0)
    advance: float | None = Field(None, ge=0)
    empty_bag_charges: float = Field(0, ge=0)
    rok: float = Field(0, ge=0)
    other: float = Field(0, ge=0)


class FarmerDayBillRequest(BaseModel):
    farmer_id: str
    bill_date: date
    deductions: DeductionsIn = DeductionsIn()


class BillLotLineOut(BaseModel):
    lot_id: str
    lot_number: str
    variety_grade: str | None
    lot_price: float
    number_of_bags: int
    weighed_bags: int
    weight: float
    basic_amount: float
    commission: float
    vehicle_rent: float
    advance: float
    unload_hamali: float

    model_config = _ORM


class BillSummaryOut(BaseModel):
    total_lots: int
    total_bags: int
    total_weighed_bags: int
    total_weight: float
    total_weight_quintals: float
    gross_amount: float
    hamali: float
    vehicle_rent: float
    advance: float
    empty_bag_charges: float
    rok: float
    other: float
    commission: float
    total_deductions: float
    net_amount: float

    model_config = _ORM


class FarmerDayBillOut(BaseModel):
    farmer_id: str
    farmer_name: str
    farmer_mobile: str | None
    bill_date: date
    lots: list[BillLotLineOut]
    summary: BillSummaryOut

    model_config = _ORM


# ── Saved bills (patti) ──────────────────────────────────────

class FarmerBillCreate(FarmerDayBillRequest):
    patti_number: str | None = Field(None, max_length=50)


class FarmerBillDeductionsUpdate(BaseModel):
    hamali: float | None = Field(None, ge=0)
    vehicle_rent: float | None = Field(None, ge=0)
    empty_bag_charges: float | None = Field(None, ge=0)
    advance: float | None = Field(None, ge=0)
    rok: float | None = Field(None, ge=0)
    other_charges: float | None = Field(None, ge=0)


class FarmerBillOut(BaseModel):
    id: str
    patti_number: str
    farmer_id: str
    bill_date: date
    lot_ids: list[str]
    total_bags: int
    total_weight: float
    gross_amount: float
    commission: float
    hamali: float
    vehicle_rent: float
    empty_bag_charges: float
    advance: float
    rok: float
    other_charges: float
    total_deductions: float
    net_payable: float
    created_at: datetime

    model_config = _ORM


# ── Missing bags ─────────────────────────────────────────────

class LotBagStatusOut(BaseModel):
    lot_id: str
    lot_number: str
    farmer_name: str | None
    status: str
    total_bags: int
    entered_bags: int
    missing_bag_numbers: list[int]
    missing_count: int
    empty_weight_bags: list[int]
    completion_percentage: float
    is_complete: bool

    model_config = _ORM


class MissingBagsSummaryOut(BaseModel):
    date: date
    total_lots: int
    lots_with_missing_bags: int
    lots_complete: int
    total_missing_bags: int
    total_empty_weight_bags: int

    model_config = _ORM


class MissingBagsOut(BaseModel):
    summary: MissingBagsSummaryOut
    missing_bags_details: list[LotBagStatusOut]
    lots: list[LotBagStatusOut]

    model_config = _ORM


# ── CESS / GST reports ───────────────────────────────────────

class CessLineOut(BaseModel):
    date: datetime
    lot_id: str
    lot_number: str
    farmer_name: str | None
    buyer_name: str | None
    weight_quintals: float
    basic_amount: float
    cess_amount: float

    model_config = _ORM


class CessSummaryOut(BaseModel):
    period: str
    report_type: str
    start_date: datetime
    end_date: datetime
    cess_rate: float
    total_transactions: int
    total_weight_quintals: float
    basic_amount: float
    cess_amount: float

    model_config = _ORM


class CessReportOut(BaseModel):
    summary: CessSummaryOut
    transactions: list[CessLineOut]

    model_config = _ORM


class GstLineOut(BaseModel):
    date: datetime
    lot_id: str
    lot_number: str
    farmer_name: str | None
    buyer_name: str | None
    taxable_amount: float
    sgst_amount: float
    cgst_amount: float
    total_gst: float

    model_config = _ORM


class GstSummaryOut(BaseModel):
    period: str
    report_type: str
    start_date: datetime
    end_date: datetime
    sgst_rate: float
    cgst_rate: float
    total_transactions: int
    taxable_amount: float
    sgst_amount: float
    cgst_amount: float
    total_gst: float

    model_config = _ORM


class GstReportOut(BaseModel):
    summary: GstSummaryOut
    transactions: list[GstLineOut]

    model_config = _ORM


# ── Buyer tax invoices ───────────────────────────────────────

class BuyerInvoiceRequest(BaseModel):
    buyer_id: str
    invoice_date: date


class InvoiceItemOut(BaseModel):
    lot_id: str
    lot_number: str
    farmer_name: str | None
    variety_grade: str | None
    bag_count: int
    weight: float
    weight_quintals: float
    lot_price: float
    basic_amount: float
    total_amount: float

    model_config = _ORM


class InvoiceTotalsOut(BaseModel):
    total_bags: int
    total_weight: float
    basic_amount: float
    packaging: float
    weighing_charges: float
    commission: float
    taxable_amount: float
    cess_amount: float
    sgst_amount: float
    cgst_amount: float
    total_tax_amount: float
    total_amount: float

    model_config = _ORM


class BuyerInvoiceOut(BaseModel):
    buyer_id: str
    buyer_name: str
    invoice_date: date
    items: list[InvoiceItemOut]
    totals: InvoiceTotalsOut

    model_config = _ORM


class TaxInvoiceOut(BaseModel):
    id: str
    invoice_number: str
    buyer_id: str
    invoice_date: date
    lot_ids: list[str]
    total_bags: int
    total_weight: float
    basic_amount: float
    packaging: float
    weighing_charges: float
    commission: float
    taxable_amount: float
    cess_amount: float
    sgst_amount: float
    cgst_amount: float
    total_tax_amount: float
    total_amount: float
    created_at: datetime

    model_config = _ORM


# ── Buyer purchases ──────────────────────────────────────────

class BuyerPurchaseOut(BaseModel):
    lot_id: str
    lot_number: str
    date: datetime
    farmer_name: str | None
    variety_grade: str | None
    bag_count: int
    weight: float
    lot_price: float
    total_amount: float
    amount_due: float
    amount_paid: float
    balance: float
    payment_status: str
    payment_date: date | None
    bill_generated: bool

    model_config = _ORM


# ── Dashboard ────────────────────────────────────────────────

class DashboardStatsOut(BaseModel):
    total_farmers: int
    active_lots: int
    bags_today: int
    completed_lots_today: int

    model_config = _ORM

"""Billing & tax aggregation engine: pure computations over lots and bags.

Nothing in this module touches the database.  Callers (services/reports.py)
load lots with their bags, farmer and buyer, resolve the tenant's
``TenantSettings`` and pass both in explicitly.  Every function here is
deterministic: identical inputs give identical ``Decimal`` results.

Per-lot arithmetic (rates are percentages):

    total_weight      = Σ bag.weight                      (kg, null → 0)
    quintals          = total_weight / 100
    basic_amount      = quintals × lot_price              (null price → 0)
    packaging         = bag_count × packaging_per_bag
    weighing_charges  = bag_count × weighing_fee_per_bag
    commission        = basic_amount × commission%
    taxable_amount    = basic + packaging + weighing + commission
    cess              = basic_amount × cess%
    sgst / cgst       = taxable_amount × sgst% / cgst%
    total_amount      = taxable_amount + cess + sgst + cgst

Amounts stay exact; the API layer serializes them to floats.  Only values
that get persisted (saved bills, invoices, lot dues) go through ``money()``.
"""

import calendar
from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum

from mandi.middleware.exceptions import InvalidReportTypeError, ValidationError
from mandi.schemas.settings import TenantSettings

ZERO = Decimal("0")
HUNDRED = Decimal("100")
KG_PER_QUINTAL = Decimal("100")
PAISE = Decimal("0.01")


def to_decimal(value) -> Decimal:
    """Coerce a nullable numeric column value to Decimal (None → 0)."""
    if value is None:
        return ZERO
    if isinstance(value, Decimal):
        return value
    # str() first so 45.1 becomes Decimal("45.1"), not its binary expansion
    return Decimal(str(value))


def money(value) -> Decimal:
    """Round to paise, half up, for values that are stored or settled."""
    return to_decimal(value).quantize(PAISE, rounding=ROUND_HALF_UP)


def _pct(amount: Decimal, rate: Decimal) -> Decimal:
    return amount * rate / HUNDRED


# ── Per-lot amounts ──────────────────────────────────────────

@dataclass(frozen=True)
class LotAmounts:
    bag_count: int
    total_weight: Decimal
    total_weight_quintals: Decimal
    lot_price: Decimal
    basic_amount: Decimal
    packaging: Decimal
    weighing_charges: Decimal
    commission: Decimal
    taxable_amount: Decimal
    cess_amount: Decimal
    sgst_amount: Decimal
    cgst_amount: Decimal
    total_tax_amount: Decimal
    total_amount: Decimal


def compute_lot_amounts(lot, settings: TenantSettings) -> LotAmounts:
    """Compute every billable amount for one lot.

    ``lot`` needs ``lot_price`` and ``bags`` (each with ``weight``); an ORM
    Lot with its bags loaded qualifies.  ``bag_count`` is the number of bag
    rows actually entered, so a lot with no bags carries no per-bag charges.
    """
    bags = list(lot.bags or [])
    bag_count = len(bags)

    total_weight = sum((to_decimal(b.weight) for b in bags), ZERO)
    quintals = total_weight / KG_PER_QUINTAL
    price = to_decimal(lot.lot_price)
    basic = quintals * price if price > 0 else ZERO

    packaging = bag_count * settings.packaging_per_bag
    weighing = bag_count * settings.weighing_fee_per_bag
    commission = _pct(basic, settings.apmc_commission_percentage)
    taxable = basic + packaging + weighing + commission

    cess = _pct(basic, settings.cess_rate)
    sgst = _pct(taxable, settings.sgst_rate)
    cgst = _pct(taxable, settings.cgst_rate)
    total_tax = cess + sgst + cgst

    return LotAmounts(
        bag_count=bag_count,
        total_weight=total_weight,
        total_weight_quintals=quintals,
        lot_price=price,
        basic_amount=basic,
        packaging=packaging,
        weighing_charges=weighing,
        commission=commission,
        taxable_amount=taxable,
        cess_amount=cess,
        sgst_amount=sgst,
        cgst_amount=cgst,
        total_tax_amount=total_tax,
        total_amount=taxable + total_tax,
    )


# ── Report periods ───────────────────────────────────────────

class ReportType(str, Enum):
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"
    CUSTOM = "custom"

    @classmethod
    def parse(cls, value) -> "ReportType":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).lower())
        except ValueError:
            raise InvalidReportTypeError(str(value)) from None


@dataclass(frozen=True)
class DateRange:
    """Inclusive [start, end] window in naive UTC."""
    report_type: ReportType
    start: datetime
    end: datetime

    def contains(self, moment: datetime) -> bool:
        return self.start <= moment <= self.end

    @property
    def period(self) -> str:
        if self.report_type is ReportType.DAILY:
            return self.start.date().isoformat()
        if self.report_type is ReportType.MONTHLY:
            return self.start.strftime("%B %Y")
        if self.report_type is ReportType.YEARLY:
            return str(self.start.year)
        return f"{self.start.date().isoformat()} to {self.end.date().isoformat()}"


def _start_of(day: date) -> datetime:
    return datetime.combine(day, time.min)


def _end_of(day: date) -> datetime:
    return datetime.combine(day, time.max)


def resolve_date_range(
    report_type,
    on: date | None = None,
    start: date | datetime | None = None,
    end: date | datetime | None = None,
) -> DateRange:
    """Turn a report granularity into a concrete inclusive window.

    daily    00:00:00 – 23:59:59.999999 of ``on``
    weekly   Sunday – Saturday of the week containing ``on``
    monthly  calendar month of ``on``
    yearly   1 Jan – 31 Dec of ``on``'s year
    custom   explicit ``start`` / ``end``; a date-only end covers that whole day
    """
    kind = ReportType.parse(report_type)
    on = on or datetime.utcnow().date()

    if kind is ReportType.DAILY:
        return DateRange(kind, _start_of(on), _end_of(on))

    if kind is ReportType.WEEKLY:
        sunday = on - timedelta(days=(on.weekday() + 1) % 7)
        return DateRange(kind, _start_of(sunday), _end_of(sunday + timedelta(days=6)))

    if kind is ReportType.MONTHLY:
        last_day = calendar.monthrange(on.year, on.month)[1]
        return DateRange(
            kind, _start_of(on.replace(day=1)), _end_of(on.replace(day=last_day))
        )

    if kind is ReportType.YEARLY:
        return DateRange(
            kind, _start_of(date(on.year, 1, 1)), _end_of(date(on.year, 12, 31))
        )

    # custom
    if start is None or end is None:
        raise ValidationError("Custom reports require both start and end dates")
    start_dt = start if isinstance(start, datetime) else _start_of(start)
    end_dt = end if isinstance(end, datetime) else _end_of(end)
    if start_dt > end_dt:
        raise ValidationError(
            "Start date must not be after end date",
            details={"start": start_dt.isoformat(), "end": end_dt.isoformat()},
        )
    return DateRange(kind, start_dt, end_dt)


# ── Tax report ───────────────────────────────────────────────

@dataclass(frozen=True)
class TaxTransaction:
    date: datetime
    lot_id: str
    lot_number: str
    farmer_name: str | None
    buyer_name: str | None
    bag_count: int
    weight: Decimal
    weight_quintals: Decimal
    lot_price: Decimal
    basic_amount: Decimal
    packaging: Decimal
    weighing_charges: Decimal
    commission: Decimal
    taxable_amount: Decimal
    cess_amount: Decimal
    sgst_amount: Decimal
    cgst_amount: Decimal
    total_tax_amount: Decimal
    total_amount: Decimal


@dataclass(frozen=True)
class TaxSummary:
    period: str
    report_type: str
    start_date: datetime
    end_date: datetime
    total_transactions: int
    total_weight: Decimal
    total_weight_quintals: Decimal
    basic_amount: Decimal
    packaging: Decimal
    weighing_charges: Decimal
    commission: Decimal
    cess_amount: Decimal
    sgst_amount: Decimal
    cgst_amount: Decimal
    total_tax_amount: Decimal
    total_amount: Decimal


@dataclass(frozen=True)
class TaxReport:
    summary: TaxSummary
    transactions: list[TaxTransaction]


_SUMMED = (
    "basic_amount", "packaging", "weighing_charges", "commission",
    "cess_amount", "sgst_amount", "cgst_amount", "total_tax_amount", "total_amount",
)


def build_tax_report(lots, settings: TenantSettings, window: DateRange) -> TaxReport:
    """Aggregate completed lots that fall inside ``window``.

    Lots outside the window are skipped, so callers may over-fetch.
    Unpriced lots contribute zero amounts.
    """
    transactions: list[TaxTransaction] = []
    for lot in sorted(lots, key=lambda l: l.created_at):
        if not window.contains(lot.created_at):
            continue
        amounts = compute_lot_amounts(lot, settings)
        transactions.append(TaxTransaction(
            date=lot.created_at,
            lot_id=lot.id,
            lot_number=lot.lot_number,
            farmer_name=lot.farmer.name if lot.farmer else None,
            buyer_name=lot.buyer.name if lot.buyer else None,
            bag_count=amounts.bag_count,
            weight=amounts.total_weight,
            weight_quintals=amounts.total_weight_quintals,
            lot_price=amounts.lot_price,
            basic_amount=amounts.basic_amount,
            packaging=amounts.packaging,
            weighing_charges=amounts.weighing_charges,
            commission=amounts.commission,
            taxable_amount=amounts.taxable_amount,
            cess_amount=amounts.cess_amount,
            sgst_amount=amounts.sgst_amount,
            cgst_amount=amounts.cgst_amount,
            total_tax_amount=amounts.total_tax_amount,
            total_amount=amounts.total_amount,
        ))

    totals = {name: sum((getattr(t, name) for t in transactions), ZERO) for name in _SUMMED}
    total_weight = sum((t.weight for t in transactions), ZERO)

    summary = TaxSummary(
        period=window.period,
        report_type=window.report_type.value,
        start_date=window.start,
        end_date=window.end,
        total_transactions=len(transactions),
        total_weight=total_weight,
        total_weight_quintals=total_weight / KG_PER_QUINTAL,
        **totals,
    )
    return TaxReport(summary=summary, transactions=transactions)


# ── Farmer day bill ──────────────────────────────────────────

@dataclass(frozen=True)
class ManualDeductions:
    """Deductions typed in at the billing desk.

    ``None`` for hamali / vehicle_rent / advance means "use what was
    recorded on the lots"; an explicit value (including 0) overrides.
    """
    hamali: Decimal | None = None
    vehicle_rent: Decimal | None = None
    advance: Decimal | None = None
    empty_bag_charges: Decimal = ZERO
    rok: Decimal = ZERO
    other: Decimal = ZERO

    def __post_init__(self):
        negative = [
            name for name in ("hamali", "vehicle_rent", "advance",
                              "empty_bag_charges", "rok", "other")
            if getattr(self, name) is not None and getattr(self, name) < 0
        ]
        if negative:
            raise ValidationError(
                "Deductions must not be negative",
                details={"fields": negative},
            )


@dataclass(frozen=True)
class BillLotLine:
    lot_id: str
    lot_number: str
    variety_grade: str | None
    lot_price: Decimal
    number_of_bags: int
    weighed_bags: int
    weight: Decimal
    basic_amount: Decimal
    commission: Decimal
    vehicle_rent: Decimal
    advance: Decimal
    unload_hamali: Decimal


@dataclass(frozen=True)
class BillSummary:
    total_lots: int
    total_bags: int
    total_weighed_bags: int
    total_weight: Decimal
    total_weight_quintals: Decimal
    gross_amount: Decimal
    hamali: Decimal
    vehicle_rent: Decimal
    advance: Decimal
    empty_bag_charges: Decimal
    rok: Decimal
    other: Decimal
    commission: Decimal
    total_deductions: Decimal
    net_amount: Decimal


@dataclass(frozen=True)
class FarmerDayBill:
    farmer_id: str
    farmer_name: str
    farmer_mobile: str | None
    bill_date: date
    lots: list[BillLotLine] = field(default_factory=list)
    summary: BillSummary | None = None


def total_deductions(
    *, hamali, vehicle_rent, advance, empty_bag_charges, rok, other, commission
) -> Decimal:
    return sum(
        (to_decimal(v) for v in (hamali, vehicle_rent, advance,
                                 empty_bag_charges, rok, other, commission)),
        ZERO,
    )


def build_farmer_day_bill(
    farmer,
    lots,
    settings: TenantSettings,
    bill_date: date,
    deductions: ManualDeductions | None = None,
) -> FarmerDayBill:
    """Settle one farmer's completed lots for one day."""
    deductions = deductions or ManualDeductions()

    lines: list[BillLotLine] = []
    for lot in sorted(lots, key=lambda l: (l.created_at, l.lot_number)):
        amounts = compute_lot_amounts(lot, settings)
        lines.append(BillLotLine(
            lot_id=lot.id,
            lot_number=lot.lot_number,
            variety_grade=lot.variety_grade,
            lot_price=amounts.lot_price,
            number_of_bags=lot.number_of_bags,
            weighed_bags=sum(1 for b in lot.bags if to_decimal(b.weight) > 0),
            weight=amounts.total_weight,
            basic_amount=amounts.basic_amount,
            commission=amounts.commission,
            vehicle_rent=to_decimal(lot.vehicle_rent),
            advance=to_decimal(lot.advance),
            unload_hamali=to_decimal(lot.unload_hamali),
        ))

    def _resolved(manual, recorded: str) -> Decimal:
        if manual is not None:
            return to_decimal(manual)
        return sum((getattr(line, recorded) for line in lines), ZERO)

    hamali = _resolved(deductions.hamali, "unload_hamali")
    vehicle_rent = _resolved(deductions.vehicle_rent, "vehicle_rent")
    advance = _resolved(deductions.advance, "advance")
    commission = sum((line.commission for line in lines), ZERO)
    gross = sum((line.basic_amount for line in lines), ZERO)
    total_weight = sum((line.weight for line in lines), ZERO)

    deducted = total_deductions(
        hamali=hamali,
        vehicle_rent=vehicle_rent,
        advance=advance,
        empty_bag_charges=deductions.empty_bag_charges,
        rok=deductions.rok,
        other=deductions.other,
        commission=commission,
    )

    summary = BillSummary(
        total_lots=len(lines),
        total_bags=sum(line.number_of_bags for line in lines),
        total_weighed_bags=sum(line.weighed_bags for line in lines),
        total_weight=total_weight,
        total_weight_quintals=total_weight / KG_PER_QUINTAL,
        gross_amount=gross,
        hamali=hamali,
        vehicle_rent=vehicle_rent,
        advance=advance,
        empty_bag_charges=to_decimal(deductions.empty_bag_charges),
        rok=to_decimal(deductions.rok),
        other=to_decimal(deductions.other),
        commission=commission,
        total_deductions=deducted,
        net_amount=gross - deducted,
    )
    return FarmerDayBill(
        farmer_id=farmer.id,
        farmer_name=farmer.name,
        farmer_mobile=farmer.mobile,
        bill_date=bill_date,
        lots=lines,
        summary=summary,
    )


# ── Missing-bag analysis ─────────────────────────────────────

@dataclass(frozen=True)
class LotBagStatus:
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


@dataclass(frozen=True)
class MissingBagsSummary:
    date: date
    total_lots: int
    lots_with_missing_bags: int
    lots_complete: int
    total_missing_bags: int
    total_empty_weight_bags: int


@dataclass(frozen=True)
class MissingBagsReport:
    summary: MissingBagsSummary
    missing_bags_details: list[LotBagStatus]
    lots: list[LotBagStatus]


def lot_bag_status(lot) -> LotBagStatus:
    """Compare the bags present on a lot with the declared range 1..n."""
    total = lot.number_of_bags or 0
    expected = set(range(1, total + 1))
    present = {b.bag_number for b in lot.bags if b.bag_number in expected}
    missing = sorted(expected - present)
    empty = sorted(
        b.bag_number for b in lot.bags
        if b.bag_number in expected and to_decimal(b.weight) <= 0
    )
    entered = len(present)
    completion = round(entered / total * 100, 2) if total > 0 else 0.0

    return LotBagStatus(
        lot_id=lot.id,
        lot_number=lot.lot_number,
        farmer_name=lot.farmer.name if lot.farmer else None,
        status=lot.status,
        total_bags=total,
        entered_bags=entered,
        missing_bag_numbers=missing,
        missing_count=len(missing),
        empty_weight_bags=empty,
        completion_percentage=completion,
        is_complete=not missing and not empty,
    )


def analyse_missing_bags(lots, on: date) -> MissingBagsReport:
    statuses = [lot_bag_status(lot) for lot in sorted(lots, key=lambda l: l.lot_number)]
    with_issues = [s for s in statuses if not s.is_complete]

    summary = MissingBagsSummary(
        date=on,
        total_lots=len(statuses),
        # gaps or empty-weight bags
        lots_with_missing_bags=len(with_issues),
        lots_complete=sum(1 for s in statuses if s.is_complete),
        total_missing_bags=sum(s.missing_count for s in statuses),
        total_empty_weight_bags=sum(len(s.empty_weight_bags) for s in statuses),
    )
    return MissingBagsReport(summary=summary, missing_bags_details=with_issues, lots=statuses)


# ── CESS and GST reports ─────────────────────────────────────

@dataclass(frozen=True)
class CessLine:
    date: datetime
    lot_id: str
    lot_number: str
    farmer_name: str | None
    buyer_name: str | None
    weight_quintals: Decimal
    basic_amount: Decimal
    cess_amount: Decimal


@dataclass(frozen=True)
class CessSummary:
    period: str
    report_type: str
    start_date: datetime
    end_date: datetime
    cess_rate: Decimal
    total_transactions: int
    total_weight_quintals: Decimal
    basic_amount: Decimal
    cess_amount: Decimal


@dataclass(frozen=True)
class CessReport:
    summary: CessSummary
    transactions: list[CessLine]


def build_cess_report(report: TaxReport, settings: TenantSettings) -> CessReport:
    """Market-fee (CESS) view of a tax report: CESS is levied on basic amount."""
    s = report.summary
    return CessReport(
        summary=CessSummary(
            period=s.period,
            report_type=s.report_type,
            start_date=s.start_date,
            end_date=s.end_date,
            cess_rate=settings.cess_rate,
            total_transactions=s.total_transactions,
            total_weight_quintals=s.total_weight_quintals,
            basic_amount=s.basic_amount,
            cess_amount=s.cess_amount,
        ),
        transactions=[
            CessLine(
                date=t.date,
                lot_id=t.lot_id,
                lot_number=t.lot_number,
                farmer_name=t.farmer_name,
                buyer_name=t.buyer_name,
                weight_quintals=t.weight_quintals,
                basic_amount=t.basic_amount,
                cess_amount=t.cess_amount,
            )
            for t in report.transactions
        ],
    )


@dataclass(frozen=True)
class GstLine:
    date: datetime
    lot_id: str
    lot_number: str
    farmer_name: str | None
    buyer_name: str | None
    taxable_amount: Decimal
    sgst_amount: Decimal
    cgst_amount: Decimal
    total_gst: Decimal


@dataclass(frozen=True)
class GstSummary:
    period: str
    report_type: str
    start_date: datetime
    end_date: datetime
    sgst_rate: Decimal
    cgst_rate: Decimal
    total_transactions: int
    taxable_amount: Decimal
    sgst_amount: Decimal
    cgst_amount: Decimal
    total_gst: Decimal


@dataclass(frozen=True)
class GstReport:
    summary: GstSummary
    transactions: list[GstLine]


def build_gst_report(report: TaxReport, settings: TenantSettings) -> GstReport:
    """SGST/CGST view of a tax report (CESS excluded)."""
    lines = [
        GstLine(
            date=t.date,
            lot_id=t.lot_id,
            lot_number=t.lot_number,
            farmer_name=t.farmer_name,
            buyer_name=t.buyer_name,
            taxable_amount=t.taxable_amount,
            sgst_amount=t.sgst_amount,
            cgst_amount=t.cgst_amount,
            total_gst=t.sgst_amount + t.cgst_amount,
        )
        for t in report.transactions
    ]
    s = report.summary
    return GstReport(
        summary=GstSummary(
            period=s.period,
            report_type=s.report_type,
            start_date=s.start_date,
            end_date=s.end_date,
            sgst_rate=settings.sgst_rate,
            cgst_rate=settings.cgst_rate,
            total_transactions=len(lines),
            taxable_amount=sum((l.taxable_amount for l in lines), ZERO),
            sgst_amount=s.sgst_amount,
            cgst_amount=s.cgst_amount,
            total_gst=s.sgst_amount + s.cgst_amount,
        ),
        transactions=lines,
    )


# ── Buyer tax invoice ────────────────────────────────────────

@dataclass(frozen=True)
class InvoiceItem:
    lot_id: str
    lot_number: str
    farmer_name: str | None
    variety_grade: str | None
    bag_count: int
    weight: Decimal
    weight_quintals: Decimal
    lot_price: Decimal
    basic_amount: Decimal
    total_amount: Decimal


@dataclass(frozen=True)
class InvoiceTotals:
    total_bags: int
    total_weight: Decimal
    basic_amount: Decimal
    packaging: Decimal
    weighing_charges: Decimal
    commission: Decimal
    taxable_amount: Decimal
    cess_amount: Decimal
    sgst_amount: Decimal
    cgst_amount: Decimal
    total_tax_amount: Decimal
    total_amount: Decimal


@dataclass(frozen=True)
class BuyerInvoice:
    buyer_id: str
    buyer_name: str
    invoice_date: date
    items: list[InvoiceItem] = field(default_factory=list)
    totals: InvoiceTotals | None = None


_CHARGES = (
    "basic_amount", "packaging", "weighing_charges", "commission",
    "cess_amount", "sgst_amount", "cgst_amount",
)


def settle_lot_amounts(amounts: LotAmounts) -> LotAmounts:
    """Paise-rounded copy of ``amounts`` for invoicing and dues.

    Each charge is rounded on its own; taxable amount, total tax and total
    are sums of the rounded charges, so a printed line adds up.
    """
    r = {name: money(getattr(amounts, name)) for name in _CHARGES}
    taxable = r["basic_amount"] + r["packaging"] + r["weighing_charges"] + r["commission"]
    total_tax = r["cess_amount"] + r["sgst_amount"] + r["cgst_amount"]
    return LotAmounts(
        bag_count=amounts.bag_count,
        total_weight=amounts.total_weight,
        total_weight_quintals=amounts.total_weight_quintals,
        lot_price=amounts.lot_price,
        taxable_amount=taxable,
        total_tax_amount=total_tax,
        total_amount=taxable + total_tax,
        **r,
    )


def build_buyer_invoice(
    buyer,
    lots,
    settings: TenantSettings,
    invoice_date: date,
) -> BuyerInvoice:
    """GST tax invoice for one buyer's completed lots of one day.

    Lines carry each lot's settled (paise-rounded) amounts and the invoice
    totals are plain sums of those lines, so the invoice total equals the
    sum of the ``amount_due`` values fixed on its lots.
    """
    items: list[InvoiceItem] = []
    settled: list[LotAmounts] = []
    for lot in sorted(lots, key=lambda l: (l.created_at, l.lot_number)):
        a = settle_lot_amounts(compute_lot_amounts(lot, settings))
        settled.append(a)
        items.append(InvoiceItem(
            lot_id=lot.id,
            lot_number=lot.lot_number,
            farmer_name=lot.farmer.name if lot.farmer else None,
            variety_grade=lot.variety_grade,
            bag_count=a.bag_count,
            weight=a.total_weight,
            weight_quintals=a.total_weight_quintals,
            lot_price=a.lot_price,
            basic_amount=a.basic_amount,
            total_amount=a.total_amount,
        ))

    def _sum(name: str) -> Decimal:
        return sum((getattr(a, name) for a in settled), ZERO)

    totals = InvoiceTotals(
        total_bags=sum(a.bag_count for a in settled),
        total_weight=_sum("total_weight"),
        taxable_amount=_sum("taxable_amount"),
        total_tax_amount=_sum("total_tax_amount"),
        total_amount=_sum("total_amount"),
        **{name: _sum(name) for name in _CHARGES},
    )
    return BuyerInvoice(
        buyer_id=buyer.id,
        buyer_name=buyer.name,
        invoice_date=invoice_date,
        items=items,
        totals=totals,
    )


# ── Buyer payments ───────────────────────────────────────────

def derive_payment_status(amount_due, amount_paid) -> str:
    """pending (nothing paid), partial, or paid (due fully covered)."""
    paid = to_decimal(amount_paid)
    if paid <= 0:
        return "pending"
    if amount_due is not None and paid >= to_decimal(amount_due):
        return "paid"
    return "partial"


@dataclass(frozen=True)
class BuyerPurchase:
    lot_id: str
    lot_number: str
    date: datetime
    farmer_name: str | None
    variety_grade: str | None
    bag_count: int
    weight: Decimal
    lot_price: Decimal
    total_amount: Decimal
    amount_due: Decimal
    amount_paid: Decimal
    balance: Decimal
    payment_status: str
    payment_date: date | None
    bill_generated: bool


def buyer_purchase(lot, settings: TenantSettings) -> BuyerPurchase:
    """One completed lot as seen from the buyer's ledger.

    Until an invoice fixes ``amount_due`` on the lot, the due amount is the
    lot's settled total at current rates.
    """
    a = settle_lot_amounts(compute_lot_amounts(lot, settings))
    due = a.total_amount if lot.amount_due is None else money(lot.amount_due)
    paid = money(lot.amount_paid)
    return BuyerPurchase(
        lot_id=lot.id,
        lot_number=lot.lot_number,
        date=lot.created_at,
        farmer_name=lot.farmer.name if lot.farmer else None,
        variety_grade=lot.variety_grade,
        bag_count=a.bag_count,
        weight=a.total_weight,
        lot_price=a.lot_price,
        total_amount=a.total_amount,
        amount_due=due,
        amount_paid=paid,
        balance=due - paid,
        payment_status=lot.payment_status or "pending",
        payment_date=lot.payment_date,
        bill_generated=bool(lot.bill_generated),
    )

"""Sequential document numbers.

Format:  {PREFIX}-{YYYYMMDD}-{seq:3}

  lot:      LOT-20240115-001
  patti:    PATTI-20240115-001
  invoice:  INV-20240115-001

The sequence resets daily per prefix.  The next number is one past the
highest numeric suffix already stored under the day's prefix, so codes typed
in by hand (``LOT-20240115-005``) move the sequence forward instead of
colliding with it.  Suffixes that are not numbers are ignored.  Two
concurrent requests can still pick the same code; the column's unique
constraint turns that into an IntegrityError.
"""

from datetime import date, datetime

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from mandi.models.tenant.farmer_bill import FarmerBill
from mandi.models.tenant.lot import Lot
from mandi.models.tenant.tax_invoice import TaxInvoice

# entity → (prefix, code column)
ENTITY_COLUMN_MAP = {
    "lot": ("LOT", Lot.lot_number),
    "patti": ("PATTI", FarmerBill.patti_number),
    "invoice": ("INV", TaxInvoice.invoice_number),
}


async def generate_code(
    db: AsyncSession,
    entity: str,
    on: date | None = None,
) -> str:
    """Generate the next sequential code for ``entity`` on ``on``.

    Args:
        db: Database session (tenant-scoped)
        entity: One of "lot", "patti", "invoice"
        on: Day the sequence belongs to (defaults to today)

    Returns:
        Generated code string, e.g. "PATTI-20240115-001"
    """
    prefix, column = ENTITY_COLUMN_MAP[entity]
    day_prefix = f"{prefix}-{(on or datetime.utcnow().date()).strftime('%Y%m%d')}-"

    result = await db.execute(select(column).where(column.like(f"{day_prefix}%")))
    highest = 0
    for code in result.scalars():
        suffix = code[len(day_prefix):]
        if suffix.isdigit():
            highest = max(highest, int(suffix))
    return f"{day_prefix}{highest + 1:03d}"

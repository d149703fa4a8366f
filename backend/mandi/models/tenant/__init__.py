"""Tenant-schema models (duplicated into every tenant_xxx schema).

These models use TenantBase, so their tables are created per-tenant
and never in the public schema.
"""

# ── Parties ──────────────────────────────────────────────────
from mandi.models.tenant.farmer import Farmer
from mandi.models.tenant.buyer import Buyer

# ── Yard operations ──────────────────────────────────────────
from mandi.models.tenant.lot import Lot
from mandi.models.tenant.bag import Bag

# ── Settlement & audit ───────────────────────────────────────
from mandi.models.tenant.farmer_bill import FarmerBill
from mandi.models.tenant.tax_invoice import TaxInvoice
from mandi.models.tenant.audit_log import AuditLog

__all__ = ["Farmer", "Buyer", "Lot", "Bag", "FarmerBill", "TaxInvoice", "AuditLog"]

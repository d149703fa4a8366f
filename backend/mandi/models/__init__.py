"""Aggregate model imports for Alembic auto-detection."""

# Public schema
from mandi.models.public.tenant import Tenant  # noqa: F401

# Tenant schema: parties
from mandi.models.tenant.farmer import Farmer  # noqa: F401
from mandi.models.tenant.buyer import Buyer  # noqa: F401

# Tenant schema: yard operations
from mandi.models.tenant.lot import Lot  # noqa: F401
from mandi.models.tenant.bag import Bag  # noqa: F401

# Tenant schema: settlement & audit
from mandi.models.tenant.farmer_bill import FarmerBill  # noqa: F401
from mandi.models.tenant.tax_invoice import TaxInvoice  # noqa: F401
from mandi.models.tenant.audit_log import AuditLog  # noqa: F401

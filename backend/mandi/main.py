import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from mandi.config import settings
from mandi.middleware.exceptions import register_exception_handlers
from mandi.middleware.tenant import TenantMiddleware
from mandi.routers import (
    audit_logs, billing, buyers, dashboard, farmers, health, lots, reports, tenants,
)
from mandi.routers import settings as settings_router

logging.basicConfig(
    level=logging.DEBUG if settings.debug else logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

app = FastAPI(
    title="MandiLedger",
    description="APMC commission agent trading, billing & tax reporting",
    version="0.1.0",
)

# ── Exception Handlers ───────────────────────────────────────
register_exception_handlers(app)

# ── Middleware (outermost first) ─────────────────────────────
# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins.split(","),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Tenant context (innermost - processes request data)
app.add_middleware(TenantMiddleware)

# ── Routers ──────────────────────────────────────────────────
# Public (no tenant context needed)
app.include_router(health.router)
app.include_router(tenants.router, prefix="/api/tenants", tags=["tenants"])

# Tenant-scoped (require tenant_schema in JWT)
app.include_router(settings_router.router, prefix="/api/settings", tags=["settings"])
app.include_router(farmers.router, prefix="/api/farmers", tags=["farmers"])
app.include_router(buyers.router, prefix="/api/buyers", tags=["buyers"])
app.include_router(lots.router, prefix="/api/lots", tags=["lots"])
app.include_router(dashboard.router, prefix="/api/dashboard", tags=["dashboard"])
app.include_router(reports.router, prefix="/api/reports", tags=["reports"])
app.include_router(billing.router, prefix="/api/billing", tags=["billing"])
app.include_router(audit_logs.router, prefix="/api/audit-logs", tags=["audit"])

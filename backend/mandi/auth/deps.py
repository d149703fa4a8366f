"""FastAPI dependencies for authentication and authorization.

Dependencies:
  get_current_claims     → decode the bearer JWT, return its claims
  get_current_user_id    → the `sub` claim (stamped on audit rows)
  get_current_tenant     → the active Tenant row for the token's schema
  get_tenant_settings    → typed rate settings of that tenant
  require_platform_admin → restrict to platform operators
"""

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from mandi.auth.jwt import decode_token
from mandi.database import get_db
from mandi.middleware.exceptions import (
    NotFoundError,
    PermissionDeniedError,
    TenantContextError,
)
from mandi.models.public.tenant import Tenant
from mandi.schemas.settings import TenantSettings

PLATFORM_ADMIN = "platform_admin"

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/login")


async def get_current_claims(token: str = Depends(oauth2_scheme)) -> dict:
    payload = decode_token(token)
    if not payload.get("sub") or payload.get("type") != "access":
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return payload


async def get_current_user_id(claims: dict = Depends(get_current_claims)) -> str:
    return claims["sub"]


# ── Tenant resolution ───────────────────────────────────────

async def get_current_tenant(
    claims: dict = Depends(get_current_claims),
    db: AsyncSession = Depends(get_db),
) -> Tenant:
    """Load the tenant named by the token's `tenant_schema` claim.

    Deactivated tenants resolve exactly like unknown ones.
    """
    schema = claims.get("tenant_schema")
    if not schema:
        raise TenantContextError(
            "No tenant context: this endpoint requires a tenant-scoped token"
        )
    result = await db.execute(select(Tenant).where(Tenant.schema_name == schema))
    tenant = result.scalar_one_or_none()
    if not tenant or not tenant.is_active:
        raise NotFoundError("Tenant", schema)
    return tenant


# ── Role-based access control ───────────────────────────────

async def require_platform_admin(
    claims: dict = Depends(get_current_claims),
) -> dict:
    """Restrict endpoint to platform admins only."""
    if claims.get("role") != PLATFORM_ADMIN:
        raise PermissionDeniedError("Platform admin access required")
    return claims


async def get_tenant_settings(
    tenant: Tenant = Depends(get_current_tenant),
) -> TenantSettings:
    """The tenant's validated rate settings, read fresh on every request."""
    return TenantSettings.load(tenant.settings)

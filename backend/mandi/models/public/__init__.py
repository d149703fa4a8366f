"""Public-schema models (shared across all tenants)."""

from mandi.models.public.tenant import Tenant

__all__ = ["Tenant"]

"""Tenant middleware: resolves tenant context from the JWT on every request.

Flow:
  1. Extract Bearer token from Authorization header
  2. Decode JWT → get `tenant_schema` claim
  3. Validate the schema name
  4. Set ContextVar so downstream code (get_tenant_db, etc.) can read it
  5. After the response, clear the ContextVar

Routes that don't require tenant scope (health, platform admin) simply
won't call get_tenant_db(), so having no tenant context is fine for them.
"""

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from mandi.auth.jwt import decode_token
from mandi.middleware.exceptions import create_error_response
from mandi.tenancy import (
    clear_tenant_context,
    set_current_tenant_schema,
    validate_schema_name,
)

# Routes that never require auth; do not reject expired tokens here
_PUBLIC_PREFIXES = ("/docs", "/openapi.json", "/health")


class TenantMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next) -> Response:
        auth_header = request.headers.get("authorization", "")
        path = request.url.path

        clear_tenant_context()
        if auth_header.startswith("Bearer "):
            payload = decode_token(auth_header[7:])

            if not payload:
                # Token present but expired/malformed: 401 before routing
                if not any(path.startswith(p) for p in _PUBLIC_PREFIXES):
                    response = create_error_response(
                        status_code=401,
                        message="Token expired or invalid",
                        error_code="HTTP_401",
                    )
                    response.headers["WWW-Authenticate"] = "Bearer"
                    return response
            else:
                tenant_schema = payload.get("tenant_schema")
                if tenant_schema:
                    try:
                        set_current_tenant_schema(validate_schema_name(tenant_schema))
                    except ValueError:
                        clear_tenant_context()

        try:
            response = await call_next(request)
        finally:
            clear_tenant_context()

        return response

"""JWT token creation and decoding.

Tokens are issued by the platform's auth service; this service only needs
to verify them and read their claims.  `create_access_token` exists for the
CLI and the test-suite.

Token claims:
  - sub:            user ID
  - role:           "platform_admin" | "tenant_admin" | "operator"
  - tenant_schema:  schema name of the user's tenant (absent for platform admins)
  - type:           "access"
  - exp:            expiry timestamp
"""

from datetime import datetime, timedelta, timezone

from jose import JWTError, jwt

from mandi.config import settings

ALGORITHM = settings.jwt_algorithm


def create_access_token(
    user_id: str,
    role: str,
    tenant_schema: str | None = None,
    expires_delta: timedelta | None = None,
) -> str:
    expire = datetime.now(timezone.utc) + (
        expires_delta or timedelta(minutes=settings.access_token_expire_minutes)
    )
    payload = {
        "sub": user_id,
        "role": role,
        "type": "access",
        "exp": expire,
    }
    if tenant_schema:
        payload["tenant_schema"] = tenant_schema
    return jwt.encode(payload, settings.secret_key, algorithm=ALGORITHM)


def decode_token(token: str) -> dict:
    """Decode and validate a JWT. Returns empty dict on failure."""
    try:
        return jwt.decode(token, settings.secret_key, algorithms=[ALGORITHM])
    except JWTError:
        return {}

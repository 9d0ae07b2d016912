"""Bearer tokens.

Access tokens are issued by the shop's identity service and carry the
employee id (sub), display name (name) and role (role). This service only
verifies them; create_access_token exists for scripts and tests.
"""

from datetime import datetime, timedelta, timezone
from typing import Any

from jose import ExpiredSignatureError, JWTError, jwt

from src.core.auth.schemas import Employee
from src.core.config import settings
from src.core.exceptions import AuthenticationError

ACCESS_TOKEN_TYPE = "access"


def create_access_token(
    employee_id: str,
    role: str,
    full_name: str | None = None,
    expires_in: timedelta | None = None,
) -> str:
    now = datetime.now(timezone.utc)
    expire = now + (expires_in or timedelta(minutes=settings.access_token_expire_minutes))
    payload: dict[str, Any] = {
        "sub": str(employee_id),
        "role": role,
        "type": ACCESS_TOKEN_TYPE,
        "exp": expire,
        "iat": now,
    }
    if full_name:
        payload["name"] = full_name
    return jwt.encode(payload, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def decode_token(token: str, token_type: str = ACCESS_TOKEN_TYPE) -> dict[str, Any]:
    """
    Decode and validate JWT token.

    Raises:
        AuthenticationError: If token is invalid, expired or of another type
    """
    try:
        payload = jwt.decode(
            token,
            settings.jwt_secret_key,
            algorithms=[settings.jwt_algorithm],
        )
    except ExpiredSignatureError:
        raise AuthenticationError("Token has expired")
    except JWTError as e:
        raise AuthenticationError(f"Invalid token: {str(e)}")

    if payload.get("type") != token_type:
        raise AuthenticationError(f"Invalid token type, expected {token_type}")
    return payload


def employee_from_token(token: str) -> Employee:
    """Resolve the employee an access token was issued to."""
    payload = decode_token(token)
    employee_id = str(payload.get("sub") or "").strip()
    if not employee_id:
        raise AuthenticationError("Token has no employee id")

    return Employee(
        id=employee_id,
        full_name=payload.get("name") or "Unknown User",
        role=payload.get("role") or "",
    )

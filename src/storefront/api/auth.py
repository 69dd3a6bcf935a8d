"""Bearer-token authentication.

Tokens are HS256 JWTs issued by the account service; this API only verifies
them. The ``sub`` claim carries the user id and ``role`` is either
``customer`` or ``admin``.
"""

import os
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta

import jwt
from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from storefront.utils.logging import bind_request_context

ADMIN_ROLE = "admin"
CUSTOMER_ROLE = "customer"

_bearer = HTTPBearer(auto_error=False)


class AuthError(Exception):
    def __init__(self, message, status_code=401):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


@dataclass(frozen=True)
class Principal:
    user_id: str
    role: str = CUSTOMER_ROLE

    @property
    def is_admin(self):
        return self.role == ADMIN_ROLE


def _secret():
    return os.getenv("JWT_SECRET", "dev-secret-change-me")


def _algorithm():
    return os.getenv("JWT_ALGORITHM", "HS256")


def create_access_token(user_id, role=CUSTOMER_ROLE, expires_in=timedelta(hours=1)):
    """Mint a token the way the account service does (development and tests)."""
    now = datetime.now(UTC)
    payload = {"sub": str(user_id), "role": role, "iat": now, "exp": now + expires_in}
    return jwt.encode(payload, _secret(), algorithm=_algorithm())


def decode_token(token) -> Principal:
    try:
        payload = jwt.decode(token, _secret(), algorithms=[_algorithm()])
    except jwt.ExpiredSignatureError:
        raise AuthError("Token expired") from None
    except jwt.InvalidTokenError:
        raise AuthError("Invalid token") from None

    user_id = payload.get("sub")
    if not user_id:
        raise AuthError("Invalid token")
    return Principal(user_id=str(user_id), role=payload.get("role") or CUSTOMER_ROLE)


async def current_user(credentials: HTTPAuthorizationCredentials | None = Depends(_bearer)) -> Principal:
    if credentials is None or not credentials.credentials:
        raise AuthError("Not authorized, no token")

    principal = decode_token(credentials.credentials)
    bind_request_context(user_id=principal.user_id)
    return principal


async def require_admin(principal: Principal = Depends(current_user)) -> Principal:
    if not principal.is_admin:
        raise AuthError("Admin access required", status_code=403)
    return principal

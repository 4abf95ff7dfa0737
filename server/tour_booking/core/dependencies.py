"""FastAPI dependencies for database sessions, identity and role guards."""

from dataclasses import dataclass
from typing import Optional

import jwt
from fastapi import Depends, Request
from jwt import PyJWTError

from .config import settings
from .database import get_db
from .exceptions import AuthenticationError, AuthorizationError, ValidationError

# Largest value an Integer primary key column holds
MAX_ID = 2**31 - 1


@dataclass(frozen=True)
class Principal:
    """Identity resolved from the bearer token of the current request."""

    user_id: int
    role: str
    email: Optional[str] = None

    @property
    def is_admin(self) -> bool:
        return self.role.strip().lower() == settings.admin_role


def _decode_principal(authorization: str) -> Principal:
    try:
        scheme, token = authorization.split()
    except ValueError:
        raise AuthenticationError("Invalid authorization header format")

    if scheme.lower() != "bearer":
        raise AuthenticationError("Invalid authentication scheme")

    try:
        payload = jwt.decode(
            token,
            settings.bearer_token_secret,
            algorithms=["HS256"]
        )
    except PyJWTError as e:
        raise AuthenticationError(f"Token validation failed: {str(e)}")

    subject = payload.get("sub")
    if subject is None or str(subject).strip() == "":
        raise AuthenticationError("Unauthorized")

    try:
        user_id = int(str(subject))
    except ValueError:
        raise ValidationError("Invalid user identifier")

    if not 0 < user_id <= MAX_ID:
        raise ValidationError("Invalid user identifier")

    return Principal(
        user_id=user_id,
        role=str(payload.get("role") or "user"),
        email=payload.get("email"),
    )


def resolve_principal(request: Request) -> Optional[Principal]:
    """
    Resolve the caller once per request and cache it on ``request.state``.

    Returns None when no Authorization header was sent.

    Raises:
        AuthenticationError: If the header or token is invalid
        ValidationError: If the token subject is not a numeric user id
    """
    if hasattr(request.state, "principal"):
        return request.state.principal

    authorization = request.headers.get("Authorization")
    principal = _decode_principal(authorization) if authorization else None
    request.state.principal = principal
    return principal


async def get_optional_user(request: Request) -> Optional[Principal]:
    """Identity dependency for endpoints that also serve anonymous callers."""
    return resolve_principal(request)


async def get_current_user(request: Request) -> Principal:
    """
    Authentication dependency that validates Bearer tokens.

    Raises:
        AuthenticationError: If credentials are missing or invalid
    """
    principal = resolve_principal(request)
    if principal is None:
        raise AuthenticationError("Unauthorized")
    return principal


async def require_admin(principal: Principal = Depends(get_current_user)) -> Principal:
    """
    Role guard for the admin back-office endpoints.

    Raises:
        AuthorizationError: If the caller is authenticated but not an admin
    """
    if not principal.is_admin:
        raise AuthorizationError("Forbidden", required_role=settings.admin_role)
    return principal


def parse_positive_id(value: str, resource_type: str) -> int:
    """
    Parse a path identifier that must be a positive integer of ASCII digits
    within the primary key range.

    Raises:
        ValidationError: If the value is not a positive integer
    """
    candidate = value.strip()
    if candidate.isascii() and candidate.isdigit() and 0 < int(candidate) <= MAX_ID:
        return int(candidate)
    raise ValidationError(f"Invalid {resource_type} id")


# Define dependencies to avoid B008 linting errors
DatabaseSession = Depends(get_db)
RequiredAuth = Depends(get_current_user)
OptionalAuth = Depends(get_optional_user)
AdminAuth = Depends(require_admin)

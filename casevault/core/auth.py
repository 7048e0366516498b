from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

from fastapi import Header
from jose import JWTError, jwt

from casevault.config import settings
from casevault.core.exceptions import UnauthorizedError


@dataclass(frozen=True)
class Identity:
    """Authenticated caller as supplied by the identity provider."""

    user_id: int
    email: str
    organization_id: str


def create_access_token(user_id: int, email: str, organization_id: str) -> str:
    """Create a JWT token for a user."""
    expire = datetime.now(timezone.utc) + timedelta(hours=settings.jwt_expire_hours)
    payload = {
        "sub": str(user_id),
        "email": email,
        "org": organization_id,
        "exp": expire,
        "iat": datetime.now(timezone.utc),
    }
    return jwt.encode(payload, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def decode_token(token: str) -> dict:
    """Decode and validate a JWT token. Returns the payload."""
    try:
        payload = jwt.decode(token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])
    except JWTError:
        raise UnauthorizedError("Invalid or expired token")
    if payload.get("sub") is None:
        raise UnauthorizedError("Token missing subject")
    if payload.get("org") is None:
        raise UnauthorizedError("Token missing organization")
    return payload


def get_current_identity(authorization: str = Header(None)) -> Identity:
    """FastAPI dependency that extracts the caller's identity from the Authorization header."""
    if not authorization:
        raise UnauthorizedError("Missing Authorization header")

    parts = authorization.split()
    if len(parts) != 2 or parts[0].lower() != "bearer":
        raise UnauthorizedError("Authorization header must be: Bearer <token>")

    payload = decode_token(parts[1])
    try:
        user_id = int(payload["sub"])
    except (TypeError, ValueError):
        raise UnauthorizedError("Token subject is not a user id")
    if user_id < 0:
        raise UnauthorizedError("Token subject is not a user id")
    return Identity(
        user_id=user_id,
        email=payload.get("email", ""),
        organization_id=str(payload["org"]),
    )

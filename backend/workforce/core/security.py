from datetime import datetime, timedelta, timezone
from typing import Any
from uuid import UUID

from jose import jwt, JWTError
from passlib.context import CryptContext

from workforce.core.config import settings

ACCESS = "access"
REFRESH = "refresh"

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


def _encode(claims: dict[str, Any], lifetime: timedelta) -> str:
    claims["exp"] = datetime.now(timezone.utc) + lifetime
    return jwt.encode(claims, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def create_access_token(subject: str | UUID, role: str, expires_delta: timedelta | None = None) -> str:
    """Short-lived token carrying the user id and role (``admin`` / ``employee``)."""
    lifetime = expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    return _encode({"sub": str(subject), "role": role, "type": ACCESS}, lifetime)


def create_refresh_token(subject: str | UUID) -> str:
    return _encode(
        {"sub": str(subject), "type": REFRESH},
        timedelta(days=settings.REFRESH_TOKEN_EXPIRE_DAYS),
    )


def decode_token(token: str, expected_type: str | None = None) -> dict[str, Any]:
    """Verify signature and expiry; with ``expected_type`` the token kind must match."""
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except JWTError as e:
        raise ValueError(f"Invalid token: {e}")
    if expected_type is not None and payload.get("type") != expected_type:
        raise ValueError(f"Expected a {expected_type} token")
    return payload


def token_user_id(token: str, expected_type: str) -> UUID:
    """User id from the ``sub`` claim of a valid token of the given kind."""
    payload = decode_token(token, expected_type)
    try:
        return UUID(payload["sub"])
    except KeyError:
        raise ValueError("Token has no subject")

import hashlib
import secrets
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

import jwt
from pwdlib import PasswordHash
from pydantic import BaseModel

from codereview.core.exceptions import UnauthorizedError
from codereview.core.settings import get_config


class TokenData(BaseModel):
    """Decoded JWT payload."""

    sub: str
    role: str
    iat: int
    exp: int


def _get_password_hasher() -> PasswordHash:
    """Get or create the password hasher instance."""
    if not hasattr(_get_password_hasher, "cached_instance"):
        _get_password_hasher.cached_instance = PasswordHash.recommended()
    return _get_password_hasher.cached_instance


def hash_password(password: str) -> str:
    """Hash a password using Argon2 (pwdlib recommended settings)."""
    return _get_password_hasher().hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a password against its stored hash."""
    return _get_password_hasher().verify(plain_password, hashed_password)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Treat naive datetimes as UTC so they compare with stored values."""
    if value is None or value.tzinfo is not None:
        return value
    return value.replace(tzinfo=timezone.utc)


def create_access_token(subject: str, role: str, expires_in: Optional[int] = None) -> str:
    """Create a signed JWT carrying the user id and role."""
    auth = get_config().AUTH
    now = utcnow()
    expires_in = auth.JWT_EXPIRES_IN if expires_in is None else expires_in

    payload: Dict[str, Any] = {
        "sub": subject,
        "role": role,
        "iat": int(now.timestamp()),
        "exp": int((now + timedelta(seconds=expires_in)).timestamp()),
    }
    return jwt.encode(payload, auth.JWT_SECRET.get_secret_value(), algorithm=auth.JWT_ALGORITHM)


def decode_token(token: str) -> TokenData:
    """Decode and validate a JWT, returning a typed payload."""
    auth = get_config().AUTH
    try:
        payload = jwt.decode(
            token,
            auth.JWT_SECRET.get_secret_value(),
            algorithms=[auth.JWT_ALGORITHM],
        )
        return TokenData(**payload)
    except jwt.ExpiredSignatureError:
        raise UnauthorizedError("Token has expired")
    except (jwt.InvalidTokenError, ValueError):
        raise UnauthorizedError("Invalid token")


def generate_token(nbytes: int = 32) -> str:
    """Random hex token for email verification and password reset links."""
    return secrets.token_hex(nbytes)


def hash_token(token: str) -> str:
    """SHA-256 digest stored in place of a reset token."""
    return hashlib.sha256(token.encode("utf-8")).hexdigest()

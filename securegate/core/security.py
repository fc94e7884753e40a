"""
Password hashing and token helpers.

The rest of the code base treats these as black boxes:
``hash_password`` / ``verify_password`` for credentials and
``create_token`` / ``decode_token`` for JWTs.
"""

import hashlib
import secrets
from datetime import timedelta
from typing import Any

from jose import JWTError, jwt
from passlib.context import CryptContext

from securegate.core.config import settings
from securegate.core.exceptions import UnauthorizedError
from securegate.utils.timezone import utc_now

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

ACCESS_TOKEN = "access"
REFRESH_TOKEN = "refresh"


def hash_password(password: str) -> str:
    """Hash a password."""
    return pwd_context.hash(password)


def verify_password(plain: str, hashed: str) -> bool:
    """Verify password against hash."""
    return pwd_context.verify(plain, hashed)


def create_token(
    subject: Any,
    token_type: str = ACCESS_TOKEN,
    expires_delta: timedelta | None = None,
    **claims: Any,
) -> str:
    """Create a signed JWT for ``subject``."""
    if expires_delta is None:
        if token_type == REFRESH_TOKEN:
            expires_delta = timedelta(days=settings.auth.refresh_token_expire_days)
        else:
            expires_delta = timedelta(minutes=settings.auth.access_token_expire_minutes)

    payload = {
        **claims,
        "sub": str(subject),
        "exp": utc_now() + expires_delta,
        "type": token_type,
    }
    return jwt.encode(
        payload,
        settings.auth.secret_key,
        algorithm=settings.auth.algorithm,
    )


def decode_token(token: str, expected_type: str = ACCESS_TOKEN) -> dict[str, Any]:
    """
    Decode and validate a JWT.

    Raises:
        UnauthorizedError: bad signature, expired, wrong type or missing subject
    """
    try:
        payload = jwt.decode(
            token,
            settings.auth.secret_key,
            algorithms=[settings.auth.algorithm],
        )
    except JWTError:
        raise UnauthorizedError("Invalid token")

    if payload.get("type") != expected_type or not payload.get("sub"):
        raise UnauthorizedError("Invalid token")

    return payload


def generate_reset_token() -> str:
    """Random URL-safe token for password reset links."""
    return secrets.token_urlsafe(32)


def hash_reset_token(token: str) -> str:
    """Reset tokens are stored as SHA-256 digests, never in clear."""
    return hashlib.sha256(token.encode()).hexdigest()

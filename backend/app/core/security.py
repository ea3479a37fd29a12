"""JWT token management and password hashing."""

import hashlib
import re
from datetime import datetime, timedelta, timezone

from jose import JWTError, jwt
from passlib.context import CryptContext

from app.core.config import settings

pwd_context = CryptContext(
    schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=settings.BCRYPT_ROUNDS
)

ACCESS = "access"
REFRESH = "refresh"

# 8+ chars, lower, upper, digit and one of @$!%*?&
_STRONG_PASSWORD = re.compile(r"^(?=.*[a-z])(?=.*[A-Z])(?=.*\d)(?=.*[@$!%*?&])[A-Za-z\d@$!%*?&]{8,}$")


def hash_password(plain: str) -> str:
    return pwd_context.hash(plain)


def verify_password(plain: str, hashed: str) -> bool:
    return pwd_context.verify(plain, hashed)


def is_strong_password(plain: str) -> bool:
    return bool(_STRONG_PASSWORD.match(plain))


def hash_token(token: str) -> str:
    """sha256 hex digest used as the session key for an issued token."""
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


def _encode(user_id: int, username: str, role: str, token_type: str, expires_delta: timedelta) -> str:
    payload = {
        "userId": user_id,
        "username": username,
        "role": role,
        "type": token_type,
        "exp": datetime.now(timezone.utc) + expires_delta,
    }
    return jwt.encode(payload, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def create_access_token(
    user_id: int,
    username: str,
    role: str,
    expires_delta: timedelta | None = None,
) -> str:
    return _encode(
        user_id,
        username,
        role,
        ACCESS,
        expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES),
    )


def create_refresh_token(
    user_id: int,
    username: str,
    role: str,
    expires_delta: timedelta | None = None,
) -> str:
    return _encode(
        user_id,
        username,
        role,
        REFRESH,
        expires_delta or timedelta(days=settings.REFRESH_TOKEN_EXPIRE_DAYS),
    )


def decode_token(token: str, expected_type: str = ACCESS) -> dict:
    """Decode and validate a JWT of the given type. Raises JWTError on failure."""
    payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    if payload.get("type", ACCESS) != expected_type:
        raise JWTError(f"Expected a {expected_type} token")
    return payload


def access_token_expiry() -> datetime:
    """Naive UTC expiry matching ``user_sessions.expires_at``."""
    return datetime.now(timezone.utc).replace(tzinfo=None) + timedelta(
        minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES
    )

# jobtrack/core/security.py
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from functools import lru_cache
from typing import Any

from jose import jwt
from passlib.context import CryptContext

from jobtrack.core.config import settings

pwd_context = CryptContext(schemes=["argon2"], deprecated="auto")

# Tokens carry the identity only, and live for a fixed week.
ACCESS_TOKEN_LIFETIME = timedelta(days=7)


# -------------------------
# Password hashing
# -------------------------
def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    return pwd_context.verify(password, password_hash)


def dummy_verify_password() -> None:
    """Spend the same time as a real verification when there is no user to check."""
    pwd_context.dummy_verify()


# -------------------------
# JWT helpers
# -------------------------
@dataclass(frozen=True)
class TokenConfig:
    secret: str
    algorithm: str = "HS256"
    lifetime: timedelta = ACCESS_TOKEN_LIFETIME

    def __post_init__(self) -> None:
        if not self.secret or not self.secret.strip():
            raise RuntimeError("JWT_SECRET must be set (auth is required).")

    def __repr__(self) -> str:
        return f"TokenConfig(algorithm={self.algorithm!r}, lifetime={self.lifetime!r})"


@lru_cache(maxsize=1)
def get_token_config() -> TokenConfig:
    """Process-wide token config, read from settings on first use and never mutated."""
    return TokenConfig(secret=settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


def _now_utc() -> datetime:
    return datetime.now(timezone.utc)


def create_access_token(user_id: str, config: TokenConfig | None = None, *, now: datetime | None = None) -> str:
    """
    Access token used for API auth: Authorization: Bearer <token>
    subject = the user's id
    """
    config = config or get_token_config()
    issued_at = now or _now_utc()
    expires_at = issued_at + config.lifetime

    payload = {
        "sub": str(user_id),
        "iat": int(issued_at.timestamp()),
        "exp": int(expires_at.timestamp()),
    }
    return jwt.encode(payload, config.secret, algorithm=config.algorithm)


def decode_access_token(token: str, config: TokenConfig | None = None) -> dict[str, Any]:
    """
    Returns the verified payload or raises a jose JWTError subclass.
    Keep this "pure" (no FastAPI/AppError here); the access gate classifies failures.
    """
    config = config or get_token_config()
    return jwt.decode(
        token,
        config.secret,
        algorithms=[config.algorithm],
        # Subject shape is checked by the access gate, which reports it separately.
        options={"require_exp": True, "verify_sub": False},
    )

# jobtrack/auth/identity.py
"""
Canonical authenticated identity model.

The access gate builds an Identity for every request it lets through, so that
downstream code can reason about "who is this user?" without touching raw JWTs.

The Identity object is INTERNAL ONLY and should not be returned directly
to clients. It's used for ownership scoping and log context.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any


@dataclass(frozen=True)
class Identity:
    """
    Canonical representation of an authenticated (or unauthenticated) user.

    Attributes:
        user_id: Internal user ID taken from the token's ``sub`` claim.
        email: User's email address from the user store.
        is_authenticated: True if the gate verified a token for this request.
        token_expires_at: When the presented token stops being accepted.
    """

    user_id: str | None = None
    email: str | None = None
    is_authenticated: bool = False
    token_expires_at: datetime | None = None

    @classmethod
    def unauthenticated(cls) -> Identity:
        """Create an identity representing an unauthenticated request."""
        return cls()

    @classmethod
    def from_user(cls, user: Any, claims: dict[str, Any] | None = None) -> Identity:
        """
        Create an identity for a user resolved from verified token claims.

        Args:
            user: Object with ``id`` and ``email`` attributes (the User model).
            claims: Verified token payload; only ``exp`` is read.
        """
        exp = (claims or {}).get("exp")
        expires_at = datetime.fromtimestamp(int(exp), tz=timezone.utc) if exp is not None else None
        email = getattr(user, "email", None)
        return cls(
            user_id=str(user.id),
            email=email.strip().lower() if email else None,
            is_authenticated=True,
            token_expires_at=expires_at,
        )

    def to_debug_dict(self) -> dict[str, Any]:
        """Return a safe subset of identity info for logs."""
        return {
            "user_id": self.user_id,
            "email": self.email,
            "is_authenticated": self.is_authenticated,
        }

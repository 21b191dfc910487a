# jobtrack/auth/gate.py
"""
Access gate for protected routes.

Turns the raw ``Authorization`` header of a request into a resolved user, or
fails with a classified AppError before any resource logic runs:

- header absent / empty token               -> MISSING_CREDENTIAL
- header without the ``Bearer `` prefix      -> MALFORMED_CREDENTIAL
- bad signature / corrupt token             -> INVALID_CREDENTIAL
- registered claim rejected (nbf, aud, ...) -> INVALID_CREDENTIAL
- correctly signed but past ``exp``          -> EXPIRED_CREDENTIAL
- verified payload without a string ``sub``  -> MALFORMED_CREDENTIAL
- ``sub`` does not resolve to a user         -> UNKNOWN_IDENTITY
- anything unexpected (store down, ...)     -> INTERNAL_FAULT

The gate holds no per-request state and never writes to the store.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Protocol

from jose import ExpiredSignatureError, JWTError

from jobtrack.auth.identity import Identity
from jobtrack.core.errors import AppError, ErrorKind
from jobtrack.core.security import TokenConfig, decode_access_token

logger = logging.getLogger(__name__)

BEARER_PREFIX = "Bearer "


class IdentityResolver(Protocol):
    """Anything that can look a user up by id (returns None when unknown)."""

    def resolve(self, user_id: str) -> Any | None: ...


@dataclass(frozen=True)
class GateResult:
    user: Any
    identity: Identity
    claims: dict[str, Any]


def extract_bearer_token(authorization: str | None) -> str:
    if not authorization:
        logger.info("Rejected request: no Authorization header")
        raise AppError(ErrorKind.MISSING_CREDENTIAL)

    if not authorization.startswith(BEARER_PREFIX):
        logger.warning("Rejected request: Authorization header missing Bearer prefix")
        raise AppError(ErrorKind.MALFORMED_CREDENTIAL)

    token = authorization[len(BEARER_PREFIX):].strip()
    if not token:
        logger.info("Rejected request: no token after Bearer prefix")
        raise AppError(ErrorKind.MISSING_CREDENTIAL)
    return token


class AccessGate:
    def __init__(self, config: TokenConfig, resolver: IdentityResolver) -> None:
        self.config = config
        self.resolver = resolver

    def verify_token(self, token: str) -> dict[str, Any]:
        """Signature and expiry check; returns the claims with a usable ``sub``."""
        try:
            claims = decode_access_token(token, self.config)
        except ExpiredSignatureError:
            logger.info("Rejected request: access token expired")
            raise AppError(ErrorKind.EXPIRED_CREDENTIAL)
        except JWTError as exc:
            logger.warning("Rejected request: invalid access token: %s", exc)
            raise AppError(ErrorKind.INVALID_CREDENTIAL)

        sub = claims.get("sub")
        if not isinstance(sub, str) or not sub.strip():
            logger.warning("Rejected request: token has no subject")
            raise AppError(ErrorKind.MALFORMED_CREDENTIAL)
        return claims

    def authenticate(self, authorization: str | None) -> GateResult:
        try:
            token = extract_bearer_token(authorization)
            claims = self.verify_token(token)
            user_id = claims["sub"].strip()

            user = self.resolver.resolve(user_id)
            if user is None:
                logger.warning("Rejected request: no user for token subject %s", user_id)
                raise AppError(ErrorKind.UNKNOWN_IDENTITY)
        except AppError:
            raise
        except Exception as exc:
            logger.exception("Access gate failed unexpectedly")
            raise AppError(ErrorKind.INTERNAL_FAULT) from exc

        return GateResult(user=user, identity=Identity.from_user(user, claims), claims=claims)

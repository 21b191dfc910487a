# jobtrack/dependencies/auth.py
from __future__ import annotations

import logging

from fastapi import Depends, Request
from sqlalchemy.orm import Session

from jobtrack.auth.gate import AccessGate
from jobtrack.auth.identity import Identity
from jobtrack.core.database import get_db
from jobtrack.core.security import get_token_config
from jobtrack.models.user import User
from jobtrack.services.users import SessionIdentityResolver

logger = logging.getLogger(__name__)


def get_access_gate(db: Session = Depends(get_db)) -> AccessGate:
    return AccessGate(get_token_config(), SessionIdentityResolver(db))


def get_current_user(
    request: Request,
    gate: AccessGate = Depends(get_access_gate),
) -> User:
    """
    Validates:
      - Authorization: Bearer <token>
      - token signature + exp
      - token subject resolves to a user
    Binds request.state.user / request.state.identity and returns:
      - User SQLAlchemy model
    """
    request.state.identity = Identity.unauthenticated()
    request.state.user = None

    result = gate.authenticate(request.headers.get("Authorization"))

    request.state.user = result.user
    request.state.identity = result.identity
    logger.debug("Authenticated request %s %s as %s", request.method, request.url.path, result.identity.to_debug_dict())
    return result.user


def get_identity(request: Request) -> Identity:
    """Identity bound by the gate, or an unauthenticated one if the gate did not run."""
    identity = getattr(request.state, "identity", None)
    if isinstance(identity, Identity):
        return identity
    return Identity.unauthenticated()

# tests/test_access_gate.py
"""
Unit tests for the access gate.

These tests verify:
- Authorization header parsing (missing / malformed / empty token)
- Signature and expiry classification
- Subject claim and identity resolution failures
- Unexpected resolver failures surfacing as INTERNAL_FAULT

Tests do NOT require a database: the gate talks to a fake resolver.
"""
from __future__ import annotations

import base64
import json
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

import pytest
from jose import jwt
from sqlalchemy.exc import OperationalError

from jobtrack.auth.gate import AccessGate, extract_bearer_token
from jobtrack.core.errors import AppError, ErrorKind
from jobtrack.core.security import TokenConfig, create_access_token

CONFIG = TokenConfig(secret="gate-test-secret")


@dataclass
class FakeUser:
    id: str
    email: str = "fake@example.com"


class FakeResolver:
    def __init__(self, users: dict[str, FakeUser] | None = None) -> None:
        self.users = users or {}
        self.calls: list[str] = []

    def resolve(self, user_id: str):
        self.calls.append(user_id)
        return self.users.get(user_id)


class BrokenResolver:
    def resolve(self, user_id: str):
        raise OperationalError("SELECT users", {}, Exception("connection refused"))


@pytest.fixture()
def user():
    return FakeUser(id="5b0d2a4e-0f3c-4c49-9c1c-0d6f0f6b7e11")


@pytest.fixture()
def resolver(user):
    return FakeResolver({user.id: user})


@pytest.fixture()
def gate(resolver):
    return AccessGate(CONFIG, resolver)


def _kind(fn, *args) -> ErrorKind:
    with pytest.raises(AppError) as exc_info:
        fn(*args)
    return exc_info.value.kind


# ---------------------------------------------------------------------------
# Header parsing
# ---------------------------------------------------------------------------


@pytest.mark.parametrize("header", [None, ""])
def test_missing_header_is_missing_credential(gate, header):
    assert _kind(gate.authenticate, header) is ErrorKind.MISSING_CREDENTIAL


@pytest.mark.parametrize("header", ["Token abc", "Basic dXNlcjpwYXNz", "bearer abc", "Bearer", "abc.def.ghi"])
def test_header_without_bearer_prefix_is_malformed(gate, header):
    assert _kind(gate.authenticate, header) is ErrorKind.MALFORMED_CREDENTIAL


@pytest.mark.parametrize("header", ["Bearer ", "Bearer    "])
def test_empty_token_after_prefix_is_missing_credential(gate, header):
    assert _kind(gate.authenticate, header) is ErrorKind.MISSING_CREDENTIAL


def test_extract_bearer_token_strips_prefix():
    assert extract_bearer_token("Bearer abc.def.ghi") == "abc.def.ghi"


# ---------------------------------------------------------------------------
# Signature / expiry
# ---------------------------------------------------------------------------


def test_token_signed_with_other_secret_is_invalid(gate, user):
    token = create_access_token(user.id, TokenConfig(secret="someone-else"))
    assert _kind(gate.authenticate, f"Bearer {token}") is ErrorKind.INVALID_CREDENTIAL


def test_tampered_payload_is_invalid(gate, user):
    token = create_access_token(user.id, CONFIG)
    header, _, signature = token.split(".")
    forged = base64.urlsafe_b64encode(
        json.dumps({"sub": "someone-else", "exp": 4102444800}).encode()
    ).rstrip(b"=").decode()

    assert _kind(gate.authenticate, f"Bearer {header}.{forged}.{signature}") is ErrorKind.INVALID_CREDENTIAL


@pytest.mark.parametrize("token", ["not-a-jwt", "a.b.c", "...."])
def test_structurally_corrupt_token_is_invalid(gate, token):
    assert _kind(gate.authenticate, f"Bearer {token}") is ErrorKind.INVALID_CREDENTIAL


def test_expired_token_is_expired_credential(gate, user):
    issued = datetime.now(timezone.utc) - timedelta(days=8)
    token = create_access_token(user.id, CONFIG, now=issued)

    assert _kind(gate.authenticate, f"Bearer {token}") is ErrorKind.EXPIRED_CREDENTIAL


def test_expired_token_with_bad_signature_is_invalid_not_expired(gate, user):
    issued = datetime.now(timezone.utc) - timedelta(days=8)
    token = create_access_token(user.id, TokenConfig(secret="someone-else"), now=issued)

    assert _kind(gate.authenticate, f"Bearer {token}") is ErrorKind.INVALID_CREDENTIAL


def test_token_just_inside_lifetime_is_accepted(gate, user):
    issued = datetime.now(timezone.utc) - timedelta(days=6, hours=23)
    token = create_access_token(user.id, CONFIG, now=issued)

    assert gate.authenticate(f"Bearer {token}").user is user


# ---------------------------------------------------------------------------
# Claims / identity resolution
# ---------------------------------------------------------------------------


def test_token_without_subject_is_malformed(gate):
    exp = int((datetime.now(timezone.utc) + timedelta(days=1)).timestamp())
    token = jwt.encode({"exp": exp}, CONFIG.secret, algorithm=CONFIG.algorithm)

    assert _kind(gate.authenticate, f"Bearer {token}") is ErrorKind.MALFORMED_CREDENTIAL


def test_token_with_non_string_subject_is_malformed(gate):
    exp = int((datetime.now(timezone.utc) + timedelta(days=1)).timestamp())
    token = jwt.encode({"sub": 42, "exp": exp}, CONFIG.secret, algorithm=CONFIG.algorithm)

    assert _kind(gate.authenticate, f"Bearer {token}") is ErrorKind.MALFORMED_CREDENTIAL


def test_token_not_yet_valid_is_invalid_not_malformed(gate, user):
    now = datetime.now(timezone.utc)
    token = jwt.encode(
        {"sub": user.id, "nbf": int((now + timedelta(hours=1)).timestamp()), "exp": int((now + timedelta(days=1)).timestamp())},
        CONFIG.secret,
        algorithm=CONFIG.algorithm,
    )

    assert _kind(gate.authenticate, f"Bearer {token}") is ErrorKind.INVALID_CREDENTIAL


def test_token_with_unexpected_audience_is_invalid_not_malformed(gate, user):
    exp = int((datetime.now(timezone.utc) + timedelta(days=1)).timestamp())
    token = jwt.encode({"sub": user.id, "aud": "another-service", "exp": exp}, CONFIG.secret, algorithm=CONFIG.algorithm)

    assert _kind(gate.authenticate, f"Bearer {token}") is ErrorKind.INVALID_CREDENTIAL


def test_unknown_subject_is_unknown_identity(gate, resolver):
    token = create_access_token("00000000-0000-4000-8000-000000000000", CONFIG)

    assert _kind(gate.authenticate, f"Bearer {token}") is ErrorKind.UNKNOWN_IDENTITY
    assert resolver.calls == ["00000000-0000-4000-8000-000000000000"]


def test_resolver_failure_is_internal_fault(user):
    gate = AccessGate(CONFIG, BrokenResolver())
    token = create_access_token(user.id, CONFIG)

    with pytest.raises(AppError) as exc_info:
        gate.authenticate(f"Bearer {token}")

    assert exc_info.value.kind is ErrorKind.INTERNAL_FAULT
    assert exc_info.value.status_code == 500
    # Store internals stay out of the client-facing message.
    assert "connection refused" not in exc_info.value.message
    assert isinstance(exc_info.value.__cause__, OperationalError)


def test_resolver_not_called_for_bad_tokens(resolver, gate):
    with pytest.raises(AppError):
        gate.authenticate("Bearer not-a-jwt")
    assert resolver.calls == []


# ---------------------------------------------------------------------------
# Success
# ---------------------------------------------------------------------------


def test_valid_token_resolves_user_and_identity(gate, user):
    token = create_access_token(user.id, CONFIG)

    result = gate.authenticate(f"Bearer {token}")

    assert result.user is user
    assert result.identity.is_authenticated is True
    assert result.identity.user_id == user.id
    assert result.identity.email == "fake@example.com"
    assert result.claims["sub"] == user.id
    assert result.identity.token_expires_at is not None

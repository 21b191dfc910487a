# jobtrack/services/users.py
"""
User management helpers.

Responsibilities:
- Signup field validation and account creation (password hashed before persistence)
- Credential check for login (unknown email and wrong password look the same)
- User lookup by id or email, including the resolver the access gate depends on
"""
from __future__ import annotations

import logging
from typing import Optional

from email_validator import EmailNotValidError, validate_email
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from jobtrack.core.errors import AppError, ErrorKind
from jobtrack.core.security import dummy_verify_password, hash_password, verify_password
from jobtrack.models.user import User

logger = logging.getLogger(__name__)

DUPLICATE_EMAIL_MESSAGE = "This email is already registered"


def normalize_email(email: str | None) -> str:
    return (email or "").strip().lower()


def get_user_by_id(db: Session, user_id: str) -> Optional[User]:
    """Look up a user by primary key."""
    return db.query(User).filter(User.id == user_id).first()


def get_user_by_email(db: Session, email: str) -> Optional[User]:
    """Look up a user by email address."""
    return db.query(User).filter(User.email == normalize_email(email)).first()


class SessionIdentityResolver:
    """Resolve token subjects to users through a SQLAlchemy session."""

    def __init__(self, db: Session) -> None:
        self.db = db

    def resolve(self, user_id: str) -> Optional[User]:
        return get_user_by_id(self.db, user_id)


def validate_signup_fields(name: str | None, email: str | None, password: str | None) -> dict[str, str]:
    """
    Returns a field -> message mapping of every problem with the signup payload.
    An empty mapping means the payload is acceptable.
    """
    errors: dict[str, str] = {}
    if not (name or "").strip():
        errors["name"] = "Name is required"
    if not (email or "").strip():
        errors["email"] = "Email is required"
    else:
        try:
            validate_email(email.strip(), check_deliverability=False)
        except EmailNotValidError as exc:
            errors["email"] = str(exc)
    if not password:
        errors["password"] = "Password is required"
    return errors


def create_user(db: Session, *, name: str | None, email: str | None, password: str | None) -> User:
    """
    Create a new account.

    Raises:
        AppError(INVALID_INPUT): a required field is missing or the email is malformed
        AppError(DUPLICATE_IDENTITY): the email is already registered
    """
    errors = validate_signup_fields(name, email, password)
    if errors:
        missing = not (name and name.strip()) or not (email and email.strip()) or not password
        message = "All fields are required" if missing else "Validation failed"
        raise AppError(ErrorKind.INVALID_INPUT, message, errors=errors)

    normalized_email = normalize_email(email)
    if get_user_by_email(db, normalized_email):
        raise AppError(ErrorKind.DUPLICATE_IDENTITY, errors={"email": DUPLICATE_EMAIL_MESSAGE})

    user = User(
        name=name.strip()[:100],
        email=normalized_email,
        password_hash=hash_password(password),
    )
    db.add(user)
    try:
        db.commit()
    except IntegrityError:
        # Lost a race with a concurrent signup for the same email.
        db.rollback()
        raise AppError(ErrorKind.DUPLICATE_IDENTITY, errors={"email": DUPLICATE_EMAIL_MESSAGE})
    db.refresh(user)

    logger.info("Created user id=%s email=%s", user.id, normalized_email)
    return user


def authenticate_user(db: Session, *, email: str | None, password: str | None) -> User:
    """
    Returns the user whose email and password match.

    Raises AppError(INVALID_CREDENTIALS) for an unknown email, a wrong password,
    or a missing field, without saying which.
    """
    normalized_email = normalize_email(email)
    user = get_user_by_email(db, normalized_email) if normalized_email else None

    if user is None:
        dummy_verify_password()
        logger.info("Login rejected: no user for email=%s", normalized_email or "<missing>")
        raise AppError(ErrorKind.INVALID_CREDENTIALS)

    if not password:
        dummy_verify_password()
        logger.info("Login rejected: no password for email=%s", normalized_email)
        raise AppError(ErrorKind.INVALID_CREDENTIALS)

    if not verify_password(password, user.password_hash):
        logger.info("Login rejected: password mismatch for email=%s", normalized_email)
        raise AppError(ErrorKind.INVALID_CREDENTIALS)

    return user

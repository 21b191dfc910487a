# jobtrack/routes/auth.py
from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from jobtrack.core.database import get_db
from jobtrack.core.security import create_access_token
from jobtrack.dependencies.auth import get_current_user
from jobtrack.models.user import User
from jobtrack.schemas.auth import LoginIn, SignupIn, TokenOut
from jobtrack.schemas.user import UserProfileOut
from jobtrack.services.users import authenticate_user, create_user, normalize_email

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


def _token_response(user: User) -> dict:
    return {
        "token": create_access_token(user.id),
        "token_type": "bearer",
        "user": {"id": user.id, "name": user.name, "email": user.email},
    }


@router.post("/signup", response_model=TokenOut, status_code=status.HTTP_201_CREATED)
def signup(payload: SignupIn, db: Session = Depends(get_db)):
    logger.info("Signup attempt for email=%s", normalize_email(payload.email) or "<missing>")

    user = create_user(db, name=payload.name, email=payload.email, password=payload.password)
    return _token_response(user)


@router.post("/login", response_model=TokenOut)
def login(payload: LoginIn, db: Session = Depends(get_db)):
    logger.info("Login attempt for email=%s", normalize_email(payload.email) or "<missing>")

    user = authenticate_user(db, email=payload.email, password=payload.password)

    logger.info("Login successful for user id=%s", user.id)
    return _token_response(user)


@router.get("/profile", response_model=UserProfileOut)
def get_profile(user: User = Depends(get_current_user)) -> User:
    return user

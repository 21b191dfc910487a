# jobtrack/schemas/auth.py
from typing import Optional

from pydantic import BaseModel, Field


class SignupIn(BaseModel):
    # Optional so a missing field is reported per-field by the signup handler.
    name: Optional[str] = Field(default=None, max_length=100)
    email: Optional[str] = Field(default=None, max_length=255)
    password: Optional[str] = Field(default=None, max_length=128)


class LoginIn(BaseModel):
    email: Optional[str] = None
    password: Optional[str] = None


class AuthUserOut(BaseModel):
    id: str
    name: str
    email: str


class TokenOut(BaseModel):
    token: str
    token_type: str = "bearer"
    user: AuthUserOut

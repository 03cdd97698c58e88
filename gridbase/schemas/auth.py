# File: /gridbase/schemas/auth.py | Version: 2.1 | Path: /gridbase/schemas/auth.py
from __future__ import annotations

from pydantic import BaseModel, EmailStr, Field


class RegisterRequest(BaseModel):
    email: EmailStr
    password: str = Field(min_length=1)
    full_name: str | None = None


class RefreshIn(BaseModel):
    refresh_token: str


class TokenOut(BaseModel):
    access_token: str
    token_type: str = "bearer"


class TokenPair(TokenOut):
    refresh_token: str

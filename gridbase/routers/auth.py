# File: /gridbase/routers/auth.py | Version: 3.0 | Title: Auth Router (JSON+form tolerant) + Access & Refresh Tokens
from __future__ import annotations

from typing import Any, Dict

from fastapi import APIRouter, Depends, Form, HTTPException, Request, status
from pydantic import ValidationError
from sqlalchemy.orm import Session

from gridbase.db.session import get_db
from gridbase.models import User
from gridbase.schemas.auth import RefreshIn, RegisterRequest, TokenOut, TokenPair
from gridbase.security import (
    create_access_token,
    create_refresh_token,
    decode_refresh_token,
    get_current_user,
    get_password_hash,
    verify_password,
)

router = APIRouter(prefix="/auth", tags=["Auth"])


# ---------------------------
# Utilities
# ---------------------------


async def _read_json_or_form(request: Request) -> Dict[str, Any]:
    """Accept JSON or form-encoded bodies and normalize keys."""
    ctype = (request.headers.get("content-type") or "").lower()
    data: Dict[str, Any] = {}
    if "application/json" in ctype:
        try:
            body = await request.json()
        except ValueError:
            body = None
        if isinstance(body, dict):
            data = body
    else:
        form = await request.form()
        data = dict(form)

    # alias: username -> email (OAuth-style)
    if "username" in data and "email" not in data:
        data["email"] = data["username"]
    return data


def _issue_tokens_for_user(user: User) -> TokenPair:
    sub = {"sub": str(user.id)}
    return TokenPair(
        access_token=create_access_token(sub),
        refresh_token=create_refresh_token(sub),
    )


def _authenticate(db: Session, email: str, password: str) -> User:
    user = db.query(User).filter(User.email == email).first()
    if not user or not verify_password(password, user.hashed_password):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Incorrect email or password",
        )
    return user


# ---------------------------
# Endpoints
# ---------------------------


@router.post("/register")
async def register(request: Request, db: Session = Depends(get_db)):
    """
    Register a user. Idempotent: an existing email returns the existing user.
    Accepts JSON or form {email, password, [full_name]}.
    """
    payload = await _read_json_or_form(request)
    try:
        data = RegisterRequest.model_validate(payload)
    except ValidationError:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail="Valid email and password required",
        )
    email = data.email.strip().lower()

    user = db.query(User).filter(User.email == email).first()
    if not user:
        user = User(
            email=email,
            full_name=data.full_name,
            hashed_password=get_password_hash(data.password),
            is_active=True,
        )
        db.add(user)
        db.commit()
        db.refresh(user)

    return {"id": str(user.id), "email": user.email}


@router.post("/login", response_model=TokenPair)
async def login(request: Request, db: Session = Depends(get_db)):
    """Login with JSON or form {email/username, password}."""
    payload = await _read_json_or_form(request)
    email = (payload.get("email") or "").strip().lower()
    password = payload.get("password")

    if not email or not password:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail="Email and password required",
        )
    return _issue_tokens_for_user(_authenticate(db, email, password))


@router.post("/token", response_model=TokenPair)
def login_oauth_form(
    db: Session = Depends(get_db),
    username: str = Form(...),
    password: str = Form(...),
):
    """OAuth2 form variant (used by Swagger UI and tools)."""
    return _issue_tokens_for_user(_authenticate(db, (username or "").strip().lower(), password))


@router.post("/refresh", response_model=TokenOut)
def refresh(body: RefreshIn):
    payload = decode_refresh_token(body.refresh_token)
    sub = payload.get("sub")
    if not sub:
        raise HTTPException(status_code=401, detail="Invalid refresh token")
    return TokenOut(access_token=create_access_token({"sub": sub}))


@router.get("/me", response_model=dict)
def me(current_user: User = Depends(get_current_user)):
    return {
        "id": str(current_user.id),
        "email": current_user.email,
        "full_name": current_user.full_name,
    }

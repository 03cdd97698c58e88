# File: /gridbase/security.py | Version: 2.0 | Title: Password hashing and typed JWTs (access + refresh), OAuth2 tokenUrl=/auth/token
from datetime import UTC, datetime, timedelta
from enum import Enum
from typing import Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError, jwt
from passlib.context import CryptContext
from sqlalchemy.orm import Session

from gridbase.core.config import settings
from gridbase.db.session import get_db
from gridbase.models import User

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/auth/token")


class TokenKind(str, Enum):
    access = "access"
    refresh = "refresh"


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


def get_password_hash(password: str) -> str:
    return pwd_context.hash(password)


def _unauthorized(detail: str = "Could not validate credentials") -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def _issue(claims: dict, kind: TokenKind, lifetime: timedelta) -> str:
    payload = {**claims, "type": kind.value, "exp": datetime.now(UTC) + lifetime}
    return jwt.encode(payload, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    lifetime = expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    return _issue(data, TokenKind.access, lifetime)


def create_refresh_token(data: dict, expires_minutes: Optional[int] = None) -> str:
    minutes = expires_minutes or settings.REFRESH_TOKEN_EXPIRE_MINUTES
    return _issue(data, TokenKind.refresh, timedelta(minutes=minutes))


def decode_token(token: str, kind: TokenKind) -> dict:
    """Claims of a valid, unexpired token of the given kind; 401 otherwise."""
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except JWTError:
        raise _unauthorized()
    if payload.get("type") != kind.value:
        raise _unauthorized("Invalid token type")
    if not payload.get("sub"):
        raise _unauthorized()
    return payload


def decode_refresh_token(token: str) -> dict:
    return decode_token(token, TokenKind.refresh)


def get_current_user(
    token: str = Depends(oauth2_scheme),
    db: Session = Depends(get_db),
) -> User:
    user = db.get(User, decode_token(token, TokenKind.access)["sub"])
    if user is None or not user.is_active:
        raise _unauthorized()
    return user

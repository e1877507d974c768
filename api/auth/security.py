"""
API Security: password hashing + JWT bearer authentication
"""
from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Annotated

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from jose import ExpiredSignatureError, JWTError, jwt
from passlib.context import CryptContext
from pydantic import BaseModel

from api.dependencies import get_user_repository
from config.settings import settings
from storage.repository import StoredUser, UserRepository

# ── Setup ──────────────────────────────────────────────────────────────────────
pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__default_rounds=settings.bcrypt_rounds,
)
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/login")


# ── Pydantic models ────────────────────────────────────────────────────────────
class Token(BaseModel):
    access_token: str
    token_type:   str = "bearer"


class User(BaseModel):
    id:       int
    username: str
    email:    str

    @classmethod
    def from_stored(cls, stored: StoredUser) -> "User":
        return cls(id=stored.id, username=stored.username, email=stored.email)


# ── Helpers ────────────────────────────────────────────────────────────────────
def hash_password(plain: str) -> str:
    return pwd_context.hash(plain)


def verify_password(plain: str, hashed: str) -> bool:
    return pwd_context.verify(plain, hashed)


def authenticate_user(users: UserRepository, login: str, password: str) -> User | None:
    stored = users.get_by_login(login)
    if not stored or not verify_password(password, stored.hashed_password):
        return None
    return User.from_stored(stored)


def create_access_token(data: dict) -> str:
    payload = data.copy()
    expire  = datetime.now(timezone.utc) + timedelta(minutes=settings.jwt_expire_minutes)
    payload.update({"exp": expire})
    return jwt.encode(payload, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code = status.HTTP_401_UNAUTHORIZED,
        detail      = detail,
        headers     = {"WWW-Authenticate": "Bearer"},
    )


def get_current_user(
    token: Annotated[str, Depends(oauth2_scheme)],
    users: Annotated[UserRepository, Depends(get_user_repository)],
) -> User:
    try:
        payload = jwt.decode(token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])
    except ExpiredSignatureError:
        raise _unauthorized("Token has expired. Please login again.")
    except JWTError:
        raise _unauthorized("Could not validate credentials")

    subject = payload.get("sub")
    if subject is None or not str(subject).isdigit():
        raise _unauthorized("Could not validate credentials")

    stored = users.get_by_id(int(subject))
    if stored is None:
        raise _unauthorized("User not found. Token is not valid.")
    return User.from_stored(stored)


CurrentUser = Annotated[User, Depends(get_current_user)]

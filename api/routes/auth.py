"""
Auth Router
===========
Registration, password login and the current-user lookup.
"""
from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import OAuth2PasswordRequestForm
from pydantic import BaseModel, Field, field_validator

from api.auth.security import (
    CurrentUser, Token, User, authenticate_user, create_access_token, hash_password,
)
from api.dependencies import get_user_repository
from config.logging_config import logger
from storage.repository import UserRepository

router = APIRouter()

Users = Annotated[UserRepository, Depends(get_user_repository)]


# ── Models ─────────────────────────────────────────────────────────────────────
class RegisterRequest(BaseModel):
    username: str = Field(min_length=3, max_length=50)
    email:    str = Field(max_length=255)
    password: str = Field(min_length=6)

    @field_validator("username", "email")
    @classmethod
    def _strip(cls, value: str) -> str:
        return value.strip()

    @field_validator("email")
    @classmethod
    def _looks_like_email(cls, value: str) -> str:
        if "@" not in value:
            raise ValueError("Please provide a valid email")
        return value.lower()


class RegisterResponse(Token):
    user: User


# ── Endpoints ──────────────────────────────────────────────────────────────────
@router.post("/register", response_model=RegisterResponse, status_code=status.HTTP_201_CREATED)
def register(body: RegisterRequest, users: Users) -> RegisterResponse:
    stored = users.create(body.username, body.email, hash_password(body.password))
    user = User.from_stored(stored)
    token = create_access_token({"sub": str(user.id)})
    return RegisterResponse(access_token=token, user=user)


@router.post("/login", response_model=Token)
def login(form_data: Annotated[OAuth2PasswordRequestForm, Depends()], users: Users) -> Token:
    user = authenticate_user(users, form_data.username, form_data.password)
    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )
    logger.info(f"Login: {user.username} (id={user.id})")
    return Token(access_token=create_access_token({"sub": str(user.id)}))


@router.get("/me", response_model=User)
async def get_me(current_user: CurrentUser) -> User:
    return current_user

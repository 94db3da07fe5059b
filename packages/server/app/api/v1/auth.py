"""
Authentication endpoints.

- Email/Password registration & login
- Bearer token issue (no cookies, no refresh)
- ``/me`` for the current identity
"""

from __future__ import annotations

import uuid
from datetime import datetime

import structlog
from fastapi import APIRouter, Depends
from pydantic import BaseModel, EmailStr
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.auth import Identity, create_jwt, get_identity
from app.core.database import get_session
from app.services import users as user_service

log = structlog.get_logger()
router = APIRouter()


class RegisterRequest(BaseModel):
    email: EmailStr
    password: str
    confirm_password: str


class LoginRequest(BaseModel):
    email: EmailStr
    password: str


class UserResponse(BaseModel):
    user_id: uuid.UUID
    email: str


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    expires_at_utc: datetime


@router.post("/register", response_model=UserResponse, status_code=201)
async def register(
    body: RegisterRequest,
    session: AsyncSession = Depends(get_session),
):
    """Register a new user with email/password."""
    user = await user_service.register_user(
        body.email, body.password, body.confirm_password, session
    )
    return UserResponse(user_id=user.id, email=user.email)


@router.post("/login", response_model=TokenResponse)
async def login(
    body: LoginRequest,
    session: AsyncSession = Depends(get_session),
):
    """Authenticate with email/password and receive a bearer token."""
    user = await user_service.authenticate(body.email, body.password, session)
    token, expires_at = create_jwt(user.id, user.email)
    return TokenResponse(access_token=token, expires_at_utc=expires_at)


@router.get("/me", response_model=UserResponse)
async def me(identity: Identity = Depends(get_identity)):
    return UserResponse(user_id=identity.user_id, email=identity.email)

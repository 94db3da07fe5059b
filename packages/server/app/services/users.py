"""
User accounts: registration and credential checks.
"""

from __future__ import annotations

import structlog
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from app.core.auth import hash_password, verify_password
from app.core.errors import StateConflictError, UnauthenticatedError, ValidationFailure
from app.models.user import User
from app.services.invariants import unique_guard

log = structlog.get_logger()

MIN_PASSWORD_LENGTH = 8
EMAIL_TAKEN = "Email already registered."


def normalize_email(email: str) -> str:
    return email.strip().lower()


async def get_user_by_email(email: str, session: AsyncSession) -> User | None:
    result = await session.execute(select(User).where(User.email == normalize_email(email)))
    return result.scalar_one_or_none()


async def register_user(
    email: str, password: str, confirm_password: str, session: AsyncSession
) -> User:
    if len(password) < MIN_PASSWORD_LENGTH:
        raise ValidationFailure(f"Password must be at least {MIN_PASSWORD_LENGTH} characters.")
    if password != confirm_password:
        raise ValidationFailure("Passwords do not match.")
    if await get_user_by_email(email, session):
        raise StateConflictError(EMAIL_TAKEN)

    user = User(email=normalize_email(email), password_hash=hash_password(password))
    async with unique_guard(session, EMAIL_TAKEN):
        session.add(user)

    log.info("user.registered", user_id=str(user.id))
    return user


async def authenticate(email: str, password: str, session: AsyncSession) -> User:
    user = await get_user_by_email(email, session)
    if not user or not verify_password(password, user.password_hash):
        log.warning("auth.login_failure", reason="bad_credentials")
        raise UnauthenticatedError("Invalid email or password.")
    log.info("auth.login_success", user_id=str(user.id))
    return user

"""
Input rules shared by the resource services.

Text is trimmed and checked, never truncated. Every failure here is a
``ValidationFailure`` (400).
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Optional

import structlog
from pydantic import EmailStr, TypeAdapter, ValidationError
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.errors import StateConflictError, ValidationFailure
from workops_shared.schemas.common import (
    DESCRIPTION_MAX_LENGTH,
    EMAIL_MAX_LENGTH,
    NAME_MAX_LENGTH,
    PHONE_MAX_LENGTH,
)
from workops_shared.schemas.projects import decode_row_version

log = structlog.get_logger()

_email_adapter = TypeAdapter(EmailStr)


def require_text(value: Optional[str], field: str, max_length: int = NAME_MAX_LENGTH) -> str:
    """Trim a required name or title."""
    text = (value or "").strip()
    if not text:
        raise ValidationFailure(f"{field} is required.")
    if len(text) > max_length:
        raise ValidationFailure(f"{field} must be at most {max_length} characters.")
    return text


def optional_text(
    value: Optional[str], field: str, max_length: int = DESCRIPTION_MAX_LENGTH
) -> Optional[str]:
    """Trim an optional field. Blank becomes None."""
    if value is None:
        return None
    text = value.strip()
    if not text:
        return None
    if len(text) > max_length:
        raise ValidationFailure(f"{field} must be at most {max_length} characters.")
    return text


def optional_email(value: Optional[str], field: str = "Email") -> Optional[str]:
    text = optional_text(value, field, EMAIL_MAX_LENGTH)
    if text is None:
        return None
    try:
        _email_adapter.validate_python(text)
    except ValidationError:
        raise ValidationFailure(f"{field} is not a valid email address.")
    return text


def optional_phone(value: Optional[str]) -> Optional[str]:
    return optional_text(value, "Phone", PHONE_MAX_LENGTH)


def as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def require_future(value: Optional[datetime], field: str) -> Optional[datetime]:
    if value is None:
        return None
    value = as_utc(value)
    if value <= datetime.now(timezone.utc):
        raise ValidationFailure(f"{field} must be in the future.")
    return value


def parse_row_version(value: Optional[str]) -> bytes:
    """Decode the caller's version token."""
    if value is None or not value.strip():
        raise ValidationFailure("RowVersion is required for concurrency control.")
    try:
        token = decode_row_version(value)
    except ValueError:
        raise ValidationFailure("Invalid RowVersion format.")
    if not token:
        raise ValidationFailure("Invalid RowVersion format.")
    return token


@asynccontextmanager
async def unique_guard(session: AsyncSession, message: str):
    """Flush inside the block; a unique-constraint hit becomes a 409.

    Covers the race where two requests pass an existence check at the same time.
    """
    try:
        yield
        await session.flush()
    except IntegrityError:
        log.info("resource.unique_conflict", detail=message)
        raise StateConflictError(message)

"""
Domain errors and their HTTP rendering.

Services raise these; the handlers installed by ``install_exception_handlers``
turn them into ``application/problem+json`` responses. Messages never carry
identifiers of resources the caller is not allowed to see.
"""

from __future__ import annotations

from typing import Optional

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from workops_shared.schemas.common import ProblemDetail

log = structlog.get_logger()

PROBLEM_CONTENT_TYPE = "application/problem+json"

# Documented on every v1 route so clients can generate the error type
PROBLEM_RESPONSES = {
    status: {"model": ProblemDetail, "content": {PROBLEM_CONTENT_TYPE: {}}}
    for status in (400, 401, 403, 404, 409)
}


class WorkOpsError(Exception):
    """Base class for errors the API reports to callers."""

    status_code: int = 500
    title: str = "Internal Server Error"
    code: str = "internal_error"

    def __init__(self, detail: Optional[str] = None):
        super().__init__(detail or self.title)
        self.detail = detail

    def headers(self) -> Optional[dict[str, str]]:
        return None


class UnauthenticatedError(WorkOpsError):
    status_code = 401
    title = "Unauthorized"
    code = "unauthenticated"

    def headers(self) -> Optional[dict[str, str]]:
        return {"WWW-Authenticate": "Bearer"}


class NotFoundError(WorkOpsError):
    status_code = 404
    title = "Not Found"
    code = "not_found"


class NotMemberError(NotFoundError):
    """Caller is not a member of the org. Rendered exactly like a missing org."""

    def __init__(self, detail: Optional[str] = None):
        super().__init__(detail or "Organization not found.")


class InsufficientRoleError(WorkOpsError):
    status_code = 403
    title = "Forbidden"
    code = "forbidden"

    def __init__(self, detail: Optional[str] = None):
        super().__init__(detail or "Your role in this organization does not allow this action.")


class ValidationFailure(WorkOpsError):
    status_code = 400
    title = "Validation failed"
    code = "validation_failed"


class StateConflictError(WorkOpsError):
    status_code = 409
    title = "Conflict"
    code = "state_conflict"


class VersionConflictError(WorkOpsError):
    status_code = 409
    title = "Conflict"
    code = "version_conflict"

    def __init__(self, detail: Optional[str] = None):
        super().__init__(
            detail or "The project was updated by someone else. Please refresh and try again."
        )


def problem_response(
    status_code: int,
    title: str,
    detail: Optional[str] = None,
    code: Optional[str] = None,
    headers: Optional[dict[str, str]] = None,
) -> JSONResponse:
    body = ProblemDetail(title=title, status=status_code, detail=detail, code=code or None)
    return JSONResponse(
        status_code=status_code,
        content=body.model_dump(exclude_none=True),
        headers=headers,
        media_type=PROBLEM_CONTENT_TYPE,
    )


def _format_validation_errors(exc: RequestValidationError) -> str:
    parts = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err.get("loc", ()) if p != "body")
        parts.append(f"{loc}: {err.get('msg')}" if loc else str(err.get("msg")))
    return "; ".join(parts) or "Request is malformed."


async def _workops_error_handler(request: Request, exc: WorkOpsError) -> JSONResponse:
    log.info(
        "request.rejected",
        path=request.url.path,
        status=exc.status_code,
        code=exc.code,
    )
    return problem_response(
        exc.status_code,
        exc.title,
        exc.detail or exc.title,
        code=exc.code,
        headers=exc.headers(),
    )


async def _request_validation_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    return problem_response(
        400,
        ValidationFailure.title,
        _format_validation_errors(exc),
        code=ValidationFailure.code,
    )


async def _http_exception_handler(
    request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    title = {404: "Not Found", 405: "Method Not Allowed"}.get(exc.status_code, "Error")
    return problem_response(
        exc.status_code,
        title,
        str(exc.detail) if exc.detail else None,
        headers=getattr(exc, "headers", None),
    )


async def _unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    log.exception("request.failed", path=request.url.path, method=request.method)
    return problem_response(500, "Internal Server Error", None, code="internal_error")


def install_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(WorkOpsError, _workops_error_handler)
    app.add_exception_handler(RequestValidationError, _request_validation_handler)
    app.add_exception_handler(StarletteHTTPException, _http_exception_handler)
    app.add_exception_handler(Exception, _unhandled_exception_handler)

"""
Custom exception hierarchy for the memories & wishes board.

Rule: every HTTP error has a machine-readable `code` string so clients
can branch on it without parsing English messages. All responses share the
`{success, data?, error?}` envelope; failures add `code` and `details`.
"""
from __future__ import annotations

import logging
from typing import Any

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette import status
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Exception classes
# ---------------------------------------------------------------------------

class WishboardError(Exception):
    """Base class for all application-level errors."""
    http_status: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    code: str = "INTERNAL_ERROR"

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> dict:
        payload: dict[str, Any] = {
            "success": False,
            "error": self.message,
            "code": self.code,
        }
        if self.details:
            payload["details"] = self.details
        return payload


class MissingParametersError(WishboardError):
    http_status = status.HTTP_400_BAD_REQUEST
    code = "MISSING_PARAMETERS"

    def __init__(self, *names: str):
        super().__init__(
            message=f"Missing parameters: {', '.join(names)}.",
            details={"missing": list(names)},
        )


class InvalidFieldError(WishboardError):
    http_status = status.HTTP_400_BAD_REQUEST
    code = "VALIDATION_ERROR"

    def __init__(self, field: str, message: str):
        super().__init__(
            message=message,
            details={"errors": [{"field": field, "message": message, "type": "value_error"}]},
        )


class EntryNotFoundError(WishboardError):
    http_status = status.HTTP_404_NOT_FOUND
    code = "ENTRY_NOT_FOUND"

    def __init__(self, entry_id: str):
        super().__init__(
            message=f"Entry {entry_id} not found.",
            details={"id": entry_id},
        )


class CommentNotFoundError(WishboardError):
    http_status = status.HTTP_404_NOT_FOUND
    code = "COMMENT_NOT_FOUND"

    def __init__(self, comment_id: str):
        super().__init__(
            message=f"Comment {comment_id} not found.",
            details={"id": comment_id},
        )


class UserNotFoundError(WishboardError):
    http_status = status.HTTP_404_NOT_FOUND
    code = "USER_NOT_FOUND"

    def __init__(self, name: str):
        super().__init__(
            message=f"User {name!r} not found.",
            details={"name": name},
        )


class ReactionNotFoundError(WishboardError):
    http_status = status.HTTP_404_NOT_FOUND
    code = "REACTION_NOT_FOUND"

    def __init__(self, entry_id: str, user_name: str, emoji: str):
        super().__init__(
            message=f"{user_name} has no {emoji} reaction on entry {entry_id}.",
            details={"entryId": entry_id, "userName": user_name, "emoji": emoji},
        )


class NotOwnerError(WishboardError):
    http_status = status.HTTP_403_FORBIDDEN
    code = "NOT_OWNER"

    def __init__(self, resource: str, resource_id: str, user_name: str):
        super().__init__(
            message=f"{user_name} is not allowed to modify {resource} {resource_id}.",
            details={"resource": resource, "id": resource_id, "userName": user_name},
        )


class ReactionExistsError(WishboardError):
    http_status = status.HTTP_409_CONFLICT
    code = "REACTION_EXISTS"

    def __init__(self, entry_id: str, user_name: str, emoji: str):
        super().__init__(
            message="Already reacted with this emoji.",
            details={"entryId": entry_id, "userName": user_name, "emoji": emoji},
        )


class InvalidUploadError(WishboardError):
    http_status = status.HTTP_400_BAD_REQUEST
    code = "INVALID_UPLOAD"


class UploadNotConfiguredError(WishboardError):
    http_status = status.HTTP_500_INTERNAL_SERVER_ERROR
    code = "UPLOAD_NOT_CONFIGURED"

    def __init__(self):
        super().__init__(message="No upload bucket configured. Set UPLOAD_BUCKET.")


class UploadFailedError(WishboardError):
    http_status = status.HTTP_500_INTERNAL_SERVER_ERROR
    code = "UPLOAD_FAILED"

    def __init__(self, message: str, key: str | None = None):
        super().__init__(
            message=message,
            details={"pathname": key} if key else {},
        )


class StorageError(WishboardError):
    http_status = status.HTTP_500_INTERNAL_SERVER_ERROR
    code = "STORAGE_ERROR"

    def __init__(self, message: str = "Could not save changes.", backend: str | None = None):
        super().__init__(
            message=message,
            details={"backend": backend} if backend else {},
        )


# ---------------------------------------------------------------------------
# FastAPI exception handlers
# ---------------------------------------------------------------------------

async def wishboard_exception_handler(request: Request, exc: WishboardError) -> JSONResponse:
    return JSONResponse(
        status_code=exc.http_status,
        content=exc.to_dict(),
    )


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Return structured 400 with machine-readable field errors."""
    field_errors = []
    for error in exc.errors():
        field_errors.append({
            "field": ".".join(
                str(loc) for loc in error["loc"] if loc not in ("body", "query", "path")
            ),
            "message": error["msg"],
            "type": error["type"],
        })
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={
            "success": False,
            "error": "Request validation failed.",
            "code": "VALIDATION_ERROR",
            "details": {"errors": field_errors},
        },
    )


async def http_exception_handler(
    request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "error": str(exc.detail), "code": "HTTP_ERROR"},
        headers=getattr(exc, "headers", None),
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "success": False,
            "error": "An unexpected error occurred.",
            "code": "INTERNAL_ERROR",
        },
    )

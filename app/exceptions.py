# =============================================================================
# app/exceptions.py - Custom Exceptions and Handlers
# =============================================================================
# Centralized error taxonomy for the API. Every error carries a machine code,
# the HTTP status it surfaces as, and a suggestion telling the admin how to
# fix it.
#
#   ValidationFailed  -> 400   (bad content type, oversized file, missing field)
#   Unauthorized      -> 401   (no valid session)
#   NotFound          -> 404   (record or stored object)
#   Conflict          -> 409   (reserved for optimistic locking)
#   StoreUnavailable  -> 500   (database or storage backend failure)
# =============================================================================

from typing import Any

from fastapi import Request
from fastapi.responses import JSONResponse


class PortfolioException(Exception):
    """
    Base exception for the portfolio API.

    All custom exceptions inherit from this class.
    Provides structured error responses with actionable suggestions.
    """

    def __init__(
        self,
        message: str,
        code: str = "PORTFOLIO_ERROR",
        status_code: int = 500,
        suggestion: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.status_code = status_code
        self.suggestion = suggestion
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to API response dict."""
        result = {
            "detail": self.message,
            "code": self.code,
        }
        if self.suggestion:
            result["suggestion"] = self.suggestion
        if self.details:
            result["details"] = self.details
        return result


# =============================================================================
# Validation Exceptions (400)
# =============================================================================

class ValidationFailedError(PortfolioException):
    """Raised when input is malformed. Always raised before any store is touched."""

    def __init__(
        self,
        reason: str,
        code: str = "VALIDATION_FAILED",
        suggestion: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(
            message=reason,
            code=code,
            status_code=400,
            suggestion=suggestion,
            details=details,
        )


class InvalidContentError(ValidationFailedError):
    """Raised when the storage provider rejects the declared content type."""

    def __init__(self, filename: str, content_type: str, error: str):
        super().__init__(
            reason=f"Storage rejected {filename} ({content_type}): {error}",
            code="INVALID_CONTENT",
            suggestion="Check the file type allowed by the bucket in the Supabase dashboard",
            details={"filename": filename, "content_type": content_type},
        )


class AssetInUseError(ValidationFailedError):
    """Raised when deleting a stored object that a record still references."""

    def __init__(self, bucket: str, key: str):
        super().__init__(
            reason=f"File is still referenced by a record: {key}",
            code="ASSET_IN_USE",
            suggestion="Replace or clear the field that uses this file first",
            details={"bucket": bucket, "key": key},
        )


# =============================================================================
# Auth Exceptions (401)
# =============================================================================

class UnauthorizedError(PortfolioException):
    """Raised when a mutating call arrives without a valid session."""

    def __init__(self, reason: str = "Unauthorized"):
        super().__init__(
            message=reason,
            code="UNAUTHORIZED",
            status_code=401,
            suggestion="Log in to the admin panel again",
        )


# =============================================================================
# Not Found Exceptions (404)
# =============================================================================

class RecordNotFoundError(PortfolioException):
    """Raised when a record id doesn't exist."""

    def __init__(self, table: str, record_id: str | int):
        super().__init__(
            message=f"Record not found in {table}: {record_id}",
            code="RECORD_NOT_FOUND",
            status_code=404,
            suggestion="Check that the id is correct and the record hasn't been deleted",
            details={"table": table, "id": str(record_id)},
        )


class ObjectNotFoundError(PortfolioException):
    """Raised when a stored object doesn't exist in its bucket."""

    def __init__(self, bucket: str, key: str):
        super().__init__(
            message=f"File not found in {bucket}: {key}",
            code="OBJECT_NOT_FOUND",
            status_code=404,
            details={"bucket": bucket, "key": key},
        )


# =============================================================================
# Conflict (409)
# =============================================================================

class ConflictError(PortfolioException):
    """Reserved for optimistic-locking mismatches on update."""

    def __init__(self, table: str, record_id: str | int):
        super().__init__(
            message=f"Record was modified concurrently: {record_id}",
            code="CONFLICT",
            status_code=409,
            suggestion="Reload the record and apply your changes again",
            details={"table": table, "id": str(record_id)},
        )


# =============================================================================
# Store Exceptions (500)
# =============================================================================

class StoreUnavailableError(PortfolioException):
    """Raised when the database or storage backend fails. Never retried here."""

    def __init__(
        self,
        operation: str,
        error: str,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(
            message=f"Failed to {operation}: {error}",
            code="STORE_UNAVAILABLE",
            status_code=500,
            suggestion="Try the whole operation again later",
            details={"operation": operation, "error": error, **(details or {})},
        )


class PersistFailedError(StoreUnavailableError):
    """
    Raised when files were stored but the record update referencing them failed.

    `details["orphaned_uploads"]` lists the keys that were stored for this
    request and are now unreferenced; `details["cleanup"]` says which of them
    were removed again.
    """

    def __init__(self, table: str, error: str, details: dict[str, Any] | None = None):
        super().__init__(f"save record in {table}", error, details=details)
        self.code = "PERSIST_FAILED"


# =============================================================================
# Exception Handlers
# =============================================================================

async def portfolio_exception_handler(
    request: Request,
    exc: PortfolioException
) -> JSONResponse:
    """
    Convert PortfolioException to JSON response.

    Returns structured error with:
    - detail: Human-readable message
    - code: Machine-readable error code
    - suggestion: How to fix (if available)
    - details: Additional context
    """
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_dict()
    )


async def validation_exception_handler(
    request: Request,
    exc: Exception
) -> JSONResponse:
    """Handle request body validation errors as VALIDATION_FAILED."""
    errors = exc.errors() if hasattr(exc, "errors") else str(exc)
    return JSONResponse(
        status_code=400,
        content={
            "detail": "Validation error",
            "code": "VALIDATION_FAILED",
            "errors": errors if isinstance(errors, str) else [
                {"loc": list(e.get("loc", [])), "msg": e.get("msg")} for e in errors
            ],
        }
    )

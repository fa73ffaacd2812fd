"""Application exception hierarchy.

Every exception carries a machine-readable ``error_code``, the HTTP status it
maps to and optional structured ``details``; the handlers in
``washtrack.middleware.error_handler`` render them as ``ErrorResponse``.
"""

from typing import Any, Optional


class BaseAPIException(Exception):
    """Base class for all application errors surfaced through the API."""

    status_code: int = 500
    error_code: str = "INTERNAL_ERROR"

    def __init__(
        self,
        message: str,
        details: Optional[dict[str, Any]] = None,
        status_code: Optional[int] = None,
        error_code: Optional[str] = None,
    ):
        super().__init__(message)
        self.message = message
        self.details = details or {}
        if status_code is not None:
            self.status_code = status_code
        if error_code is not None:
            self.error_code = error_code

    def __repr__(self) -> str:
        return f"{type(self).__name__}(error_code={self.error_code!r}, message={self.message!r})"


# ============================================================================
# Report builder errors
# ============================================================================


class ValidationError(BaseAPIException):
    """Malformed filter, sort, column or template input.

    Raised before anything reaches the executor. ``field`` names the offending
    input so the caller can render a field-level message.
    """

    status_code = 422
    error_code = "VALIDATION_ERROR"

    def __init__(self, field: str, message: str):
        super().__init__(message, details={"field": field})
        self.field = field


class InvalidConfigurationError(BaseAPIException):
    """Configuration references a column that is not in the registry."""

    status_code = 400
    error_code = "INVALID_CONFIGURATION"

    def __init__(self, message: str, column_ids: Optional[list[str]] = None):
        super().__init__(message, details={"column_ids": column_ids or []})
        self.column_ids = column_ids or []


class DataAccessError(BaseAPIException):
    """The data store failed during execution or persistence.

    Reports are user-initiated, so there is no automatic retry; the user may
    re-trigger the action.
    """

    status_code = 503
    error_code = "DATA_ACCESS_ERROR"

    def __init__(self, operation: str, message: str = "The report data could not be loaded"):
        super().__init__(message, details={"operation": operation})
        self.operation = operation


class ReportTooLargeError(BaseAPIException):
    """More records matched than a full report may hold.

    Exports and summaries never run on a partial result set; the caller has
    to narrow the filters.
    """

    status_code = 422
    error_code = "REPORT_TOO_LARGE"

    def __init__(self, row_limit: int):
        super().__init__(
            f"The report matches more than {row_limit} records; narrow the filters",
            details={"row_limit": row_limit},
        )
        self.row_limit = row_limit


class ExportError(BaseAPIException):
    """Spreadsheet rendering failed as a whole."""

    status_code = 500
    error_code = "EXPORT_FAILED"


# ============================================================================
# Resource errors
# ============================================================================


class ResourceNotFoundError(BaseAPIException):
    """Requested resource does not exist."""

    status_code = 404
    error_code = "RESOURCE_NOT_FOUND"

    def __init__(self, resource_type: str, resource_id: str):
        super().__init__(
            f"{resource_type} with id '{resource_id}' not found",
            details={"resource_type": resource_type, "resource_id": resource_id},
        )


class ConflictError(BaseAPIException):
    """Request conflicts with existing state (e.g. duplicate template name)."""

    status_code = 409
    error_code = "CONFLICT"


class ForbiddenError(BaseAPIException):
    """Operation is not allowed on this resource."""

    status_code = 403
    error_code = "FORBIDDEN"


class DatabaseError(BaseAPIException):
    """Unhandled database failure reaching the API boundary."""

    status_code = 500
    error_code = "DATABASE_ERROR"

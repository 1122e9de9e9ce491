from typing import Any, Dict, List, Optional


class InvoiceAPIError(Exception):
    """Base class for errors that map onto an HTTP error response"""

    status_code: int = 500
    error: str = "Internal server error"

    def __init__(self, error: Optional[str] = None, details: Any = None,
                 status_code: Optional[int] = None):
        super().__init__(error or self.error)
        if error:
            self.error = error
        if status_code:
            self.status_code = status_code
        self.details = details


class InvoiceValidationError(InvoiceAPIError):
    status_code = 400
    error = "Validation error"

    def __init__(self, details: List[Dict[str, str]]):
        super().__init__(details=details)

    @classmethod
    def for_field(cls, field: str, message: str) -> "InvoiceValidationError":
        return cls([{"field": field, "message": message}])


class InvoiceNotFoundError(InvoiceAPIError):
    status_code = 404
    error = "Invoice not found"


class DatabaseError(InvoiceAPIError):
    """A query against the managed Postgres failed"""

    UNIQUE_VIOLATION = "23505"

    def __init__(self, code: Optional[str], message: str):
        self.code = code or ""
        # PostgREST errors are caused by the request, anything else is on us
        status_code = 400 if self.code.startswith("PGRST") else 500
        super().__init__("Database error", details=message, status_code=status_code)
        self.message = message

    @property
    def is_unique_violation(self) -> bool:
        return self.code == self.UNIQUE_VIOLATION


class AuthenticationError(InvoiceAPIError):
    status_code = 401
    error = "Invalid or expired token"


class AuthUnavailableError(InvoiceAPIError):
    status_code = 503
    error = "Auth service temporarily unavailable. Please try again."

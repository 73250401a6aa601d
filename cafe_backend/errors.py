from __future__ import annotations


class ApiError(Exception):
    """Base error rendered as ``{"success": false, "error", "code"}``."""

    status_code: int = 500
    code: str | None = None

    def __init__(self, message: str, status_code: int | None = None, code: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        if code is not None:
            self.code = code


class BadRequestError(ApiError):
    status_code = 400
    code = "BAD_REQUEST"

    def __init__(self, message: str = "Bad Request", code: str = "BAD_REQUEST") -> None:
        super().__init__(message, code=code)


class NotFoundError(ApiError):
    status_code = 404
    code = "NOT_FOUND"

    def __init__(self, message: str = "Not Found", code: str = "NOT_FOUND") -> None:
        super().__init__(message, code=code)


class ConflictError(ApiError):
    status_code = 409
    code = "CONFLICT"

    def __init__(self, message: str = "Conflict", code: str = "CONFLICT") -> None:
        super().__init__(message, code=code)


class ServiceUnavailableError(ApiError):
    status_code = 503
    code = "SERVICE_UNAVAILABLE"

    def __init__(
        self, message: str = "Service Unavailable", code: str = "SERVICE_UNAVAILABLE",
    ) -> None:
        super().__init__(message, code=code)


class DatabaseError(RuntimeError):
    """Raised when the JSON database file cannot be written."""

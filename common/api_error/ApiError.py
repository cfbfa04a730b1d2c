# common/api_error/ApiError.py
class AppError(Exception):
    """Base error for all application-specific issues."""

    def __init__(
        self,
        message: str,
        status_code: int = 400,
        code: str = "INTERNAL_ERROR",
    ):
        self.message = message
        self.status_code = status_code
        self.code = code
        super().__init__(self.message)


class DatabaseError(AppError):
    """
    Persistence failure surfaced to the caller.

    The underlying driver message is passed through for display.
    """

    def __init__(self, message: str):
        super().__init__(message, status_code=500, code="DATABASE_ERROR")


class NotFoundError(AppError):
    """Requested record does not exist (or is not visible)."""

    def __init__(self, entity: str, identifier: str):
        self.entity = entity
        self.identifier = identifier
        super().__init__(
            f"{entity} '{identifier}' not found",
            status_code=404,
            code="NOT_FOUND",
        )


class AuthorizationError(AppError):
    """Actor is not allowed to perform the operation."""

    def __init__(self, message: str, *, authenticated: bool = True):
        super().__init__(
            message,
            status_code=403 if authenticated else 401,
            code="FORBIDDEN" if authenticated else "UNAUTHENTICATED",
        )


__all__ = ["AppError", "DatabaseError", "NotFoundError", "AuthorizationError"]

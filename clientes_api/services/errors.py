from typing import Optional


class ApiError(Exception):
    """Failure that maps onto an HTTP status and a client-safe ``message``.

    ``errors`` and ``details`` are optional extra keys copied into the JSON
    body. Never put raw store errors in ``message``; log them instead.
    """

    status_code: int = 500
    default_message: str = "Internal server error"

    def __init__(
        self,
        message: Optional[str] = None,
        *,
        errors: Optional[list[str]] = None,
        details: Optional[str] = None,
        headers: Optional[dict[str, str]] = None,
    ) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)
        self.errors = errors
        self.details = details
        self.headers = headers

    def to_body(self) -> dict:
        body: dict = {"message": self.message}
        if self.errors:
            body["errors"] = self.errors
        if self.details:
            body["details"] = self.details
        return body


class BadRequest(ApiError):
    status_code = 400
    default_message = "Invalid request"


class NotAuthenticated(ApiError):
    status_code = 401
    default_message = "Not authenticated"


class Forbidden(ApiError):
    status_code = 403
    default_message = "Access denied"


class NotFound(ApiError):
    status_code = 404
    default_message = "Not found"


class TooManyRequests(ApiError):
    status_code = 429
    default_message = "Too many requests"

    def __init__(self, message: Optional[str] = None, *, retry_after: int = 0) -> None:
        super().__init__(message, headers={"Retry-After": str(max(retry_after, 1))})
        self.retry_after = retry_after


class Internal(ApiError):
    status_code = 500
    default_message = "Internal server error"

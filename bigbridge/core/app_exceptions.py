"""HTTP-facing exceptions for the warehouse router."""

from typing import Any

from fastapi import HTTPException, status

from bigbridge.core.errors import BigError, QueryTimeoutError


class AppError(HTTPException):
    """Application error with standardized error code."""

    def __init__(
        self,
        status_code: int,
        code: str,
        message: str,
        details: dict[str, Any] | list[Any] | None = None,
    ):
        """Initialize application error."""
        super().__init__(
            status_code=status_code,
            detail={
                "code": code,
                "message": message,
                "details": details,
            },
        )
        self.code = code
        self.message = message
        self.details = details


def raise_app_error(
    status_code: int,
    code: str,
    message: str,
    details: dict[str, Any] | list[Any] | None = None,
) -> None:
    """Raise an application error with standardized format."""
    raise AppError(status_code=status_code, code=code, message=message, details=details)


def app_error_from(exc: BigError) -> AppError:
    """Translate a bridge error into an HTTP error."""
    if isinstance(exc, QueryTimeoutError):
        status_code = status.HTTP_504_GATEWAY_TIMEOUT
    else:
        status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    return AppError(status_code=status_code, code=exc.code, message=exc.message, details=exc.details)

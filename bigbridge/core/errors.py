"""Bridge exception hierarchy.

Failures raised by the Google client library (network, auth, API errors) are
not wrapped: they propagate to the caller unchanged.
"""

from typing import Any


class BigError(Exception):
    """Base class for errors raised by the bridge itself."""

    code = "BIG_ERROR"

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class BigConfigError(BigError):
    """Required project or credential configuration is missing or invalid."""

    code = "BIG_CONFIG_ERROR"


class ModelTypeError(BigError, TypeError):
    """Schema derivation was asked for something that is not an ORM model."""

    code = "BIG_MODEL_TYPE_ERROR"


class WaitTimeoutError(BigError):
    """A bounded wait ran out of attempts or time."""

    code = "BIG_WAIT_TIMEOUT"

    def __init__(self, message: str, attempts: int, elapsed: float):
        super().__init__(message, {"attempts": attempts, "elapsed_seconds": round(elapsed, 3)})
        self.attempts = attempts
        self.elapsed = elapsed


class QueryTimeoutError(WaitTimeoutError):
    """A query job did not complete within the poll policy."""

    code = "BIG_QUERY_TIMEOUT"

    def __init__(self, message: str, attempts: int, elapsed: float, job_id: str | None = None):
        super().__init__(message, attempts, elapsed)
        self.job_id = job_id
        if job_id:
            self.details["job_id"] = job_id

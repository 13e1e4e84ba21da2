"""Bounded waits for remote state changes."""

from __future__ import annotations

import time
from collections.abc import Callable

from pydantic import BaseModel, Field

from bigbridge.core.config import Settings, settings
from bigbridge.core.errors import WaitTimeoutError
from bigbridge.core.logging import get_logger

logger = get_logger(__name__)


class WaitPolicy(BaseModel):
    """Fixed-interval polling with an attempt cap and an optional deadline."""

    interval: float = Field(default=0.5, gt=0, description="Seconds between checks")
    max_attempts: int = Field(default=1200, ge=1, description="Checks before giving up")
    timeout: float | None = Field(default=600.0, gt=0, description="Overall deadline in seconds")

    @classmethod
    def from_settings(cls, config: Settings | None = None) -> "WaitPolicy":
        config = config or settings
        return cls(
            interval=config.BIG_POLL_INTERVAL_SECONDS,
            max_attempts=config.BIG_POLL_MAX_ATTEMPTS,
            timeout=config.BIG_QUERY_TIMEOUT_SECONDS,
        )


def wait_until(
    check: Callable[[], bool],
    policy: WaitPolicy,
    *,
    sleep: Callable[[float], None] = time.sleep,
    clock: Callable[[], float] = time.monotonic,
    on_timeout: Callable[[], None] | None = None,
    description: str = "condition",
) -> int:
    """Call check() until it returns True; return the number of checks made.

    Raises WaitTimeoutError once max_attempts checks have failed or the
    deadline has passed; on_timeout runs first so the caller can cancel the
    remote work.
    """
    started = clock()
    attempts = 0

    while True:
        attempts += 1
        if check():
            return attempts

        elapsed = clock() - started
        out_of_attempts = attempts >= policy.max_attempts
        out_of_time = policy.timeout is not None and elapsed + policy.interval > policy.timeout
        if out_of_attempts or out_of_time:
            logger.warning(
                "wait_timeout",
                extra={
                    "event": "wait_timeout",
                    "description": description,
                    "attempts": attempts,
                    "elapsed_seconds": round(elapsed, 3),
                },
            )
            if on_timeout is not None:
                on_timeout()
            raise WaitTimeoutError(
                f"Gave up waiting for {description} after {attempts} checks",
                attempts=attempts,
                elapsed=elapsed,
            )

        sleep(policy.interval)


def settle(seconds: float, *, sleep: Callable[[float], None] = time.sleep) -> None:
    """Advisory pause after creating a table; streaming inserts lag behind creation."""
    if seconds <= 0:
        return
    logger.debug("settle", extra={"event": "settle", "seconds": seconds})
    sleep(seconds)

"""BigQuery readiness checks (configuration only, never connects)."""

import os
from typing import Any

from bigbridge.core.config import Settings, settings
from bigbridge.core.logging import get_logger

logger = get_logger(__name__)


class WarehouseReadinessStatus:
    """Warehouse readiness status."""

    def __init__(
        self,
        ready: bool,
        reason: str | None = None,
        checks: dict[str, Any] | None = None,
    ):
        self.ready = ready
        self.reason = reason
        self.checks = checks or {}

    def to_dict(self) -> dict[str, Any]:
        return {"ready": self.ready, "reason": self.reason, "checks": self.checks}


def check_warehouse_readiness(config: Settings | None = None) -> WarehouseReadinessStatus:
    """
    Check whether the bridge is configured well enough to talk to BigQuery.

    Rules:
    - BIG_PROJECT_ID missing: ready=false, reason="missing_project_id"
    - BIG_AUTH_FILE set but not a file: ready=false, reason="auth_file_not_found"
    - BIG_DEFAULT_DATASET missing: ready=false, reason="missing_default_dataset"

    Absent BIG_AUTH_FILE is fine: application default credentials apply.
    """
    config = config or settings
    checks: dict[str, Any] = {}

    if not config.BIG_PROJECT_ID:
        return WarehouseReadinessStatus(
            ready=False,
            reason="missing_project_id",
            checks={"project_id": False},
        )
    checks["project_id"] = config.BIG_PROJECT_ID

    if config.BIG_AUTH_FILE:
        if not os.path.isfile(config.BIG_AUTH_FILE):
            return WarehouseReadinessStatus(
                ready=False,
                reason="auth_file_not_found",
                checks={**checks, "credentials": "key_file", "auth_file_exists": False},
            )
        checks["credentials"] = "key_file"
    else:
        checks["credentials"] = "application_default"

    if not config.BIG_DEFAULT_DATASET:
        return WarehouseReadinessStatus(
            ready=False,
            reason="missing_default_dataset",
            checks={**checks, "default_dataset": False},
        )
    checks["default_dataset"] = config.BIG_DEFAULT_DATASET

    checks["connectivity_check"] = "not_attempted"
    return WarehouseReadinessStatus(ready=True, reason=None, checks=checks)

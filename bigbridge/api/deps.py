"""FastAPI dependency providing the shared bridge."""

import threading

from bigbridge.core.logging import get_logger
from bigbridge.warehouse.bridge import Big

logger = get_logger(__name__)

# Process-wide bridge, built on first use
_bridge: Big | None = None
_lock = threading.Lock()


def get_bridge() -> Big:
    """Shared Big instance; use with ``Depends(get_bridge)``.

    Configuration errors surface here, on first use.
    """
    global _bridge

    if _bridge is None:
        with _lock:
            if _bridge is None:
                _bridge = Big()
                logger.info("bigquery_bridge_ready", extra={"event": "bigquery_bridge_ready"})
    return _bridge


def set_bridge(bridge: Big | None) -> None:
    global _bridge
    _bridge = bridge


def reset_bridge() -> None:
    set_bridge(None)

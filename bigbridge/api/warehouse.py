"""Warehouse endpoints.

Mount behind the host application's admin authentication:

    app.include_router(warehouse.router, prefix="/v1/admin", dependencies=[Depends(require_admin)])
"""

from typing import Any

from fastapi import APIRouter, Depends, Query, status
from pydantic import BaseModel

from bigbridge.api.deps import get_bridge
from bigbridge.core.app_exceptions import app_error_from, raise_app_error
from bigbridge.core.errors import BigError
from bigbridge.core.logging import get_logger
from bigbridge.warehouse.bridge import Big
from bigbridge.warehouse.readiness import check_warehouse_readiness

logger = get_logger(__name__)

router = APIRouter(prefix="/warehouse", tags=["warehouse"])


class TableLookupResponse(BaseModel):
    """Table existence response."""

    dataset: str
    table_id: str
    exists: bool


class MaxFieldResponse(BaseModel):
    """Column maximum response."""

    table_id: str
    field: str
    value: Any = None


def require_bridge() -> Big:
    try:
        return get_bridge()
    except BigError as e:
        logger.error("bigquery_bridge_unavailable", extra={"event": "bigquery_bridge_unavailable", "error": e.message})
        raise app_error_from(e) from e


@router.get("/readiness")
def warehouse_readiness() -> dict[str, Any]:
    """Configuration readiness; does not contact BigQuery."""
    return check_warehouse_readiness().to_dict()


@router.get("/tables/{table_name}", response_model=TableLookupResponse)
def lookup_table(
    table_name: str,
    dataset: str | None = Query(default=None),
    bridge: Big = Depends(require_bridge),
) -> TableLookupResponse:
    try:
        resolved = dataset or bridge.default_dataset
        table = bridge.get_table(table_name, resolved)
    except BigError as e:
        raise app_error_from(e) from e
    return TableLookupResponse(dataset=resolved or "", table_id=table_name, exists=table is not None)


@router.get("/tables/{table_name}/max/{field}", response_model=MaxFieldResponse)
def max_field(
    table_name: str,
    field: str,
    dataset: str | None = Query(default=None),
    bridge: Big = Depends(require_bridge),
) -> MaxFieldResponse:
    try:
        value = bridge.get_max_field(table_name, field, dataset)
    except ValueError as e:
        raise_app_error(status.HTTP_422_UNPROCESSABLE_ENTITY, "INVALID_IDENTIFIER", str(e))
    except BigError as e:
        raise app_error_from(e) from e
    return MaxFieldResponse(table_id=table_name, field=field, value=value)

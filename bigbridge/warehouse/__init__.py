"""BigQuery bridge for SQLAlchemy applications.

This module provides:
- Big: query runner, streaming inserts, table provisioning
- Schema derivation from live table descriptions (cached)
- Row preparation with insertId dedup keys for auto-increment models
"""

from bigbridge.warehouse.bridge import Big
from bigbridge.warehouse.contracts import ColumnRecord, InsertReport, PreparedRow, SchemaField, StructHint
from bigbridge.warehouse.rows import prepare_data
from bigbridge.warehouse.schema import field_map
from bigbridge.warehouse.types import FieldMode, NativeType, WarehouseType, map_native_type
from bigbridge.warehouse.waits import WaitPolicy

__all__ = [
    "Big",
    "ColumnRecord",
    "FieldMode",
    "InsertReport",
    "NativeType",
    "PreparedRow",
    "SchemaField",
    "StructHint",
    "WaitPolicy",
    "WarehouseType",
    "field_map",
    "map_native_type",
    "prepare_data",
]

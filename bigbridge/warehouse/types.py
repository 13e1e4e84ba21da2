"""Native column type tokens and their BigQuery counterparts."""

from __future__ import annotations

import datetime as dt
from collections.abc import Mapping
from decimal import Decimal
from enum import Enum
from typing import Any


class NativeType:
    """Column type tokens as reported by DESCRIBE (MySQL) or compiled by SQLAlchemy."""

    JSON = "json"
    BIGINT = "bigint"
    BOOLEAN = "tinyint"
    DATETIME = "datetime"
    TIMESTAMP = "timestamp"
    DATE = "date"
    TIME = "time"
    DECIMAL = "decimal"
    INTEGER = "integer"
    OBJECT = "object"
    MEDIUMINT = "mediumint"
    SMALLINT = "smallint"
    TINYINT = "tinyint"
    INT = "int"
    STRING = "string"
    TEXT = "text"
    LONGTEXT = "longtext"
    MEDIUMTEXT = "mediumtext"
    BINARY = "binary"
    BLOB = "blob"
    FLOAT = "float"
    CHAR = "char"
    ENUM = "enum"
    DOUBLE = "double"

    # Spellings used by SQLite/Postgres dialects
    BOOL = "bool"
    BOOLEAN_NAME = "boolean"
    NUMERIC = "numeric"
    REAL = "real"


class WarehouseType(str, Enum):
    """BigQuery column types produced by the bridge."""

    STRING = "STRING"
    INTEGER = "INTEGER"
    FLOAT = "FLOAT"
    BOOLEAN = "BOOLEAN"
    TIMESTAMP = "TIMESTAMP"
    DATETIME = "DATETIME"
    TIME = "TIME"
    STRUCT = "STRUCT"


class FieldMode(str, Enum):
    """BigQuery column modes."""

    REQUIRED = "REQUIRED"
    NULLABLE = "NULLABLE"


TYPE_MAP: dict[str, WarehouseType] = {
    NativeType.TIMESTAMP: WarehouseType.TIMESTAMP,
    NativeType.INT: WarehouseType.INTEGER,
    NativeType.TINYINT: WarehouseType.INTEGER,
    NativeType.BIGINT: WarehouseType.INTEGER,
    NativeType.INTEGER: WarehouseType.INTEGER,
    NativeType.SMALLINT: WarehouseType.INTEGER,
    NativeType.MEDIUMINT: WarehouseType.INTEGER,
    NativeType.DATE: WarehouseType.DATETIME,
    NativeType.DATETIME: WarehouseType.DATETIME,
    NativeType.DECIMAL: WarehouseType.FLOAT,
    NativeType.FLOAT: WarehouseType.FLOAT,
    NativeType.DOUBLE: WarehouseType.FLOAT,
    NativeType.NUMERIC: WarehouseType.FLOAT,
    NativeType.REAL: WarehouseType.FLOAT,
    NativeType.TIME: WarehouseType.TIME,
    NativeType.BOOL: WarehouseType.BOOLEAN,
    NativeType.BOOLEAN_NAME: WarehouseType.BOOLEAN,
}


def base_token(native_type: str) -> str:
    """Strip the length/precision suffix: ``varchar(255)`` -> ``varchar``.

    Trailing modifiers such as ``unsigned`` are dropped as well.
    """
    head = native_type.split("(", 1)[0].strip().lower()
    return head.split(" ", 1)[0] if head else head


def map_native_type(native_type: str, *, boolean: bool = False) -> WarehouseType:
    """Map a native column type to its BigQuery type.

    ``json`` maps to STRUCT; whether the column survives is the caller's
    decision since the nested layout cannot be read from the column type.
    ``boolean`` marks a tinyint column the model declares as Boolean.
    """
    token = base_token(native_type)
    if token == NativeType.JSON:
        return WarehouseType.STRUCT
    if boolean and token == NativeType.BOOLEAN:
        return WarehouseType.BOOLEAN
    return TYPE_MAP.get(token, WarehouseType.STRING)


def mode_for(null_flag: Any) -> FieldMode:
    if isinstance(null_flag, str) and null_flag.strip().lower() == "yes":
        return FieldMode.NULLABLE
    return FieldMode.REQUIRED


def runtime_type_name(value: Any) -> str:
    """BigQuery type name for a Python value found inside a nested row mapping."""
    # bool before int: bool is an int subclass
    if isinstance(value, bool):
        return WarehouseType.BOOLEAN.value
    if isinstance(value, int):
        return WarehouseType.INTEGER.value
    if isinstance(value, (float, Decimal)):
        return WarehouseType.FLOAT.value
    if isinstance(value, (dt.datetime, dt.date)):
        return WarehouseType.DATETIME.value
    if isinstance(value, dt.time):
        return WarehouseType.TIME.value
    if isinstance(value, Mapping):
        return WarehouseType.STRUCT.value
    return WarehouseType.STRING.value

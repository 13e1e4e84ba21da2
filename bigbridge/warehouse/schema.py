"""Model -> BigQuery schema derivation.

The column list comes from the live database (DESCRIBE on MySQL, the
SQLAlchemy inspector elsewhere), not from the Python model, so the derived
schema matches what is actually stored. Describe results are cached.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from typing import Any

from sqlalchemy import Boolean, inspect, text
from sqlalchemy.engine import Connection, Engine
from sqlalchemy.orm import Mapper, Session

from bigbridge.cache.helpers import describe_key
from bigbridge.cache.store import CacheStore, remember
from bigbridge.core.errors import ModelTypeError
from bigbridge.core.logging import get_logger
from bigbridge.warehouse.contracts import ColumnRecord, SchemaField, StructHint
from bigbridge.warehouse.types import NativeType, WarehouseType, base_token, map_native_type, mode_for

logger = get_logger(__name__)

Bind = Engine | Connection | Session
StructHints = Mapping[str, Sequence[StructHint | SchemaField | Mapping[str, Any]]]


def resolve_mapper(model: Any) -> Mapper:
    """Mapper for a mapped class or instance; ModelTypeError for anything else."""
    insp = inspect(model, raiseerr=False)
    if insp is None:
        raise ModelTypeError(
            f"Expected a SQLAlchemy mapped model, got {type(model).__name__}.",
            {"type": type(model).__name__},
        )
    if isinstance(insp, Mapper):
        return insp
    mapper = getattr(insp, "mapper", None)
    if not isinstance(mapper, Mapper):
        raise ModelTypeError(
            f"Expected a SQLAlchemy mapped model, got {type(model).__name__}.",
            {"type": type(model).__name__},
        )
    return mapper


def table_name_for(model: Any) -> str:
    return resolve_mapper(model).local_table.name


def hidden_columns(model: Any) -> set[str]:
    """Columns never mirrored: ``__hidden__`` plus columns with ``info={"hidden": True}``."""
    mapper = resolve_mapper(model)
    hidden = set(getattr(mapper.class_, "__hidden__", ()) or ())
    for column in mapper.local_table.columns:
        if column.info.get("hidden"):
            hidden.add(column.name)
    return hidden


def boolean_columns(model: Any) -> set[str]:
    mapper = resolve_mapper(model)
    return {c.name for c in mapper.local_table.columns if isinstance(c.type, Boolean)}


def _as_str(value: Any) -> str:
    if isinstance(value, bytes):
        return value.decode("utf-8")
    return "" if value is None else str(value)


def _describe_mysql(conn: Connection, table_name: str) -> list[ColumnRecord]:
    quoted = conn.dialect.identifier_preparer.quote(table_name)
    rows = conn.execute(text(f"DESCRIBE {quoted}")).mappings().all()
    return [
        ColumnRecord(Field=_as_str(r["Field"]), Type=_as_str(r["Type"]), Null=_as_str(r["Null"]))
        for r in rows
    ]


def _describe_inspected(conn: Connection, table_name: str) -> list[ColumnRecord]:
    records = []
    for column in inspect(conn).get_columns(table_name):
        native = column["type"].compile(dialect=conn.dialect)
        records.append(
            ColumnRecord(
                Field=column["name"],
                Type=native.lower(),
                Null="YES" if column.get("nullable", True) else "NO",
            )
        )
    return records


def describe_table(bind: Bind, table_name: str) -> list[ColumnRecord]:
    """Column records (name, native type, nullability) for a live table."""

    def _run(conn: Connection) -> list[ColumnRecord]:
        if conn.dialect.name in ("mysql", "mariadb"):
            return _describe_mysql(conn, table_name)
        return _describe_inspected(conn, table_name)

    if isinstance(bind, Session):
        return _run(bind.connection())
    if isinstance(bind, Connection):
        return _run(bind)
    with bind.connect() as conn:
        return _run(conn)


def cached_describe(model: Any, bind: Bind, cache: CacheStore, ttl_seconds: int) -> list[ColumnRecord]:
    """describe_table through the cache, keyed by table name."""
    table_name = table_name_for(model)

    def _compute() -> list[dict[str, str]]:
        records = describe_table(bind, table_name)
        logger.info(
            "describe_table",
            extra={"event": "describe_table", "table": table_name, "columns": len(records)},
        )
        return [r.to_cache() for r in records]

    raw = remember(cache, describe_key(table_name), ttl_seconds, _compute)
    return [ColumnRecord.model_validate(r) for r in raw]


def field_map(
    records: Iterable[ColumnRecord],
    structs: StructHints | None = None,
    boolean: Iterable[str] = (),
) -> list[SchemaField]:
    """Map describe records to BigQuery fields, in column order.

    JSON columns need a struct hint keyed by column name; without one the
    column is left out of the schema.
    """
    structs = structs or {}
    boolean = set(boolean)
    fields: list[SchemaField] = []

    for record in records:
        nested: list[StructHint] = []
        if base_token(record.type) == NativeType.JSON:
            hint = structs.get(record.field)
            if not hint:
                logger.debug(
                    "json_column_skipped",
                    extra={"event": "json_column_skipped", "column": record.field},
                )
                continue
            nested = [StructHint.from_hint(h) for h in hint]

        field_type = map_native_type(record.type, boolean=record.field in boolean)
        fields.append(
            SchemaField(
                name=record.field,
                type=field_type,
                mode=mode_for(record.null),
                fields=nested if field_type == WarehouseType.STRUCT else [],
            )
        )

    return fields


def flip_model(
    model: Any,
    structs: StructHints | None = None,
    *,
    bind: Bind,
    cache: CacheStore,
    ttl_seconds: int,
) -> list[SchemaField]:
    """Derive the BigQuery schema of a mapped model's table."""
    resolve_mapper(model)
    records = cached_describe(model, bind, cache, ttl_seconds)
    hidden = hidden_columns(model)
    visible = [r for r in records if r.field not in hidden]
    return field_map(visible, structs, boolean_columns(model))

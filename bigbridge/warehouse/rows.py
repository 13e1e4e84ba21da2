"""Row preparation for streaming inserts."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any

from fastapi.encoders import jsonable_encoder

from bigbridge.warehouse.contracts import PreparedRow, SchemaField
from bigbridge.warehouse.schema import hidden_columns, resolve_mapper
from bigbridge.warehouse.types import WarehouseType, runtime_type_name


def model_to_dict(instance: Any) -> dict[str, Any]:
    """Column values of a mapped instance keyed by column name, hidden columns excluded."""
    mapper = resolve_mapper(instance)
    hidden = hidden_columns(instance)
    data: dict[str, Any] = {}
    for prop in mapper.column_attrs:
        column = prop.columns[0]
        if column.name in hidden:
            continue
        data[column.name] = getattr(instance, prop.key)
    return data


def is_incrementing(model: Any) -> bool:
    """Whether the model's primary key is generated by the database."""
    mapper = resolve_mapper(model)
    override = getattr(mapper.class_, "__incrementing__", None)
    if override is not None:
        return bool(override)
    return mapper.local_table.autoincrement_column is not None


def primary_key_value(instance: Any) -> Any:
    mapper = resolve_mapper(instance)
    identity = mapper.primary_key_from_instance(instance)
    return identity[0] if len(identity) == 1 else tuple(identity)


def _runtime_field(name: str, value: Any) -> SchemaField:
    if isinstance(value, Mapping):
        return SchemaField(
            name=name,
            type=WarehouseType.STRUCT,
            fields=[_runtime_field(str(key), attr) for key, attr in value.items()],
        )
    return SchemaField(name=name, type=runtime_type_name(value))


def struct_fields(data: Mapping[str, Any]) -> list[SchemaField]:
    """STRUCT descriptors for the nested mappings in a row, typed from runtime values."""
    return [_runtime_field(name, value) for name, value in data.items() if isinstance(value, Mapping)]


def prepare_row(item: Any) -> PreparedRow:
    if isinstance(item, Mapping):
        raw = dict(item)
        insert_id = None
    else:
        raw = model_to_dict(item)
        # insertId lets BigQuery drop duplicates when a streaming insert is retried
        insert_id = primary_key_value(item) if is_incrementing(item) else None

    fields = struct_fields(raw)
    return PreparedRow(
        insert_id=insert_id,
        data=jsonable_encoder(raw),
        fields=fields or None,
    )


def prepare_data(items: Iterable[Any]) -> list[PreparedRow]:
    """Turn model instances (or plain mappings) into streaming-insert rows."""
    return [prepare_row(item) for item in items]

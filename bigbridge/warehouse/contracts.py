"""Warehouse contracts (pydantic schemas).

These define the shapes the bridge hands to, and receives from, BigQuery:
- SchemaField: one derived column definition
- StructHint: one caller-declared sub-field of a JSON column
- PreparedRow: one streaming-insert row
- InsertReport: verbose insert outcome
- ColumnRecord: one describe-table record, as cached
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from google.cloud import bigquery
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from bigbridge.warehouse.types import FieldMode, WarehouseType


_RECORD_TYPES = {"STRUCT", "RECORD"}


class SchemaField(BaseModel):
    """BigQuery column definition derived from a model column or a struct hint."""

    name: str
    type: WarehouseType
    mode: FieldMode | None = None
    fields: list["SchemaField | StructHint"] = Field(default_factory=list)

    @field_validator("type", mode="before")
    @classmethod
    def upper_type(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.upper()
        return value

    @field_validator("mode", mode="before")
    @classmethod
    def upper_mode(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.upper()
        return value

    @model_validator(mode="after")
    def nested_only_for_struct(self) -> "SchemaField":
        if self.fields and self.type != WarehouseType.STRUCT:
            raise ValueError(f"Field {self.name!r}: nested fields require type STRUCT, got {self.type.value}")
        return self

    def to_api(self) -> dict[str, Any]:
        """Plain dict in BigQuery's JSON schema shape."""
        out: dict[str, Any] = {"name": self.name, "type": self.type.value}
        if self.mode is not None:
            out["mode"] = self.mode.value
        if self.fields:
            out["fields"] = [f.to_api() for f in self.fields]
        return out

    def to_bigquery(self) -> bigquery.SchemaField:
        mode = self.mode.value if self.mode is not None else FieldMode.NULLABLE.value
        return bigquery.SchemaField(
            self.name,
            self.type.value,
            mode=mode,
            fields=[f.to_bigquery() for f in self.fields],
        )


class StructHint(BaseModel):
    """Caller-supplied sub-field of a JSON column, kept as BigQuery declares it.

    Any BigQuery type or mode is accepted (``DATE``, ``NUMERIC``, ``REPEATED``...).
    """

    name: str
    type: str
    mode: str | None = None
    fields: list["StructHint"] = Field(default_factory=list)

    @field_validator("type", "mode", mode="before")
    @classmethod
    def upper(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.upper()
        return value

    @model_validator(mode="after")
    def nested_only_for_records(self) -> "StructHint":
        if self.fields and self.type not in _RECORD_TYPES:
            raise ValueError(f"Field {self.name!r}: nested fields require type STRUCT or RECORD, got {self.type}")
        return self

    @classmethod
    def from_hint(cls, hint: "StructHint | SchemaField | Mapping[str, Any]") -> "StructHint":
        """Build a sub-field from a hint such as ``{"name": "k", "type": "string"}``."""
        if isinstance(hint, StructHint):
            return hint
        if isinstance(hint, SchemaField):
            return cls.model_validate(hint.to_api())
        return cls.model_validate(dict(hint))

    def to_api(self) -> dict[str, Any]:
        out: dict[str, Any] = {"name": self.name, "type": self.type}
        if self.mode is not None:
            out["mode"] = self.mode
        if self.fields:
            out["fields"] = [f.to_api() for f in self.fields]
        return out

    def to_bigquery(self) -> bigquery.SchemaField:
        return bigquery.SchemaField(
            self.name,
            self.type,
            mode=self.mode or FieldMode.NULLABLE.value,
            fields=[f.to_bigquery() for f in self.fields],
        )


class PreparedRow(BaseModel):
    """One streaming-insert row."""

    insert_id: Any | None = Field(default=None, description="Dedup key for streaming retries")
    data: dict[str, Any]
    fields: list[SchemaField] | None = Field(default=None, description="STRUCT columns present in this row")

    def to_api(self) -> dict[str, Any]:
        out: dict[str, Any] = {}
        if self.insert_id is not None:
            out["insertId"] = self.insert_id
        out["data"] = self.data
        if self.fields:
            out["fields"] = [f.to_api() for f in self.fields]
        return out


class InsertReport(BaseModel):
    """Verbose outcome of a streaming insert."""

    affected_rows: int
    errors: list[dict[str, Any]] = Field(default_factory=list)
    info: dict[str, Any] = Field(default_factory=dict)

    @property
    def successful(self) -> bool:
        return not self.errors


class ColumnRecord(BaseModel):
    """One describe-table record. Keeps MySQL's DESCRIBE keys when serialized."""

    model_config = ConfigDict(populate_by_name=True)

    field: str = Field(alias="Field")
    type: str = Field(alias="Type")
    null: str = Field(alias="Null")

    def to_cache(self) -> dict[str, str]:
        return self.model_dump(by_alias=True)


SchemaField.model_rebuild()

"""Tests for model -> BigQuery schema derivation."""

from unittest.mock import patch

import pytest
from sqlalchemy.orm import Session

from bigbridge.cache.helpers import describe_key
from bigbridge.core.errors import ModelTypeError
from bigbridge.warehouse import schema as schema_derive
from bigbridge.warehouse.contracts import ColumnRecord
from bigbridge.warehouse.schema import describe_table, field_map, flip_model, hidden_columns
from tests.helpers.models import Flag, Order, Tag

TTL = 5 * 24 * 3600

ORDERS_DESCRIBE = [
    {"Field": "id", "Type": "int(11)", "Null": "NO"},
    {"Field": "total", "Type": "decimal(10,2)", "Null": "YES"},
    {"Field": "meta", "Type": "json", "Null": "NO"},
]


def _records(raw):
    return [ColumnRecord.model_validate(r) for r in raw]


class TestFieldMap:
    """Test mapping describe records to fields."""

    def test_orders_with_struct_hint(self):
        fields = field_map(_records(ORDERS_DESCRIBE), {"meta": [{"name": "k", "type": "STRING"}]})
        assert [f.to_api() for f in fields] == [
            {"name": "id", "type": "INTEGER", "mode": "REQUIRED"},
            {"name": "total", "type": "FLOAT", "mode": "NULLABLE"},
            {"name": "meta", "type": "STRUCT", "mode": "REQUIRED", "fields": [{"name": "k", "type": "STRING"}]},
        ]

    def test_json_without_hint_is_skipped(self):
        fields = field_map(_records(ORDERS_DESCRIBE))
        assert [f.name for f in fields] == ["id", "total"]

    def test_json_with_hint_for_other_column_is_skipped(self):
        fields = field_map(_records(ORDERS_DESCRIBE), {"other": [{"name": "k", "type": "STRING"}]})
        assert "meta" not in [f.name for f in fields]

    def test_boolean_columns(self):
        records = _records([{"Field": "active", "Type": "tinyint(1)", "Null": "NO"}])
        assert field_map(records, boolean=["active"])[0].type.value == "BOOLEAN"
        assert field_map(records)[0].type.value == "INTEGER"

    def test_unknown_types_are_strings(self):
        records = _records([{"Field": "name", "Type": "varchar(255)", "Null": "YES"}])
        field = field_map(records)[0]
        assert field.type.value == "STRING"
        assert field.mode.value == "NULLABLE"


class TestFlipModel:
    """Test schema derivation for mapped models."""

    def test_orders_end_to_end_from_cached_describe(self, engine, cache):
        cache.set(describe_key("orders"), ORDERS_DESCRIBE, TTL)

        with patch.object(schema_derive, "describe_table") as describe:
            fields = flip_model(
                Order,
                {"meta": [{"name": "k", "type": "STRING"}]},
                bind=engine,
                cache=cache,
                ttl_seconds=TTL,
            )
            describe.assert_not_called()

        assert [f.to_api() for f in fields] == [
            {"name": "id", "type": "INTEGER", "mode": "REQUIRED"},
            {"name": "total", "type": "FLOAT", "mode": "NULLABLE"},
            {"name": "meta", "type": "STRUCT", "mode": "REQUIRED", "fields": [{"name": "k", "type": "STRING"}]},
        ]

    def test_hidden_columns_are_excluded(self, engine, cache):
        cache.set(
            describe_key("orders"),
            ORDERS_DESCRIBE + [{"Field": "secret", "Type": "varchar(64)", "Null": "YES"}],
            TTL,
        )
        fields = flip_model(Order, bind=engine, cache=cache, ttl_seconds=TTL)
        assert [f.name for f in fields] == ["id", "total"]

    def test_live_describe_on_sqlite(self, engine, cache):
        fields = flip_model(Order, {"meta": [{"name": "k", "type": "STRING"}]}, bind=engine, cache=cache, ttl_seconds=TTL)
        by_name = {f.name: f.to_api() for f in fields}

        assert list(by_name) == ["id", "total", "meta"]
        assert by_name["id"] == {"name": "id", "type": "INTEGER", "mode": "REQUIRED"}
        assert by_name["total"] == {"name": "total", "type": "FLOAT", "mode": "NULLABLE"}
        assert by_name["meta"]["type"] == "STRUCT"

    def test_describe_is_cached_per_table(self, engine, cache):
        with patch.object(schema_derive, "describe_table", wraps=describe_table) as describe:
            flip_model(Tag, bind=engine, cache=cache, ttl_seconds=TTL)
            flip_model(Tag, bind=engine, cache=cache, ttl_seconds=TTL)
            assert describe.call_count == 1

        assert cache.get(describe_key("tags")) is not None

    def test_info_hidden_column_excluded(self, engine, cache):
        fields = flip_model(Tag, bind=engine, cache=cache, ttl_seconds=TTL)
        assert [f.name for f in fields] == ["code", "label"]

    def test_boolean_model_column(self, engine, cache):
        fields = flip_model(Flag, bind=engine, cache=cache, ttl_seconds=TTL)
        by_name = {f.name: f for f in fields}
        assert by_name["active"].type.value == "BOOLEAN"
        assert by_name["created_at"].type.value == "DATETIME"
        assert by_name["created_at"].mode.value == "NULLABLE"

    def test_accepts_instances(self, engine, cache):
        fields = flip_model(Tag(code="a", label="A"), bind=engine, cache=cache, ttl_seconds=TTL)
        assert [f.name for f in fields] == ["code", "label"]

    def test_session_bind(self, engine, cache):
        with Session(engine) as session:
            fields = flip_model(Tag, bind=session, cache=cache, ttl_seconds=TTL)
        assert [f.name for f in fields] == ["code", "label"]

    @pytest.mark.parametrize("not_a_model", [{"id": 1}, "orders", 42, object()])
    def test_rejects_non_models(self, engine, cache, not_a_model):
        with pytest.raises(ModelTypeError) as exc_info:
            flip_model(not_a_model, bind=engine, cache=cache, ttl_seconds=TTL)
        assert type(not_a_model).__name__ in str(exc_info.value)
        assert isinstance(exc_info.value, TypeError)


class TestDescribeTable:
    def test_sqlite_records(self, engine):
        records = describe_table(engine, "orders")
        assert [r.field for r in records] == ["id", "total", "meta", "secret"]
        assert records[0].null == "NO"
        assert records[1].null == "YES"
        assert records[2].type == "json"

    def test_hidden_columns(self):
        assert hidden_columns(Order) == {"secret"}
        assert hidden_columns(Tag) == {"api_key"}
        assert hidden_columns(Flag) == set()

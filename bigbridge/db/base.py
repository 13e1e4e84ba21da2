"""Declarative helpers for models mirrored into BigQuery.

Models do not have to inherit anything from this module: the bridge works on
any SQLAlchemy mapped class. The mixin only documents the two class-level
knobs the bridge reads.
"""

from typing import Any, ClassVar

from sqlalchemy import inspect


class WarehouseModelMixin:
    """Opt-in knobs for warehouse mirroring.

    __hidden__: column names never sent to the warehouse (schema or rows).
    __incrementing__: force (True/False) the auto-increment detection that
        decides whether streaming inserts carry an insertId.
    """

    __hidden__: ClassVar[tuple[str, ...]] = ()
    __incrementing__: ClassVar[bool | None] = None

    def to_warehouse_dict(self) -> dict[str, Any]:
        """Column values keyed by column name, hidden columns excluded."""
        from bigbridge.warehouse.rows import model_to_dict

        return model_to_dict(self)

    @classmethod
    def warehouse_table_name(cls) -> str:
        return inspect(cls).local_table.name

"""BigQuery bridge: queries, streaming inserts and model-driven tables.

Every call is a blocking, independent remote call; nothing here retries or
compensates. Client-library errors propagate to the caller.
"""

from __future__ import annotations

import re
import time
import uuid
from collections.abc import Callable, Iterable, Mapping, Sequence
from typing import Any

from google.cloud import bigquery
from google.cloud.bigquery.enums import AutoRowIDs
from google.cloud.bigquery.table import TableListItem

from bigbridge.cache.store import CacheStore, get_default_store
from bigbridge.core.config import Settings, settings
from bigbridge.core.errors import BigConfigError, QueryTimeoutError, WaitTimeoutError
from bigbridge.core.logging import get_logger
from bigbridge.db.engine import get_engine
from bigbridge.warehouse import rows as row_prep
from bigbridge.warehouse import schema as schema_derive
from bigbridge.warehouse.client import build_client
from bigbridge.warehouse.contracts import InsertReport, PreparedRow, SchemaField
from bigbridge.warehouse.waits import WaitPolicy, settle, wait_until

logger = get_logger(__name__)

_IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")
_TABLE_NAME = re.compile(r"^[A-Za-z0-9_-]+$")
_WIRE_KEYS = {"insertId", "data", "fields"}

WarehouseTable = bigquery.Table | TableListItem


def _check_identifier(value: str, pattern: re.Pattern[str] = _IDENTIFIER) -> str:
    if not pattern.match(value or ""):
        raise ValueError(f"Invalid BigQuery identifier: {value!r}")
    return value


def _is_wire_row(row: Mapping[str, Any]) -> bool:
    """True for the {insertId, data, fields} envelope; a lone "data" column is a plain row."""
    return (
        set(row) <= _WIRE_KEYS
        and isinstance(row.get("data"), Mapping)
        and ("insertId" in row or "fields" in row)
    )


class Big:
    """Wrapper around a BigQuery client for ORM-backed applications."""

    def __init__(
        self,
        client: bigquery.Client | None = None,
        *,
        config: Settings | None = None,
        cache: CacheStore | None = None,
        bind: Any | None = None,
        wait_policy: WaitPolicy | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.config = config or settings

        self.options: dict[str, Any] = {
            "use_legacy_sql": self.config.BIG_USE_LEGACY_SQL,
            "use_query_cache": self.config.BIG_USE_QUERY_CACHE,
        }
        self.default_dataset = self.config.BIG_DEFAULT_DATASET
        self.wait_policy = wait_policy or WaitPolicy.from_settings(self.config)
        self.settle_seconds = self.config.BIG_TABLE_SETTLE_SECONDS
        self.describe_ttl = self.config.BIG_DESCRIBE_CACHE_TTL_SECONDS

        self.client = client if client is not None else build_client(self.config)
        self._cache = cache
        self._bind = bind
        self._sleep = sleep

    @property
    def cache(self) -> CacheStore:
        if self._cache is None:
            self._cache = get_default_store()
        return self._cache

    @property
    def bind(self) -> Any:
        return self._bind if self._bind is not None else get_engine()

    def _dataset(self, dataset: str | None) -> str:
        dataset = dataset or self.default_dataset
        if not dataset:
            raise BigConfigError("No dataset given and BIG_DEFAULT_DATASET is not set")
        return dataset

    # Queries

    def run(self, query: str, options: Mapping[str, Any] | bigquery.QueryJobConfig | None = None) -> list[dict[str, Any]]:
        """Run a query, wait for the job and return its rows as dicts."""
        if isinstance(options, bigquery.QueryJobConfig):
            job_config = options
        else:
            job_config = bigquery.QueryJobConfig(**dict(options if options is not None else self.options))

        job = self.client.query(query, job_config=job_config)
        job_id = getattr(job, "job_id", None)

        def _cancel() -> None:
            try:
                job.cancel()
            except Exception as e:
                logger.warning(
                    "query_cancel_failed",
                    extra={"event": "query_cancel_failed", "job_id": job_id, "error": str(e)},
                )

        try:
            attempts = wait_until(
                job.done,
                self.wait_policy,
                sleep=self._sleep,
                on_timeout=_cancel,
                description=f"query job {job_id}",
            )
        except WaitTimeoutError as e:
            raise QueryTimeoutError(
                f"Query job {job_id} did not complete after {e.attempts} status checks",
                attempts=e.attempts,
                elapsed=e.elapsed,
                job_id=job_id,
            ) from e

        results = [dict(row.items()) for row in job.result()]
        logger.info(
            "query_complete",
            extra={"event": "query_complete", "job_id": job_id, "rows": len(results), "polls": attempts},
        )
        return results

    def get_max_field(self, table: str, field: str, dataset: str | None = None) -> Any:
        """Largest value of a column, None for an empty table."""
        dataset = _check_identifier(self._dataset(dataset))
        table = _check_identifier(table, _TABLE_NAME)
        field = _check_identifier(field)

        results = self.run(f"SELECT max({field}) {field} FROM `{dataset}.{table}`")
        return results[0].get(field) if results else None

    def get_max_id(self, table: str, dataset: str | None = None) -> Any:
        return self.get_max_field(table, "id", dataset)

    def get_max_creation_date(self, table: str, dataset: str | None = None) -> Any:
        return self.get_max_field(table, "created_at", dataset)

    # Inserts

    def _table_arg(self, table: Any) -> Any:
        if isinstance(table, str) and "." not in table:
            return f"{self.client.project}.{self._dataset(None)}.{table}"
        return table

    def insert(
        self,
        table: Any,
        rows: Sequence[PreparedRow | Mapping[str, Any]],
        options: Mapping[str, Any] | None = None,
        verbose: bool = False,
    ) -> bool | InsertReport | list[dict[str, Any]]:
        """Streaming insert.

        Returns True on success; with verbose an InsertReport; otherwise the
        list of per-row errors. Rejected rows are reported, never raised.
        """
        options = dict(options if options is not None else {"ignore_unknown_values": True})

        payload: list[dict[str, Any]] = []
        ids: list[Any] = []
        for row in rows:
            if isinstance(row, PreparedRow):
                payload.append(row.data)
                ids.append(row.insert_id)
            elif _is_wire_row(row):
                payload.append(dict(row["data"]))
                ids.append(row.get("insertId"))
            else:
                payload.append(dict(row))
                ids.append(None)

        table_id = getattr(table, "table_id", str(table))
        if not payload:
            return InsertReport(affected_rows=0, info={"table": table_id, "rows": 0}) if verbose else True

        if all(i is None for i in ids):
            row_ids: Any = AutoRowIDs.DISABLED
        else:
            row_ids = [str(i) if i is not None else str(uuid.uuid4()) for i in ids]

        failed = self.client.insert_rows_json(self._table_arg(table), payload, row_ids=row_ids, **options)

        errors: list[dict[str, Any]] = []
        for entry in failed or []:
            for error in entry.get("errors", []):
                errors.append({"index": entry.get("index"), **error})

        if failed:
            logger.warning(
                "insert_rows_failed",
                extra={"event": "insert_rows_failed", "table": table_id, "rows": len(payload), "failed_rows": len(failed)},
            )
        else:
            logger.info("insert_rows", extra={"event": "insert_rows", "table": table_id, "rows": len(payload)})

        if verbose:
            return InsertReport(
                affected_rows=len(payload) - len(failed or []),
                errors=errors,
                info={"table": table_id, "rows": len(payload), "failed_rows": len(failed or [])},
            )
        if not failed:
            return True
        return errors

    def prepare_data(self, items: Iterable[Any]) -> list[PreparedRow]:
        return row_prep.prepare_data(items)

    # Tables

    def get_table(self, table_name: str, dataset: str | None = None) -> WarehouseTable | None:
        """Find a table by exact id within a dataset."""
        dataset = self._dataset(dataset)
        for table in self.client.list_tables(dataset):
            if table.table_id == table_name:
                return table
        return None

    def flip_model(self, model: Any, structs: Mapping[str, Any] | None = None) -> list[SchemaField]:
        """BigQuery schema for a mapped model, from its live (cached) table description."""
        return schema_derive.flip_model(
            model,
            structs,
            bind=self.bind,
            cache=self.cache,
            ttl_seconds=self.describe_ttl,
        )

    derive_schema = flip_model

    def create_from_model(
        self,
        dataset: str | None,
        table_id: str,
        model: Any,
        structs: Mapping[str, Any] | None = None,
        use_delay: bool = True,
    ) -> WarehouseTable:
        """Return the named table, creating it from the model's schema if absent.

        Existing tables are returned as-is; schema changes are not applied.
        """
        dataset = self._dataset(dataset)
        existing = self.get_table(table_id, dataset)
        if existing is not None:
            return existing

        fields = self.flip_model(model, structs)
        ref = bigquery.DatasetReference(self.client.project, dataset).table(table_id)
        table = self.client.create_table(bigquery.Table(ref, schema=[f.to_bigquery() for f in fields]))
        logger.info(
            "table_created",
            extra={"event": "table_created", "dataset": dataset, "table": table_id, "fields": len(fields)},
        )

        # New tables are not immediately available to streaming inserts
        if use_delay:
            settle(self.settle_seconds, sleep=self._sleep)

        return table

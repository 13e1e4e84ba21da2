"""Tests for settings, readiness, client construction and logging."""

import io
import json
import logging
from unittest.mock import patch

import pytest
from pydantic import ValidationError

from bigbridge.core.config import Settings, settings
from bigbridge.core.errors import BigConfigError
from bigbridge.core.logging import CustomJsonFormatter, setup_logging
from bigbridge.db.engine import create_db_engine, get_engine
from bigbridge.warehouse.client import build_client
from bigbridge.warehouse.readiness import check_warehouse_readiness


class TestSettings:
    """Test settings defaults and production guards."""

    def test_defaults(self):
        config = Settings(_env_file=None)
        assert config.BIG_DESCRIBE_CACHE_TTL_SECONDS == 432000
        assert config.BIG_POLL_INTERVAL_SECONDS == 0.5
        assert config.BIG_TABLE_SETTLE_SECONDS == 10.0
        assert config.BIG_USE_LEGACY_SQL is False
        assert config.BIG_USE_QUERY_CACHE is False

    def test_env_vars(self, monkeypatch):
        monkeypatch.setenv("BIG_PROJECT_ID", "env-project")
        monkeypatch.setenv("big_default_dataset", "events")
        config = Settings(_env_file=None)
        assert config.BIG_PROJECT_ID == "env-project"
        assert config.BIG_DEFAULT_DATASET == "events"

    def test_prod_requires_project(self):
        with pytest.raises(ValidationError):
            Settings(_env_file=None, ENV="prod", BIG_PROJECT_ID=None)

    def test_prod_with_project(self):
        assert Settings(_env_file=None, ENV="prod", BIG_PROJECT_ID="p").ENV == "prod"


class TestReadiness:
    """Test configuration readiness."""

    def test_missing_project(self):
        status = check_warehouse_readiness(Settings(_env_file=None, BIG_PROJECT_ID=None))
        assert status.ready is False
        assert status.reason == "missing_project_id"

    def test_missing_auth_file(self, tmp_path):
        config = Settings(_env_file=None, BIG_PROJECT_ID="p", BIG_AUTH_FILE=str(tmp_path / "missing.json"))
        status = check_warehouse_readiness(config)
        assert status.ready is False
        assert status.reason == "auth_file_not_found"

    def test_missing_dataset(self):
        status = check_warehouse_readiness(Settings(_env_file=None, BIG_PROJECT_ID="p"))
        assert status.reason == "missing_default_dataset"
        assert status.checks["credentials"] == "application_default"

    def test_ready(self, tmp_path):
        key_file = tmp_path / "key.json"
        key_file.write_text("{}")
        config = Settings(
            _env_file=None,
            BIG_PROJECT_ID="p",
            BIG_AUTH_FILE=str(key_file),
            BIG_DEFAULT_DATASET="analytics",
        )
        status = check_warehouse_readiness(config)
        assert status.ready is True
        assert status.to_dict()["checks"]["credentials"] == "key_file"


class TestBuildClient:
    """Test BigQuery client construction."""

    def test_requires_project(self):
        with pytest.raises(BigConfigError):
            build_client(Settings(_env_file=None, BIG_PROJECT_ID=None))

    def test_missing_auth_file(self, tmp_path):
        config = Settings(_env_file=None, BIG_PROJECT_ID="p", BIG_AUTH_FILE=str(tmp_path / "nope.json"))
        with pytest.raises(BigConfigError):
            build_client(config)

    def test_default_credentials(self):
        with patch("bigbridge.warehouse.client.bigquery.Client") as client_cls:
            client = build_client(Settings(_env_file=None, BIG_PROJECT_ID="p"))
        client_cls.assert_called_once_with(project="p")
        assert client is client_cls.return_value

    def test_key_file(self, tmp_path):
        key_file = tmp_path / "key.json"
        key_file.write_text("{}")
        with patch("bigbridge.warehouse.client.bigquery.Client") as client_cls:
            build_client(Settings(_env_file=None, BIG_PROJECT_ID="p", BIG_AUTH_FILE=str(key_file)))
        client_cls.from_service_account_json.assert_called_once_with(str(key_file), project="p")


class TestJsonLogging:
    def test_records_are_json(self):
        stream = io.StringIO()
        handler = logging.StreamHandler(stream)
        handler.setFormatter(CustomJsonFormatter("%(timestamp)s %(level)s %(logger)s %(message)s"))
        logger = logging.getLogger("bigbridge.test")
        logger.addHandler(handler)
        logger.setLevel(logging.INFO)
        try:
            logger.info("table_created", extra={"event": "table_created", "table": "orders"})
        finally:
            logger.removeHandler(handler)

        payload = json.loads(stream.getvalue())
        assert payload["level"] == "INFO"
        assert payload["logger"] == "bigbridge.test"
        assert payload["event"] == "table_created"
        assert payload["table"] == "orders"


    def test_setup_logging_installs_json_handler(self):
        root = logging.getLogger()
        saved_handlers, saved_level = root.handlers[:], root.level
        try:
            setup_logging("debug")
            assert root.level == logging.DEBUG
            assert len(root.handlers) == 1
            assert isinstance(root.handlers[0].formatter, CustomJsonFormatter)
            assert logging.getLogger("google").level == logging.WARNING
            assert logging.getLogger("urllib3").level == logging.WARNING
        finally:
            root.handlers[:] = saved_handlers
            root.setLevel(saved_level)


class TestEngine:
    def test_lazy_engine_uses_database_url(self):
        with patch.object(settings, "DATABASE_URL", "sqlite://"):
            engine = get_engine()
        assert str(engine.url) == "sqlite://"
        assert get_engine() is engine

    def test_explicit_url(self):
        engine = create_db_engine("sqlite://")
        try:
            assert engine.dialect.name == "sqlite"
        finally:
            engine.dispose()

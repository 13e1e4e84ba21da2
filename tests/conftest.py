"""Pytest configuration and shared fixtures."""

from collections.abc import Generator

import pytest
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.pool import StaticPool

from bigbridge.api.deps import reset_bridge
from bigbridge.cache.store import MemoryCacheStore, reset_default_store
from bigbridge.core.config import Settings
from bigbridge.db.engine import reset_engine
from bigbridge.warehouse.bridge import Big
from bigbridge.warehouse.waits import WaitPolicy
from tests.helpers.fakes import FakeBigQueryClient, SleepRecorder
from tests.helpers.models import Base


@pytest.fixture(autouse=True)
def _reset_singletons() -> Generator[None, None, None]:
    yield
    reset_bridge()
    reset_default_store()
    reset_engine()


@pytest.fixture
def engine() -> Generator[Engine, None, None]:
    """SQLite in-memory engine with the test tables created."""
    eng = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=eng)
    try:
        yield eng
    finally:
        eng.dispose()


@pytest.fixture
def cache() -> MemoryCacheStore:
    return MemoryCacheStore()


@pytest.fixture
def config() -> Settings:
    return Settings(
        _env_file=None,
        BIG_PROJECT_ID="test-project",
        BIG_DEFAULT_DATASET="analytics",
    )


@pytest.fixture
def fake_client() -> FakeBigQueryClient:
    return FakeBigQueryClient()


@pytest.fixture
def sleeps() -> SleepRecorder:
    return SleepRecorder()


@pytest.fixture
def bridge(fake_client, config, cache, engine, sleeps) -> Big:
    return Big(
        fake_client,
        config=config,
        cache=cache,
        bind=engine,
        wait_policy=WaitPolicy(interval=0.5, max_attempts=5, timeout=None),
        sleep=sleeps,
    )

"""Database engine configuration."""

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine

from bigbridge.core.config import settings

# Global engine instance, created on first use
_engine: Engine | None = None


def create_db_engine(url: str | None = None) -> Engine:
    """Create SQLAlchemy engine."""
    return create_engine(
        url or settings.DATABASE_URL,
        pool_pre_ping=True,  # Verify connections before using
        echo=False,
    )


def get_engine() -> Engine:
    """Engine the describe-table queries run on when no bind is injected."""
    global _engine
    if _engine is None:
        _engine = create_db_engine()
    return _engine


def reset_engine() -> None:
    global _engine
    if _engine is not None:
        _engine.dispose()
    _engine = None

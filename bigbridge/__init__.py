"""BigQuery bridge for SQLAlchemy/FastAPI applications."""

__version__ = "1.0.0"

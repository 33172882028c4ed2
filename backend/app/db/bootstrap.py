from __future__ import annotations

import logging

from sqlalchemy import inspect, text
from sqlalchemy.engine import Engine

import app.models  # noqa: F401
from app.db.base import Base
from app.db.session import engine as default_engine

logger = logging.getLogger(__name__)

REQUIRED_COLUMNS: dict[str, set[str]] = {
    "schedule_snapshots": {"id", "version", "payload", "created_at", "updated_at"},
}


def _ensure_snapshot_version_column(engine: Engine) -> None:
    # Snapshot rows written before optimistic versioning have no version column.
    with engine.begin() as connection:
        inspector = inspect(connection)
        if "schedule_snapshots" not in set(inspector.get_table_names()):
            return
        column_names = {item["name"] for item in inspector.get_columns("schedule_snapshots")}
        if "version" in column_names:
            return
        connection.execute(
            text("ALTER TABLE schedule_snapshots ADD COLUMN version INTEGER NOT NULL DEFAULT 1")
        )
        logger.info("Added version column to schedule_snapshots")


def missing_schema(engine: Engine) -> tuple[list[str], dict[str, list[str]]]:
    with engine.connect() as connection:
        inspector = inspect(connection)
        table_names = set(inspector.get_table_names())
        missing_tables = sorted(name for name in REQUIRED_COLUMNS if name not in table_names)
        missing_columns: dict[str, list[str]] = {}
        for table_name, required in REQUIRED_COLUMNS.items():
            if table_name not in table_names:
                continue
            existing = {item["name"] for item in inspector.get_columns(table_name)}
            missing = sorted(required - existing)
            if missing:
                missing_columns[table_name] = missing
    return missing_tables, missing_columns


def ensure_runtime_schema_compatibility(engine: Engine | None = None) -> None:
    engine = engine or default_engine
    try:
        Base.metadata.create_all(bind=engine)
        _ensure_snapshot_version_column(engine)
        missing_tables, missing_columns = missing_schema(engine)
        if missing_tables or missing_columns:
            raise RuntimeError(f"Missing schema objects: tables={missing_tables} columns={missing_columns}")
    except Exception as exc:  # pragma: no cover - runtime environment dependent
        logger.exception("Runtime schema compatibility bootstrap failed")
        raise RuntimeError("Runtime schema compatibility bootstrap failed") from exc

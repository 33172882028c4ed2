from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Protocol

from sqlalchemy import update
from sqlalchemy.orm import Session

from app.core.exceptions import ResourceNotFoundError, SnapshotVersionConflictError
from app.models.schedule_snapshot import ScheduleSnapshotRecord
from app.schemas.routine import ScheduleSnapshot

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StoredSnapshot:
    id: int
    version: int
    snapshot: ScheduleSnapshot
    updated_at: datetime | None = None


class ScheduleStore(Protocol):
    def create(self, snapshot: ScheduleSnapshot) -> StoredSnapshot: ...

    def load(self, snapshot_id: int) -> StoredSnapshot: ...

    def save(
        self,
        snapshot_id: int,
        snapshot: ScheduleSnapshot,
        expected_version: int | None = None,
    ) -> StoredSnapshot: ...


class SqlScheduleStore:
    """Snapshots kept as JSON rows with a monotonically increasing version.

    ``save`` with ``expected_version`` only succeeds when the row is still at
    that version, so two writers validating against the same snapshot cannot
    both commit.
    """

    def __init__(self, db: Session) -> None:
        self.db = db

    def create(self, snapshot: ScheduleSnapshot) -> StoredSnapshot:
        record = ScheduleSnapshotRecord(version=1, payload=_dump(snapshot))
        self.db.add(record)
        self.db.commit()
        self.db.refresh(record)
        logger.info("Created schedule snapshot %s", record.id)
        return _stored(record)

    def load(self, snapshot_id: int) -> StoredSnapshot:
        record = self.db.get(ScheduleSnapshotRecord, snapshot_id)
        if record is None:
            raise ResourceNotFoundError("Snapshot", str(snapshot_id))
        return _stored(record)

    def save(
        self,
        snapshot_id: int,
        snapshot: ScheduleSnapshot,
        expected_version: int | None = None,
    ) -> StoredSnapshot:
        record = self.db.get(ScheduleSnapshotRecord, snapshot_id)
        if record is None:
            raise ResourceNotFoundError("Snapshot", str(snapshot_id))
        current_version = record.version
        if expected_version is None:
            expected_version = current_version

        result = self.db.execute(
            update(ScheduleSnapshotRecord)
            .where(
                ScheduleSnapshotRecord.id == snapshot_id,
                ScheduleSnapshotRecord.version == expected_version,
            )
            .values(payload=_dump(snapshot), version=expected_version + 1)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            self.db.rollback()
            logger.warning(
                "Rejected stale write to snapshot %s (expected version %s, found %s)",
                snapshot_id,
                expected_version,
                current_version,
            )
            raise SnapshotVersionConflictError(snapshot_id, expected_version, current_version)
        self.db.commit()
        self.db.refresh(record)
        return _stored(record)


def _dump(snapshot: ScheduleSnapshot) -> dict:
    return snapshot.model_dump(mode="json", by_alias=True)


def _stored(record: ScheduleSnapshotRecord) -> StoredSnapshot:
    return StoredSnapshot(
        id=record.id,
        version=record.version,
        snapshot=ScheduleSnapshot.model_validate(record.payload),
        updated_at=record.updated_at,
    )

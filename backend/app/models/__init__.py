from app.models.schedule_snapshot import ScheduleSnapshotRecord  # noqa: F401

from datetime import datetime

from pydantic import BaseModel, Field

from app.schemas.routine import ScheduleSnapshot


class SnapshotWrite(BaseModel):
    snapshot: ScheduleSnapshot
    expected_version: int | None = Field(default=None, alias="expectedVersion", ge=1)

    model_config = {"populate_by_name": True}


class SnapshotOut(BaseModel):
    id: int
    version: int
    snapshot: ScheduleSnapshot
    updated_at: datetime | None = Field(default=None, alias="updatedAt")

    model_config = {"populate_by_name": True}

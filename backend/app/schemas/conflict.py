from __future__ import annotations

from enum import Enum
from typing import Any, Literal

from pydantic import BaseModel, Field, field_validator, model_validator

from app.schemas.calendar import DayOfWeek, normalize_day, normalize_time
from app.schemas.routine import Room, ScheduleSnapshot, SessionPayload


class RejectionCode(str, Enum):
    malformed_candidate = "malformed_candidate"
    teacher_busy = "teacher_busy"
    teacher_off_day = "teacher_off_day"
    room_occupied = "room_occupied"
    section_busy = "section_busy"


class PlacementAccepted(BaseModel):
    status: Literal["accepted"] = "accepted"

    @property
    def accepted(self) -> bool:
        return True


class PlacementRejected(BaseModel):
    status: Literal["rejected"] = "rejected"
    code: RejectionCode
    reason: str
    conflicting_session_id: str | None = Field(default=None, alias="conflictingSessionId")
    resource_id: str | None = Field(default=None, alias="resourceId")

    model_config = {"populate_by_name": True}

    @property
    def accepted(self) -> bool:
        return False


class SnapshotSource(BaseModel):
    """Either an inline snapshot or the id of a stored one."""

    snapshot: ScheduleSnapshot | None = None
    snapshot_id: int | None = Field(default=None, alias="snapshotId", ge=1)

    model_config = {"populate_by_name": True}

    @model_validator(mode="after")
    def validate_single_source(self) -> "SnapshotSource":
        if (self.snapshot is None) == (self.snapshot_id is None):
            raise ValueError("Provide exactly one of snapshot or snapshotId")
        return self


class PlacementRequest(SnapshotSource):
    candidate: SessionPayload
    exclude_id: str | None = Field(default=None, alias="excludeId", max_length=36)


class PlaceSessionRequest(BaseModel):
    candidate: SessionPayload
    exclude_id: str | None = Field(default=None, alias="excludeId", max_length=36)
    expected_version: int | None = Field(default=None, alias="expectedVersion", ge=1)

    model_config = {"populate_by_name": True}


class PlacementAcceptedOut(BaseModel):
    status: Literal["accepted"] = "accepted"
    session_id: str = Field(alias="sessionId")
    token: str
    snapshot_version: int | None = Field(default=None, alias="snapshotVersion")

    model_config = {"populate_by_name": True}


class ViolationReport(BaseModel):
    session_id: str = Field(alias="sessionId")
    violations: list[PlacementRejected] = Field(default_factory=list)

    model_config = {"populate_by_name": True}


class _CellMixin(BaseModel):
    day: DayOfWeek
    start_time: str = Field(alias="startTime")

    model_config = {"populate_by_name": True}

    @field_validator("day", mode="before")
    @classmethod
    def validate_day(cls, value: Any) -> Any:
        return normalize_day(value) if isinstance(value, str) else value

    @field_validator("start_time", mode="before")
    @classmethod
    def validate_start_time(cls, value: Any) -> Any:
        return normalize_time(value) if isinstance(value, str) else value


class FreeRoomsRequest(SnapshotSource, _CellMixin):
    exclude_id: str | None = Field(default=None, alias="excludeId", max_length=36)


class FreeRoomsOut(BaseModel):
    day: DayOfWeek
    start_time: str = Field(alias="startTime")
    rooms: list[Room] = Field(default_factory=list)
    fully_booked: bool = Field(alias="fullyBooked")

    model_config = {"populate_by_name": True}


class MoveSessionRequest(_CellMixin):
    expected_version: int | None = Field(default=None, alias="expectedVersion", ge=1)

from __future__ import annotations

import uuid
from enum import Enum
from typing import Annotated, Any, Literal, Union

from pydantic import AliasChoices, BaseModel, EmailStr, Field, field_validator, model_validator

from app.schemas.calendar import (
    DayOfWeek,
    SLOT_END_BY_START,
    normalize_day,
    normalize_time,
    parse_slot_label,
)


class RoomType(str, Enum):
    theory = "Theory"
    lab = "Lab"


class CounselingHour(BaseModel):
    day: DayOfWeek
    start_time: str = Field(alias="startTime")

    model_config = {"populate_by_name": True, "frozen": True}

    @field_validator("day", mode="before")
    @classmethod
    def validate_day(cls, value: Any) -> Any:
        return normalize_day(value) if isinstance(value, str) else value

    @field_validator("start_time", mode="before")
    @classmethod
    def validate_start_time(cls, value: Any) -> Any:
        return normalize_time(value) if isinstance(value, str) else value

    @field_validator("start_time")
    @classmethod
    def validate_catalog_slot(cls, value: str) -> str:
        if value not in SLOT_END_BY_START:
            raise ValueError(f"Counseling hour must start on a catalog slot, got {value}")
        return value

    @classmethod
    def parse(cls, text: str) -> CounselingHour | None:
        """Parse the ``"Sunday 10:00 AM - 11:30 AM"`` form kept on teacher records."""
        cleaned = text.strip()
        if not cleaned or cleaned.lower() == "none":
            return None
        day, _, slot = cleaned.partition(" ")
        start, _ = parse_slot_label(slot)
        return cls(day=day, start_time=start)


class Teacher(BaseModel):
    id: str = Field(min_length=1, max_length=36)
    name: str = Field(min_length=1, max_length=200)
    initial: str = Field(min_length=1, max_length=10)
    email: EmailStr | None = None
    phone: str | None = Field(default=None, max_length=30)
    off_days: frozenset[DayOfWeek] = Field(default_factory=frozenset, alias="offDays")
    counseling_hour: CounselingHour | None = Field(default=None, alias="counselingHour")

    model_config = {"populate_by_name": True, "frozen": True}

    @model_validator(mode="before")
    @classmethod
    def upgrade_single_off_day(cls, data: Any) -> Any:
        # Older records carried one ``offDay`` string; a null ``offDays`` counts as missing.
        if not isinstance(data, dict) or data.get("offDays") is not None or data.get("off_days") is not None:
            return data
        data = {key: value for key, value in data.items() if key not in ("offDays", "off_days")}
        legacy = data.pop("offDay", None)
        data["offDays"] = [legacy] if legacy else []
        return data

    @field_validator("off_days", mode="before")
    @classmethod
    def validate_off_days(cls, value: Any) -> Any:
        if isinstance(value, str):
            value = [value]
        if isinstance(value, (list, tuple, set, frozenset)):
            return frozenset(normalize_day(day) for day in value if str(day).strip())
        return value

    @field_validator("counseling_hour", mode="before")
    @classmethod
    def validate_counseling_hour(cls, value: Any) -> Any:
        if isinstance(value, str):
            return CounselingHour.parse(value)
        return value

    @field_validator("email", mode="before")
    @classmethod
    def blank_email_is_none(cls, value: Any) -> Any:
        if isinstance(value, str) and not value.strip():
            return None
        return value


class Room(BaseModel):
    id: str = Field(min_length=1, max_length=36)
    room_number: str = Field(min_length=1, max_length=50, alias="roomNumber")
    type: RoomType = RoomType.theory

    model_config = {"populate_by_name": True, "frozen": True}


class Section(BaseModel):
    id: str = Field(min_length=1, max_length=36)
    name: str = Field(default="", max_length=20)
    batch: int = Field(ge=0)
    student_count: int = Field(default=0, ge=0, alias="studentCount")

    model_config = {"populate_by_name": True, "frozen": True}

    @property
    def label(self) -> str:
        if self.name:
            return f"Batch {self.batch} ({self.name})"
        return f"Batch {self.batch}"


class Course(BaseModel):
    id: str = Field(min_length=1, max_length=36)
    code: str = Field(min_length=1, max_length=50)
    name: str = Field(min_length=1, max_length=200)
    short_name: str | None = Field(default=None, max_length=50, alias="shortName")
    credits: float = Field(default=0, ge=0, le=40)

    model_config = {"populate_by_name": True, "frozen": True}


class _SessionBase(BaseModel):
    id: str = Field(min_length=1, max_length=36)
    day: DayOfWeek
    start_time: str = Field(alias="startTime")
    end_time: str | None = Field(default=None, alias="endTime")
    teacher_id: str = Field(min_length=1, max_length=36, alias="teacherId")

    model_config = {"populate_by_name": True, "frozen": True}

    @field_validator("day", mode="before")
    @classmethod
    def validate_day(cls, value: Any) -> Any:
        return normalize_day(value) if isinstance(value, str) else value

    @field_validator("start_time", "end_time", mode="before")
    @classmethod
    def validate_time(cls, value: Any) -> Any:
        return normalize_time(value) if isinstance(value, str) else value

    @model_validator(mode="before")
    @classmethod
    def fill_catalog_end(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        start_key, end_key = ("startTime", "endTime") if "startTime" in data else ("start_time", "end_time")
        start = data.get(start_key)
        if data.get(end_key) is not None or not isinstance(start, str):
            return data
        try:
            start = normalize_time(start)
        except ValueError:
            return data
        if start in SLOT_END_BY_START:
            data = {**data, end_key: SLOT_END_BY_START[start]}
        return data

    @property
    def cell(self) -> tuple[DayOfWeek, str]:
        return self.day, self.start_time


class AcademicSession(_SessionBase):
    kind: Literal["academic"] = "academic"
    course_id: str = Field(min_length=1, max_length=36, alias="courseId")
    room_id: str = Field(min_length=1, max_length=36, alias="roomId")
    section_id: str = Field(min_length=1, max_length=36, alias="sectionId")


class CounselingSession(_SessionBase):
    kind: Literal["counseling"] = "counseling"


ScheduledSession = Annotated[Union[AcademicSession, CounselingSession], Field(discriminator="kind")]

RESOURCE_FIELDS = ("courseId", "roomId", "sectionId")


def infer_session_kind(data: Any) -> Any:
    """Tag a raw session record that predates the ``kind`` discriminator."""
    if not isinstance(data, dict) or "kind" in data:
        return data
    tagged = dict(data)
    counseling = tagged.pop("counselingHour", None) or tagged.pop("counseling", None)
    has_resources = any(tagged.get(key) or tagged.get(_snake(key)) for key in RESOURCE_FIELDS)
    tagged["kind"] = "counseling" if counseling or not has_resources else "academic"
    return tagged


def _snake(name: str) -> str:
    return "".join(f"_{char.lower()}" if char.isupper() else char for char in name)


class SessionPayload(BaseModel):
    """Flat session record as submitted by the admin screens.

    Resource fields are optional here; ``to_session`` enforces that they are
    given all together (academic) or not at all (counseling).
    """

    id: str | None = Field(default=None, max_length=36)
    day: str | None = None
    start_time: str | None = Field(default=None, alias="startTime")
    end_time: str | None = Field(default=None, alias="endTime")
    teacher_id: str | None = Field(default=None, alias="teacherId")
    course_id: str | None = Field(default=None, alias="courseId")
    room_id: str | None = Field(default=None, alias="roomId")
    section_id: str | None = Field(default=None, alias="sectionId")
    counseling: bool = Field(default=False, validation_alias=AliasChoices("counseling", "counselingHour"))

    model_config = {"populate_by_name": True}

    @field_validator("counseling", mode="before")
    @classmethod
    def truthy_counseling(cls, value: Any) -> bool:
        return bool(value)

    def problems(self) -> list[str]:
        issues: list[str] = []
        if not self.day:
            issues.append("day is required")
        if not self.start_time:
            issues.append("startTime is required")
        if not self.teacher_id:
            issues.append("teacherId is required")
        resources = {
            "courseId": self.course_id,
            "roomId": self.room_id,
            "sectionId": self.section_id,
        }
        present = [name for name, value in resources.items() if value]
        if self.counseling and present:
            issues.append(f"Counseling sessions cannot carry {', '.join(present)}")
        elif not self.counseling and len(present) != len(resources):
            missing = [name for name in resources if name not in present]
            issues.append(f"Class sessions require {', '.join(missing)}")
        return issues

    def to_session(self) -> AcademicSession | CounselingSession:
        issues = self.problems()
        if issues:
            raise ValueError("; ".join(issues))
        base = {
            "id": self.id or str(uuid.uuid4()),
            "day": self.day,
            "start_time": self.start_time,
            "end_time": self.end_time,
            "teacher_id": self.teacher_id,
        }
        if self.counseling:
            return CounselingSession(**base)
        return AcademicSession(
            **base,
            course_id=self.course_id,
            room_id=self.room_id,
            section_id=self.section_id,
        )


class RoutineSettings(BaseModel):
    semester_name: str = Field(default="", max_length=100, alias="semesterName")
    is_published: bool = Field(default=False, alias="isPublished")

    model_config = {"populate_by_name": True}


class ScheduleSnapshot(BaseModel):
    settings: RoutineSettings = Field(default_factory=RoutineSettings)
    last_modified: str | None = Field(default=None, alias="lastModified")
    teachers: list[Teacher] = Field(default_factory=list)
    courses: list[Course] = Field(default_factory=list)
    rooms: list[Room] = Field(default_factory=list)
    sections: list[Section] = Field(default_factory=list)
    schedule: list[ScheduledSession] = Field(default_factory=list)

    model_config = {"populate_by_name": True}

    @field_validator("schedule", mode="before")
    @classmethod
    def tag_legacy_sessions(cls, value: Any) -> Any:
        if isinstance(value, list):
            return [infer_session_kind(item) for item in value]
        return value

    @model_validator(mode="after")
    def validate_uniqueness(self) -> "ScheduleSnapshot":
        def ensure_unique(label: str, values: list[str]) -> None:
            seen: set[str] = set()
            duplicates: set[str] = set()
            for value in values:
                if value in seen:
                    duplicates.add(value)
                else:
                    seen.add(value)
            if duplicates:
                raise ValueError(f"Duplicate {label}: {', '.join(sorted(duplicates))}")

        ensure_unique("teacher id(s)", [teacher.id for teacher in self.teachers])
        ensure_unique("teacher initial(s)", [teacher.initial.upper() for teacher in self.teachers])
        ensure_unique("course id(s)", [course.id for course in self.courses])
        ensure_unique("room id(s)", [room.id for room in self.rooms])
        ensure_unique("room number(s)", [room.room_number.lower() for room in self.rooms])
        ensure_unique("section id(s)", [section.id for section in self.sections])
        ensure_unique("session id(s)", [session.id for session in self.schedule])
        return self

    @model_validator(mode="after")
    def validate_catalog_slots(self) -> "ScheduleSnapshot":
        off_catalog = sorted(
            session.id
            for session in self.schedule
            if session.start_time not in SLOT_END_BY_START or SLOT_END_BY_START[session.start_time] != session.end_time
        )
        if off_catalog:
            raise ValueError(f"Session(s) off the time slot catalog: {', '.join(off_catalog)}")
        return self

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field

from app.schemas.routine import Course, Room, ScheduleSnapshot, Section, Teacher


@dataclass(frozen=True)
class ResourceRegistry:
    """Reference data the conflict checker resolves names against.

    Plain id -> record tables; a missing id is not an error, labels fall back
    to the raw id.
    """

    teachers: dict[str, Teacher] = field(default_factory=dict)
    rooms: dict[str, Room] = field(default_factory=dict)
    sections: dict[str, Section] = field(default_factory=dict)
    courses: dict[str, Course] = field(default_factory=dict)

    @classmethod
    def build(
        cls,
        *,
        teachers: Iterable[Teacher] = (),
        rooms: Iterable[Room] = (),
        sections: Iterable[Section] = (),
        courses: Iterable[Course] = (),
    ) -> ResourceRegistry:
        return cls(
            teachers={teacher.id: teacher for teacher in teachers},
            rooms={room.id: room for room in rooms},
            sections={section.id: section for section in sections},
            courses={course.id: course for course in courses},
        )

    @classmethod
    def from_snapshot(cls, snapshot: ScheduleSnapshot) -> ResourceRegistry:
        return cls.build(
            teachers=snapshot.teachers,
            rooms=snapshot.rooms,
            sections=snapshot.sections,
            courses=snapshot.courses,
        )

    def teacher_name(self, teacher_id: str) -> str:
        teacher = self.teachers.get(teacher_id)
        return teacher.name if teacher is not None else teacher_id

    def room_label(self, room_id: str) -> str:
        room = self.rooms.get(room_id)
        return room.room_number if room is not None else room_id

    def section_label(self, section_id: str) -> str:
        section = self.sections.get(section_id)
        return section.label if section is not None else section_id

from __future__ import annotations

from collections import defaultdict
from collections.abc import Iterable

from app.schemas.calendar import DayOfWeek
from app.schemas.routine import AcademicSession, CounselingSession

Session = AcademicSession | CounselingSession
Cell = tuple[DayOfWeek, str]


class ResourceIndex:
    """Sessions bucketed by (day, slot start) for one validation pass.

    Slots match on the start boundary string; the catalog slots never
    overlap, so equal starts are the only way two sessions can collide.
    """

    def __init__(self, schedule: Iterable[Session], exclude_ids: Iterable[str] = ()) -> None:
        excluded = {value for value in exclude_ids if value}
        self._cells: dict[Cell, list[Session]] = defaultdict(list)
        for session in schedule:
            if session.id in excluded:
                continue
            self._cells[session.cell].append(session)

    def sessions_at(self, day: DayOfWeek, start_time: str) -> list[Session]:
        return list(self._cells.get((day, start_time), ()))

    def teacher_session(self, day: DayOfWeek, start_time: str, teacher_id: str) -> Session | None:
        for session in self._cells.get((day, start_time), ()):
            if session.teacher_id == teacher_id:
                return session
        return None

    def room_session(self, day: DayOfWeek, start_time: str, room_id: str) -> AcademicSession | None:
        for session in self._academic_at(day, start_time):
            if session.room_id == room_id:
                return session
        return None

    def section_session(self, day: DayOfWeek, start_time: str, section_id: str) -> AcademicSession | None:
        for session in self._academic_at(day, start_time):
            if session.section_id == section_id:
                return session
        return None

    def occupied_rooms(self, day: DayOfWeek, start_time: str) -> set[str]:
        return {session.room_id for session in self._academic_at(day, start_time)}

    def _academic_at(self, day: DayOfWeek, start_time: str) -> Iterable[AcademicSession]:
        return (
            session
            for session in self._cells.get((day, start_time), ())
            if isinstance(session, AcademicSession)
        )


def sessions_at(schedule: Iterable[Session], day: DayOfWeek, start_time: str) -> list[Session]:
    return ResourceIndex(schedule).sessions_at(day, start_time)

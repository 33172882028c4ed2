from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator

from pydantic import ValidationError

from app.schemas.calendar import SLOT_END_BY_START
from app.schemas.conflict import PlacementAccepted, PlacementRejected, RejectionCode
from app.schemas.routine import AcademicSession, CounselingSession, SessionPayload
from app.services.registry import ResourceRegistry
from app.services.resource_index import ResourceIndex, Session

logger = logging.getLogger(__name__)

PlacementResult = PlacementAccepted | PlacementRejected


class ConflictService:
    """Placement rules for one proposed session against a schedule snapshot.

    Rules run in a fixed order so the first reported violation is stable:

    1. the teacher is not already booked in the cell (class or counseling),
    2. the day is not one of the teacher's off-days,
    3. the room is free in the cell (class sessions only),
    4. the section is free in the cell (class sessions only).

    Counseling sessions carry no room or section and therefore skip 3 and 4.
    The session whose id matches the candidate (or ``exclude_id``) is treated
    as not yet scheduled, which makes edits and moves replace-by-id.
    """

    def __init__(self, schedule: Iterable[Session], registry: ResourceRegistry | None = None):
        self.schedule = list(schedule)
        self.registry = registry or ResourceRegistry()

    def validate(self, candidate: Session, exclude_id: str | None = None) -> PlacementResult:
        for violation in self.find_violations(candidate, exclude_id=exclude_id):
            logger.info(
                "Rejected session %s on %s %s: %s",
                candidate.id,
                candidate.day.value,
                candidate.start_time,
                violation.code.value,
            )
            return violation
        return PlacementAccepted()

    def validate_payload(self, payload: SessionPayload, exclude_id: str | None = None) -> tuple[Session | None, PlacementResult]:
        try:
            candidate = payload.to_session()
        except ValueError as exc:
            return None, malformed(describe_error(exc))
        return candidate, self.validate(candidate, exclude_id=exclude_id)

    def find_violations(self, candidate: Session, exclude_id: str | None = None) -> Iterator[PlacementRejected]:
        problem = _shape_problem(candidate)
        if problem is None and exclude_id and exclude_id != candidate.id:
            if any(session.id == candidate.id for session in self.schedule):
                problem = f"Session id {candidate.id} already belongs to another session than {exclude_id}"
        if problem is not None:
            yield malformed(problem)
            return

        index = ResourceIndex(self.schedule, exclude_ids=(candidate.id, exclude_id))
        day, start = candidate.cell
        registry = self.registry

        booked = index.teacher_session(day, start, candidate.teacher_id)
        if booked is not None:
            activity = "Counseling Hour" if isinstance(booked, CounselingSession) else "Class"
            yield PlacementRejected(
                code=RejectionCode.teacher_busy,
                reason=f"{registry.teacher_name(candidate.teacher_id)} is already busy with a {activity}.",
                conflicting_session_id=booked.id,
                resource_id=candidate.teacher_id,
            )

        teacher = registry.teachers.get(candidate.teacher_id)
        if teacher is not None and day in teacher.off_days:
            yield PlacementRejected(
                code=RejectionCode.teacher_off_day,
                reason=f"{teacher.name} has an off-day on {day.value}.",
                resource_id=candidate.teacher_id,
            )

        if not isinstance(candidate, AcademicSession):
            return

        occupant = index.room_session(day, start, candidate.room_id)
        if occupant is not None:
            yield PlacementRejected(
                code=RejectionCode.room_occupied,
                reason=f"Room {registry.room_label(candidate.room_id)} is already occupied.",
                conflicting_session_id=occupant.id,
                resource_id=candidate.room_id,
            )

        attending = index.section_session(day, start, candidate.section_id)
        if attending is not None:
            yield PlacementRejected(
                code=RejectionCode.section_busy,
                reason=f"Section {registry.section_label(candidate.section_id)} already has a class.",
                conflicting_session_id=attending.id,
                resource_id=candidate.section_id,
            )


def _shape_problem(candidate: Session) -> str | None:
    if not candidate.teacher_id:
        return "Session requires a teacher"
    if candidate.start_time not in SLOT_END_BY_START:
        return f"{candidate.start_time} is not the start of a catalog time slot"
    expected_end = SLOT_END_BY_START[candidate.start_time]
    if candidate.end_time is not None and candidate.end_time != expected_end:
        return f"Time slot {candidate.start_time} ends at {expected_end}, not {candidate.end_time}"
    if isinstance(candidate, AcademicSession):
        missing = [
            name
            for name, value in (
                ("courseId", candidate.course_id),
                ("roomId", candidate.room_id),
                ("sectionId", candidate.section_id),
            )
            if not value
        ]
        if missing:
            return f"Class sessions require {', '.join(missing)}"
    return None


def malformed(reason: str) -> PlacementRejected:
    return PlacementRejected(code=RejectionCode.malformed_candidate, reason=reason)


def describe_error(exc: ValueError) -> str:
    if isinstance(exc, ValidationError):
        messages = []
        for error in exc.errors():
            location = ".".join(str(part) for part in error.get("loc", ()))
            messages.append(f"{location}: {error['msg']}" if location else error["msg"])
        return "; ".join(messages)
    return str(exc)


def validate_placement(
    candidate: Session,
    schedule: Iterable[Session],
    registry: ResourceRegistry | None = None,
    exclude_id: str | None = None,
) -> PlacementResult:
    return ConflictService(schedule, registry).validate(candidate, exclude_id=exclude_id)


def find_violations(
    candidate: Session,
    schedule: Iterable[Session],
    registry: ResourceRegistry | None = None,
    exclude_id: str | None = None,
) -> list[PlacementRejected]:
    return list(ConflictService(schedule, registry).find_violations(candidate, exclude_id=exclude_id))

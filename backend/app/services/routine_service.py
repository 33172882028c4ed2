from __future__ import annotations

import hashlib
import logging
import uuid
from datetime import date

from app.core.exceptions import MalformedCandidateError, ResourceNotFoundError
from app.schemas.calendar import SLOT_END_BY_START, DayOfWeek
from app.schemas.routine import CounselingSession, ScheduleSnapshot, Teacher
from app.services.conflict_service import ConflictService, PlacementResult
from app.services.registry import ResourceRegistry
from app.services.resource_index import Session

logger = logging.getLogger(__name__)


def format_modified_date(value: date | None = None) -> str:
    """``05-January-2026`` style stamp shown on the published routine."""
    value = value or date.today()
    return value.strftime("%d-%B-%Y")


def find_session(snapshot: ScheduleSnapshot, session_id: str) -> Session:
    for session in snapshot.schedule:
        if session.id == session_id:
            return session
    raise ResourceNotFoundError("Session", session_id)


def place_session(
    snapshot: ScheduleSnapshot,
    candidate: Session,
    exclude_id: str | None = None,
) -> tuple[PlacementResult, ScheduleSnapshot]:
    """Validate ``candidate`` and, when accepted, write it into a new snapshot.

    The session named by ``exclude_id`` (or else by the candidate's id) is
    replaced in place; otherwise the candidate is appended. A candidate whose
    id belongs to a session other than ``exclude_id`` is malformed. A rejected
    candidate leaves the snapshot untouched.
    """
    service = ConflictService(snapshot.schedule, ResourceRegistry.from_snapshot(snapshot))
    outcome = service.validate(candidate, exclude_id=exclude_id)
    if not outcome.accepted:
        return outcome, snapshot

    replaced = exclude_id or candidate.id
    schedule: list[Session] = []
    inserted = False
    for session in snapshot.schedule:
        if session.id == replaced:
            if not inserted:
                schedule.append(candidate)
                inserted = True
            continue
        schedule.append(session)
    if not inserted:
        schedule.append(candidate)

    logger.debug("Placed session %s on %s %s", candidate.id, candidate.day.value, candidate.start_time)
    return outcome, _touch(snapshot, schedule)


def move_session(
    snapshot: ScheduleSnapshot,
    session_id: str,
    day: DayOfWeek,
    start_time: str,
) -> tuple[PlacementResult, ScheduleSnapshot]:
    session = find_session(snapshot, session_id)
    moved = session.model_copy(
        update={"day": day, "start_time": start_time, "end_time": SLOT_END_BY_START.get(start_time)}
    )
    return place_session(snapshot, moved)


def remove_session(snapshot: ScheduleSnapshot, session_id: str) -> ScheduleSnapshot:
    find_session(snapshot, session_id)
    return _touch(snapshot, [session for session in snapshot.schedule if session.id != session_id])


def counseling_candidate(teacher: Teacher, session_id: str | None = None) -> CounselingSession:
    """Counseling session for the weekly hour declared on ``teacher``."""
    if teacher.counseling_hour is None:
        raise MalformedCandidateError(f"{teacher.name} has no counseling hour")
    return CounselingSession(
        id=session_id or str(uuid.uuid4()),
        day=teacher.counseling_hour.day,
        start_time=teacher.counseling_hour.start_time,
        teacher_id=teacher.id,
    )


def acceptance_token(candidate: Session, snapshot_version: int | None = None) -> str:
    """Digest tying an accepted candidate to the snapshot version it was checked against."""
    basis = f"{snapshot_version if snapshot_version is not None else 'inline'}:{candidate.model_dump_json()}"
    return hashlib.sha256(basis.encode("utf-8")).hexdigest()


def _touch(snapshot: ScheduleSnapshot, schedule: list[Session]) -> ScheduleSnapshot:
    return snapshot.model_copy(update={"schedule": schedule, "last_modified": format_modified_date()})

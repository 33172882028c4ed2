import logging

from fastapi import APIRouter, Depends, Query, status

from app.api.deps import get_store
from app.core.config import get_settings
from app.core.exceptions import (
    MalformedCandidateError,
    PlacementRejectedError,
    ResourceNotFoundError,
    SnapshotVersionConflictError,
)
from app.schemas.calendar import DayOfWeek, normalize_time
from app.schemas.conflict import FreeRoomsOut, MoveSessionRequest, PlaceSessionRequest, RejectionCode
from app.schemas.snapshot import SnapshotOut, SnapshotWrite
from app.services.availability import free_rooms, week_grid
from app.services.conflict_service import PlacementResult, describe_error
from app.services.routine_service import (
    counseling_candidate,
    move_session,
    place_session,
    remove_session,
)
from app.services.snapshot_store import ScheduleStore, StoredSnapshot

logger = logging.getLogger(__name__)

router = APIRouter()


def _out(stored: StoredSnapshot) -> SnapshotOut:
    return SnapshotOut(
        id=stored.id,
        version=stored.version,
        snapshot=stored.snapshot,
        updated_at=stored.updated_at,
    )


def _load_expected(store: ScheduleStore, snapshot_id: int, expected_version: int | None) -> StoredSnapshot:
    stored = store.load(snapshot_id)
    if expected_version is not None and expected_version != stored.version:
        raise SnapshotVersionConflictError(snapshot_id, expected_version, stored.version)
    return stored


def _raise_for(outcome: PlacementResult) -> None:
    if outcome.accepted:
        return
    if outcome.code == RejectionCode.malformed_candidate:
        raise MalformedCandidateError(outcome.reason)
    raise PlacementRejectedError(outcome)


@router.post("", response_model=SnapshotOut, status_code=status.HTTP_201_CREATED)
def create_snapshot(payload: SnapshotWrite, store: ScheduleStore = Depends(get_store)) -> SnapshotOut:
    snapshot = payload.snapshot
    if not snapshot.settings.semester_name:
        settings = snapshot.settings.model_copy(update={"semester_name": get_settings().default_semester_name})
        snapshot = snapshot.model_copy(update={"settings": settings})
    return _out(store.create(snapshot))


@router.get("/{snapshot_id}", response_model=SnapshotOut)
def get_snapshot(snapshot_id: int, store: ScheduleStore = Depends(get_store)) -> SnapshotOut:
    return _out(store.load(snapshot_id))


@router.put("/{snapshot_id}", response_model=SnapshotOut)
def replace_snapshot(snapshot_id: int, payload: SnapshotWrite, store: ScheduleStore = Depends(get_store)) -> SnapshotOut:
    return _out(store.save(snapshot_id, payload.snapshot, expected_version=payload.expected_version))


@router.post("/{snapshot_id}/sessions", response_model=SnapshotOut)
def place_snapshot_session(
    snapshot_id: int,
    payload: PlaceSessionRequest,
    store: ScheduleStore = Depends(get_store),
) -> SnapshotOut:
    stored = _load_expected(store, snapshot_id, payload.expected_version)
    try:
        candidate = payload.candidate.to_session()
    except ValueError as exc:
        raise MalformedCandidateError(describe_error(exc)) from exc

    outcome, updated = place_session(stored.snapshot, candidate, exclude_id=payload.exclude_id)
    _raise_for(outcome)
    saved = store.save(snapshot_id, updated, expected_version=stored.version)
    logger.info("Session %s saved to snapshot %s (version %s)", candidate.id, snapshot_id, saved.version)
    return _out(saved)


@router.post("/{snapshot_id}/sessions/{session_id}/move", response_model=SnapshotOut)
def move_snapshot_session(
    snapshot_id: int,
    session_id: str,
    payload: MoveSessionRequest,
    store: ScheduleStore = Depends(get_store),
) -> SnapshotOut:
    stored = _load_expected(store, snapshot_id, payload.expected_version)
    outcome, updated = move_session(stored.snapshot, session_id, payload.day, payload.start_time)
    _raise_for(outcome)
    return _out(store.save(snapshot_id, updated, expected_version=stored.version))


@router.delete("/{snapshot_id}/sessions/{session_id}", response_model=SnapshotOut)
def delete_snapshot_session(
    snapshot_id: int,
    session_id: str,
    expected_version: int | None = Query(default=None, alias="expectedVersion", ge=1),
    store: ScheduleStore = Depends(get_store),
) -> SnapshotOut:
    stored = _load_expected(store, snapshot_id, expected_version)
    updated = remove_session(stored.snapshot, session_id)
    return _out(store.save(snapshot_id, updated, expected_version=stored.version))


@router.post("/{snapshot_id}/teachers/{teacher_id}/counseling", response_model=SnapshotOut)
def place_counseling_hour(
    snapshot_id: int,
    teacher_id: str,
    store: ScheduleStore = Depends(get_store),
) -> SnapshotOut:
    stored = store.load(snapshot_id)
    teacher = next((item for item in stored.snapshot.teachers if item.id == teacher_id), None)
    if teacher is None:
        raise ResourceNotFoundError("Teacher", teacher_id)

    outcome, updated = place_session(stored.snapshot, counseling_candidate(teacher))
    _raise_for(outcome)
    return _out(store.save(snapshot_id, updated, expected_version=stored.version))


@router.get("/{snapshot_id}/free-rooms", response_model=FreeRoomsOut)
def get_free_rooms(
    snapshot_id: int,
    day: DayOfWeek,
    start_time: str = Query(alias="startTime"),
    store: ScheduleStore = Depends(get_store),
) -> FreeRoomsOut:
    snapshot = store.load(snapshot_id).snapshot
    try:
        start_time = normalize_time(start_time)
    except ValueError as exc:
        raise MalformedCandidateError(str(exc)) from exc
    rooms = free_rooms(day, start_time, snapshot.rooms, snapshot.schedule)
    return FreeRoomsOut(day=day, start_time=start_time, rooms=rooms, fully_booked=not rooms)


@router.get("/{snapshot_id}/grid")
def get_week_grid(snapshot_id: int, store: ScheduleStore = Depends(get_store)) -> list[dict]:
    snapshot = store.load(snapshot_id).snapshot
    return [
        {
            "day": day.value,
            "slots": [
                {
                    "startTime": start,
                    "sessions": [session.model_dump(mode="json", by_alias=True) for session in sessions],
                }
                for start, sessions in slots
            ],
        }
        for day, slots in week_grid(snapshot.schedule)
    ]

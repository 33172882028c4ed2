import logging

from fastapi import APIRouter, Depends

from app.api.deps import get_store
from app.core.exceptions import MalformedCandidateError, PlacementRejectedError
from app.schemas.conflict import (
    FreeRoomsOut,
    FreeRoomsRequest,
    PlacementAcceptedOut,
    PlacementRequest,
    RejectionCode,
    SnapshotSource,
    ViolationReport,
)
from app.schemas.routine import ScheduleSnapshot
from app.services.availability import free_rooms
from app.services.conflict_service import ConflictService, describe_error
from app.services.registry import ResourceRegistry
from app.services.routine_service import acceptance_token
from app.services.snapshot_store import ScheduleStore

logger = logging.getLogger(__name__)

router = APIRouter()


def resolve_snapshot(source: SnapshotSource, store: ScheduleStore) -> tuple[ScheduleSnapshot, int | None]:
    if source.snapshot is not None:
        return source.snapshot, None
    stored = store.load(source.snapshot_id)
    return stored.snapshot, stored.version


@router.post(
    "/sessions/validate",
    response_model=PlacementAcceptedOut,
    responses={409: {"description": "Placement rejected"}, 422: {"description": "Malformed candidate"}},
)
def validate_session(payload: PlacementRequest, store: ScheduleStore = Depends(get_store)) -> PlacementAcceptedOut:
    snapshot, version = resolve_snapshot(payload, store)
    service = ConflictService(snapshot.schedule, ResourceRegistry.from_snapshot(snapshot))
    candidate, outcome = service.validate_payload(payload.candidate, exclude_id=payload.exclude_id)

    if not outcome.accepted:
        if outcome.code == RejectionCode.malformed_candidate:
            raise MalformedCandidateError(outcome.reason)
        raise PlacementRejectedError(outcome)

    return PlacementAcceptedOut(
        session_id=candidate.id,
        token=acceptance_token(candidate, version),
        snapshot_version=version,
    )


@router.post("/sessions/violations", response_model=ViolationReport)
def list_violations(payload: PlacementRequest, store: ScheduleStore = Depends(get_store)) -> ViolationReport:
    snapshot, _ = resolve_snapshot(payload, store)
    try:
        candidate = payload.candidate.to_session()
    except ValueError as exc:
        raise MalformedCandidateError(describe_error(exc)) from exc

    service = ConflictService(snapshot.schedule, ResourceRegistry.from_snapshot(snapshot))
    violations = list(service.find_violations(candidate, exclude_id=payload.exclude_id))
    if violations and violations[0].code == RejectionCode.malformed_candidate:
        raise MalformedCandidateError(violations[0].reason)
    return ViolationReport(session_id=candidate.id, violations=violations)


@router.post("/availability/free-rooms", response_model=FreeRoomsOut)
def list_free_rooms(payload: FreeRoomsRequest, store: ScheduleStore = Depends(get_store)) -> FreeRoomsOut:
    snapshot, _ = resolve_snapshot(payload, store)
    rooms = free_rooms(payload.day, payload.start_time, snapshot.rooms, snapshot.schedule, exclude_id=payload.exclude_id)
    logger.debug("%d of %d rooms free on %s %s", len(rooms), len(snapshot.rooms), payload.day.value, payload.start_time)
    return FreeRoomsOut(day=payload.day, start_time=payload.start_time, rooms=rooms, fully_booked=not rooms)

import re
from datetime import date

import pytest

from app.core.exceptions import MalformedCandidateError, ResourceNotFoundError
from app.schemas.calendar import DayOfWeek
from app.schemas.conflict import RejectionCode
from app.schemas.routine import AcademicSession, CounselingSession
from app.services.routine_service import (
    acceptance_token,
    counseling_candidate,
    format_modified_date,
    move_session,
    place_session,
    remove_session,
)


def _class(session_id, **overrides):
    fields = {
        "id": session_id,
        "day": "Monday",
        "startTime": "08:30",
        "teacherId": "t2",
        "courseId": "c2",
        "roomId": "r2",
        "sectionId": "s2",
    }
    fields.update(overrides)
    return AcademicSession(**fields)


def test_format_modified_date():
    assert format_modified_date(date(2026, 1, 5)) == "05-January-2026"


def test_place_session_appends_and_stamps(snapshot):
    outcome, updated = place_session(snapshot, _class("n1"))
    assert outcome.accepted
    assert [session.id for session in updated.schedule] == ["x1", "n1"]
    assert re.fullmatch(r"\d{2}-[A-Z][a-z]+-\d{4}", updated.last_modified)
    assert [session.id for session in snapshot.schedule] == ["x1"]


def test_place_session_rejection_keeps_snapshot(snapshot):
    outcome, updated = place_session(snapshot, _class("n1", roomId="r1"))
    assert outcome.code == RejectionCode.room_occupied
    assert outcome.reason == "Room R1 is already occupied."
    assert updated is snapshot


def test_place_session_replaces_by_id(snapshot):
    edited = _class("x1", teacherId="t1", roomId="r2", sectionId="s1", courseId="c1")
    outcome, updated = place_session(snapshot, edited)
    assert outcome.accepted
    assert len(updated.schedule) == 1
    assert updated.schedule[0].room_id == "r2"


def test_place_session_replaces_excluded_id(snapshot):
    replacement = _class("y1", teacherId="t1", roomId="r1", sectionId="s1", courseId="c1")
    outcome, updated = place_session(snapshot, replacement, exclude_id="x1")
    assert outcome.accepted
    assert [session.id for session in updated.schedule] == ["y1"]


def test_move_session_to_free_cell(snapshot):
    outcome, updated = move_session(snapshot, "x1", DayOfWeek.tuesday, "13:00")
    assert outcome.accepted
    moved = updated.schedule[0]
    assert moved.cell == (DayOfWeek.tuesday, "13:00")
    assert moved.end_time == "14:30"


def test_move_session_onto_off_day(snapshot):
    outcome, updated = move_session(snapshot, "x1", DayOfWeek.friday, "08:30")
    assert outcome.code == RejectionCode.teacher_off_day
    assert outcome.reason == "Dr. Rahman has an off-day on Friday."
    assert updated is snapshot


def test_move_unknown_session(snapshot):
    with pytest.raises(ResourceNotFoundError):
        move_session(snapshot, "missing", DayOfWeek.monday, "08:30")


def test_remove_session(snapshot):
    updated = remove_session(snapshot, "x1")
    assert updated.schedule == []
    with pytest.raises(ResourceNotFoundError):
        remove_session(updated, "x1")


def test_counseling_candidate_from_teacher_hour(snapshot):
    teacher = snapshot.teachers[0]
    candidate = counseling_candidate(teacher, session_id="h1")
    assert isinstance(candidate, CounselingSession)
    assert candidate.cell == (DayOfWeek.sunday, "10:00")
    assert candidate.end_time == "11:30"

    outcome, updated = place_session(snapshot, candidate)
    assert outcome.accepted
    assert updated.schedule[-1].kind == "counseling"


def test_counseling_candidate_requires_hour(snapshot):
    with pytest.raises(MalformedCandidateError):
        counseling_candidate(snapshot.teachers[1])


def test_acceptance_token_binds_version():
    candidate = _class("n1")
    assert acceptance_token(candidate, 1) == acceptance_token(candidate, 1)
    assert acceptance_token(candidate, 1) != acceptance_token(candidate, 2)
    assert acceptance_token(candidate) != acceptance_token(_class("n2"))


def test_place_session_refuses_id_of_another_session(snapshot):
    _, snapshot = place_session(snapshot, _class("y1", startTime="10:00"))
    clash = _class("y1", teacherId="t1", roomId="r1", sectionId="s1", courseId="c1", startTime="10:00")

    outcome, updated = place_session(snapshot, clash, exclude_id="x1")
    assert outcome.code == RejectionCode.malformed_candidate
    assert "y1" in outcome.reason
    assert updated is snapshot
    assert [session.id for session in updated.schedule] == ["x1", "y1"]


def test_place_session_replaces_only_excluded_id(snapshot):
    _, snapshot = place_session(snapshot, _class("y1", startTime="10:00"))
    replacement = _class("z1", teacherId="t1", roomId="r1", sectionId="s1", courseId="c1", startTime="11:30")

    outcome, updated = place_session(snapshot, replacement, exclude_id="x1")
    assert outcome.accepted
    assert [session.id for session in updated.schedule] == ["z1", "y1"]

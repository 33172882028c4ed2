import pytest
from pydantic import ValidationError

from app.schemas.calendar import DayOfWeek, normalize_time, parse_slot_label, slot_label
from app.schemas.routine import (
    AcademicSession,
    CounselingHour,
    CounselingSession,
    ScheduleSnapshot,
    SessionPayload,
    Teacher,
)


def test_normalize_time_accepts_both_clocks():
    assert normalize_time("08:30") == "08:30"
    assert normalize_time("1:00 pm") == "13:00"
    assert normalize_time("11:30 AM") == "11:30"
    with pytest.raises(ValueError):
        normalize_time("25:00")


def test_slot_labels():
    assert slot_label("14:30") == "14:30 - 16:00"
    assert parse_slot_label("08:30 AM - 10:00 AM") == ("08:30", "10:00")
    with pytest.raises(ValueError):
        slot_label("09:00")


def test_legacy_off_day_is_upgraded():
    teacher = Teacher.model_validate({"id": "t1", "name": "A", "initial": "A", "offDay": "friday"})
    assert teacher.off_days == frozenset({DayOfWeek.friday})

    blank = Teacher.model_validate({"id": "t2", "name": "B", "initial": "B", "offDay": ""})
    assert blank.off_days == frozenset()


def test_counseling_hour_text():
    teacher = Teacher.model_validate(
        {"id": "t1", "name": "A", "initial": "A", "counselingHour": "Sunday 10:00 AM - 11:30 AM", "email": ""}
    )
    assert teacher.counseling_hour == CounselingHour(day=DayOfWeek.sunday, start_time="10:00")
    assert teacher.email is None
    assert CounselingHour.parse("None") is None


def test_counseling_hour_must_be_catalog_slot():
    with pytest.raises(ValidationError):
        CounselingHour.parse("Sunday 09:00 AM - 10:00 AM")


def test_session_end_is_filled_from_catalog():
    session = AcademicSession(
        id="a1", day="Monday", startTime="04:00 PM", teacherId="t1", courseId="c1", roomId="r1", sectionId="s1"
    )
    assert (session.start_time, session.end_time) == ("16:00", "17:30")


def test_academic_session_requires_resources():
    with pytest.raises(ValidationError):
        AcademicSession(id="a1", day="Monday", startTime="08:30", teacherId="t1", courseId="c1", roomId="r1")


def test_snapshot_tags_legacy_sessions(snapshot_data):
    snapshot_data["schedule"] = [
        {"id": "a1", "day": "Monday", "startTime": "08:30", "teacherId": "t1", "courseId": "c1", "roomId": "r1", "sectionId": "s1"},
        {"id": "h1", "day": "Sunday", "startTime": "10:00", "teacherId": "t1", "counselingHour": True},
    ]
    snapshot = ScheduleSnapshot.model_validate(snapshot_data)
    assert isinstance(snapshot.schedule[0], AcademicSession)
    assert isinstance(snapshot.schedule[1], CounselingSession)


def test_snapshot_rejects_duplicate_room_numbers(snapshot_data):
    snapshot_data["rooms"].append({"id": "r3", "roomNumber": "r1"})
    with pytest.raises(ValidationError, match="Duplicate room number"):
        ScheduleSnapshot.model_validate(snapshot_data)


def test_snapshot_rejects_duplicate_initials(snapshot_data):
    snapshot_data["teachers"].append({"id": "t3", "name": "Other", "initial": "dr"})
    with pytest.raises(ValidationError, match="Duplicate teacher initial"):
        ScheduleSnapshot.model_validate(snapshot_data)


def test_snapshot_dump_round_trips_aliases(snapshot):
    dumped = snapshot.model_dump(mode="json", by_alias=True)
    assert dumped["schedule"][0]["roomId"] == "r1"
    assert dumped["teachers"][0]["offDays"] == ["Friday"]
    assert ScheduleSnapshot.model_validate(dumped) == snapshot


def test_session_payload_problems():
    assert SessionPayload().problems() == [
        "day is required",
        "startTime is required",
        "teacherId is required",
        "Class sessions require courseId, roomId, sectionId",
    ]
    counseling = SessionPayload(day="Sunday", startTime="10:00", teacherId="t1", counselingHour=True)
    assert counseling.problems() == []
    assert isinstance(counseling.to_session(), CounselingSession)


def test_null_off_days_falls_back_to_legacy_field():
    teacher = Teacher.model_validate({"id": "t1", "name": "A", "initial": "A", "offDays": None, "offDay": "Friday"})
    assert teacher.off_days == frozenset({DayOfWeek.friday})

    bare = Teacher.model_validate({"id": "t2", "name": "B", "initial": "B", "offDays": None})
    assert bare.off_days == frozenset()


def test_snapshot_rejects_off_catalog_sessions(snapshot_data):
    snapshot_data["schedule"].append(
        {"id": "odd", "kind": "counseling", "day": "Monday", "startTime": "09:00", "teacherId": "t2"}
    )
    with pytest.raises(ValidationError, match="off the time slot catalog: odd"):
        ScheduleSnapshot.model_validate(snapshot_data)


def test_snapshot_rejects_mismatched_session_end(snapshot_data):
    snapshot_data["schedule"][0]["endTime"] = "11:30"
    with pytest.raises(ValidationError, match="off the time slot catalog: x1"):
        ScheduleSnapshot.model_validate(snapshot_data)

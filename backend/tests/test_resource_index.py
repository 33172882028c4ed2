from app.schemas.calendar import DayOfWeek
from app.schemas.routine import AcademicSession, CounselingSession
from app.services.resource_index import ResourceIndex, sessions_at


def _schedule():
    return [
        AcademicSession(
            id="a1", day="Monday", startTime="08:30", teacherId="t1", courseId="c1", roomId="r1", sectionId="s1"
        ),
        AcademicSession(
            id="a2", day="Monday", startTime="08:30", teacherId="t2", courseId="c2", roomId="r2", sectionId="s2"
        ),
        AcademicSession(
            id="a3", day="Monday", startTime="10:00", teacherId="t1", courseId="c1", roomId="r1", sectionId="s1"
        ),
        CounselingSession(id="h1", day="Monday", startTime="08:30", teacherId="t3"),
    ]


def test_sessions_at_matches_exact_cell():
    ids = [session.id for session in sessions_at(_schedule(), DayOfWeek.monday, "08:30")]
    assert ids == ["a1", "a2", "h1"]
    assert sessions_at(_schedule(), DayOfWeek.tuesday, "08:30") == []


def test_lookup_by_resource():
    index = ResourceIndex(_schedule())
    assert index.teacher_session(DayOfWeek.monday, "08:30", "t3").id == "h1"
    assert index.room_session(DayOfWeek.monday, "08:30", "r2").id == "a2"
    assert index.section_session(DayOfWeek.monday, "10:00", "s1").id == "a3"
    assert index.room_session(DayOfWeek.monday, "10:00", "r2") is None


def test_occupied_rooms_skip_counseling():
    index = ResourceIndex(_schedule())
    assert index.occupied_rooms(DayOfWeek.monday, "08:30") == {"r1", "r2"}


def test_excluded_ids_are_invisible():
    index = ResourceIndex(_schedule(), exclude_ids=("a1", None))
    assert index.room_session(DayOfWeek.monday, "08:30", "r1") is None
    assert [session.id for session in index.sessions_at(DayOfWeek.monday, "08:30")] == ["a2", "h1"]

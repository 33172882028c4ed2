"""Seed a demo class routine snapshot for trying the placement endpoints.

Every session is placed through the conflict checker, so the seeded routine
is conflict-free by construction.

Run:
  PYTHONPATH=backend python scripts/seed_demo_routine.py
"""

from __future__ import annotations

import os

from app.db.bootstrap import ensure_runtime_schema_compatibility
from app.db.session import SessionLocal
from app.schemas.routine import AcademicSession, ScheduleSnapshot
from app.services.routine_service import counseling_candidate, place_session
from app.services.snapshot_store import SqlScheduleStore

SEMESTER_NAME = os.getenv("DEMO_SEMESTER_NAME", "Demo Semester")

REFERENCE_DATA = {
    "settings": {"semesterName": SEMESTER_NAME},
    "teachers": [
        {
            "id": "t-rahman",
            "name": "Dr. Rahman",
            "initial": "DR",
            "offDays": ["Friday"],
            "counselingHour": "Sunday 10:00 AM - 11:30 AM",
        },
        {
            "id": "t-akter",
            "name": "Ms. Akter",
            "initial": "MA",
            "offDays": ["Thursday"],
            "counselingHour": "Monday 02:30 PM - 04:00 PM",
        },
    ],
    "courses": [
        {"id": "c-spl", "code": "CSE101", "name": "Structured Programming", "shortName": "SPL", "credits": 3},
        {"id": "c-dm", "code": "CSE103", "name": "Discrete Mathematics", "shortName": "DM", "credits": 3},
        {"id": "c-spl-lab", "code": "CSE102", "name": "Structured Programming Lab", "credits": 1.5},
    ],
    "rooms": [
        {"id": "r-301", "roomNumber": "301", "type": "Theory"},
        {"id": "r-lab1", "roomNumber": "Lab-1", "type": "Lab"},
    ],
    "sections": [
        {"id": "s-12a", "name": "A", "batch": 12, "studentCount": 40},
        {"id": "s-12b", "name": "B", "batch": 12, "studentCount": 38},
    ],
}

CLASSES = [
    ("Sunday", "08:30", "t-rahman", "c-spl", "r-301", "s-12a"),
    ("Sunday", "08:30", "t-akter", "c-dm", "r-lab1", "s-12b"),
    ("Monday", "11:30", "t-rahman", "c-spl-lab", "r-lab1", "s-12b"),
    ("Tuesday", "13:00", "t-akter", "c-dm", "r-301", "s-12a"),
]


def _build_snapshot() -> ScheduleSnapshot:
    snapshot = ScheduleSnapshot.model_validate(REFERENCE_DATA)
    for number, (day, start, teacher_id, course_id, room_id, section_id) in enumerate(CLASSES, start=1):
        candidate = AcademicSession(
            id=f"demo-{number}",
            day=day,
            start_time=start,
            teacher_id=teacher_id,
            course_id=course_id,
            room_id=room_id,
            section_id=section_id,
        )
        outcome, snapshot = place_session(snapshot, candidate)
        if not outcome.accepted:
            raise SystemExit(f"Demo class demo-{number} rejected: {outcome.reason}")

    for teacher in list(snapshot.teachers):
        outcome, snapshot = place_session(snapshot, counseling_candidate(teacher, session_id=f"counseling-{teacher.id}"))
        if not outcome.accepted:
            raise SystemExit(f"Counseling hour for {teacher.name} rejected: {outcome.reason}")
    return snapshot


def main() -> None:
    ensure_runtime_schema_compatibility()
    db = SessionLocal()
    try:
        stored = SqlScheduleStore(db).create(_build_snapshot())
    finally:
        db.close()

    print(f"Demo routine ready: snapshot {stored.id} (version {stored.version})")
    print(f"  - {len(stored.snapshot.schedule)} sessions for {stored.snapshot.settings.semester_name}")
    print(f"  - try: GET /api/snapshots/{stored.id}/grid")


if __name__ == "__main__":
    main()

import os

# The app lifespan bootstraps the default engine; keep it off the working directory.
os.environ.setdefault("DATABASE_URL", "sqlite+pysqlite://")

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from app.api.deps import get_db  # noqa: E402
from app.db.base import Base  # noqa: E402
from app.main import app  # noqa: E402
from app.schemas.routine import ScheduleSnapshot  # noqa: E402


@pytest.fixture()
def engine():
    engine = create_engine(
        "sqlite+pysqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture()
def db_session(engine):
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture()
def client(engine):
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

    def override_get_db():
        db = TestingSessionLocal()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


@pytest.fixture()
def snapshot_data():
    """A small department: two teachers, two rooms, two sections, one class booked."""
    return {
        "settings": {"semesterName": "Fall 2026", "isPublished": False},
        "teachers": [
            {
                "id": "t1",
                "name": "Dr. Rahman",
                "initial": "DR",
                "email": "rahman@example.edu",
                "offDays": ["Friday"],
                "counselingHour": "Sunday 10:00 AM - 11:30 AM",
            },
            {"id": "t2", "name": "Ms. Akter", "initial": "MA", "offDays": []},
        ],
        "courses": [
            {"id": "c1", "code": "CSE101", "name": "Structured Programming", "shortName": "SPL", "credits": 3},
            {"id": "c2", "code": "CSE102", "name": "Discrete Mathematics", "credits": 3},
        ],
        "rooms": [
            {"id": "r1", "roomNumber": "R1", "type": "Theory"},
            {"id": "r2", "roomNumber": "R2", "type": "Lab"},
        ],
        "sections": [
            {"id": "s1", "name": "A", "batch": 12, "studentCount": 40},
            {"id": "s2", "name": "", "batch": 13, "studentCount": 35},
        ],
        "schedule": [
            {
                "id": "x1",
                "kind": "academic",
                "day": "Monday",
                "startTime": "08:30",
                "teacherId": "t1",
                "courseId": "c1",
                "roomId": "r1",
                "sectionId": "s1",
            }
        ],
    }


@pytest.fixture()
def snapshot(snapshot_data):
    return ScheduleSnapshot.model_validate(snapshot_data)

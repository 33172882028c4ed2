from __future__ import annotations

from collections.abc import Iterable

from app.schemas.calendar import TIME_SLOTS, WEEK_ORDER, DayOfWeek
from app.schemas.routine import Room
from app.services.resource_index import ResourceIndex, Session


def free_rooms(
    day: DayOfWeek,
    start_time: str,
    rooms: Iterable[Room],
    schedule: Iterable[Session],
    exclude_id: str | None = None,
) -> list[Room]:
    """Rooms from ``rooms`` that no class session holds at (day, start_time).

    Counseling sessions never hold a room. Catalog order is preserved.
    """
    occupied = ResourceIndex(schedule, exclude_ids=(exclude_id,)).occupied_rooms(day, start_time)
    return [room for room in rooms if room.id not in occupied]


def is_slot_full(
    day: DayOfWeek,
    start_time: str,
    rooms: Iterable[Room],
    schedule: Iterable[Session],
) -> bool:
    return not free_rooms(day, start_time, rooms, schedule)


def week_grid(schedule: Iterable[Session]) -> list[tuple[DayOfWeek, list[tuple[str, list[Session]]]]]:
    """Sessions laid out day by day (Saturday first) and slot by slot."""
    index = ResourceIndex(schedule)
    return [
        (day, [(start, index.sessions_at(day, start)) for start, _ in TIME_SLOTS])
        for day in WEEK_ORDER
    ]

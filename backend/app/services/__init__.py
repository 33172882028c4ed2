from app.schemas.calendar import TIME_SLOTS, WEEK_ORDER, DayOfWeek  # noqa: F401
from app.services.availability import free_rooms, is_slot_full, week_grid  # noqa: F401
from app.services.conflict_service import ConflictService, find_violations, validate_placement  # noqa: F401
from app.services.registry import ResourceRegistry  # noqa: F401
from app.services.resource_index import ResourceIndex  # noqa: F401

from fastapi import APIRouter

from app.schemas.calendar import TIME_SLOTS, WEEK_ORDER, DayOfWeek

router = APIRouter()


@router.get("/catalog")
def get_catalog() -> dict:
    return {
        "days": [day.value for day in DayOfWeek],
        "weekOrder": [day.value for day in WEEK_ORDER],
        "timeSlots": [{"startTime": start, "endTime": end} for start, end in TIME_SLOTS],
    }

from fastapi import APIRouter, Depends

from timetable_backend.database import SessionLocal
from timetable_backend.models.user import User
from timetable_backend.schemas.timetable import (
    ScheduleItemIn,
    ScheduleItemOut,
    ScheduleItemUpdate,
    TimetableData,
    TimetableResponse,
)
from timetable_backend.services.timetable_service import (
    CONFLICT,
    NOT_FOUND,
    MutationOutcome,
    TimetableService,
)
from timetable_backend.services.timetable_store import SqlTimetableStore
from timetable_backend.utils.auth import get_current_user
from timetable_backend.utils.errors import ConflictError, NotFoundError

router = APIRouter(prefix="/timetable", tags=["Timetable"])

_service = TimetableService(SqlTimetableStore(SessionLocal))


def get_timetable_service() -> TimetableService:
    return _service


def _respond(outcome: MutationOutcome) -> TimetableResponse:
    # rendered by the app-level handlers in main.py
    if outcome.status == CONFLICT:
        raise ConflictError(outcome.conflict)
    if outcome.status == NOT_FOUND:
        raise NotFoundError(outcome.message)

    return TimetableResponse(
        message=outcome.message or None,
        data=TimetableData(
            timetable=[ScheduleItemOut.model_validate(i) for i in outcome.items],
            last_updated=outcome.last_updated,
        ),
    )


# 取得課表（沒有就建立空的）
@router.get("", response_model=TimetableResponse)
def get_my_timetable(
    user: User = Depends(get_current_user),
    service: TimetableService = Depends(get_timetable_service),
):
    return _respond(service.get_timetable(user.id))


@router.post("/slots", response_model=TimetableResponse)
def add_time_slot(
    body: ScheduleItemIn,
    user: User = Depends(get_current_user),
    service: TimetableService = Depends(get_timetable_service),
):
    return _respond(service.add_slot(user.id, body.model_dump()))


@router.put("/slots/{slot_id}", response_model=TimetableResponse)
def update_time_slot(
    slot_id: str,
    body: ScheduleItemUpdate,
    user: User = Depends(get_current_user),
    service: TimetableService = Depends(get_timetable_service),
):
    changes = body.model_dump(exclude_unset=True, exclude_none=True)
    return _respond(service.update_slot(user.id, slot_id, changes))


# 不存在的 slot_id 視為已刪除（不回 404）
@router.delete("/slots/{slot_id}", response_model=TimetableResponse)
def remove_time_slot(
    slot_id: str,
    user: User = Depends(get_current_user),
    service: TimetableService = Depends(get_timetable_service),
):
    return _respond(service.remove_slot(user.id, slot_id))


@router.delete("/clear", response_model=TimetableResponse)
def clear_timetable(
    user: User = Depends(get_current_user),
    service: TimetableService = Depends(get_timetable_service),
):
    return _respond(service.clear_timetable(user.id))

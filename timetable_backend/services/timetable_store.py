"""
Persistence for schedule collections.

The service only talks to the TimetableStore protocol: load a collection
before an operation and save it afterwards. A failed save surfaces as
PersistenceError and nothing is committed.
"""
from __future__ import annotations

import copy
import logging
from datetime import timezone
from typing import Any, Optional, Protocol

from sqlalchemy.exc import SQLAlchemyError

from timetable_backend.models.timetable import ScheduleItemRow, Timetable
from timetable_backend.services.schedule_repository import ScheduleCollection, ScheduleItem
from timetable_backend.utils.errors import PersistenceError

logger = logging.getLogger("app.timetable")


class TimetableStore(Protocol):
    def load_collection(self, owner_id: Any) -> Optional[ScheduleCollection]:
        ...

    def save_collection(self, owner_id: Any, collection: ScheduleCollection) -> None:
        ...


class InMemoryTimetableStore:
    """Dict-backed store; copies on the way in and out so no state is shared."""

    def __init__(self) -> None:
        self._data: dict[Any, ScheduleCollection] = {}

    def load_collection(self, owner_id):
        stored = self._data.get(owner_id)
        return copy.deepcopy(stored) if stored is not None else None

    def save_collection(self, owner_id, collection):
        self._data[owner_id] = copy.deepcopy(collection)


def _as_aware(value):
    # sqlite hands back naive datetimes
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _row_to_item(row: ScheduleItemRow) -> ScheduleItem:
    return ScheduleItem(
        id=row.id,
        subject=row.subject,
        teacher=row.teacher,
        day=row.day,
        section=row.section,
        start_time=row.start_time,
        end_time=row.end_time,
        time_slot_label=row.time_slot_label or "",
        start_minutes=row.start_minutes,
        end_minutes=row.end_minutes,
    )


def _fill_row(row: ScheduleItemRow, item: ScheduleItem, position: int) -> None:
    row.position = position
    row.subject = item.subject
    row.teacher = item.teacher
    row.day = item.day
    row.section = item.section
    row.start_time = item.start_time
    row.end_time = item.end_time
    row.time_slot_label = item.time_slot_label
    row.start_minutes = item.start_minutes
    row.end_minutes = item.end_minutes


class SqlTimetableStore:
    """SQLAlchemy store: one `timetables` row per user plus ordered `schedule_items`."""

    def __init__(self, session_factory) -> None:
        self._session_factory = session_factory

    def load_collection(self, owner_id):
        db = self._session_factory()
        try:
            tt = db.query(Timetable).filter(Timetable.user_id == owner_id).first()
            if tt is None:
                return None
            return ScheduleCollection(
                owner_id=owner_id,
                items=[_row_to_item(r) for r in tt.items],
                last_updated=_as_aware(tt.last_updated),
            )
        except SQLAlchemyError as exc:
            logger.exception("Loading timetable for user %s failed", owner_id)
            raise PersistenceError("Error loading timetable") from exc
        finally:
            db.close()

    def save_collection(self, owner_id, collection):
        db = self._session_factory()
        try:
            tt = db.query(Timetable).filter(Timetable.user_id == owner_id).first()
            if tt is None:
                tt = Timetable(user_id=owner_id, last_updated=collection.last_updated)
                db.add(tt)

            existing = {row.id: row for row in tt.items}
            rows = []
            for position, item in enumerate(collection.items):
                row = existing.pop(item.id, None) or ScheduleItemRow(id=item.id)
                _fill_row(row, item, position)
                rows.append(row)

            # rows left in `existing` become orphans and get deleted
            tt.items = rows
            tt.last_updated = collection.last_updated
            db.commit()
        except SQLAlchemyError as exc:
            db.rollback()
            logger.exception("Saving timetable for user %s failed", owner_id)
            raise PersistenceError("Error saving timetable") from exc
        finally:
            db.close()

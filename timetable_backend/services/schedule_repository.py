"""
In-memory schedule state for a single owner.

ScheduleItem / ScheduleCollection are plain dataclasses so the conflict
rules can run without a database session. ScheduleRepository applies every
mutation as copy -> validate -> commit: the collection's item list is only
replaced once the candidate passed the conflict check, so a rejected
add/update leaves the collection exactly as it was.
"""
from __future__ import annotations

import uuid
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from typing import Any, Callable, Optional

from timetable_backend.utils.conflict import find_conflict
from timetable_backend.utils.errors import (
    ConflictError,
    InvalidTimeRangeError,
    NotFoundError,
)
from timetable_backend.utils.timeslots import time_to_minutes

EDITABLE_FIELDS = (
    "subject",
    "teacher",
    "day",
    "section",
    "start_time",
    "end_time",
    "time_slot_label",
)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def new_item_id() -> str:
    return uuid.uuid4().hex


@dataclass(frozen=True)
class ScheduleItem:
    id: str
    subject: str
    teacher: str
    day: str
    section: str
    start_time: str
    end_time: str
    time_slot_label: str
    start_minutes: int
    end_minutes: int

    @classmethod
    def create(cls, *, id: Optional[str] = None, **fields: Any) -> "ScheduleItem":
        unknown = set(fields) - set(EDITABLE_FIELDS)
        if unknown:
            raise TypeError(f"Unknown schedule item fields: {sorted(unknown)}")

        start = time_to_minutes(fields["start_time"])
        end = time_to_minutes(fields["end_time"])
        _check_range(fields["start_time"], fields["end_time"], start, end)
        return cls(
            id=id or new_item_id(),
            subject=fields["subject"],
            teacher=fields["teacher"],
            day=fields["day"],
            section=fields["section"],
            start_time=fields["start_time"],
            end_time=fields["end_time"],
            time_slot_label=fields.get("time_slot_label") or "",
            start_minutes=start,
            end_minutes=end,
        )

    def with_changes(self, **changes: Any) -> "ScheduleItem":
        """Copy with the given fields overwritten; minutes follow the times."""
        changes = {k: v for k, v in changes.items() if v is not None}
        if "id" in changes:
            raise TypeError("Schedule item id is immutable")
        unknown = set(changes) - set(EDITABLE_FIELDS)
        if unknown:
            raise TypeError(f"Unknown schedule item fields: {sorted(unknown)}")

        updated = replace(self, **changes)
        if "start_time" in changes or "end_time" in changes:
            start = time_to_minutes(updated.start_time)
            end = time_to_minutes(updated.end_time)
            _check_range(updated.start_time, updated.end_time, start, end)
            updated = replace(updated, start_minutes=start, end_minutes=end)
        return updated


def _check_range(start_time: str, end_time: str, start: int, end: int) -> None:
    if end <= start:
        raise InvalidTimeRangeError(
            f"End time {end_time} must be after start time {start_time}"
        )


@dataclass
class ScheduleCollection:
    owner_id: Any
    items: list[ScheduleItem] = field(default_factory=list)
    last_updated: datetime = field(default_factory=utcnow)

    def find(self, item_id: str) -> Optional[ScheduleItem]:
        for item in self.items:
            if item.id == item_id:
                return item
        return None


class ScheduleRepository:
    """Mutations over one owner's collection, each guarded by the conflict check."""

    def __init__(
        self,
        collection: ScheduleCollection,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self.collection = collection
        self._clock = clock

    def get(self) -> list[ScheduleItem]:
        return list(self.collection.items)

    def add(self, fields: dict[str, Any]) -> ScheduleItem:
        candidate = ScheduleItem.create(**fields)

        conflict = find_conflict(candidate, self.collection.items)
        if conflict is not None:
            raise ConflictError(conflict)

        self._commit(self.collection.items + [candidate])
        return candidate

    def update(self, item_id: str, changes: dict[str, Any]) -> ScheduleItem:
        current = self.collection.find(item_id)
        if current is None:
            raise NotFoundError("Time slot not found")

        candidate = current.with_changes(**changes)
        others = [i for i in self.collection.items if i.id != item_id]

        conflict = find_conflict(candidate, others)
        if conflict is not None:
            raise ConflictError(conflict)

        self._commit([candidate if i.id == item_id else i for i in self.collection.items])
        return candidate

    def remove(self, item_id: str) -> list[ScheduleItem]:
        # unknown ids are a no-op, not an error
        self._commit([i for i in self.collection.items if i.id != item_id])
        return self.get()

    def clear(self) -> list[ScheduleItem]:
        self._commit([])
        return self.get()

    def _commit(self, items: list[ScheduleItem]) -> None:
        self.collection.items = items
        self.collection.last_updated = self._clock()

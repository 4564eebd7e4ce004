"""
Timetable mutations: lock owner -> load -> apply through ScheduleRepository -> save.

Every public method returns a MutationOutcome (success / conflict / not_found).
Malformed times, bad ranges and storage failures are raised, not returned.
"""
from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, Optional

from timetable_backend.services.schedule_repository import (
    ScheduleCollection,
    ScheduleItem,
    ScheduleRepository,
    utcnow,
)
from timetable_backend.services.timetable_store import TimetableStore
from timetable_backend.utils.conflict import ConflictResult
from timetable_backend.utils.errors import ConflictError, NotFoundError

logger = logging.getLogger("app.timetable")

SUCCESS = "success"
CONFLICT = "conflict"
NOT_FOUND = "not_found"

TIMETABLE_NOT_FOUND = "Timetable not found"


@dataclass
class MutationOutcome:
    status: str
    items: list[ScheduleItem] = field(default_factory=list)
    last_updated: Optional[datetime] = None
    message: str = ""
    item: Optional[ScheduleItem] = None
    conflict: Optional[ConflictResult] = None

    @property
    def ok(self) -> bool:
        return self.status == SUCCESS

    @classmethod
    def success(cls, collection: ScheduleCollection, message: str = "", item=None):
        return cls(
            status=SUCCESS,
            items=list(collection.items),
            last_updated=collection.last_updated,
            message=message,
            item=item,
        )

    @classmethod
    def rejected(cls, result: ConflictResult):
        return cls(status=CONFLICT, message=result.message, conflict=result)

    @classmethod
    def not_found(cls, message: str):
        return cls(status=NOT_FOUND, message=message)


class OwnerLocks:
    """One lock per owner; different owners never wait on each other."""

    def __init__(self) -> None:
        self._guard = threading.Lock()
        # never evicted: one lock per owner id seen by this process.
        # threading.Lock can't be weakly referenced, so no WeakValueDictionary.
        self._locks: dict[Any, threading.Lock] = {}

    def for_owner(self, owner_id) -> threading.Lock:
        with self._guard:
            lock = self._locks.get(owner_id)
            if lock is None:
                lock = self._locks[owner_id] = threading.Lock()
            return lock


class TimetableService:
    def __init__(
        self,
        store: TimetableStore,
        clock: Callable[[], datetime] = utcnow,
        locks: Optional[OwnerLocks] = None,
    ) -> None:
        self.store = store
        self._clock = clock
        self._locks = locks or OwnerLocks()

    def get_timetable(self, owner_id) -> MutationOutcome:
        with self._locks.for_owner(owner_id):
            collection = self._load_or_create(owner_id)
            return MutationOutcome.success(collection)

    def add_slot(self, owner_id, fields: dict[str, Any]) -> MutationOutcome:
        with self._locks.for_owner(owner_id):
            collection = self.store.load_collection(owner_id)
            if collection is None:
                collection = ScheduleCollection(owner_id=owner_id, last_updated=self._clock())

            repo = ScheduleRepository(collection, clock=self._clock)
            try:
                item = repo.add(fields)
            except ConflictError as exc:
                logger.warning("Add rejected for owner %s: %s", owner_id, exc.message)
                return MutationOutcome.rejected(exc.result)

            self.store.save_collection(owner_id, collection)
            logger.info("Slot %s added for owner %s", item.id, owner_id)
            return MutationOutcome.success(collection, "Time slot added successfully", item)

    def update_slot(self, owner_id, slot_id: str, changes: dict[str, Any]) -> MutationOutcome:
        with self._locks.for_owner(owner_id):
            collection = self.store.load_collection(owner_id)
            if collection is None:
                return MutationOutcome.not_found(TIMETABLE_NOT_FOUND)

            repo = ScheduleRepository(collection, clock=self._clock)
            try:
                item = repo.update(slot_id, changes)
            except NotFoundError as exc:
                return MutationOutcome.not_found(str(exc))
            except ConflictError as exc:
                logger.warning("Update of slot %s rejected for owner %s: %s", slot_id, owner_id, exc.message)
                return MutationOutcome.rejected(exc.result)

            self.store.save_collection(owner_id, collection)
            logger.info("Slot %s updated for owner %s", slot_id, owner_id)
            return MutationOutcome.success(collection, "Time slot updated successfully", item)

    def remove_slot(self, owner_id, slot_id: str) -> MutationOutcome:
        with self._locks.for_owner(owner_id):
            collection = self.store.load_collection(owner_id)
            if collection is None:
                return MutationOutcome.not_found(TIMETABLE_NOT_FOUND)

            ScheduleRepository(collection, clock=self._clock).remove(slot_id)
            self.store.save_collection(owner_id, collection)
            logger.info("Slot %s removed for owner %s", slot_id, owner_id)
            return MutationOutcome.success(collection, "Time slot removed successfully")

    def clear_timetable(self, owner_id) -> MutationOutcome:
        with self._locks.for_owner(owner_id):
            collection = self.store.load_collection(owner_id)
            if collection is None:
                return MutationOutcome.not_found(TIMETABLE_NOT_FOUND)

            ScheduleRepository(collection, clock=self._clock).clear()
            self.store.save_collection(owner_id, collection)
            logger.info("Timetable cleared for owner %s", owner_id)
            return MutationOutcome.success(collection, "Timetable cleared successfully")

    def _load_or_create(self, owner_id) -> ScheduleCollection:
        collection = self.store.load_collection(owner_id)
        if collection is None:
            collection = ScheduleCollection(owner_id=owner_id, last_updated=self._clock())
            self.store.save_collection(owner_id, collection)
            logger.info("Created empty timetable for owner %s", owner_id)
        return collection

import pytest
from sqlalchemy.exc import OperationalError

from timetable_backend.models.timetable import ScheduleItemRow, Timetable
from timetable_backend.models.user import User
from timetable_backend.services.schedule_repository import ScheduleCollection, ScheduleItem
from timetable_backend.services.timetable_store import SqlTimetableStore
from timetable_backend.utils.errors import PersistenceError

from conftest import slot


@pytest.fixture
def owner_id(session_factory):
    db = session_factory()
    user = User(username="bob", email="bob@example.com", password_hash="x")
    db.add(user)
    db.commit()
    uid = user.id
    db.close()
    return uid


@pytest.fixture
def store(session_factory):
    return SqlTimetableStore(session_factory)


def test_missing_collection_loads_as_none(store, owner_id):
    assert store.load_collection(owner_id) is None


def test_save_and_load_keeps_order_and_fields(store, owner_id):
    items = [
        ScheduleItem.create(**slot(day="Wed")),
        ScheduleItem.create(**slot(day="Mon", time_slot_label="")),
        ScheduleItem.create(**slot(day="Fri", start_time="13:00", end_time="14:30")),
    ]
    collection = ScheduleCollection(owner_id=owner_id, items=items)
    store.save_collection(owner_id, collection)

    loaded = store.load_collection(owner_id)
    assert loaded.items == items
    assert loaded.last_updated == collection.last_updated


def test_resave_updates_rows_and_drops_removed(store, owner_id, session_factory):
    a = ScheduleItem.create(**slot(day="Mon"))
    b = ScheduleItem.create(**slot(day="Tue"))
    store.save_collection(owner_id, ScheduleCollection(owner_id=owner_id, items=[a, b]))

    b2 = b.with_changes(subject="Chemistry")
    c = ScheduleItem.create(**slot(day="Thu"))
    store.save_collection(owner_id, ScheduleCollection(owner_id=owner_id, items=[b2, c]))

    assert store.load_collection(owner_id).items == [b2, c]

    db = session_factory()
    try:
        assert db.query(Timetable).count() == 1
        assert {r.id for r in db.query(ScheduleItemRow).all()} == {b.id, c.id}
    finally:
        db.close()


def test_clear_persists_empty_collection(store, owner_id):
    store.save_collection(owner_id, ScheduleCollection(owner_id=owner_id, items=[ScheduleItem.create(**slot())]))
    store.save_collection(owner_id, ScheduleCollection(owner_id=owner_id, items=[]))
    assert store.load_collection(owner_id).items == []


class BrokenSession:
    def query(self, *args, **kwargs):
        raise OperationalError("SELECT", {}, Exception("connection refused"))

    def rollback(self):
        self.rolled_back = True

    def close(self):
        pass


def test_storage_errors_become_persistence_errors():
    store = SqlTimetableStore(BrokenSession)
    with pytest.raises(PersistenceError):
        store.load_collection(1)
    with pytest.raises(PersistenceError):
        store.save_collection(1, ScheduleCollection(owner_id=1))

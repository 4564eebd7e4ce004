from datetime import datetime, timedelta, timezone
from itertools import combinations

import pytest

from timetable_backend.services.schedule_repository import (
    ScheduleCollection,
    ScheduleItem,
    ScheduleRepository,
)
from timetable_backend.utils.errors import (
    ConflictError,
    InvalidTimeRangeError,
    MalformedTimeError,
    NotFoundError,
)

from conftest import slot


class Clock:
    def __init__(self):
        self.now = datetime(2024, 1, 1, tzinfo=timezone.utc)

    def __call__(self):
        self.now += timedelta(minutes=1)
        return self.now


@pytest.fixture
def repo():
    return ScheduleRepository(ScheduleCollection(owner_id=1), clock=Clock())


def assert_invariants(items):
    for a, b in combinations(items, 2):
        if a.day != b.day:
            continue
        overlap = a.start_minutes < b.end_minutes and b.start_minutes < a.end_minutes
        if a.teacher == b.teacher:
            assert not overlap
        if a.section == b.section:
            assert not overlap
    assert len({i.id for i in items}) == len(items)


def test_create_derives_minutes_and_fresh_ids():
    a = ScheduleItem.create(**slot())
    b = ScheduleItem.create(**slot())
    assert (a.start_minutes, a.end_minutes) == (540, 600)
    assert a.id != b.id


def test_create_rejects_inverted_range():
    with pytest.raises(InvalidTimeRangeError):
        ScheduleItem.create(**slot(start_time="10:00", end_time="10:00"))


def test_with_changes_recomputes_minutes_and_keeps_id():
    a = ScheduleItem.create(**slot())
    b = a.with_changes(end_time="11:30", subject="Physics")
    assert b.id == a.id
    assert b.end_minutes == 690
    assert b.subject == "Physics"
    assert a.end_minutes == 600


def test_with_changes_refuses_id():
    with pytest.raises(TypeError):
        ScheduleItem.create(**slot()).with_changes(id="other")


def test_add_appends_in_order(repo):
    first = repo.add(slot())
    second = repo.add(slot(day="Tue"))
    assert [i.id for i in repo.get()] == [first.id, second.id]


def test_add_identical_slot_conflicts_and_changes_nothing(repo):
    repo.add(slot())
    before = repo.get()
    stamp = repo.collection.last_updated

    with pytest.raises(ConflictError) as exc:
        repo.add(slot())

    assert exc.value.result.rule == "teacher"
    assert repo.get() == before
    assert repo.collection.last_updated == stamp


def test_smith_jones_scenario(repo):
    repo.add(slot(teacher="Smith", day="Mon", start_time="09:00", end_time="10:00", section="B"))

    with pytest.raises(ConflictError) as exc:
        repo.add(slot(teacher="Smith", start_time="09:30", end_time="10:30", section="D"))
    assert exc.value.message.startswith("Teacher Smith")
    assert "Section B" in exc.value.message

    with pytest.raises(ConflictError) as exc:
        repo.add(slot(teacher="Jones", start_time="09:30", end_time="10:30", section="B"))
    assert exc.value.result.rule == "section"

    repo.add(slot(teacher="Jones", day="Tue", start_time="09:00", end_time="10:00", section="B"))
    assert len(repo.get()) == 2
    assert_invariants(repo.get())


def test_back_to_back_slots_are_allowed(repo):
    repo.add(slot(start_time="09:00", end_time="10:00"))
    repo.add(slot(start_time="10:00", end_time="11:00"))
    assert len(repo.get()) == 2


def test_add_malformed_time_propagates(repo):
    with pytest.raises(MalformedTimeError):
        repo.add(slot(start_time="9am"))
    assert repo.get() == []


def test_update_can_overlap_itself(repo):
    item = repo.add(slot(start_time="09:00", end_time="10:00"))
    updated = repo.update(item.id, {"start_time": "09:30", "end_time": "10:30"})

    assert updated.id == item.id
    assert (updated.start_minutes, updated.end_minutes) == (570, 630)
    assert repo.get() == [updated]


def test_update_preserves_position(repo):
    a = repo.add(slot(day="Mon"))
    b = repo.add(slot(day="Tue"))
    c = repo.add(slot(day="Wed"))
    repo.update(b.id, {"subject": "Art"})
    assert [i.id for i in repo.get()] == [a.id, b.id, c.id]
    assert repo.get()[1].subject == "Art"


def test_update_conflict_leaves_stored_item(repo):
    repo.add(slot(start_time="09:00", end_time="10:00"))
    other = repo.add(slot(start_time="11:00", end_time="12:00"))
    stamp = repo.collection.last_updated

    with pytest.raises(ConflictError):
        repo.update(other.id, {"start_time": "09:30"})

    assert repo.collection.find(other.id) == other
    assert repo.collection.last_updated == stamp


def test_update_into_inverted_range_is_rejected(repo):
    item = repo.add(slot(start_time="09:00", end_time="10:00"))
    with pytest.raises(InvalidTimeRangeError):
        repo.update(item.id, {"start_time": "10:30"})
    assert repo.collection.find(item.id) == item


def test_update_missing_item(repo):
    with pytest.raises(NotFoundError):
        repo.update("nope", {"subject": "x"})


def test_remove_unknown_id_is_noop(repo):
    repo.add(slot())
    before = repo.get()
    assert repo.remove("does-not-exist") == before


def test_remove_and_clear(repo):
    a = repo.add(slot(day="Mon"))
    b = repo.add(slot(day="Tue"))
    assert repo.remove(a.id) == [b]

    stamp = repo.collection.last_updated
    assert repo.clear() == []
    assert repo.collection.last_updated > stamp

    # empty collection never conflicts
    repo.add(slot())
    assert len(repo.get()) == 1

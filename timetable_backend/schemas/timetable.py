# timetable_backend/schemas/timetable.py
from datetime import datetime
from typing import Annotated, List, Optional

from pydantic import AfterValidator, BaseModel, ConfigDict, model_validator
from pydantic.alias_generators import to_camel

from timetable_backend.config import settings
from timetable_backend.utils.timeslots import is_valid_time, time_to_minutes


def _subject(value: str) -> str:
    value = value.strip()
    if not value:
        raise ValueError("Subject name is required")
    return value


def _teacher(value: str) -> str:
    value = value.strip()
    if not value:
        raise ValueError("Teacher name is required")
    return value


def _day(value: str) -> str:
    if value not in settings.days:
        raise ValueError("Invalid day")
    return value


def _section(value: str) -> str:
    if value not in settings.sections:
        raise ValueError("Invalid section")
    return value


def _label(value: str) -> str:
    # free-text display label, may be empty
    return value.strip()


def _time(value: str) -> str:
    value = value.strip()
    if not is_valid_time(value):
        raise ValueError("Time must be HH:MM (24h)")
    return value


Subject = Annotated[str, AfterValidator(_subject)]
Teacher = Annotated[str, AfterValidator(_teacher)]
Day = Annotated[str, AfterValidator(_day)]
Section = Annotated[str, AfterValidator(_section)]
HHMM = Annotated[str, AfterValidator(_time)]
Label = Annotated[str, AfterValidator(_label)]


def _check_order(start_time, end_time):
    if start_time and end_time and time_to_minutes(end_time) <= time_to_minutes(start_time):
        raise ValueError("End time must be after start time")


class ScheduleItemIn(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    subject: Subject
    teacher: Teacher
    day: Day
    section: Section
    start_time: HHMM
    end_time: HHMM
    time_slot_label: Label = ""

    @model_validator(mode="after")
    def _order(self):
        _check_order(self.start_time, self.end_time)
        return self


class ScheduleItemUpdate(BaseModel):
    """Partial update: only supplied fields are validated and applied."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    subject: Optional[Subject] = None
    teacher: Optional[Teacher] = None
    day: Optional[Day] = None
    section: Optional[Section] = None
    start_time: Optional[HHMM] = None
    end_time: Optional[HHMM] = None
    time_slot_label: Optional[Label] = None

    @model_validator(mode="after")
    def _order(self):
        _check_order(self.start_time, self.end_time)
        return self


class ScheduleItemOut(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)

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


class TimetableData(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    timetable: List[ScheduleItemOut] = []
    last_updated: Optional[datetime] = None


class TimetableResponse(BaseModel):
    success: bool = True
    message: Optional[str] = None
    data: TimetableData

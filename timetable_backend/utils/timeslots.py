import re

from timetable_backend.utils.errors import MalformedTimeError

_HHMM = re.compile(r"^\d{1,2}:\d{2}$")


def time_to_minutes(value: str) -> int:
    """
    "09:30" -> 570

    Same-day minute offset, no timezone / rollover handling.
    Raises MalformedTimeError for anything that is not a valid HH:MM.
    """
    if not isinstance(value, str) or ":" not in value:
        raise MalformedTimeError(f"Invalid time format: {value!r}")

    h, m = value.strip().split(":", 1)
    # plain ascii digits only; int() alone would take "+9", "-0" or " 9 "
    if not (h.isascii() and h.isdigit() and m.isascii() and m.isdigit()):
        raise MalformedTimeError(f"Invalid time format: {value!r}")
    hour = int(h)
    minute = int(m)

    if not (0 <= hour <= 23 and 0 <= minute <= 59):
        raise MalformedTimeError(f"Invalid time value: {value!r}")
    return hour * 60 + minute


def is_valid_time(value) -> bool:
    if not isinstance(value, str) or not _HHMM.match(value.strip()):
        return False
    try:
        time_to_minutes(value)
    except MalformedTimeError:
        return False
    return True

# timetable_backend/utils/errors.py


class TimetableError(Exception):
    """Base class for timetable core errors."""


class ConflictError(TimetableError):
    """A proposed add/update would double-book a teacher or a section."""

    def __init__(self, result):
        super().__init__(result.message)
        self.result = result

    @property
    def message(self) -> str:
        return self.result.message


class NotFoundError(TimetableError):
    pass


class MalformedTimeError(TimetableError, ValueError):
    pass


class InvalidTimeRangeError(TimetableError, ValueError):
    pass


class PersistenceError(TimetableError):
    """Storage failed; the operation was not committed."""

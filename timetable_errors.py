"""Error hierarchy for timetable rendering.

Callers distinguish bad request data (InvalidInputError, surfaced as a 400)
from failures to produce the document itself (RenderError, surfaced as a 500).
"""


class TimetableError(Exception):
    """Base exception for all timetable errors."""

    pass


class InvalidInputError(TimetableError):
    """The schedule data cannot be laid out.

    Examples: no terms at all, or no term that falls on a visible weekday.
    """

    pass


class DegenerateHourRangeError(InvalidInputError):
    """The earliest start hour is not before the latest finish hour.

    The per-hour band height of a day row would be undefined.
    """

    pass


class RenderError(TimetableError):
    """The document could not be finalized or serialized."""

    pass

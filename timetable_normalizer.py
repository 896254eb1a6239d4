"""Turn request terms and breaks into grid positions.

Weeks are columns and weekdays are rows. Session week indices are 0-based and
anchored to the first term in input order; break spans use 1-based week
indices measured from the Monday that opens the grid.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from typing import List, Optional, Sequence, Tuple

from timetable_errors import DegenerateHourRangeError, InvalidInputError
from timetable_logging import get_logger
from timetable_schema import Term, YearPlanTerm

logger = get_logger(__name__)

DEFAULT_VISIBLE_DAYS = 6
WEEK = timedelta(days=7)


@dataclass(frozen=True)
class PositionedSession:
    name: str
    location: str
    week_index: int
    day_of_week: int
    start_hour: int
    duration_hours: float
    start: datetime
    finish: datetime


@dataclass(frozen=True)
class GridBounds:
    min_hour: int
    max_hour: int
    week_count: int

    @property
    def hours_per_row(self) -> int:
        return self.max_hour - self.min_hour


@dataclass(frozen=True)
class PositionedBreakSpan:
    break_id: str
    week_index: int
    day_of_week: int
    start: datetime
    finish: datetime


def _weekday(d: date) -> int:
    """Mon=1 .. Sun=7."""
    return d.isoweekday()


def _next_sunday(d: date) -> date:
    # Sunday stays put, every other day moves forward to the coming Sunday
    sunday_based = d.isoweekday() % 7
    return d + timedelta(days=(7 - sunday_based) % 7)


def _finish_hour(ts: datetime) -> int:
    if ts.minute or ts.second or ts.microsecond:
        return ts.hour + 1
    return ts.hour


def compute_date_range(terms: Sequence[Term]) -> Tuple[datetime, datetime]:
    """Earliest and latest timestamp over all term starts and finishes."""
    if not terms:
        raise InvalidInputError("no terms provided; nothing to lay out")
    stamps = sorted([t.start for t in terms] + [t.finish for t in terms])
    return stamps[0], stamps[-1]


def week_index_of(ts: datetime, anchor: datetime) -> int:
    """0-based week of ``ts`` counted from the week holding ``anchor``."""
    days = (_next_sunday(ts.date()) - _next_sunday(anchor.date())).days
    return math.ceil(days / 7)


def normalize_sessions(
    terms: Sequence[Term],
    *,
    visible_days: int = DEFAULT_VISIBLE_DAYS,
) -> Tuple[List[PositionedSession], GridBounds]:
    if not terms:
        raise InvalidInputError("no terms provided; nothing to lay out")

    anchor = terms[0].start
    min_hour = 24
    max_hour = 0
    positioned: List[PositionedSession] = []

    for term in terms:
        start_hour = term.start.hour
        finish_hour = _finish_hour(term.finish)
        # hidden-day terms still widen the hour range
        min_hour = min(min_hour, start_hour)
        max_hour = max(max_hour, finish_hour)

        day_of_week = _weekday(term.start.date())
        if day_of_week > visible_days:
            logger.debug("session_dropped", reason="hidden_weekday", term=term.id, start=term.start.isoformat())
            continue

        week_index = week_index_of(term.start, anchor)
        # a negative column cannot be drawn, so the positioned count can fall
        # short of input minus hidden-day terms when input is not in date order
        if week_index < 0:
            logger.warning("session_dropped", reason="before_anchor_week", term=term.id, start=term.start.isoformat())
            continue

        positioned.append(
            PositionedSession(
                name=term.name,
                location=term.rooms,
                week_index=week_index,
                day_of_week=day_of_week,
                start_hour=start_hour,
                duration_hours=(term.finish - term.start).total_seconds() / 3600.0,
                start=term.start,
                finish=term.finish,
            )
        )

    if min_hour >= max_hour:
        raise DegenerateHourRangeError(
            f"earliest start hour {min_hour} is not before latest finish hour {max_hour}"
        )
    if not positioned:
        raise InvalidInputError("no term falls on a visible weekday")

    bounds = GridBounds(
        min_hour=min_hour,
        max_hour=max_hour,
        week_count=max(s.week_index for s in positioned) + 1,
    )
    logger.debug(
        "sessions_normalized",
        terms=len(terms),
        positioned=len(positioned),
        min_hour=bounds.min_hour,
        max_hour=bounds.max_hour,
        week_count=bounds.week_count,
    )
    return positioned, bounds


def grid_date_range(earliest: datetime, latest: datetime) -> Tuple[date, date]:
    """Pad the range outward: Monday on/before ``earliest``, Saturday on/after ``latest``.

    A Sunday ``latest`` is left where it is.
    """
    start = earliest.date()
    start -= timedelta(days=start.isoweekday() - 1)
    end = latest.date()
    if end.isoweekday() != 7:
        end += timedelta(days=6 - end.isoweekday())
    return start, end


def _at_hour(d: date, hour: int) -> datetime:
    # hour may be 24 when the last session runs past 23:00
    return datetime.combine(d, time()) + timedelta(hours=hour)


def normalize_break_periods(
    periods: Sequence[YearPlanTerm],
    grid_start: date,
    grid_end: date,
    min_hour: int,
    max_hour: int,
    *,
    week_count: Optional[int] = None,
    visible_days: int = DEFAULT_VISIBLE_DAYS,
) -> List[PositionedBreakSpan]:
    """One span per visible day of each break that falls inside the grid.

    With ``week_count`` set, spans past the last session column are dropped.
    """
    grid_origin = datetime.combine(grid_start, time())
    spans: List[PositionedBreakSpan] = []

    for period in periods:
        current = period.start.date()
        last = period.finish.date()
        while current <= last:
            day_of_week = _weekday(current)
            span_start = _at_hour(current, min_hour)
            span_finish = _at_hour(current, max_hour)
            # 1-based: the first grid week is 1
            week_index = math.ceil((span_finish - grid_origin) / WEEK)
            if (
                day_of_week <= visible_days
                and week_index >= 1
                and (week_count is None or week_index <= week_count)
                and grid_start <= current <= grid_end
            ):
                spans.append(
                    PositionedBreakSpan(
                        break_id=period.id,
                        week_index=week_index,
                        day_of_week=day_of_week,
                        start=span_start,
                        finish=span_finish,
                    )
                )
            current += timedelta(days=1)

    return spans


def build_date_labels(
    grid_start: date,
    grid_end: date,
    *,
    visible_days: int = DEFAULT_VISIBLE_DAYS,
) -> List[str]:
    """``DD.MM`` for each visible day of the padded range, in calendar order."""
    labels: List[str] = []
    current = grid_start
    while current <= grid_end:
        if _weekday(current) <= visible_days:
            labels.append(current.strftime("%d.%m"))
        current += timedelta(days=1)
    return labels


def date_label_for(labels: Sequence[str], day_index: int, week: int, visible_days: int) -> Optional[str]:
    idx = day_index + week * visible_days
    if idx < len(labels):
        return labels[idx]
    return None

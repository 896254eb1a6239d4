"""Draw the semester grid onto a DrawingSurface.

One row per visible weekday, one column per week. Each row is cut into one
band per hour between ``min_hour`` and ``max_hour``. Later draws sit on top of
earlier ones, so breaks are drawn before sessions.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import date, datetime
from typing import Sequence

from timetable_logging import get_logger
from timetable_normalizer import GridBounds, PositionedBreakSpan, PositionedSession, date_label_for
from timetable_schema import Course
from timetable_settings import GridLayout
from timetable_surface import DrawingSurface

logger = get_logger(__name__)

BLACK = (0, 0, 0)

# Label detail thresholds on block height (mm)
ROOM_LINE_MIN_HEIGHT = 5
TIME_LINE_MIN_HEIGHT = 9

FOOTER_SEPARATOR = " // "


@dataclass(frozen=True)
class GridGeometry:
    origin_x: float
    origin_y: float
    column_width: float
    row_spacing: float
    row_height: float
    hour_height: float
    week_count: int

    @property
    def right_edge(self) -> float:
        return self.origin_x + self.week_count * self.column_width

    def row_top(self, day_of_week: int) -> float:
        return self.origin_y + (day_of_week - 1) * self.row_spacing

    def column_left(self, week_index: int) -> float:
        return self.origin_x + week_index * self.column_width


@dataclass(frozen=True)
class RenderStats:
    sessions_drawn: int
    sessions_skipped: int
    breaks_drawn: int


def grid_geometry(page_width: float, layout: GridLayout, bounds: GridBounds) -> GridGeometry:
    return GridGeometry(
        origin_x=layout.margin,
        origin_y=layout.origin_y,
        column_width=(page_width - 2 * layout.margin) / bounds.week_count,
        row_spacing=layout.row_spacing,
        row_height=layout.row_height,
        hour_height=layout.row_height / bounds.hours_per_row,
        week_count=bounds.week_count,
    )


def format_day(value: date) -> str:
    return value.strftime("%d.%m.%Y")


def _draw_rows(
    surface: DrawingSurface,
    layout: GridLayout,
    geo: GridGeometry,
    bounds: GridBounds,
    date_labels: Sequence[str],
) -> None:
    hours = bounds.hours_per_row
    # keeps hour labels just under their band line
    label_padding = geo.row_height / (hours + 10)

    for day_index, day in enumerate(layout.day_labels):
        top = geo.row_top(day_index + 1)
        header_top = top - layout.header_gap
        bottom = top + geo.row_height

        surface.set_font(layout.font_family, "bold", 7)
        surface.text(layout.day_label_x, top + geo.row_spacing / 2, day)

        for y in (header_top, top, bottom):
            surface.line(geo.origin_x, y, geo.right_edge, y)
        for week in range(geo.week_count + 1):
            x = geo.column_left(week)
            surface.line(x, header_top, x, bottom)

        surface.set_font(layout.font_family, "normal", 4)
        for week in range(geo.week_count):
            label = date_label_for(date_labels, day_index, week, layout.visible_days)
            if label is not None:
                surface.text(geo.column_left(week) + 0.5, top - 0.5, label)

        surface.set_draw_color(layout.hour_line_color)
        surface.set_line_dash(True)
        for band in range(1, hours):
            y = top + geo.hour_height * band
            surface.line(geo.origin_x, y, geo.right_edge, y)
        surface.set_line_dash(False)
        surface.set_draw_color(BLACK)

        surface.set_font(layout.font_family, "normal", 5)
        for band in range(hours):
            y = top + geo.hour_height * band + label_padding
            label = str(bounds.min_hour + band)
            surface.text(layout.hour_label_x, y, label, align="right")
            surface.text(geo.right_edge + 2, y, label)


def _draw_breaks(
    surface: DrawingSurface,
    layout: GridLayout,
    geo: GridGeometry,
    bounds: GridBounds,
    breaks: Sequence[PositionedBreakSpan],
) -> int:
    height = geo.hour_height * bounds.hours_per_row
    surface.set_fill_color(layout.break_fill)
    surface.set_draw_color(BLACK)
    drawn = 0
    for span in breaks:
        if not 1 <= span.week_index <= geo.week_count:
            logger.debug("break_outside_grid", break_id=span.break_id, week_index=span.week_index)
            continue
        surface.rect(geo.column_left(span.week_index - 1), geo.row_top(span.day_of_week), geo.column_width, height)
        drawn += 1
    return drawn


def session_block(geo: GridGeometry, bounds: GridBounds, session: PositionedSession) -> tuple:
    """(x, y, height) of a session block before the inset is applied."""
    x = geo.column_left(session.week_index)
    y = geo.row_top(session.day_of_week) + (session.start_hour - bounds.min_hour) * geo.hour_height
    return x, y, geo.hour_height * session.duration_hours


def _draw_session_label(
    surface: DrawingSurface,
    layout: GridLayout,
    session: PositionedSession,
    x: float,
    y: float,
    height: float,
) -> None:
    short_name = session.name[:3]
    surface.set_font(layout.font_family, "normal", 5)
    surface.text(x + 2, y + 2, short_name)
    if height > ROOM_LINE_MIN_HEIGHT:
        surface.text(x + 2, y + 5, session.location)
    elif session.location:
        surface.text(x + 2 + surface.text_width(short_name + " "), y + 2, session.location)
    if height > TIME_LINE_MIN_HEIGHT:
        surface.set_font_size(4)
        surface.text(x + 2, y + 8, f"{session.start:%H:%M} - {session.finish:%H:%M}")


def _draw_sessions(
    surface: DrawingSurface,
    layout: GridLayout,
    geo: GridGeometry,
    bounds: GridBounds,
    sessions: Sequence[PositionedSession],
) -> int:
    skipped = 0
    for session in sessions:
        x, y, height = session_block(geo, bounds, session)
        if not all(math.isfinite(v) for v in (x, y, geo.column_width, height)):
            skipped += 1
            logger.warning(
                "session_geometry_invalid",
                session=session.name,
                x=x,
                y=y,
                width=geo.column_width,
                height=height,
            )
            continue
        surface.set_fill_color(layout.session_fill)
        surface.set_draw_color(BLACK)
        surface.rect(x + layout.block_inset, y, geo.column_width - layout.block_inset, height)
        _draw_session_label(surface, layout, session, x, y, height)
    return skipped


def _draw_footer(
    surface: DrawingSurface,
    layout: GridLayout,
    course: Course,
    generated_on: date,
    page_height: float,
) -> None:
    course_label = course.name
    if course.course_number:
        course_label = f"{course_label} ({course.course_number})"
    parts = [("Kurs: ", course_label)]
    if course.class_name:
        parts.append(("Klasse: ", course.class_name))
    parts.append(("Zeitraum: ", f"{format_day(course.start)} - {format_day(course.finish)}"))
    parts.append(("Gedruckt: ", format_day(generated_on)))

    x = layout.margin
    y = page_height - layout.footer_offset
    for index, (label, value) in enumerate(parts):
        surface.set_font(layout.font_family, "bold", 10)
        surface.text(x, y, label)
        x += surface.text_width(label)

        surface.set_font(layout.font_family, "normal", 10)
        surface.text(x, y, value)
        x += surface.text_width(value)

        if index < len(parts) - 1:
            surface.text(x, y, FOOTER_SEPARATOR)
            x += surface.text_width(FOOTER_SEPARATOR)


def render_grid(
    surface: DrawingSurface,
    layout: GridLayout,
    bounds: GridBounds,
    sessions: Sequence[PositionedSession],
    breaks: Sequence[PositionedBreakSpan],
    date_labels: Sequence[str],
    course: Course,
    generated_on: date | datetime,
) -> RenderStats:
    page_width, page_height = surface.page_size()
    geo = grid_geometry(page_width, layout, bounds)

    _draw_rows(surface, layout, geo, bounds, date_labels)
    breaks_drawn = _draw_breaks(surface, layout, geo, bounds, breaks)
    skipped = _draw_sessions(surface, layout, geo, bounds, sessions)
    _draw_footer(surface, layout, course, generated_on, page_height)

    return RenderStats(
        sessions_drawn=len(sessions) - skipped,
        sessions_skipped=skipped,
        breaks_drawn=breaks_drawn,
    )

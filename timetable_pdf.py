import argparse
import sys
from datetime import date, datetime
from pathlib import Path
from typing import Optional, Union

from timetable_errors import RenderError, TimetableError
from timetable_logging import get_logger, setup_logging
from timetable_normalizer import (
    build_date_labels,
    compute_date_range,
    grid_date_range,
    normalize_break_periods,
    normalize_sessions,
)
from timetable_renderer import render_grid
from timetable_schema import RenderData
from timetable_settings import TimetableSettings, get_settings
from timetable_surface import DrawingSurface, PdfSurface

logger = get_logger(__name__)


def render_semester_plan(
    data: RenderData,
    *,
    settings: Optional[TimetableSettings] = None,
    surface: Optional[DrawingSurface] = None,
    generated_on: Optional[Union[date, datetime]] = None,
) -> bytes:
    """Lay out ``data`` on a fresh surface and return the finished document."""
    settings = settings or get_settings()
    layout = settings.grid_layout()
    surface = surface if surface is not None else PdfSurface()
    generated_on = generated_on or date.today()

    earliest, latest = compute_date_range(data.terms)
    sessions, bounds = normalize_sessions(data.terms, visible_days=layout.visible_days)
    grid_start, grid_end = grid_date_range(earliest, latest)
    breaks = normalize_break_periods(
        data.year_plan_terms,
        grid_start,
        grid_end,
        bounds.min_hour,
        bounds.max_hour,
        week_count=bounds.week_count,
        visible_days=layout.visible_days,
    )
    date_labels = build_date_labels(grid_start, grid_end, visible_days=layout.visible_days)

    stats = render_grid(surface, layout, bounds, sessions, breaks, date_labels, data.course, generated_on)

    try:
        document = surface.to_bytes()
    except Exception as e:
        raise RenderError(f"could not finalize document: {e}") from e

    logger.info(
        "timetable_rendered",
        course=data.course.name,
        weeks=bounds.week_count,
        min_hour=bounds.min_hour,
        max_hour=bounds.max_hour,
        sessions_drawn=stats.sessions_drawn,
        sessions_skipped=stats.sessions_skipped,
        breaks_drawn=stats.breaks_drawn,
        size_bytes=len(document),
    )
    return document


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Render a semester timetable JSON file as a PDF week grid.")
    parser.add_argument("--input", required=True, help="Path to input JSON file.")
    parser.add_argument("--output", default="semester_plan.pdf", help="Where to write the PDF.")
    parser.add_argument("--log-json", action="store_true", help="Emit JSON log lines.")
    parser.add_argument("--log-level", default=None, help="Override TIMETABLE_LOG_LEVEL.")
    args = parser.parse_args(argv)

    settings = get_settings()
    setup_logging(
        json_output=args.log_json or settings.log_json,
        log_level=args.log_level or settings.log_level,
    )

    try:
        data = RenderData.load_file(args.input)
    except (OSError, ValueError) as e:
        logger.error("input_unreadable", path=args.input, error=str(e))
        return 1

    try:
        document = render_semester_plan(data, settings=settings)
    except TimetableError as e:
        logger.error("render_failed", path=args.input, error=str(e))
        return 1

    Path(args.output).write_bytes(document)
    logger.info("pdf_written", path=args.output)
    return 0


if __name__ == "__main__":
    sys.exit(main())

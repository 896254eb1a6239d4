"""Timetable configuration loaded from environment variables.

Settings use the ``TIMETABLE_`` prefix, e.g. ``TIMETABLE_LOG_JSON=true``.
For local development, create a .env file in the project root.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Tuple

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings

RGB = Tuple[int, int, int]


@dataclass(frozen=True)
class GridLayout:
    """Page geometry of the weekly grid, in millimetres."""

    margin: float = 15.0
    origin_y: float = 15.0
    # distance from one day row to the next
    row_spacing: float = 30.0
    # hour-banded part of a day row; the rest is the date-label strip
    row_height: float = 27.0
    header_gap: float = 2.0
    block_inset: float = 1.0
    hour_label_x: float = 13.0
    day_label_x: float = 2.0
    footer_offset: float = 10.0
    day_labels: Tuple[str, ...] = ("Mo", "Di", "Mi", "Do", "Fr", "Sa")
    font_family: str = "Helvetica"
    session_fill: RGB = (255, 255, 100)
    break_fill: RGB = (255, 200, 200)
    hour_line_color: RGB = (150, 150, 150)

    @property
    def visible_days(self) -> int:
        return len(self.day_labels)


class TimetableSettings(BaseSettings):
    """Timetable service configuration loaded from environment variables."""

    # Logging
    log_json: bool = Field(
        default=False,
        description="Output logs in JSON format (for production)",
    )
    log_level: str = Field(
        default="INFO",
        description="Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
    )

    # Grid geometry
    margin: float = Field(default=15.0, description="Left/right page margin in mm")
    origin_y: float = Field(default=15.0, description="Top of the first day row in mm")
    row_spacing: float = Field(default=30.0, description="Pitch between day rows in mm")
    row_height: float = Field(default=27.0, description="Hour-banded height of a day row in mm")
    day_labels: List[str] = Field(
        default_factory=lambda: ["Mo", "Di", "Mi", "Do", "Fr", "Sa"],
        description="Row labels, Monday first; their count is the number of visible weekdays",
    )

    # Colours
    session_fill: RGB = Field(default=(255, 255, 100), description="Fill colour of session blocks")
    break_fill: RGB = Field(default=(255, 200, 200), description="Fill colour of break periods")

    # HTTP
    sample_input_path: str = Field(
        default="semester_plan.sample.json",
        description="Request body served by GET /sample_input",
    )

    model_config = {
        "env_prefix": "TIMETABLE_",
        "case_sensitive": False,
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }

    @field_validator("day_labels")
    @classmethod
    def _day_labels_range(cls, v: List[str]) -> List[str]:
        if not 1 <= len(v) <= 7:
            raise ValueError("must name between 1 and 7 weekdays")
        return v

    @field_validator("row_height")
    @classmethod
    def _row_height_positive(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("must be positive")
        return v

    def grid_layout(self) -> GridLayout:
        return GridLayout(
            margin=self.margin,
            origin_y=self.origin_y,
            row_spacing=self.row_spacing,
            row_height=self.row_height,
            day_labels=tuple(self.day_labels),
            session_fill=self.session_fill,
            break_fill=self.break_fill,
        )


_settings: TimetableSettings | None = None


def get_settings() -> TimetableSettings:
    """Get the timetable settings singleton.

    Returns:
        TimetableSettings: settings instance, built on first use
    """
    global _settings
    if _settings is None:
        _settings = TimetableSettings()
    return _settings

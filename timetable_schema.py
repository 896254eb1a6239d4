from __future__ import annotations

import json
from datetime import datetime
from pathlib import Path
from typing import Any, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator


def _as_str(v: Any) -> Any:
    # ids and room numbers often arrive as JSON numbers
    if isinstance(v, (int, float)) and not isinstance(v, bool):
        return str(v)
    return v


class Term(BaseModel):
    """One scheduled class meeting."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    name: str
    id: str
    start: datetime
    finish: datetime
    rooms: str = ""

    @field_validator("id", "rooms", mode="before")
    @classmethod
    def _coerce_str(cls, v: Any) -> Any:
        if v is None:
            return ""
        return _as_str(v)

    @field_validator("name")
    @classmethod
    def _name_clean(cls, v: str) -> str:
        return (v or "").strip()

    @model_validator(mode="after")
    def _finish_after_start(self) -> "Term":
        if self.finish < self.start:
            raise ValueError(f"term '{self.name}': finish must not precede start")
        return self


class YearPlanTerm(BaseModel):
    """A contiguous break (holiday) shaded across every visible day it covers."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    id: str
    start: datetime
    finish: datetime

    @field_validator("id", mode="before")
    @classmethod
    def _coerce_id(cls, v: Any) -> Any:
        return _as_str(v)


class Course(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    name: str
    start: datetime
    finish: datetime
    # Optional footer fields
    course_number: Optional[str] = Field(default=None, alias="courseNumber")
    class_name: Optional[str] = Field(default=None, alias="className")

    @field_validator("course_number", "class_name", mode="before")
    @classmethod
    def _blank_is_none(cls, v: Any) -> Any:
        v = _as_str(v)
        if isinstance(v, str) and not v.strip():
            return None
        return v.strip() if isinstance(v, str) else v


class RenderData(BaseModel):
    """Request body of a timetable render."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    terms: List[Term] = Field(default_factory=list)
    course: Course
    year_plan_terms: List[YearPlanTerm] = Field(default_factory=list, alias="yearPlanTerms")

    @model_validator(mode="after")
    def _consistent_offsets(self) -> "RenderData":
        # naive and aware datetimes cannot be ordered against each other
        stamps = [t.start for t in self.terms] + [t.finish for t in self.terms]
        aware = {ts.tzinfo is not None for ts in stamps}
        if len(aware) > 1:
            raise ValueError("term timestamps must either all carry a UTC offset or all omit it")
        return self

    @classmethod
    def load_file(cls, path: Union[str, Path]) -> "RenderData":
        p = Path(path)
        data = json.loads(p.read_text(encoding="utf-8"))
        try:
            return cls.model_validate(data)
        except ValidationError as e:
            # Re-raise with a cleaner message for CLI usage
            raise ValueError(str(e)) from e

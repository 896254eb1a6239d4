from datetime import date
from pathlib import Path

import pytest

from timetable_errors import InvalidInputError, RenderError
from timetable_pdf import main, render_semester_plan
from timetable_schema import RenderData
from timetable_settings import TimetableSettings
from timetable_surface import PdfSurface, RecordingSurface

SAMPLE = Path(__file__).parent / "semester_plan.sample.json"


@pytest.fixture
def sample() -> RenderData:
    return RenderData.load_file(SAMPLE)


def test_sample_renders_to_pdf(sample):
    document = render_semester_plan(sample, settings=TimetableSettings())
    assert document.startswith(b"%PDF")


def test_pdf_surface_is_a4_landscape():
    width, height = PdfSurface().page_size()
    assert width == pytest.approx(297, abs=0.1)
    assert height == pytest.approx(210, abs=0.1)


def test_sample_layout(sample):
    surface = RecordingSurface()
    render_semester_plan(sample, settings=TimetableSettings(), surface=surface, generated_on=date(2024, 2, 1))

    breaks = [c for c in surface.of("rect") if c.fill == (255, 200, 200)]
    sessions = [c for c in surface.of("rect") if c.fill == (255, 255, 100)]
    assert len(sessions) == 7
    # Saturday 27.01 in the third week, Monday 29.01 in the fourth; Sunday skipped
    column = (297 - 30) / 5
    assert [(round(c.args[0], 6), c.args[1]) for c in breaks] == [
        (round(15 + 2 * column, 6), 15 + 5 * 30),
        (round(15 + 3 * column, 6), 15.0),
    ]
    assert "Gedruckt: " in surface.texts()
    assert "01.02.2024" in surface.texts()


def test_break_after_last_session_week_is_not_drawn():
    # the Sunday term stretches the date range a week past the last visible session
    data = RenderData.model_validate(
        {
            "terms": [
                {"name": "Mathematik", "id": "1", "start": "2024-01-08T09:00:00", "finish": "2024-01-08T10:00:00", "rooms": "B204"},
                {"name": "Mathematik", "id": "2", "start": "2024-01-21T09:00:00", "finish": "2024-01-21T10:00:00", "rooms": "B204"},
            ],
            "course": {"name": "ET", "start": "2024-01-08T00:00:00", "finish": "2024-01-21T00:00:00"},
            "yearPlanTerms": [{"id": "h1", "start": "2024-01-16T00:00:00", "finish": "2024-01-16T23:59:00"}],
        }
    )
    surface = RecordingSurface()
    render_semester_plan(data, settings=TimetableSettings(), surface=surface)

    right_edge = 15 + (297 - 30)
    rects = surface.of("rect")
    assert len(rects) == 1
    assert all(c.args[0] + c.args[2] <= right_edge for c in rects)


def test_custom_day_labels_hide_saturday(sample):
    settings = TimetableSettings(day_labels=["Mo", "Di", "Mi", "Do", "Fr"])
    surface = RecordingSurface()
    render_semester_plan(sample, settings=settings, surface=surface)

    sessions = [c for c in surface.of("rect") if c.fill == (255, 255, 100)]
    assert len(sessions) == 5


def test_empty_terms_rejected(sample):
    empty = sample.model_copy(update={"terms": []})
    with pytest.raises(InvalidInputError):
        render_semester_plan(empty, settings=TimetableSettings(), surface=RecordingSurface())


def test_serialization_failure_is_render_error(sample):
    class BrokenSurface(RecordingSurface):
        def to_bytes(self) -> bytes:
            raise OSError("disk full")

    with pytest.raises(RenderError):
        render_semester_plan(sample, settings=TimetableSettings(), surface=BrokenSurface())


def test_cli_writes_pdf(tmp_path):
    out = tmp_path / "plan.pdf"
    assert main(["--input", str(SAMPLE), "--output", str(out)]) == 0
    assert out.read_bytes().startswith(b"%PDF")


def test_cli_reports_unusable_input(tmp_path):
    bad = tmp_path / "plan.json"
    bad.write_text('{"terms": [], "course": {"name": "X", "start": "2024-01-01", "finish": "2024-02-01"}}')
    out = tmp_path / "plan.pdf"
    assert main(["--input", str(bad), "--output", str(out)]) == 1
    assert not out.exists()


def test_cli_reports_missing_file(tmp_path):
    assert main(["--input", str(tmp_path / "missing.json")]) == 1

import json
from pathlib import Path

from fastapi import FastAPI, HTTPException
from fastapi.responses import Response

from timetable_errors import InvalidInputError, RenderError
from timetable_logging import get_logger, setup_logging
from timetable_pdf import render_semester_plan
from timetable_schema import RenderData
from timetable_settings import get_settings

settings = get_settings()
setup_logging(json_output=settings.log_json, log_level=settings.log_level)
logger = get_logger(__name__)

app = FastAPI(title="Semester timetable PDF")


@app.get("/sample_input")
async def get_sample_input():
    """Returns the sample request body bundled with the service."""
    sample_file_path = Path(settings.sample_input_path)
    if not sample_file_path.is_file():
        raise HTTPException(status_code=404, detail=f"sample input not found at {sample_file_path}")
    with sample_file_path.open(encoding="utf-8") as f:
        return json.load(f)


@app.post("/generate-pdf")
def generate_pdf(request: RenderData):
    # sync handler: rendering is CPU-bound, FastAPI runs it in the threadpool
    try:
        document = render_semester_plan(request, settings=settings)
    except InvalidInputError as e:
        logger.warning("render_rejected", course=request.course.name, error=str(e))
        raise HTTPException(status_code=400, detail=str(e)) from e
    except RenderError as e:
        logger.error("render_failed", course=request.course.name, error=str(e))
        raise HTTPException(status_code=500, detail="Error generating PDF") from e

    return Response(
        content=document,
        media_type="application/pdf",
        headers={"Content-Disposition": 'attachment; filename="semester_plan.pdf"'},
    )

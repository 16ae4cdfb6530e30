from fastapi import APIRouter, HTTPException
from fastapi.responses import Response

from plagiarism_checker.schemas.report_schemas import ExportRequest
from plagiarism_checker.utils.export_utils import results_to_csv

router = APIRouter(prefix="/export", tags=["export"])


@router.post("/csv")
async def export_csv(body: ExportRequest):
    """Accepts a PlagiarismReport (extra fields ignored) or just {"results": [...]}."""
    try:
        content = results_to_csv(body.results)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    return Response(
        content=content,
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": 'attachment; filename="plagiarism_report.csv"'},
    )

from fastapi import APIRouter, UploadFile, File, Form, HTTPException, Depends
from typing import List
from datetime import datetime, timezone
import logging

from plagiarism_checker.dependencies.provider import get_provider
from plagiarism_checker.exceptions import InputError, PlagiarismCheckError
from plagiarism_checker.schemas.document_schemas import PastedTextRequest
from plagiarism_checker.schemas.report_schemas import PlagiarismReport
from plagiarism_checker.utils.analysis_utils import (
    build_report, check_plagiarism, check_pasted_text,
)
from plagiarism_checker.utils.file_utils import build_document

router = APIRouter(prefix="/check", tags=["check"])

logger = logging.getLogger("check_analysis")


@router.post("/files", response_model=PlagiarismReport)
async def check_files(
    files: List[UploadFile] = File(...),
    online: bool = Form(False),
    provider=Depends(get_provider),
):
    t0 = datetime.now(timezone.utc)
    try:
        if online and len(files) < 1:
            raise InputError("Upload at least 1 file")
        if not online and len(files) < 2:
            raise InputError("Upload at least 2 files for a pairwise comparison")

        documents = []
        for f in files:
            raw = await f.read()
            documents.append(build_document(raw, f.filename))

        results = await check_plagiarism(documents, online, provider)
    except PlagiarismCheckError as e:
        logger.error(f"❌ Check failed: {e.message}")
        raise HTTPException(status_code=e.status_code, detail=e.message)

    report = build_report(results, "online" if online else "pairwise", t0)
    logger.info(
        f"✅ {report.mode} check done: {report.summary.totalResults} result(s), "
        f"avg {report.summary.averageSimilarity}% in {report.processingTime}"
    )
    return report


@router.post("/text", response_model=PlagiarismReport)
async def check_text(
    body: PastedTextRequest,
    provider=Depends(get_provider),
):
    t0 = datetime.now(timezone.utc)
    try:
        result = await check_pasted_text(body.text, provider)
    except PlagiarismCheckError as e:
        logger.error(f"❌ Check failed: {e.message}")
        raise HTTPException(status_code=e.status_code, detail=e.message)

    report = build_report([result], "text", t0)
    logger.info(f"✅ text check done: {result.similarity}% in {report.processingTime}")
    return report

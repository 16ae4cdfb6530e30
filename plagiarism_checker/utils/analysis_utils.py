import asyncio
import logging
from datetime import datetime, timezone
from typing import Awaitable, List, Sequence, Tuple

from plagiarism_checker.config import (
    HIGH_SIMILARITY_THRESHOLD, MEDIUM_SIMILARITY_THRESHOLD, PASTED_TEXT_NAME,
)
from plagiarism_checker.exceptions import ExtractionError, InputError, ProviderError
from plagiarism_checker.schemas.document_schemas import Document
from plagiarism_checker.schemas.report_schemas import (
    AnalysisResult, ComparisonResult, OnlineComparisonResult,
    PlagiarismReport, ReportSummary,
)
from plagiarism_checker.utils.json_utils import parse_pair_response, parse_online_response

logger = logging.getLogger("analysis")


def generate_pairs(documents: Sequence[Document]) -> List[Tuple[Document, Document]]:
    """Every unordered pair (i, j) with i < j, in lexicographic order."""
    pairs = []
    for i in range(len(documents)):
        for j in range(i + 1, len(documents)):
            pairs.append((documents[i], documents[j]))
    return pairs


async def analyze_pair(doc1: Document, doc2: Document, provider) -> ComparisonResult:
    try:
        text = await provider.compare_pair(doc1, doc2)
    except ProviderError as e:
        logger.error(f"Error analyzing pair ({doc1.name}, {doc2.name}): {e.message}")
        raise ProviderError(
            f"Failed to analyze documents: {doc1.name} and {doc2.name}. {e.message}",
            status_code=e.status_code,
            details=e.details,
        ) from e
    return parse_pair_response(text, doc1.name, doc2.name)


async def analyze_content_online(doc_name: str, text: str, provider) -> OnlineComparisonResult:
    try:
        response = await provider.compare_against_online_sources(doc_name, text)
    except ProviderError as e:
        logger.error(f"Error analyzing document online ({doc_name}): {e.message}")
        raise ProviderError(
            f"Failed to analyze document {doc_name} against online sources. {e.message}",
            status_code=e.status_code,
            details=e.details,
        ) from e
    return parse_online_response(response.text, doc_name, response.grounding_chunks)


async def analyze_document_online(doc: Document, provider) -> OnlineComparisonResult:
    if doc.is_plain_text:
        text = doc.decoded_text()
        if not text.strip():
            raise ExtractionError(doc.name, "The file is empty.")
    else:
        text = await provider.extract_text(doc)
    return await analyze_content_online(doc.name, text, provider)


async def run_all(work: Sequence[Awaitable]) -> list:
    """
    Run every work item concurrently and return results in work-item order.
    The first failure fails the whole batch: pending siblings are cancelled
    and nothing partial is returned.
    """
    tasks = [asyncio.ensure_future(w) for w in work]
    try:
        return list(await asyncio.gather(*tasks))
    except BaseException:
        for task in tasks:
            if not task.done():
                task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        raise


async def check_plagiarism(
    documents: Sequence[Document],
    is_online_check: bool,
    provider,
) -> List[AnalysisResult]:
    if is_online_check:
        if len(documents) < 1:
            return []
        logger.info(f"🔎 Online check of {len(documents)} document(s)")
        return await run_all([analyze_document_online(doc, provider) for doc in documents])

    if len(documents) < 2:
        return []

    pairs = generate_pairs(documents)
    logger.info(f"🔎 Pairwise check: {len(documents)} documents, {len(pairs)} pairs")
    return await run_all([analyze_pair(doc1, doc2, provider) for doc1, doc2 in pairs])


async def check_pasted_text(text: str, provider) -> OnlineComparisonResult:
    if not text or not text.strip():
        raise InputError("Please paste some text to analyze.")
    return await analyze_content_online(PASTED_TEXT_NAME, text, provider)


# ---- Summary ----

def average_similarity(results: Sequence[AnalysisResult]) -> float:
    if not results:
        return 0.0
    return sum(r.similarity for r in results) / len(results)


def similarity_level(score: float) -> str:
    if score > HIGH_SIMILARITY_THRESHOLD:
        return "high"
    if score > MEDIUM_SIMILARITY_THRESHOLD:
        return "medium"
    return "low"


def format_processing_time(started_at: datetime) -> str:
    elapsed = (datetime.now(timezone.utc) - started_at).total_seconds()
    return f"{int(elapsed // 60)}m {int(elapsed % 60):02d}s"


def build_report(
    results: List[AnalysisResult],
    mode: str,
    started_at: datetime,
    name: str = "Plagiarism Check",
) -> PlagiarismReport:
    avg = average_similarity(results)
    highest = max((r.similarity for r in results), default=0.0)
    flagged = sum(1 for r in results if similarity_level(r.similarity) == "high")

    return PlagiarismReport(
        id=f"{mode}_{started_at.strftime('%Y%m%d_%H%M%S')}",
        name=name,
        mode=mode,
        uploadDate=datetime.now(timezone.utc),
        processingTime=format_processing_time(started_at),
        results=results,
        summary=ReportSummary(
            totalResults=len(results),
            averageSimilarity=round(avg, 1),
            highestSimilarity=round(highest, 1),
            flaggedResults=flagged,
            similarityLevel=similarity_level(avg),
        ),
    )

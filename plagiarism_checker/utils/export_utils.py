import csv
import io
from typing import Sequence

from plagiarism_checker.schemas.report_schemas import (
    AnalysisResult, ComparisonResult, OnlineComparisonResult,
)

PAIRWISE_HEADER = ["File 1", "File 2", "Plagiarism Score (%)", "Matched Sentences"]
ONLINE_HEADER = ["File", "Plagiarism Score (%)", "Matched Sentences", "Sources"]


def _score(similarity: float):
    return int(similarity) if float(similarity).is_integer() else similarity


def _row(result: AnalysisResult) -> list:
    if isinstance(result, OnlineComparisonResult):
        return [
            result.file1,
            _score(result.similarity),
            "\n".join(s.sentence for s in result.matched_sentences),
            "\n".join(s.uri for s in result.sources),
        ]
    if isinstance(result, ComparisonResult):
        return [
            result.file1,
            result.file2,
            _score(result.similarity),
            "\n".join(result.matched_sentences),
        ]
    raise TypeError(f"Unknown result kind: {type(result).__name__}")


def results_to_csv(results: Sequence[AnalysisResult]) -> str:
    """
    Render a result set as CSV. Online results use the File/Sources layout,
    pairwise results the File 1/File 2 layout. Multi-line cells are quoted
    and embedded quotes are doubled.
    """
    is_online = bool(results) and results[0].kind == "online"
    if any(r.kind != results[0].kind for r in results):
        raise ValueError("Cannot export a result set that mixes pairwise and online results")

    buf = io.StringIO()
    writer = csv.writer(buf, quoting=csv.QUOTE_MINIMAL, lineterminator="\r\n")
    writer.writerow(ONLINE_HEADER if is_online else PAIRWISE_HEADER)
    for result in results:
        writer.writerow(_row(result))
    return buf.getvalue()

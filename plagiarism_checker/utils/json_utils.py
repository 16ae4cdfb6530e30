"""
Normalization of provider responses into result entities.

The pairwise path runs in structured-output mode, so its body must already be
JSON. The online path runs with search grounding, where the model answers in
free text: the JSON object may be wrapped in a fenced block, surrounded by
commentary, or carry trailing commas.
"""

import json
import logging
import math
import re
from typing import Any, Dict, List, Optional

from plagiarism_checker.exceptions import (
    MalformedJSONError,
    MalformedResponseError,
    NonJSONResponseError,
    UnexpectedFormatError,
)
from plagiarism_checker.schemas.report_schemas import (
    ComparisonResult,
    OnlineComparisonResult,
    OnlineMatchedSentence,
)
from plagiarism_checker.utils.source_utils import sources_from_grounding_chunks

logger = logging.getLogger("json_utils")

UNPARSEABLE_SENTENCE = "[Error: Could not parse sentence]"

_FENCED_JSON_RE = re.compile(r"```json\s*([\s\S]*?)\s*```")
_OBJECT_RE = re.compile(r"\{[\s\S]*\}")
_TRAILING_COMMA_RE = re.compile(r",\s*([}\]])")


def strip_trailing_commas(json_string: str) -> str:
    return _TRAILING_COMMA_RE.sub(r"\1", json_string)


def find_json_candidate(text: str) -> Optional[str]:
    """Fenced ```json block first, otherwise the outermost {...} span."""
    if not text:
        return None
    fenced = _FENCED_JSON_RE.search(text)
    if fenced and fenced.group(1).strip():
        return fenced.group(1)
    obj = _OBJECT_RE.search(text)
    if obj:
        return obj.group(0)
    return None


def extract_json_from_text(text: str) -> Any:
    """
    Extract and parse the JSON object embedded in a free-text response.

    Raises:
        NonJSONResponseError: no fenced block and no {...} span in the text.
        MalformedJSONError: a candidate was found but fails to parse even
            after trailing commas are removed.
    """
    candidate = find_json_candidate(text)
    if candidate is None:
        logger.error(f"No JSON object found in the API response: {text[:200]!r}")
        raise NonJSONResponseError()

    cleaned = strip_trailing_commas(candidate)
    try:
        return json.loads(cleaned)
    except json.JSONDecodeError as e:
        logger.error(f"Failed to parse extracted JSON: {e}. JSON string: {cleaned[:200]!r}")
        raise MalformedJSONError(details={"error": str(e)}) from e


def normalize_sentences(items: List[Any]) -> List[OnlineMatchedSentence]:
    """Coerce bare strings and {"sentence": ...} objects into one shape."""
    normalized = []
    for item in items:
        if isinstance(item, str):
            normalized.append(OnlineMatchedSentence(sentence=item))
        elif isinstance(item, dict) and isinstance(item.get("sentence"), str):
            normalized.append(OnlineMatchedSentence(sentence=item["sentence"]))
        else:
            normalized.append(OnlineMatchedSentence(sentence=UNPARSEABLE_SENTENCE))
    return normalized


def _is_number(value: Any) -> bool:
    # json.loads accepts NaN and Infinity; neither is a usable score
    return isinstance(value, (int, float)) and not isinstance(value, bool) and math.isfinite(value)


def _clamp_percent(value: float) -> float:
    return min(max(float(value), 0.0), 100.0)


def parse_pair_response(text: str, file1: str, file2: str) -> ComparisonResult:
    """Parse a structured-output response for one document pair."""
    try:
        parsed = json.loads((text or "").strip())
    except json.JSONDecodeError as e:
        logger.error(f"Malformed API response for pair ({file1}, {file2}): {e}")
        raise MalformedResponseError(
            f"Failed to analyze documents: {file1} and {file2}. The API returned a malformed response."
        ) from e

    if not isinstance(parsed, dict):
        raise UnexpectedFormatError(
            f"Failed to analyze documents: {file1} and {file2}. The API returned JSON in an unexpected format."
        )
    similarity = parsed.get("similarity")
    sentences = parsed.get("matched_sentences")
    if not _is_number(similarity) or not isinstance(sentences, list) \
            or not all(isinstance(s, str) for s in sentences):
        raise UnexpectedFormatError(
            f"Failed to analyze documents: {file1} and {file2}. The API returned JSON in an unexpected format."
        )

    return ComparisonResult(
        file1=file1,
        file2=file2,
        similarity=_clamp_percent(similarity),
        matched_sentences=sentences,
    )


def parse_online_response(
    text: str,
    doc_name: str,
    grounding_chunks: Optional[List[Dict[str, Any]]] = None,
) -> OnlineComparisonResult:
    """Parse a free-text, search-grounded response for one document."""
    try:
        parsed = extract_json_from_text(text)
    except (NonJSONResponseError, MalformedJSONError) as e:
        raise type(e)(
            f"Failed to analyze document {doc_name} against online sources. {e.message}",
            details=e.details,
        ) from e

    if not isinstance(parsed, dict):
        raise UnexpectedFormatError(
            f"Failed to analyze document {doc_name} against online sources. "
            "The API returned JSON in an unexpected format."
        )
    similarity = parsed.get("similarity")
    raw_sentences = parsed.get("matched_sentences")
    if not _is_number(similarity) or not isinstance(raw_sentences, list):
        raise UnexpectedFormatError(
            f"Failed to analyze document {doc_name} against online sources. "
            "The API returned JSON in an unexpected format."
        )

    return OnlineComparisonResult(
        file1=doc_name,
        similarity=_clamp_percent(similarity),
        matched_sentences=normalize_sentences(raw_sentences),
        sources=sources_from_grounding_chunks(grounding_chunks or []),
    )

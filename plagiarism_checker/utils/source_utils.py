from typing import Any, Dict, Iterable, List

from plagiarism_checker.schemas.report_schemas import Source


def dedupe_sources(sources: Iterable[Dict[str, Any]]) -> List[Source]:
    """
    Drop citations without a URI and collapse repeats of the same URI.
    The first occurrence wins (its title is kept) and first-seen order is preserved.
    """
    seen_uris = set()
    unique_sources = []
    for source in sources:
        uri = source.get("uri") or ""
        if uri and uri not in seen_uris:
            seen_uris.add(uri)
            unique_sources.append(Source(uri=uri, title=source.get("title") or "Untitled"))
    return unique_sources


def sources_from_grounding_chunks(chunks: Iterable[Dict[str, Any]]) -> List[Source]:
    """Map Gemini groundingChunks ({"web": {"uri", "title"}}) to unique sources."""
    citations = []
    for chunk in chunks:
        web = (chunk or {}).get("web") or {}
        citations.append({
            "uri": web.get("uri") or "",
            "title": web.get("title") or "Untitled",
        })
    return dedupe_sources(citations)

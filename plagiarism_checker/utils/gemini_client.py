"""
Gemini REST client: the analysis provider behind every plagiarism check.

Calls are blocking `requests` calls on a pooled session with a small retry
policy; the async methods run them off the event loop with asyncio.to_thread
so a whole batch can be in flight at once.
"""

import asyncio
import logging
from typing import Any, Dict, List, Optional

import requests
from pydantic import BaseModel, Field
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from plagiarism_checker.config import (
    GEMINI_API_KEY, GEMINI_MODEL, GEMINI_API_BASE,
    REQUEST_TIMEOUT, MAX_RETRIES, POOL_SIZE,
)
from plagiarism_checker.exceptions import ExtractionError, ProviderError
from plagiarism_checker.schemas.document_schemas import Document

logger = logging.getLogger("gemini_client")

EXTRACT_PROMPT = (
    "Extract all text from the following document. "
    "Return only the raw text, with no additional commentary or formatting."
)

PAIR_PROMPT = """
Analyze the two provided documents for plagiarism.
Your task is to:
1.  Extract the text from both documents.
2.  Compare the text content of Document 1 and Document 2.
3.  Calculate a similarity percentage (a number from 0 to 100).
4.  Identify sentences that are identical or highly similar.
5.  Return the analysis ONLY in the requested JSON format. Do not add any text before or after the JSON.
"""

ONLINE_PROMPT = """
You are an API that functions as a plagiarism checker. Your ONLY output format is JSON.
Analyze the provided text against public online sources using your search tool.
Your entire response MUST be a single, valid JSON object and nothing else.
Do not include markdown, explanations, or any text outside of the JSON structure.

Strictly adhere to the following JSON format:
{
  "similarity": <A single number from 0 to 100 representing the plagiarism score>,
  "matched_sentences": [
    { "sentence": "<The first sentence that was found to be plagiarized>" },
    { "sentence": "<The second plagiarized sentence>" }
  ]
}
"""

PAIR_RESPONSE_SCHEMA = {
    "type": "OBJECT",
    "properties": {
        "similarity": {
            "type": "NUMBER",
            "description": "A percentage value from 0 to 100 representing the similarity "
                           "between the two documents. 100 means identical.",
        },
        "matched_sentences": {
            "type": "ARRAY",
            "description": "A list of sentences that are identical or highly similar "
                           "between the two documents.",
            "items": {"type": "STRING"},
        },
    },
    "required": ["similarity", "matched_sentences"],
}


class ProviderResponse(BaseModel):
    """Raw provider output: the response text plus grounding citations, if any."""
    text: str = ""
    grounding_chunks: List[Dict[str, Any]] = Field(default_factory=list)


def _make_session(max_retries: int = MAX_RETRIES) -> requests.Session:
    s = requests.Session()
    retries = Retry(
        total=max_retries,
        backoff_factor=0.5,
        status_forcelist=[429, 500, 502, 503, 504],
        allowed_methods=["POST"],
    )
    adapter = HTTPAdapter(max_retries=retries, pool_connections=POOL_SIZE, pool_maxsize=POOL_SIZE)
    s.mount("https://", adapter)
    s.mount("http://", adapter)
    s.headers.update({"Content-Type": "application/json"})
    return s


def _inline_part(doc: Document) -> Dict[str, Any]:
    return {"inlineData": {"mimeType": doc.mimeType, "data": doc.content}}


def _response_text(data: Dict[str, Any]) -> str:
    candidates = data.get("candidates") or []
    if not candidates:
        return ""
    parts = (candidates[0].get("content") or {}).get("parts") or []
    return "".join(p.get("text", "") for p in parts if isinstance(p, dict))


def _grounding_chunks(data: Dict[str, Any]) -> List[Dict[str, Any]]:
    candidates = data.get("candidates") or []
    if not candidates:
        return []
    metadata = candidates[0].get("groundingMetadata") or {}
    return metadata.get("groundingChunks") or []


class GeminiClient:
    """Thin wrapper over the generateContent endpoint. Build once, share everywhere."""

    def __init__(
        self,
        api_key: str = GEMINI_API_KEY,
        model: str = GEMINI_MODEL,
        base_url: str = GEMINI_API_BASE,
        timeout: int = REQUEST_TIMEOUT,
        session: Optional[requests.Session] = None,
    ):
        self.api_key = api_key
        self.model = model
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or _make_session()
        logger.info(f"GeminiClient initialized with model: {model}")

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key)

    @property
    def endpoint(self) -> str:
        return f"{self.base_url}/models/{self.model}:generateContent"

    def generate_content(
        self,
        parts: List[Dict[str, Any]],
        generation_config: Optional[Dict[str, Any]] = None,
        tools: Optional[List[Dict[str, Any]]] = None,
    ) -> ProviderResponse:
        """One blocking generateContent call. Any failure becomes a ProviderError."""
        if not self.api_key:
            raise ProviderError("GEMINI_API_KEY environment variable not set", status_code=503)

        payload: Dict[str, Any] = {"contents": [{"parts": parts}]}
        if generation_config:
            payload["generationConfig"] = generation_config
        if tools:
            payload["tools"] = tools

        try:
            r = self.session.post(
                self.endpoint,
                json=payload,
                headers={"x-goog-api-key": self.api_key},
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            logger.warning(f"generateContent request failed: {e}")
            raise ProviderError(f"Request to the API failed: {e}") from e

        if r.status_code >= 400:
            try:
                body = r.json()
            except ValueError:
                body = None
            error = body.get("error") if isinstance(body, dict) else None
            detail = (error.get("message") if isinstance(error, dict) else None) or r.text
            logger.warning(f"generateContent returned HTTP {r.status_code}: {detail[:200]}")
            raise ProviderError(
                f"The API returned an error (HTTP {r.status_code}): {detail}",
                details={"status": r.status_code},
            )

        try:
            data = r.json()
        except ValueError as e:
            raise ProviderError("The API returned a body that is not JSON.") from e
        if not isinstance(data, dict):
            raise ProviderError("The API returned JSON in an unexpected format.")

        return ProviderResponse(text=_response_text(data), grounding_chunks=_grounding_chunks(data))

    # ---- Async operations used by the aggregator ----

    async def extract_text(self, doc: Document) -> str:
        parts = [{"text": EXTRACT_PROMPT}, _inline_part(doc)]
        try:
            response = await asyncio.to_thread(self.generate_content, parts)
        except ProviderError as e:
            logger.error(f"Error extracting text from {doc.name}: {e.message}")
            raise ExtractionError(doc.name, f"API Error: {e.message}") from e

        text = response.text
        if not text or not text.strip():
            raise ExtractionError(
                doc.name,
                "The API failed to extract any text. The file might be empty, "
                "password-protected, or in an unsupported format.",
            )
        return text

    async def compare_pair(self, doc_a: Document, doc_b: Document) -> str:
        parts = [{"text": PAIR_PROMPT}, _inline_part(doc_a), _inline_part(doc_b)]
        config = {
            "responseMimeType": "application/json",
            "responseSchema": PAIR_RESPONSE_SCHEMA,
        }
        response = await asyncio.to_thread(self.generate_content, parts, config)
        return response.text

    async def compare_against_online_sources(self, name: str, text: str) -> ProviderResponse:
        parts = [{"text": ONLINE_PROMPT + "\n\n--- Text to Analyze ---\n" + text}]
        logger.info(f"Online check for {name} ({len(text.split())} words)")
        return await asyncio.to_thread(
            self.generate_content, parts, None, [{"google_search": {}}]
        )

    def close(self) -> None:
        self.session.close()

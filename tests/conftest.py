"""
Pytest configuration and fixtures.
Provides a fake analysis provider and sample documents.
"""

import pytest
from typing import Any, Dict, List
from unittest.mock import AsyncMock

from plagiarism_checker.schemas.document_schemas import Document
from plagiarism_checker.utils.file_utils import document_from_text
from plagiarism_checker.utils.gemini_client import ProviderResponse


class FakeProvider:
    """Stands in for GeminiClient; each operation is backed by an AsyncMock."""

    def __init__(self):
        self.extract_text_mock = AsyncMock(return_value="extracted text")
        self.compare_pair_mock = AsyncMock(
            return_value='{"similarity": 0, "matched_sentences": []}'
        )
        self.online_mock = AsyncMock(
            return_value=ProviderResponse(text='{"similarity": 0, "matched_sentences": []}')
        )

    @property
    def is_configured(self) -> bool:
        return True

    async def extract_text(self, doc: Document) -> str:
        return await self.extract_text_mock(doc)

    async def compare_pair(self, doc_a: Document, doc_b: Document) -> str:
        return await self.compare_pair_mock(doc_a, doc_b)

    async def compare_against_online_sources(self, name: str, text: str) -> ProviderResponse:
        return await self.online_mock(name, text)


@pytest.fixture
def fake_provider() -> FakeProvider:
    return FakeProvider()


@pytest.fixture
def text_documents() -> List[Document]:
    """Three plain-text documents named doc0.txt .. doc2.txt."""
    return [document_from_text(f"Content of document {i}.", f"doc{i}.txt") for i in range(3)]


@pytest.fixture
def pdf_document() -> Document:
    return Document(name="paper.pdf", content="JVBERi0xLjQK", mimeType="application/pdf")


@pytest.fixture
def grounding_chunks() -> List[Dict[str, Any]]:
    return [
        {"web": {"uri": "https://a.example", "title": "A1"}},
        {"web": {"uri": "https://a.example", "title": "A2"}},
        {"web": {"title": "No URI"}},
        {"web": {"uri": "https://b.example", "title": "B"}},
    ]

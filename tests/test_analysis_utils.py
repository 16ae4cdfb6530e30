"""
Unit tests for the aggregation pipeline.
Tests run against FakeProvider; nothing leaves the process.
"""

import asyncio
from datetime import datetime, timezone

import pytest

from plagiarism_checker.exceptions import (
    ExtractionError,
    InputError,
    NonJSONResponseError,
    ProviderError,
)
from plagiarism_checker.schemas.report_schemas import ComparisonResult
from plagiarism_checker.utils.analysis_utils import (
    average_similarity,
    build_report,
    check_pasted_text,
    check_plagiarism,
    generate_pairs,
    similarity_level,
)
from plagiarism_checker.utils.file_utils import document_from_text
from plagiarism_checker.utils.gemini_client import ProviderResponse


def _pair_result(similarity: float) -> ComparisonResult:
    return ComparisonResult(file1="a", file2="b", similarity=similarity, matched_sentences=[])


@pytest.mark.unit
class TestGeneratePairs:

    @pytest.mark.parametrize("n", [2, 3, 4, 7])
    def test_pair_count_and_shape(self, n):
        docs = [document_from_text(str(i), f"d{i}.txt") for i in range(n)]
        pairs = generate_pairs(docs)

        assert len(pairs) == n * (n - 1) // 2
        names = [(a.name, b.name) for a, b in pairs]
        assert len(set(names)) == len(names)
        assert all(a != b for a, b in names)

    def test_lexicographic_order(self, text_documents):
        names = [(a.name, b.name) for a, b in generate_pairs(text_documents)]
        assert names == [("doc0.txt", "doc1.txt"), ("doc0.txt", "doc2.txt"), ("doc1.txt", "doc2.txt")]

    @pytest.mark.parametrize("n", [0, 1])
    def test_fewer_than_two(self, n):
        docs = [document_from_text("x", "only.txt")] * n
        assert generate_pairs(docs) == []


@pytest.mark.unit
class TestSummary:

    def test_average_of_empty_set(self):
        assert average_similarity([]) == 0

    def test_average(self):
        results = [_pair_result(10), _pair_result(50), _pair_result(90)]
        assert average_similarity(results) == 50

    @pytest.mark.parametrize("score,level", [(0, "low"), (40, "low"), (40.5, "medium"), (75, "medium"), (76, "high")])
    def test_similarity_level(self, score, level):
        assert similarity_level(score) == level

    def test_build_report(self):
        results = [_pair_result(20), _pair_result(80), _pair_result(95)]
        report = build_report(results, "pairwise", datetime.now(timezone.utc))

        assert report.mode == "pairwise"
        assert report.status == "completed"
        assert report.summary.totalResults == 3
        assert report.summary.averageSimilarity == 65.0
        assert report.summary.highestSimilarity == 95.0
        assert report.summary.flaggedResults == 2
        assert report.summary.similarityLevel == "medium"
        assert report.processingTime == "0m 00s"

    def test_summary_rounds_the_mean_to_one_decimal(self):
        results = [_pair_result(10), _pair_result(20), _pair_result(20)]

        report = build_report(results, "pairwise", datetime.now(timezone.utc))

        assert average_similarity(results) == pytest.approx(50 / 3)
        assert report.summary.averageSimilarity == 16.7

    def test_upload_date_is_timezone_aware(self):
        report = build_report([], "online", datetime.now(timezone.utc))
        assert report.uploadDate.tzinfo is not None

    def test_build_empty_report(self):
        report = build_report([], "online", datetime.now(timezone.utc))
        assert report.summary.averageSimilarity == 0
        assert report.summary.highestSimilarity == 0


@pytest.mark.unit
@pytest.mark.asyncio
class TestPairwiseCheck:

    @pytest.mark.parametrize("n", [0, 1])
    async def test_fewer_than_two_documents_skip_provider(self, fake_provider, text_documents, n):
        results = await check_plagiarism(text_documents[:n], False, fake_provider)

        assert results == []
        fake_provider.compare_pair_mock.assert_not_called()

    async def test_one_call_per_pair(self, fake_provider, text_documents):
        fake_provider.compare_pair_mock.return_value = '{"similarity": 12, "matched_sentences": ["s"]}'

        results = await check_plagiarism(text_documents, False, fake_provider)

        assert fake_provider.compare_pair_mock.await_count == 3
        assert all(r.kind == "pairwise" for r in results)
        assert [r.matched_sentences for r in results] == [["s"]] * 3

    async def test_results_follow_pair_order_not_completion_order(self, fake_provider, text_documents):
        delays = {("doc0.txt", "doc1.txt"): 0.05, ("doc0.txt", "doc2.txt"): 0.02, ("doc1.txt", "doc2.txt"): 0.0}
        completed = []

        async def compare(doc_a, doc_b):
            await asyncio.sleep(delays[(doc_a.name, doc_b.name)])
            completed.append((doc_a.name, doc_b.name))
            return '{"similarity": 1, "matched_sentences": []}'

        fake_provider.compare_pair_mock.side_effect = compare

        results = await check_plagiarism(text_documents, False, fake_provider)

        assert completed[0] == ("doc1.txt", "doc2.txt")
        assert [(r.file1, r.file2) for r in results] == [
            ("doc0.txt", "doc1.txt"), ("doc0.txt", "doc2.txt"), ("doc1.txt", "doc2.txt"),
        ]

    async def test_one_failure_fails_the_batch(self, fake_provider, text_documents):
        async def compare(doc_a, doc_b):
            if doc_b.name == "doc2.txt" and doc_a.name == "doc0.txt":
                raise ProviderError("quota exceeded")
            await asyncio.sleep(0.01)
            return '{"similarity": 1, "matched_sentences": []}'

        fake_provider.compare_pair_mock.side_effect = compare

        with pytest.raises(ProviderError) as exc:
            await check_plagiarism(text_documents, False, fake_provider)
        assert "doc0.txt and doc2.txt" in exc.value.message
        assert "quota exceeded" in exc.value.message

    async def test_pending_siblings_are_cancelled(self, fake_provider, text_documents):
        cancelled = []

        async def compare(doc_a, doc_b):
            if doc_a.name == "doc0.txt" and doc_b.name == "doc1.txt":
                raise ProviderError("boom")
            try:
                await asyncio.sleep(10)
            except asyncio.CancelledError:
                cancelled.append((doc_a.name, doc_b.name))
                raise
            return '{"similarity": 1, "matched_sentences": []}'

        fake_provider.compare_pair_mock.side_effect = compare

        with pytest.raises(ProviderError):
            await check_plagiarism(text_documents, False, fake_provider)
        await asyncio.sleep(0.01)
        assert sorted(cancelled) == [("doc0.txt", "doc2.txt"), ("doc1.txt", "doc2.txt")]


    async def test_siblings_settle_before_the_error_surfaces(self, fake_provider, text_documents):
        settled = []

        async def compare(doc_a, doc_b):
            try:
                if doc_b.name == "doc1.txt":
                    raise ProviderError("first")
                if doc_a.name == "doc0.txt":
                    raise ProviderError("second")
                await asyncio.sleep(10)
            finally:
                settled.append((doc_a.name, doc_b.name))

        fake_provider.compare_pair_mock.side_effect = compare

        with pytest.raises(ProviderError):
            await check_plagiarism(text_documents, False, fake_provider)
        assert len(settled) == 3

@pytest.mark.unit
@pytest.mark.asyncio
class TestOnlineCheck:

    async def test_no_documents(self, fake_provider):
        assert await check_plagiarism([], True, fake_provider) == []
        fake_provider.online_mock.assert_not_called()

    async def test_plain_text_skips_extraction(self, fake_provider, text_documents):
        results = await check_plagiarism(text_documents[:1], True, fake_provider)

        fake_provider.extract_text_mock.assert_not_called()
        fake_provider.online_mock.assert_awaited_once_with("doc0.txt", "Content of document 0.")
        assert results[0].kind == "online"

    async def test_binary_document_is_extracted_first(self, fake_provider, pdf_document, grounding_chunks):
        fake_provider.extract_text_mock.return_value = "Text from the PDF."
        fake_provider.online_mock.return_value = ProviderResponse(
            text='Sure! {"similarity": 55, "matched_sentences": ["Text from the PDF."]}',
            grounding_chunks=grounding_chunks,
        )

        results = await check_plagiarism([pdf_document], True, fake_provider)

        fake_provider.extract_text_mock.assert_awaited_once_with(pdf_document)
        fake_provider.online_mock.assert_awaited_once_with("paper.pdf", "Text from the PDF.")
        assert results[0].similarity == 55
        assert [s.uri for s in results[0].sources] == ["https://a.example", "https://b.example"]

    async def test_extraction_failure_fails_the_batch(self, fake_provider, pdf_document, text_documents):
        fake_provider.extract_text_mock.side_effect = ExtractionError("paper.pdf", "empty")

        with pytest.raises(ExtractionError) as exc:
            await check_plagiarism([text_documents[0], pdf_document], True, fake_provider)
        assert "paper.pdf" in exc.value.message

    async def test_empty_plain_text_file(self, fake_provider):
        with pytest.raises(ExtractionError):
            await check_plagiarism([document_from_text("   ", "blank.txt")], True, fake_provider)
        fake_provider.online_mock.assert_not_called()

    async def test_non_json_response_fails(self, fake_provider, text_documents):
        fake_provider.online_mock.return_value = ProviderResponse(text="No plagiarism detected.")

        with pytest.raises(NonJSONResponseError):
            await check_plagiarism(text_documents, True, fake_provider)

    async def test_results_follow_document_order(self, fake_provider, text_documents):
        async def online(name, text):
            await asyncio.sleep(0.03 if name == "doc0.txt" else 0.0)
            return ProviderResponse(text='{"similarity": 3, "matched_sentences": []}')

        fake_provider.online_mock.side_effect = online

        results = await check_plagiarism(text_documents, True, fake_provider)
        assert [r.file1 for r in results] == ["doc0.txt", "doc1.txt", "doc2.txt"]


@pytest.mark.unit
@pytest.mark.asyncio
class TestPastedText:

    async def test_pasted_text_uses_synthetic_name(self, fake_provider):
        fake_provider.online_mock.return_value = ProviderResponse(
            text='{"similarity": 20, "matched_sentences": ["quoted"]}'
        )

        result = await check_pasted_text("Some pasted paragraph.", fake_provider)

        fake_provider.online_mock.assert_awaited_once_with("Pasted Text", "Some pasted paragraph.")
        assert result.file1 == "Pasted Text"
        assert result.similarity == 20

    @pytest.mark.parametrize("text", ["", "   \n\t"])
    async def test_blank_text_rejected_before_provider(self, fake_provider, text):
        with pytest.raises(InputError):
            await check_pasted_text(text, fake_provider)
        fake_provider.online_mock.assert_not_called()

    async def test_provider_error_names_document(self, fake_provider):
        fake_provider.online_mock.side_effect = ProviderError("HTTP 503")

        with pytest.raises(ProviderError) as exc:
            await check_pasted_text("text", fake_provider)
        assert "Pasted Text" in exc.value.message

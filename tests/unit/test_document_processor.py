"""Unit tests for background document processing."""

import threading
import time
from datetime import datetime, timedelta, timezone
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from app.models.analysis import AnalysisResult, AnalysisStatus, DocumentAnalysis, RiskLevel
from core.agents.document_analyzer import DocumentAnalyzer
from core.cost_tracker import CostTracker, ExecutionStatus
from core.decomposition.ingestion import DocumentContent, DocumentTextExtractor, ExtractionMethod
from core.exceptions import ContentValidationError, RecordNotFoundError, UpstreamError
from core.pipeline.document_processor import STALE_MESSAGE, DocumentProcessor, expire_if_stale, is_stale
from core.storage.blob_store import LocalBlobStore
from core.storage.repositories import Store, build_memory_store


@pytest.fixture
def store() -> Store:
    return build_memory_store()


@pytest.fixture
def blobs(tmp_path: Path) -> LocalBlobStore:
    return LocalBlobStore(tmp_path)


@pytest.fixture
def extractor() -> MagicMock:
    mock_extractor = MagicMock(spec=DocumentTextExtractor)
    mock_extractor.extract.return_value = DocumentContent(
        filename="lease.txt",
        raw_text="The tenant shall pay rent monthly.",
        method=ExtractionMethod.PLAIN_TEXT,
    )
    return mock_extractor


@pytest.fixture
def analyzer() -> MagicMock:
    mock_analyzer = MagicMock(spec=DocumentAnalyzer)
    mock_analyzer.analyze.return_value = AnalysisResult(
        plain_summary="Monthly lease.",
        risk_level="high",
        risk_score=78,
        key_obligations=["Pay rent monthly"],
    )
    return mock_analyzer


def make_processor(store, blobs, extractor, analyzer, timeout_seconds: float = 5, tracker=None) -> DocumentProcessor:
    return DocumentProcessor(
        analyses=store.analyses,
        blobs=blobs,
        extractor=extractor,
        analyzer=analyzer,
        timeout_seconds=timeout_seconds,
        tracker=tracker or CostTracker(logger_name="aurora.test_usage"),
    )


def record_call(tracker: CostTracker, reference_id: str) -> None:
    tracker.log_execution(tracker.create_log(
        operation="DOCUMENT_ANALYSIS",
        reference_id=reference_id,
        model="gpt-4o",
        input_tokens=100,
        output_tokens=20,
        execution_time_ms=5,
        status=ExecutionStatus.SUCCESS,
    ))


async def create_upload(store: Store, blobs: LocalBlobStore, data: bytes = b"The tenant shall pay rent.") -> DocumentAnalysis:
    file_path = blobs.save("user-1", "lease.txt", data)
    return await store.analyses.create(DocumentAnalysis(
        user_id="user-1",
        filename="lease.txt",
        file_type="text/plain",
        file_size=len(data),
        file_path=file_path,
    ))


class TestProcess:
    @pytest.mark.asyncio
    async def test_completes_record(self, store, blobs, extractor, analyzer) -> None:
        """Test the processing -> completed move and blob cleanup."""
        record = await create_upload(store, blobs)

        result = await make_processor(store, blobs, extractor, analyzer).process(record.id, record.file_path)

        assert result.status == AnalysisStatus.COMPLETED
        assert result.risk_score == 78
        assert result.risk_level == RiskLevel.HIGH
        assert result.processing_time_ms is not None
        assert (await store.analyses.get(record.id)).status == AnalysisStatus.COMPLETED
        assert not blobs.exists(record.file_path)

        data, filename, content_type, reference_id = extractor.extract.call_args.args
        assert (filename, content_type, reference_id) == ("lease.txt", "text/plain", str(record.id))
        analyzer.analyze.assert_called_once_with("The tenant shall pay rent monthly.", str(record.id))

    @pytest.mark.asyncio
    async def test_upstream_failure_fails_record(self, store, blobs, extractor, analyzer) -> None:
        """Test that an exception leaves the record failed with its message."""
        analyzer.analyze.side_effect = UpstreamError("overloaded", status_code=503, body="Service Unavailable")
        record = await create_upload(store, blobs)

        result = await make_processor(store, blobs, extractor, analyzer).process(record.id)

        assert result.status == AnalysisStatus.FAILED
        assert result.error_message == "[Code: 503] Service Unavailable"
        assert blobs.exists(record.file_path)

    @pytest.mark.asyncio
    async def test_unreadable_document_fails_record(self, store, blobs, extractor, analyzer) -> None:
        extractor.extract.side_effect = ContentValidationError("No text could be extracted from lease.txt")
        record = await create_upload(store, blobs)

        result = await make_processor(store, blobs, extractor, analyzer).process(record.id)

        assert result.status == AnalysisStatus.FAILED
        assert "No text" in result.error_message
        analyzer.analyze.assert_not_called()

    @pytest.mark.asyncio
    async def test_timeout_fails_record(self, store, blobs, extractor, analyzer) -> None:
        """Test that a job over the time limit is marked failed."""
        analyzer.analyze.side_effect = lambda text, ref: time.sleep(0.5)
        record = await create_upload(store, blobs)

        result = await make_processor(store, blobs, extractor, analyzer, timeout_seconds=0.05).process(record.id)

        assert result.status == AnalysisStatus.FAILED
        assert "timed out" in result.error_message

    @pytest.mark.asyncio
    async def test_blob_delete_error_still_completes(self, store, blobs, extractor, analyzer) -> None:
        """Test that a cleanup failure does not leave the record processing."""
        record = await create_upload(store, blobs)

        with patch.object(blobs, "delete", side_effect=PermissionError("file in use")):
            result = await make_processor(store, blobs, extractor, analyzer).process(record.id)

        assert result.status == AnalysisStatus.COMPLETED
        assert (await store.analyses.get(record.id)).status == AnalysisStatus.COMPLETED

    @pytest.mark.asyncio
    async def test_usage_released_after_job(self, store, blobs, extractor, analyzer) -> None:
        tracker = CostTracker(logger_name="aurora.test_usage")
        record = await create_upload(store, blobs)

        def analysis(text, ref):
            record_call(tracker, f"{ref}:chunk-1")
            return AnalysisResult(risk_score=20)

        analyzer.analyze.side_effect = analysis

        result = await make_processor(store, blobs, extractor, analyzer, tracker=tracker).process(record.id)

        assert result.status == AnalysisStatus.COMPLETED
        assert tracker.get_all_logs() == []

    @pytest.mark.asyncio
    async def test_usage_released_after_timed_out_job(self, store, blobs, extractor, analyzer) -> None:
        """Test that calls made after a timeout are still released when the job ends."""
        tracker = CostTracker(logger_name="aurora.test_usage")
        finished = threading.Event()

        def slow_analysis(text, ref):
            time.sleep(0.2)
            record_call(tracker, ref)
            finished.set()

        analyzer.analyze.side_effect = slow_analysis
        record = await create_upload(store, blobs)

        result = await make_processor(
            store, blobs, extractor, analyzer, timeout_seconds=0.05, tracker=tracker
        ).process(record.id)

        assert result.status == AnalysisStatus.FAILED
        assert finished.wait(timeout=5)
        for _ in range(50):
            if not tracker.get_all_logs():
                break
            time.sleep(0.02)
        assert tracker.get_all_logs() == []

    @pytest.mark.asyncio
    async def test_missing_blob_fails_record(self, store, blobs, extractor, analyzer) -> None:
        record = await create_upload(store, blobs)
        blobs.delete(record.file_path)

        result = await make_processor(store, blobs, extractor, analyzer).process(record.id)

        assert result.status == AnalysisStatus.FAILED

    @pytest.mark.asyncio
    async def test_terminal_record_not_reprocessed(self, store, blobs, extractor, analyzer) -> None:
        """Test that a record is completed or failed only once."""
        record = await create_upload(store, blobs)
        processor = make_processor(store, blobs, extractor, analyzer)
        await processor.process(record.id)

        again = await processor.process(record.id)

        assert again.status == AnalysisStatus.COMPLETED
        assert analyzer.analyze.call_count == 1

    @pytest.mark.asyncio
    async def test_unknown_record(self, store, blobs, extractor, analyzer) -> None:
        record = DocumentAnalysis(user_id="u", filename="a.txt", file_type="text/plain", file_size=1)
        with pytest.raises(RecordNotFoundError):
            await make_processor(store, blobs, extractor, analyzer).process(record.id)


class TestStaleRecords:
    def test_is_stale(self) -> None:
        record = DocumentAnalysis(
            user_id="u", filename="a.txt", file_type="text/plain", file_size=1,
            created_at=datetime.now(timezone.utc) - timedelta(seconds=700),
        )
        assert is_stale(record, 600)
        assert not is_stale(record, 800)
        assert not is_stale(record.fail("boom"), 600)

    @pytest.mark.asyncio
    async def test_expire_if_stale(self, store: Store) -> None:
        record = await store.analyses.create(DocumentAnalysis(
            user_id="u", filename="a.txt", file_type="text/plain", file_size=1,
            created_at=datetime.now(timezone.utc) - timedelta(hours=1),
        ))

        expired = await expire_if_stale(store.analyses, record, 600)

        assert expired.status == AnalysisStatus.FAILED
        assert expired.error_message == STALE_MESSAGE
        assert (await store.analyses.get(record.id)).status == AnalysisStatus.FAILED

    @pytest.mark.asyncio
    async def test_fresh_record_untouched(self, store: Store) -> None:
        record = await store.analyses.create(DocumentAnalysis(
            user_id="u", filename="a.txt", file_type="text/plain", file_size=1,
        ))
        assert (await expire_if_stale(store.analyses, record, 600)) is record

"""Background processing of uploaded documents.

A record is created in ``processing`` on upload. ``DocumentProcessor.process``
moves it to ``completed`` or ``failed`` exactly once: text extraction and
analysis run in a worker thread under a time limit, and any exception or a
timeout marks the record failed with a message the client can show.
"""

import asyncio
import logging
import time
from datetime import datetime, timedelta, timezone
from uuid import UUID

from app.models.analysis import AnalysisResult, AnalysisStatus, DocumentAnalysis
from core.agents.document_analyzer import DocumentAnalyzer
from core.cost_tracker import CostTracker, cost_tracker
from core.decomposition.ingestion import DocumentTextExtractor, text_extractor
from core.exceptions import RecordNotFoundError
from core.storage.blob_store import LocalBlobStore
from core.storage.repositories import AnalysisRepository

logger = logging.getLogger("aurora.processor")

STALE_MESSAGE = "Processing did not finish in time"


class DocumentProcessor:
    """Runs extraction and analysis for one stored upload.

    A record already being processed in this process is not started twice.
    """

    _active: set[UUID] = set()

    def __init__(
        self,
        analyses: AnalysisRepository,
        blobs: LocalBlobStore,
        extractor: DocumentTextExtractor | None = None,
        analyzer: DocumentAnalyzer | None = None,
        timeout_seconds: float = 600,
        tracker: CostTracker | None = None,
    ) -> None:
        self.analyses = analyses
        self.blobs = blobs
        self.extractor = extractor or text_extractor
        self._analyzer = analyzer
        self.timeout_seconds = timeout_seconds
        self.tracker = tracker or cost_tracker

    @property
    def analyzer(self) -> DocumentAnalyzer:
        if self._analyzer is None:
            self._analyzer = DocumentAnalyzer()
        return self._analyzer

    def _run(self, record: DocumentAnalysis, data: bytes) -> AnalysisResult:
        """Blocking part of the job: extract, then analyze.

        The usage summary is logged when the thread ends, which may be after
        a timeout has already failed the record.
        """
        reference_id = str(record.id)
        try:
            content = self.extractor.extract(data, record.filename, record.file_type, reference_id)
            logger.info(
                f"Extracted {len(content.raw_text)} chars from {record.filename} "
                f"via {content.method.value}"
            )
            return self.analyzer.analyze(content.raw_text, reference_id)
        finally:
            self.tracker.log_summary(reference_id)

    async def process(self, analysis_id: UUID, file_path: str | None = None) -> DocumentAnalysis:
        """Process one analysis record to a terminal status.

        Args:
            analysis_id: Record to process.
            file_path: Storage path of the upload; defaults to the record's.

        Returns:
            The record in its final state.

        Raises:
            RecordNotFoundError: If no such record exists.
        """
        record = await self.analyses.get(analysis_id)
        if record is None:
            raise RecordNotFoundError("Analysis", str(analysis_id))
        if record.status.is_terminal:
            logger.info(f"Analysis {analysis_id} already {record.status.value}, skipping")
            return record

        if analysis_id in self._active:
            logger.info(f"Analysis {analysis_id} already in progress, skipping")
            return record

        self._active.add(analysis_id)
        try:
            return await self._process(record, file_path or record.file_path)
        finally:
            self._active.discard(analysis_id)

    async def _process(self, record: DocumentAnalysis, file_path: str | None) -> DocumentAnalysis:
        analysis_id = record.id
        start_time = time.time()
        loop = asyncio.get_running_loop()

        try:
            if not file_path:
                raise ValueError("No stored file for this analysis")
            data = self.blobs.read(file_path)
            result = await asyncio.wait_for(
                loop.run_in_executor(None, self._run, record, data),
                timeout=self.timeout_seconds,
            )
        except asyncio.TimeoutError:
            logger.error(f"Analysis {analysis_id} timed out after {self.timeout_seconds}s")
            record = record.fail(f"Processing timed out after {int(self.timeout_seconds)} seconds")
        except Exception as e:
            logger.exception(f"Analysis {analysis_id} failed")
            record = record.fail(str(e) or type(e).__name__)
        else:
            processing_time_ms = int((time.time() - start_time) * 1000)
            record = record.complete(result, processing_time_ms)
            logger.info(
                f"Analysis {analysis_id} completed in {processing_time_ms}ms: "
                f"{record.risk_level.value} ({record.risk_score})"
                + (" [fallback]" if record.is_fallback else "")
            )

        current = await self.analyses.get(analysis_id)
        if current is not None and current.status.is_terminal:
            logger.warning(f"Analysis {analysis_id} was already {current.status.value}, result dropped")
            return current

        record = await self.analyses.update(record)
        if record.status == AnalysisStatus.COMPLETED:
            self._delete_blob(file_path)
        return record

    def _delete_blob(self, file_path: str) -> None:
        try:
            self.blobs.delete(file_path)
        except OSError as e:
            logger.warning(f"Could not delete {file_path}: {e}")


def is_stale(record: DocumentAnalysis, timeout_seconds: float, now: datetime | None = None) -> bool:
    """True for a record still processing long after it was created."""
    if record.status.is_terminal:
        return False
    now = now or datetime.now(timezone.utc)
    return now - record.created_at > timedelta(seconds=timeout_seconds)


async def expire_if_stale(
    analyses: AnalysisRepository,
    record: DocumentAnalysis,
    timeout_seconds: float,
) -> DocumentAnalysis:
    """Fail a record whose job was lost (e.g. the process restarted)."""
    if not is_stale(record, timeout_seconds):
        return record
    logger.warning(f"Analysis {record.id} stale, marking failed")
    return await analyses.update(record.fail(STALE_MESSAGE))

"""Request-scoped operations for threat scans and the voice assistant.

The agents are synchronous; their calls run in the default executor so the
event loop stays free while the model answers.
"""

import asyncio
import logging
from uuid import UUID, uuid4

from app.models.chat import AnalysisContext, ChatMessage, ChatRole
from app.models.threat import ScanType, ThreatScan
from core.agents.threat_detector import ThreatDetector
from core.agents.voice_assistant import VoiceAssistant
from core.cost_tracker import CostTracker, cost_tracker
from core.exceptions import RecordNotFoundError
from core.storage.repositories import Store

logger = logging.getLogger("aurora.services")


class ThreatScanService:
    def __init__(
        self,
        store: Store,
        detector: ThreatDetector | None = None,
        tracker: CostTracker | None = None,
    ) -> None:
        self.store = store
        self._detector = detector
        self.tracker = tracker or cost_tracker

    @property
    def detector(self) -> ThreatDetector:
        if self._detector is None:
            self._detector = ThreatDetector()
        return self._detector

    async def scan(self, user_id: str, scan_type: ScanType, content: str) -> ThreatScan:
        """Classify ``content`` and store the verdict for ``user_id``."""
        loop = asyncio.get_running_loop()
        reference_id = f"scan:{user_id}:{uuid4().hex}"
        try:
            result = await loop.run_in_executor(
                None, self.detector.scan, scan_type, content, reference_id
            )
        finally:
            self.tracker.log_summary(reference_id)
        scan = ThreatScan(
            **result.assessment.model_dump(),
            user_id=user_id,
            scan_type=scan_type,
            content=content,
            is_fallback=result.is_fallback,
            processing_time_ms=result.processing_time_ms,
        )
        logger.info(
            f"Scan {scan.id} ({scan_type.value}): threat={scan.is_threat} "
            f"{scan.threat_level.value} ({scan.threat_score})"
        )
        return await self.store.scans.create(scan)


class AssistantService:
    def __init__(
        self,
        store: Store,
        assistant: VoiceAssistant | None = None,
        tracker: CostTracker | None = None,
    ) -> None:
        self.store = store
        self._assistant = assistant
        self.tracker = tracker or cost_tracker

    @property
    def assistant(self) -> VoiceAssistant:
        if self._assistant is None:
            self._assistant = VoiceAssistant()
        return self._assistant

    async def ask(
        self,
        user_id: str,
        analysis_id: UUID,
        query: str,
        context: AnalysisContext | None = None,
    ) -> str:
        """Answer a question about one of the caller's analyses.

        When the caller sends no context, the stored analysis supplies it.
        The question and the answer are appended to the document's chat log.

        Raises:
            RecordNotFoundError: If the analysis is missing or not the caller's.
        """
        record = await self.store.analyses.get(analysis_id, user_id)
        if record is None:
            raise RecordNotFoundError("Analysis", str(analysis_id))

        if context is None or not context.summary:
            context = AnalysisContext(**record.analysis_context())

        loop = asyncio.get_running_loop()
        reference_id = f"voice:{analysis_id}:{uuid4().hex}"
        try:
            response = await loop.run_in_executor(
                None, self.assistant.answer, query, context, reference_id
            )
        finally:
            self.tracker.log_summary(reference_id)

        await self.store.messages.append([
            ChatMessage(user_id=user_id, document_id=analysis_id, role=ChatRole.USER, content=query.strip()),
            ChatMessage(user_id=user_id, document_id=analysis_id, role=ChatRole.ASSISTANT, content=response),
        ])
        return response

    async def history(self, user_id: str, analysis_id: UUID) -> list[ChatMessage]:
        record = await self.store.analyses.get(analysis_id, user_id)
        if record is None:
            raise RecordNotFoundError("Analysis", str(analysis_id))
        return await self.store.messages.list_for_document(user_id, analysis_id)

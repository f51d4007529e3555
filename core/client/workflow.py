"""Upload-then-poll workflow: the client, the state machine and the poller together."""

import logging
import threading
from dataclasses import replace
from pathlib import Path
from typing import Any, Callable

from core.client.api_client import AuroraClient
from core.client.poller import POLL_INTERVAL_SECONDS, AnalysisPoller, PollingHandle
from core.client.state import UploadEvent, UploadSession, event_for_status
from core.exceptions import AuroraError

logger = logging.getLogger("aurora.client.workflow")


class UploadWorkflow:
    """Drives one ``UploadSession`` from idle to a terminal state.

    ``on_change`` is called with every new session, from the caller's thread
    for the upload and from the polling thread afterwards.
    """

    def __init__(
        self,
        client: AuroraClient,
        interval_seconds: float = POLL_INTERVAL_SECONDS,
        on_change: Callable[[UploadSession], None] | None = None,
    ) -> None:
        self.client = client
        self.interval_seconds = interval_seconds
        self.on_change = on_change
        self._session = UploadSession()
        self._lock = threading.Lock()
        self._handle: PollingHandle | None = None

    @property
    def session(self) -> UploadSession:
        with self._lock:
            return self._session

    def _apply(self, event: UploadEvent, **updates: Any) -> UploadSession:
        with self._lock:
            self._session = self._session.apply(event, **updates)
            session = self._session
        logger.info(f"Upload session -> {session.state.value}")
        if self.on_change:
            self.on_change(session)
        return session

    def start(self, file_path: str | Path, content_type: str | None = None) -> UploadSession:
        """Upload a file and begin polling for its analysis.

        Returns the session after the upload step: ``processing`` on success,
        ``failed`` (with ``error`` set) when the upload was rejected.
        """
        self._apply(UploadEvent.UPLOAD_STARTED, filename=Path(file_path).name)
        try:
            upload = self.client.upload_document(file_path, content_type)
        except (AuroraError, OSError) as e:
            return self._apply(UploadEvent.UPLOAD_REJECTED, error=str(e))

        analysis_id = str(upload["analysis_id"])
        session = self._apply(UploadEvent.UPLOAD_ACCEPTED, analysis_id=analysis_id)

        poller = AnalysisPoller(
            fetch=self.client.get_analysis,
            on_update=self._on_record,
            interval_seconds=self.interval_seconds,
        )
        self._handle = poller.start(analysis_id)
        return session

    def _on_record(self, record: dict[str, Any]) -> None:
        event = event_for_status(record.get("status", ""))
        if event is None:
            with self._lock:
                self._session = replace(self._session, analysis=record)
            return
        self._apply(event, analysis=record, error=record.get("error_message"))

    def wait(self, timeout: float | None = None) -> UploadSession:
        """Block until polling ends (or ``timeout`` passes) and return the session."""
        if self._handle is not None:
            self._handle.join(timeout)
        return self.session

    def stop(self) -> None:
        """Stop polling; call when the owner is torn down."""
        if self._handle is not None:
            self._handle.stop()
            self._handle = None

    def reset(self) -> UploadSession:
        self.stop()
        return self._apply(UploadEvent.RESET)

"""Upload/poll state machine for the Aurora client.

Every move goes through ``transition``; there is no other way to change
``UploadSession.state``. Sessions are immutable: applying an event returns a
new session.
"""

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any

from core.exceptions import InvalidTransition


class UploadState(str, Enum):
    IDLE = "idle"
    UPLOADING = "uploading"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (UploadState.COMPLETED, UploadState.FAILED)


class UploadEvent(str, Enum):
    UPLOAD_STARTED = "upload_started"
    UPLOAD_ACCEPTED = "upload_accepted"
    UPLOAD_REJECTED = "upload_rejected"
    ANALYSIS_COMPLETED = "analysis_completed"
    ANALYSIS_FAILED = "analysis_failed"
    RESET = "reset"


TRANSITIONS: dict[tuple[UploadState, UploadEvent], UploadState] = {
    (UploadState.IDLE, UploadEvent.UPLOAD_STARTED): UploadState.UPLOADING,
    (UploadState.UPLOADING, UploadEvent.UPLOAD_ACCEPTED): UploadState.PROCESSING,
    (UploadState.UPLOADING, UploadEvent.UPLOAD_REJECTED): UploadState.FAILED,
    (UploadState.PROCESSING, UploadEvent.ANALYSIS_COMPLETED): UploadState.COMPLETED,
    (UploadState.PROCESSING, UploadEvent.ANALYSIS_FAILED): UploadState.FAILED,
}


def transition(state: UploadState, event: UploadEvent) -> UploadState:
    """Return the state after ``event``.

    ``RESET`` is accepted from every state.

    Raises:
        InvalidTransition: If ``event`` is not allowed in ``state``.
    """
    if event is UploadEvent.RESET:
        return UploadState.IDLE
    try:
        return TRANSITIONS[(state, event)]
    except KeyError:
        raise InvalidTransition(state.value, event.value) from None


def event_for_status(status: str) -> UploadEvent | None:
    """Map a server record status to the event it implies, if any."""
    if status == "completed":
        return UploadEvent.ANALYSIS_COMPLETED
    if status == "failed":
        return UploadEvent.ANALYSIS_FAILED
    return None


class StageStatus(str, Enum):
    PENDING = "pending"
    ACTIVE = "active"
    COMPLETED = "completed"
    FAILED = "failed"


@dataclass(frozen=True)
class ProcessingStage:
    id: str
    name: str
    message: str
    status: StageStatus = StageStatus.PENDING


STAGES: tuple[ProcessingStage, ...] = (
    ProcessingStage("upload", "Upload", "Uploading document..."),
    ProcessingStage("ocr", "OCR", "Extracting text..."),
    ProcessingStage("analysis", "AI Analysis", "Analyzing content..."),
    ProcessingStage("clauses", "Clause Detection", "Detecting clauses..."),
    ProcessingStage("summary", "Summary", "Generating insights..."),
)


def stages_for(state: UploadState, failed_during_upload: bool = False) -> list[ProcessingStage]:
    """Display stages implied by a session state.

    The server reports only processing/completed/failed, so while processing
    the first post-upload stage is shown active.
    """
    if state is UploadState.IDLE:
        statuses = [StageStatus.PENDING] * len(STAGES)
    elif state is UploadState.UPLOADING:
        statuses = [StageStatus.ACTIVE] + [StageStatus.PENDING] * (len(STAGES) - 1)
    elif state is UploadState.PROCESSING:
        statuses = [StageStatus.COMPLETED, StageStatus.ACTIVE] + [StageStatus.PENDING] * (len(STAGES) - 2)
    elif state is UploadState.COMPLETED:
        statuses = [StageStatus.COMPLETED] * len(STAGES)
    elif failed_during_upload:
        statuses = [StageStatus.FAILED] + [StageStatus.PENDING] * (len(STAGES) - 1)
    else:
        statuses = [StageStatus.COMPLETED] + [StageStatus.PENDING] * (len(STAGES) - 2) + [StageStatus.FAILED]
    return [replace(stage, status=status) for stage, status in zip(STAGES, statuses)]


@dataclass(frozen=True)
class UploadSession:
    """Everything the client knows about one upload."""
    state: UploadState = UploadState.IDLE
    filename: str | None = None
    analysis_id: str | None = None
    analysis: dict[str, Any] | None = None
    error: str | None = None
    stages: tuple[ProcessingStage, ...] = field(default_factory=lambda: tuple(stages_for(UploadState.IDLE)))

    def apply(self, event: UploadEvent, **updates: Any) -> "UploadSession":
        """Return the session after ``event``, with ``updates`` applied."""
        state = transition(self.state, event)
        if event is UploadEvent.RESET:
            return UploadSession()
        stages = stages_for(state, failed_during_upload=event is UploadEvent.UPLOAD_REJECTED)
        return replace(self, state=state, stages=tuple(stages), **updates)

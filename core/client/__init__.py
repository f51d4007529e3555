"""Python client for the Aurora API: HTTP calls, upload state and polling."""

from .api_client import AuroraClient
from .poller import AnalysisPoller, PollingHandle, start_polling
from .state import UploadEvent, UploadSession, UploadState, transition
from .workflow import UploadWorkflow

__all__ = [
    "AnalysisPoller",
    "AuroraClient",
    "PollingHandle",
    "UploadEvent",
    "UploadSession",
    "UploadState",
    "UploadWorkflow",
    "start_polling",
    "transition",
]

"""FastAPI dependencies shared by the routers."""

from fastapi import Depends, Header, HTTPException, Request

from app.config import Settings, get_settings
from core.pipeline.document_processor import DocumentProcessor
from core.pipeline.services import AssistantService, ThreatScanService
from core.storage.blob_store import LocalBlobStore
from core.storage.repositories import Store


async def get_current_user_id(x_user_id: str | None = Header(default=None)) -> str:
    """Caller identity, set by the auth gateway in front of the service."""
    if not x_user_id or not x_user_id.strip():
        raise HTTPException(status_code=401, detail="Missing X-User-Id header")
    return x_user_id.strip()


def get_store(request: Request) -> Store:
    return request.app.state.store


def get_blob_store(request: Request) -> LocalBlobStore:
    return request.app.state.blobs


def get_processor(
    store: Store = Depends(get_store),
    blobs: LocalBlobStore = Depends(get_blob_store),
    settings: Settings = Depends(get_settings),
) -> DocumentProcessor:
    return DocumentProcessor(
        analyses=store.analyses,
        blobs=blobs,
        timeout_seconds=settings.processing_timeout_seconds,
    )


def get_threat_service(store: Store = Depends(get_store)) -> ThreatScanService:
    return ThreatScanService(store)


def get_assistant_service(store: Store = Depends(get_store)) -> AssistantService:
    return AssistantService(store)

"""Document upload and retrieval routes."""

import logging
from uuid import UUID

from fastapi import APIRouter, BackgroundTasks, Depends, File, UploadFile

from app.config import Settings, get_settings
from app.dependencies import get_blob_store, get_current_user_id, get_processor, get_store
from app.models.analysis import DocumentAnalysis, DocumentAnalysisResponse
from core.exceptions import RecordNotFoundError
from core.pipeline.document_processor import DocumentProcessor, expire_if_stale
from core.storage.blob_store import LocalBlobStore
from core.storage.repositories import Store
from core.upload_validation import validate_upload

logger = logging.getLogger("aurora.api.documents")

router = APIRouter()


@router.post("/upload", response_model=DocumentAnalysisResponse)
async def upload_document(
    background_tasks: BackgroundTasks,
    file: UploadFile = File(...),
    user_id: str = Depends(get_current_user_id),
    store: Store = Depends(get_store),
    blobs: LocalBlobStore = Depends(get_blob_store),
    processor: DocumentProcessor = Depends(get_processor),
    settings: Settings = Depends(get_settings),
) -> DocumentAnalysisResponse:
    """Upload a PDF, DOC, DOCX or TXT file and schedule its analysis."""
    # One byte past the limit is enough to reject an oversized file
    content = await file.read(settings.max_upload_bytes + 1)
    spec = validate_upload(file.filename, file.content_type, len(content), settings.max_upload_bytes)

    file_path = blobs.save(user_id, spec.filename, content)
    record = await store.analyses.create(DocumentAnalysis(
        user_id=user_id,
        filename=spec.filename,
        file_type=spec.content_type,
        file_size=spec.size,
        file_path=file_path,
    ))
    logger.info(f"Analysis {record.id} created for {spec.filename} ({spec.size} bytes)")

    background_tasks.add_task(processor.process, record.id, file_path)

    return DocumentAnalysisResponse(
        analysis_id=record.id,
        file_path=file_path,
        status=record.status,
    )


@router.get("/{analysis_id}", response_model=DocumentAnalysis)
async def get_analysis(
    analysis_id: UUID,
    user_id: str = Depends(get_current_user_id),
    store: Store = Depends(get_store),
    settings: Settings = Depends(get_settings),
) -> DocumentAnalysis:
    """Get one of the caller's analyses; clients poll this until it is terminal."""
    record = await store.analyses.get(analysis_id, user_id)
    if record is None:
        raise RecordNotFoundError("Analysis", str(analysis_id))
    return await expire_if_stale(store.analyses, record, settings.processing_timeout_seconds)


@router.get("/", response_model=list[DocumentAnalysis])
async def list_analyses(
    user_id: str = Depends(get_current_user_id),
    store: Store = Depends(get_store),
    settings: Settings = Depends(get_settings),
) -> list[DocumentAnalysis]:
    """List the caller's analyses, newest first."""
    records = await store.analyses.list_for_user(user_id)
    return [
        await expire_if_stale(store.analyses, record, settings.processing_timeout_seconds)
        for record in records
    ]

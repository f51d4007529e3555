"""Analysis processing routes."""

from uuid import UUID

from fastapi import APIRouter, BackgroundTasks, Depends
from pydantic import BaseModel

from app.dependencies import get_current_user_id, get_processor, get_store
from core.exceptions import RecordNotFoundError
from core.pipeline.document_processor import DocumentProcessor
from core.storage.repositories import Store

router = APIRouter()


class ProcessRequest(BaseModel):
    analysis_id: UUID
    file_path: str | None = None


class ProcessAccepted(BaseModel):
    success: bool = True
    analysis_id: UUID


@router.post("/process", status_code=202, response_model=ProcessAccepted)
async def process_document(
    request: ProcessRequest,
    background_tasks: BackgroundTasks,
    user_id: str = Depends(get_current_user_id),
    store: Store = Depends(get_store),
    processor: DocumentProcessor = Depends(get_processor),
) -> ProcessAccepted:
    """Schedule processing of an upload.

    Completion is observed only by polling the document. A record that has
    already finished is left as it is. Only the upload stored for the record
    is ever read, whatever ``file_path`` the caller sends.
    """
    record = await store.analyses.get(request.analysis_id, user_id)
    if record is None:
        raise RecordNotFoundError("Analysis", str(request.analysis_id))

    background_tasks.add_task(processor.process, record.id)
    return ProcessAccepted(analysis_id=record.id)

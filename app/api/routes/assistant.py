"""Voice assistant routes."""

from uuid import UUID

from fastapi import APIRouter, Depends

from app.dependencies import get_assistant_service, get_current_user_id
from app.models.chat import ChatMessage, VoiceQueryRequest, VoiceQueryResponse
from core.pipeline.services import AssistantService

router = APIRouter()


@router.post("/query", response_model=VoiceQueryResponse)
async def ask_question(
    request: VoiceQueryRequest,
    user_id: str = Depends(get_current_user_id),
    service: AssistantService = Depends(get_assistant_service),
) -> VoiceQueryResponse:
    """Answer a (transcribed) question about an analysed document."""
    response = await service.ask(user_id, request.analysis_id, request.query, request.analysis_data)
    return VoiceQueryResponse(response=response)


@router.get("/{analysis_id}/messages", response_model=list[ChatMessage])
async def list_messages(
    analysis_id: UUID,
    user_id: str = Depends(get_current_user_id),
    service: AssistantService = Depends(get_assistant_service),
) -> list[ChatMessage]:
    """The question/answer history for one document, oldest first."""
    return await service.history(user_id, analysis_id)

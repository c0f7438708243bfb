import logging
from fastapi import APIRouter, Depends
from examprep.api.dependencies import get_chat_service
from examprep.models.chat import ChatRequest, ChatResponse
from examprep.services.chat_service import ExamChatService

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/exam-chat-ai", response_model=ChatResponse, response_model_exclude_none=True)
def exam_chat(request: ChatRequest, service: ExamChatService = Depends(get_chat_service)):
    """Answer a student's question about a paper with a structured assistant message"""
    logger.info("Chat request for paper %s", request.paper_id)
    message = service.answer(request)
    return ChatResponse(message=message, session_id=request.session_id)

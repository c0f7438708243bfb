from fastapi import APIRouter, Depends
from examprep.api.dependencies import get_paper_repository
from examprep.exceptions import NotFoundError
from examprep.models.chat import ChatSession

router = APIRouter()


@router.get("/chat-sessions/{session_id}", response_model=ChatSession)
def chat_session(session_id: str, repository=Depends(get_paper_repository)):
    session = repository.get_session(session_id)
    if session is None:
        raise NotFoundError("Chat session not found")
    return session

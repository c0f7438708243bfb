import json
from datetime import datetime, timezone
from enum import Enum
from typing import List, Optional
from uuid import uuid4
from pydantic import BaseModel, ConfigDict, Field


class ChatRole(str, Enum):
    USER = "user"
    ASSISTANT = "assistant"


def _utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


class ChatMessage(BaseModel):
    id: str = Field(default_factory=lambda: str(uuid4()))
    role: ChatRole
    content: str
    timestamp: str = Field(default_factory=_utc_now_iso)


class AIResponse(BaseModel):
    """Structured tutoring answer; stored as the content of an assistant message"""

    model_config = ConfigDict(populate_by_name=True)

    explanation: str = ""
    examples: List[str] = Field(default_factory=list)
    how_to_get_full_marks: List[str] = Field(default_factory=list, alias="howToGetFullMarks")
    solution: str = ""

    def to_content(self) -> str:
        return json.dumps(self.model_dump(by_alias=True))

    @classmethod
    def from_content(cls, content: str) -> "AIResponse":
        return cls.model_validate(json.loads(content))


class ChatRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    paper_id: Optional[str] = Field(None, alias="paperId")
    question: Optional[str] = None
    session_id: Optional[str] = Field(None, alias="sessionId")
    paper_content: Optional[str] = Field(None, alias="paperContent")
    marking_scheme_content: Optional[str] = Field(None, alias="markingSchemeContent")


class ChatResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    message: ChatMessage
    session_id: Optional[str] = Field(None, alias="sessionId")


class ChatSession(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    paper_id: Optional[str] = Field(None, alias="paperId")
    messages: List[ChatMessage] = Field(default_factory=list)

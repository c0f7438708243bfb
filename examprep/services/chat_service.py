"""
Exam Chat Service
Narrows paper context to the asked question, calls the generation model and
shapes its reply into an assistant ChatMessage.
"""
import logging
from typing import Optional

import httpx
import requests

from examprep.exceptions import (
    BadRequestError,
    ExamPrepError,
    RateLimitedError,
    ServiceUnavailableError,
    UnknownServiceError,
)
from examprep.models.chat import ChatMessage, ChatRequest, ChatRole
from examprep.services.prompt_builder import build_prompt
from examprep.services.question_locator import (
    detect_question_number,
    narrow_marking_scheme_context,
    narrow_paper_context,
)
from examprep.services.response_parser import parse_ai_response

logger = logging.getLogger(__name__)

API_KEY_MISSING_MESSAGE = (
    "AI service not configured. Please contact your administrator to set up the GEMINI_API_KEY."
)
DEFAULT_ERROR_MESSAGE = "An unexpected error occurred while processing your request."

NETWORK_EXCEPTIONS = (ConnectionError, TimeoutError, requests.RequestException, httpx.TransportError)


def classify_model_error(exc: Exception) -> ExamPrepError:
    """Map an exception from the model call onto the API error taxonomy"""
    details = str(exc)
    lowered = details.lower()

    if "api key" in lowered:
        return ServiceUnavailableError(
            "Invalid API key. Please contact your administrator.",
            details=details,
            error_code="INVALID_API_KEY",
        )
    if "quota" in lowered or "limit" in lowered:
        return RateLimitedError(
            "AI service quota exceeded. Please try again later or contact your administrator.",
            details=details,
        )
    if isinstance(exc, NETWORK_EXCEPTIONS) or "network" in lowered or "fetch" in lowered:
        return ServiceUnavailableError(
            "Network error. Please check your connection and try again.",
            details=details,
            error_code="NETWORK_ERROR",
        )
    if "not found" in lowered or "404" in lowered:
        return ServiceUnavailableError(
            "AI model not found or not supported. Please contact your administrator "
            "to update the model configuration.",
            details=details,
            error_code="MODEL_NOT_FOUND",
        )
    return UnknownServiceError(details or DEFAULT_ERROR_MESSAGE, details=details)


class ExamChatService:
    def __init__(self, generator, api_key: Optional[str], repository=None):
        self.generator = generator
        self.api_key = api_key
        self.repository = repository

    def build_prompt_for(self, request: ChatRequest) -> str:
        question = request.question.strip()
        ref = detect_question_number(question)
        if ref:
            logger.info("Detected question reference %s", ref)

        paper_context = narrow_paper_context(request.paper_content, ref) or request.paper_content
        scheme_context = (
            narrow_marking_scheme_context(request.marking_scheme_content, ref)
            or request.marking_scheme_content
        )
        return build_prompt(question, paper_context, scheme_context)

    def answer(self, request: ChatRequest) -> ChatMessage:
        if not request.question or not request.question.strip():
            raise BadRequestError("Question is required")
        if not self.api_key:
            raise ServiceUnavailableError(API_KEY_MISSING_MESSAGE, error_code="API_KEY_MISSING")

        user_message = ChatMessage(role=ChatRole.USER, content=request.question)
        prompt = self.build_prompt_for(request)

        try:
            text = self.generator.generate(prompt)
        except Exception as e:
            logger.error("Error in exam chat model call: %s", e)
            raise classify_model_error(e) from e

        reply = ChatMessage(
            role=ChatRole.ASSISTANT,
            content=parse_ai_response(text or "").to_content(),
        )

        if request.session_id:
            self._record_exchange(request.session_id, user_message, reply)
        return reply

    def _record_exchange(self, session_id: str, user_message: ChatMessage, reply: ChatMessage) -> None:
        if self.repository is None:
            return
        try:
            if not self.repository.append_messages(session_id, [user_message, reply]):
                logger.warning("Chat session %s not found, exchange not saved", session_id)
        except Exception as e:
            logger.error("Error saving chat history for session %s: %s", session_id, e)

"""
Assistant Routes

API endpoints for AI hints, character facts and question suggestions.
"""

from fastapi import APIRouter, HTTPException

from src.engine import TreeEngineError
from ..models import AssistantKind, AssistantResponse, SuggestQuestionRequest
from ..services.assistant import assistant
from .game import engine_error_to_http, get_session_or_404


router = APIRouter(prefix="/assistant", tags=["assistant"])


async def _ask(session_id: str, kind: AssistantKind, answer: str = "") -> AssistantResponse:
    session = get_session_or_404(session_id)
    try:
        response, _ = await session.request_assistant(assistant, kind, answer)
    except TreeEngineError as e:
        raise engine_error_to_http(e)
    return response


@router.get("/status")
async def assistant_status() -> dict:
    """Whether an LLM provider is reachable."""
    return {"available": await assistant.check_available()}


@router.post("/{session_id}/hint", response_model=AssistantResponse)
async def get_hint(session_id: str) -> AssistantResponse:
    """Hint for the question on screen."""
    return await _ask(session_id, AssistantKind.HINT)


@router.post("/{session_id}/fact", response_model=AssistantResponse)
async def get_fact(session_id: str) -> AssistantResponse:
    """Fun fact about the character being guessed."""
    return await _ask(session_id, AssistantKind.FACT)


@router.post("/{session_id}/suggest-question", response_model=AssistantResponse)
async def suggest_question(session_id: str, request: SuggestQuestionRequest) -> AssistantResponse:
    """Candidate question to tell the player's character from the wrong guess."""
    if not request.answer.strip():
        raise HTTPException(status_code=422, detail="answer must not be empty")
    return await _ask(session_id, AssistantKind.SUGGEST_QUESTION, request.answer)

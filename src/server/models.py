"""
Pydantic Models for the Twenty Questions API

Data transfer objects for the REST API and WebSocket communication.
"""

from pydantic import BaseModel, Field
from typing import Any, Optional
from enum import Enum


# =============================================================================
# Enums
# =============================================================================

class ActionType(str, Enum):
    """Player action types."""
    ANSWER = "answer"
    GUESS = "guess"
    CORRECTION = "correction"
    RESTART = "restart"


class NodeKind(str, Enum):
    """What the cursor is showing."""
    QUESTION = "question"
    ANSWER = "answer"


class AssistantKind(str, Enum):
    """Assistant request types."""
    HINT = "hint"
    FACT = "fact"
    SUGGEST_QUESTION = "suggest_question"


# =============================================================================
# Request Models
# =============================================================================

class AnswerRequest(BaseModel):
    """Yes/no answer to the current question."""
    answer: bool


class GuessRequest(BaseModel):
    """Verdict on the game's guess."""
    correct: bool


class CorrectionRequest(BaseModel):
    """New distinguishing question and the player's character."""
    question: str = Field(default="", description="Yes/no question that is 'yes' for the new character")
    answer: str = Field(default="", description="Who the player's character was")


class SuggestQuestionRequest(BaseModel):
    """Ask the assistant for a distinguishing question."""
    answer: str = Field(..., description="Who the player's character was")


class PlayerActionRequest(BaseModel):
    """Any player action, as sent over Socket.IO."""
    action_type: ActionType
    session_id: str
    value: Optional[bool] = None
    question: str = ""
    answer: str = ""


# =============================================================================
# Response Models
# =============================================================================

class PathStepData(BaseModel):
    """One answered question."""
    question: str
    answer: bool


class GameStateResponse(BaseModel):
    """Everything the presentation layer needs after an action."""
    session_id: str
    state: str
    node_kind: NodeKind
    question: Optional[str] = None
    guess: Optional[str] = None
    question_number: int
    path: list[PathStepData] = Field(default_factory=list)
    games_won: int = 0
    games_learned: int = 0
    revision: int = 0
    message: str = ""


class ActionResultResponse(BaseModel):
    """Response after processing an action."""
    success: bool
    message: str = ""
    new_state: Optional[GameStateResponse] = None


class TreeSummaryResponse(BaseModel):
    """Serialized tree with a few statistics."""
    tree: dict[str, Any]
    questions: int
    answers: int
    depth: int


class CharacterListResponse(BaseModel):
    """Every character the tree can guess."""
    characters: list[str]
    total: int


class AssistantResponse(BaseModel):
    """Result of an assistant request."""
    success: bool
    kind: AssistantKind
    text: Optional[str] = None
    error: Optional[str] = None
    cached: bool = False


# =============================================================================
# WebSocket Event Models
# =============================================================================

class WSJoinGame(BaseModel):
    """WebSocket event to join a game session."""
    session_id: str


class WSAssistantRequest(BaseModel):
    """WebSocket event asking the assistant for help."""
    session_id: str
    kind: AssistantKind
    answer: str = ""

"""
Game Session Management

Manages active game sessions, socket connections and tree persistence.
"""

import asyncio
from dataclasses import dataclass, field
from typing import Optional
from uuid import uuid4
import logging

from src.engine import (
    Game, GameState, Node, Outcome, Signal,
    AnswerNode, TreeEngineError, InvalidStateError,
    describe_path,
)

from .models import (
    GameStateResponse, PathStepData, NodeKind, ActionType,
    PlayerActionRequest, AssistantKind, AssistantResponse,
)
from .services.tree_storage import TreeStore, default_store, load_or_seed
from .services.assistant import AssistantService

logger = logging.getLogger(__name__)


def generate_id() -> str:
    """Generate a short unique ID."""
    return str(uuid4())[:8]


@dataclass
class GameSession:
    """
    Manages a single game session.

    Wraps the engine Game and provides:
    - Socket tracking
    - State serialization for clients
    - Persistence of the tree after every correction
    - Assistant requests tagged with the game revision
    """
    id: str
    game: Game
    store: TreeStore

    # socket ids watching this session
    sockets: set[str] = field(default_factory=set)

    def connect_socket(self, socket_id: str) -> None:
        self.sockets.add(socket_id)

    def disconnect_socket(self, socket_id: str) -> bool:
        """Forget a socket. Returns True if it was connected."""
        if socket_id in self.sockets:
            self.sockets.discard(socket_id)
            return True
        return False

    # -------------------------------------------------------------------------
    # Client state
    # -------------------------------------------------------------------------

    def get_client_state(self, message: str = "") -> GameStateResponse:
        """Serialize the session for the presentation layer."""
        game = self.game
        is_guess = isinstance(game.cursor, AnswerNode)
        return GameStateResponse(
            session_id=self.id,
            state=game.state.value,
            node_kind=NodeKind.ANSWER if is_guess else NodeKind.QUESTION,
            question=game.current_question,
            guess=game.current_answer,
            question_number=game.question_number,
            path=[
                PathStepData(question=question, answer=choice)
                for question, choice in describe_path(game.path)
            ],
            games_won=game.games_won,
            games_learned=game.games_learned,
            revision=game.revision,
            message=message,
        )

    # -------------------------------------------------------------------------
    # Actions
    # -------------------------------------------------------------------------

    def answer(self, is_yes: bool) -> str:
        outcome = self.game.answer(is_yes)
        if outcome == Outcome.PRESENT:
            return f"Is your character {self.game.current_answer}?"
        if self.game.state == GameState.GUESSING:
            return f"I think I know! Is it {self.game.current_answer}?"
        return ""

    def confirm_guess(self, is_correct: bool) -> str:
        signal = self.game.confirm_guess(is_correct)
        if signal == Signal.RESET:
            # pick up what other sessions taught during this round
            self.game.reset_tree(load_or_seed(self.store))
            return "Yay! I guessed correctly!"
        return "Help me learn! Add a new question to distinguish your character."

    def submit_correction(self, question: str, answer: str) -> str:
        """
        Teach the tree and persist it.

        The correction is applied to the latest stored tree so that
        characters taught by other sessions are kept. Nothing is saved if
        the engine rejects it.
        """
        self.game.rebase(load_or_seed(self.store))
        tree = self.game.insert_correction(question, answer)
        self.store.save(tree)
        logger.info("Session %s taught the tree %r", self.id, answer.strip())
        return f"Thanks! I'll remember {answer.strip()}."

    def restart(self) -> str:
        """Start a new round on the latest stored tree."""
        self.game.reset_tree(load_or_seed(self.store))
        return ""

    def reset_tree(self, tree: Node) -> None:
        self.game.reset_tree(tree)

    def handle_action(self, request: PlayerActionRequest) -> tuple[bool, str]:
        """
        Apply one player action.

        Returns:
            (success, message). Engine errors are reported, not raised.
        """
        try:
            if request.action_type == ActionType.ANSWER:
                if request.value is None:
                    return False, "value required"
                return True, self.answer(request.value)
            if request.action_type == ActionType.GUESS:
                if request.value is None:
                    return False, "value required"
                return True, self.confirm_guess(request.value)
            if request.action_type == ActionType.CORRECTION:
                return True, self.submit_correction(request.question, request.answer)
            if request.action_type == ActionType.RESTART:
                return True, self.restart()
        except TreeEngineError as e:
            logger.debug("Session %s rejected %s: %s", self.id, request.action_type.value, e)
            return False, str(e)
        return False, f"Unknown action: {request.action_type}"

    # -------------------------------------------------------------------------
    # Assistant
    # -------------------------------------------------------------------------

    async def request_assistant(
        self,
        service: AssistantService,
        kind: AssistantKind,
        answer: str = ""
    ) -> tuple[AssistantResponse, bool]:
        """
        Ask the assistant about the current position.

        Returns:
            (response, is_current). `is_current` is False when the game moved
            on while the assistant was thinking.
        """
        game = self.game
        revision = game.revision
        history = describe_path(game.path)

        if kind == AssistantKind.HINT:
            if game.current_question is None:
                raise InvalidStateError("Hints are only available while a question is on screen")
            result = await service.hint(game.current_question, history)
            text_key = "hint"
        elif kind == AssistantKind.FACT:
            if game.current_answer is None:
                raise InvalidStateError("Facts are only available for a guess")
            result = await service.fact(game.current_answer)
            text_key = "fact"
        else:
            if game.state != GameState.LEARNING:
                raise InvalidStateError("Question suggestions are only available after a wrong guess")
            result = await service.suggest_question(game.current_answer, answer, history)
            text_key = "question"

        response = AssistantResponse(
            success=result.get("success", False),
            kind=kind,
            text=result.get(text_key),
            error=result.get("error"),
            cached=result.get("cached", False),
        )
        return response, game.revision == revision


class SessionManager:
    """
    Manages all active game sessions.
    """

    def __init__(self, store: Optional[TreeStore] = None):
        self.store = store or default_store()
        self.sessions: dict[str, GameSession] = {}
        self._lock = asyncio.Lock()

    async def create_session(self) -> GameSession:
        """Create a new game session on the stored tree."""
        async with self._lock:
            session_id = generate_id()
            game = Game(load_or_seed(self.store))
            session = GameSession(id=session_id, game=game, store=self.store)
            self.sessions[session_id] = session
            logger.info("Created session %s", session_id)
            return session

    def get_session(self, session_id: str) -> Optional[GameSession]:
        """Get a session by ID."""
        return self.sessions.get(session_id)

    async def remove_session(self, session_id: str) -> None:
        """Remove a session."""
        async with self._lock:
            if session_id in self.sessions:
                del self.sessions[session_id]

    def get_session_by_socket(self, socket_id: str) -> Optional[GameSession]:
        """Find the session a socket is watching."""
        for session in self.sessions.values():
            if socket_id in session.sockets:
                return session
        return None

    async def reset_tree(self, tree: Node) -> None:
        """Store `tree` and move every live session onto it."""
        async with self._lock:
            self.store.clear()
            self.store.save(tree)
            for session in self.sessions.values():
                session.reset_tree(tree)
        logger.info("Tree reset; %d live session(s) restarted", len(self.sessions))


# Global session manager instance
session_manager = SessionManager()

"""
Game Routes

Endpoints for creating game sessions, playing them, and managing the tree.
"""

from fastapi import APIRouter, HTTPException

from src.engine import (
    TreeEngineError, MalformedTreeError, NoDivergencePointError,
    InvalidInputError, InvalidStateError,
    serialize, known_answers, count_nodes, tree_depth, seed_tree,
)
from ..session import session_manager, GameSession
from ..services.tree_storage import load_or_seed
from ..models import (
    AnswerRequest, GuessRequest, CorrectionRequest,
    ActionResultResponse, GameStateResponse,
    TreeSummaryResponse, CharacterListResponse,
)

router = APIRouter(tags=["game"])


def engine_error_to_http(error: TreeEngineError) -> HTTPException:
    """Map an engine error onto an HTTP status."""
    if isinstance(error, InvalidInputError):
        return HTTPException(status_code=422, detail=str(error))
    if isinstance(error, (NoDivergencePointError, InvalidStateError)):
        return HTTPException(status_code=409, detail=str(error))
    if isinstance(error, MalformedTreeError):
        return HTTPException(
            status_code=500,
            detail=f"{error}. Reset the tree with POST /api/tree/reset."
        )
    return HTTPException(status_code=400, detail=str(error))


def get_session_or_404(session_id: str) -> GameSession:
    session = session_manager.get_session(session_id)
    if not session:
        raise HTTPException(status_code=404, detail="Game not found")
    return session


def _run(session: GameSession, action, *args) -> ActionResultResponse:
    try:
        message = action(*args)
    except TreeEngineError as e:
        raise engine_error_to_http(e)
    return ActionResultResponse(
        success=True,
        message=message,
        new_state=session.get_client_state(message)
    )


# =============================================================================
# Sessions
# =============================================================================

@router.post("/game/create", response_model=GameStateResponse)
async def create_game() -> GameStateResponse:
    """Start a new game on the current tree."""
    session = await session_manager.create_session()
    return session.get_client_state("Think of a character and answer my questions!")


@router.get("/game/{session_id}", response_model=GameStateResponse)
async def get_game(session_id: str) -> GameStateResponse:
    """Get the current state of a game."""
    return get_session_or_404(session_id).get_client_state()


@router.post("/game/{session_id}/answer", response_model=ActionResultResponse)
async def answer_question(session_id: str, request: AnswerRequest) -> ActionResultResponse:
    """Answer the question on screen."""
    session = get_session_or_404(session_id)
    return _run(session, session.answer, request.answer)


@router.post("/game/{session_id}/guess", response_model=ActionResultResponse)
async def confirm_guess(session_id: str, request: GuessRequest) -> ActionResultResponse:
    """Tell the game whether its guess was right."""
    session = get_session_or_404(session_id)
    return _run(session, session.confirm_guess, request.correct)


@router.post("/game/{session_id}/correction", response_model=ActionResultResponse)
async def submit_correction(session_id: str, request: CorrectionRequest) -> ActionResultResponse:
    """Teach the game a new character after a wrong guess."""
    session = get_session_or_404(session_id)
    return _run(session, session.submit_correction, request.question, request.answer)


@router.post("/game/{session_id}/restart", response_model=ActionResultResponse)
async def restart_game(session_id: str) -> ActionResultResponse:
    """Go back to the first question."""
    session = get_session_or_404(session_id)
    return _run(session, session.restart)


@router.delete("/game/{session_id}")
async def delete_game(session_id: str) -> dict:
    """End a game session."""
    get_session_or_404(session_id)
    await session_manager.remove_session(session_id)
    return {"success": True, "session_id": session_id}


# =============================================================================
# Tree
# =============================================================================

@router.get("/tree", response_model=TreeSummaryResponse)
async def get_tree() -> TreeSummaryResponse:
    """The stored tree, serialized, with node counts."""
    tree = load_or_seed(session_manager.store)
    counts = count_nodes(tree)
    return TreeSummaryResponse(
        tree=serialize(tree),
        questions=counts["questions"],
        answers=counts["answers"],
        depth=tree_depth(tree),
    )


@router.get("/tree/characters", response_model=CharacterListResponse)
async def list_characters() -> CharacterListResponse:
    """Every character the game can currently guess."""
    characters = known_answers(load_or_seed(session_manager.store))
    return CharacterListResponse(characters=characters, total=len(characters))


@router.post("/tree/reset", response_model=TreeSummaryResponse)
async def reset_tree() -> TreeSummaryResponse:
    """Forget everything learned and go back to the seed tree."""
    await session_manager.reset_tree(seed_tree())
    return await get_tree()

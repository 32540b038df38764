"""
Twenty Questions API Server

FastAPI application with Socket.IO for real-time game updates.
"""

import asyncio
import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
import socketio

from src.engine import TreeEngineError
from .routes import game_router, assistant_router
from .session import session_manager, GameSession
from .services.assistant import assistant
from .models import WSJoinGame, WSAssistantRequest, PlayerActionRequest

logger = logging.getLogger(__name__)


# =============================================================================
# Socket.IO Setup
# =============================================================================

sio = socketio.AsyncServer(
    async_mode='asgi',
    cors_allowed_origins='*',
    logger=False,
    engineio_logger=False
)

# Assistant tasks in flight, kept referenced until they finish
_assistant_tasks: set[asyncio.Task] = set()


async def broadcast_state(session: GameSession, message: str = "") -> None:
    """Push the session state to every socket watching it."""
    state = session.get_client_state(message)
    await sio.emit('game_state', state.model_dump(mode='json'), room=f"game_{session.id}")


@sio.event
async def connect(sid, environ):
    """Handle client connection."""
    logger.info("Client connected: %s", sid)
    await sio.emit('connected', {'sid': sid}, to=sid)


@sio.event
async def disconnect(sid):
    """Handle client disconnection."""
    logger.info("Client disconnected: %s", sid)
    session = session_manager.get_session_by_socket(sid)
    if session:
        session.disconnect_socket(sid)


@sio.event
async def join_game(sid, data):
    """
    Join a game session room.

    Expected data: { session_id: string }
    """
    try:
        session_id = WSJoinGame(**(data or {})).session_id
    except ValueError:
        session_id = ""
    if not session_id:
        await sio.emit('error', {'message': 'session_id required'}, to=sid)
        return

    session = session_manager.get_session(session_id)
    if not session:
        await sio.emit('error', {'message': 'Game not found'}, to=sid)
        return

    session.connect_socket(sid)
    await sio.enter_room(sid, f"game_{session_id}")
    state = session.get_client_state()
    await sio.emit('game_state', state.model_dump(mode='json'), to=sid)


@sio.event
async def player_action(sid, data):
    """
    Handle a player action via WebSocket.

    Expected data: PlayerActionRequest format
    """
    try:
        request = PlayerActionRequest(**(data or {}))
    except ValueError as e:
        await sio.emit('action_error', {'success': False, 'message': str(e)}, to=sid)
        return

    session = session_manager.get_session(request.session_id)
    if not session:
        await sio.emit('error', {'message': 'Game not found'}, to=sid)
        return

    success, message = session.handle_action(request)
    if success:
        await broadcast_state(session, message)
    else:
        await sio.emit('action_error', {'success': False, 'message': message}, to=sid)


async def _deliver_assistant_result(sid: str, session: GameSession, request: WSAssistantRequest) -> None:
    try:
        response, is_current = await session.request_assistant(
            assistant, request.kind, request.answer
        )
    except TreeEngineError as e:
        await sio.emit('action_error', {'success': False, 'message': str(e)}, to=sid)
        return

    if not is_current:
        logger.warning(
            "Dropping late %s result for session %s", request.kind.value, session.id
        )
        return
    await sio.emit('assistant_result', response.model_dump(mode='json'), to=sid)


@sio.event
async def request_assistant(sid, data):
    """
    Ask the assistant for help without blocking the game.

    Expected data: { session_id: string, kind: "hint"|"fact"|"suggest_question", answer?: string }
    The result arrives later as `assistant_result`, unless the game has moved on.
    """
    try:
        request = WSAssistantRequest(**(data or {}))
    except ValueError as e:
        await sio.emit('action_error', {'success': False, 'message': str(e)}, to=sid)
        return

    session = session_manager.get_session(request.session_id)
    if not session:
        await sio.emit('error', {'message': 'Game not found'}, to=sid)
        return

    task = asyncio.create_task(_deliver_assistant_result(sid, session, request))
    _assistant_tasks.add(task)
    task.add_done_callback(_assistant_tasks.discard)


# =============================================================================
# FastAPI Application
# =============================================================================

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    logger.info("Twenty Questions API Server starting...")
    yield
    for task in list(_assistant_tasks):
        task.cancel()
    logger.info("Twenty Questions API Server shutting down...")


app = FastAPI(
    title="Twenty Questions API",
    description="A guessing game that learns new characters from its mistakes",
    version="1.0.0",
    lifespan=lifespan
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # In production, restrict to your frontend URL
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Mount routers
app.include_router(game_router, prefix="/api")
app.include_router(assistant_router, prefix="/api")


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {
        "status": "healthy",
        "service": "twentyq-api",
        "sessions": len(session_manager.sessions)
    }


@app.get("/")
async def root():
    """Root endpoint with API info."""
    return {
        "name": "Twenty Questions API",
        "version": "1.0.0",
        "docs": "/docs",
        "health": "/health"
    }


# Mount Socket.IO
socket_app = socketio.ASGIApp(sio, app)


def create_app():
    """Create the ASGI application."""
    return socket_app


if __name__ == "__main__":
    import uvicorn
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s"
    )
    uvicorn.run(
        "src.server.main:socket_app",
        host="0.0.0.0",
        port=8000,
        reload=True
    )

"""
API Routes
"""

from .game import router as game_router
from .assistant import router as assistant_router

__all__ = ['game_router', 'assistant_router']

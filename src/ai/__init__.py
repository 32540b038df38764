"""
Twenty Questions AI

Language-model helpers for the assistant variant of the game: hints while
answering, facts about a guessed character, and candidate questions when the
tree has to learn someone new.
"""

from . import llm

__all__ = ['llm']

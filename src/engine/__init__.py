"""
Twenty Questions Engine

A binary decision tree that learns new characters from wrong guesses.

Core pieces:
- Types: QuestionNode / AnswerNode tagged variant, PathStep, state enums
- Tree: traversal, copy-on-write correction, serialization
- Game: per-session state machine (playing, guessing, learning)
"""

from .types import (
    AnswerNode, QuestionNode, Node,
    PathStep, Path,
    Outcome, Signal, GameState,
)

from .errors import (
    TreeEngineError,
    MalformedTreeError,
    NoDivergencePointError,
    InvalidInputError,
    InvalidStateError,
)

from .tree import (
    SEED_TREE, seed_tree,
    advance, confirm_guess, follow, insert_correction,
    serialize, deserialize,
    iter_answers, known_answers, tree_depth, count_nodes, describe_path,
)

from .game import Game

__all__ = [
    # Types
    'AnswerNode', 'QuestionNode', 'Node', 'PathStep', 'Path',
    'Outcome', 'Signal', 'GameState',

    # Errors
    'TreeEngineError', 'MalformedTreeError', 'NoDivergencePointError',
    'InvalidInputError', 'InvalidStateError',

    # Tree operations
    'SEED_TREE', 'seed_tree', 'advance', 'confirm_guess', 'follow',
    'insert_correction', 'serialize', 'deserialize',
    'iter_answers', 'known_answers', 'tree_depth', 'count_nodes', 'describe_path',

    # Session
    'Game',
]

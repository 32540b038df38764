"""
Decision Tree Core Types

A tree is a root Node. A Node is exactly one of QuestionNode or AnswerNode.
Nodes are frozen, so every correction builds a new root and shares the
untouched subtrees with the previous tree.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Union


# =============================================================================
# Nodes
# =============================================================================

@dataclass(frozen=True)
class AnswerNode:
    """Terminal node holding a candidate guess."""
    answer: str


@dataclass(frozen=True)
class QuestionNode:
    """Internal node holding a yes/no question and both children."""
    question: str
    yes: 'Node'
    no: 'Node'

    def child(self, choice: bool) -> 'Node':
        return self.yes if choice else self.no


Node = Union[QuestionNode, AnswerNode]


# =============================================================================
# Path
# =============================================================================

@dataclass(frozen=True)
class PathStep:
    """A visited question node and the branch taken (True = yes)."""
    node: QuestionNode
    choice: bool


Path = tuple[PathStep, ...]


# =============================================================================
# Outcomes and States
# =============================================================================

class Outcome(str, Enum):
    """Result of advancing the cursor."""
    CONTINUE = "continue"   # moved to a child
    PRESENT = "present"     # cursor is a guess awaiting confirmation


class Signal(str, Enum):
    """Result of confirming a guess."""
    RESET = "reset"
    LEARN = "learn"


class GameState(str, Enum):
    """Session state tag sent to the presentation layer."""
    PLAYING = "playing"
    GUESSING = "guessing"
    LEARNING = "learning"
    RESOLVED = "resolved"

"""
Guessing Game Session

State machine for one player working through the tree:

    PLAYING -> GUESSING -> RESOLVED -> PLAYING
               GUESSING -> LEARNING -> PLAYING

The Game owns the tree, the cursor and the path. It performs no I/O; the
server session persists `tree` after a successful correction.
"""

import logging
from typing import Optional

from . import tree as ops
from .errors import InvalidStateError, MalformedTreeError
from .types import AnswerNode, GameState, Node, Outcome, Path, QuestionNode, Signal

logger = logging.getLogger(__name__)


class Game:
    """
    A single guessing session over a decision tree.

    Wraps the pure tree operations and enforces which moves are legal in
    which state.
    """

    def __init__(self, tree: Optional[Node] = None):
        self._tree: Node = tree if tree is not None else ops.seed_tree()
        self._cursor: Node = self._tree
        self._path: Path = ()
        self._state = GameState.PLAYING
        self.games_won = 0
        self.games_learned = 0
        # Bumped on every transition so late assistant results can be dropped.
        self.revision = 0
        self._enter_cursor()

    # -------------------------------------------------------------------------
    # Read-only accessors
    # -------------------------------------------------------------------------

    @property
    def tree(self) -> Node:
        return self._tree

    @property
    def cursor(self) -> Node:
        return self._cursor

    @property
    def path(self) -> Path:
        return self._path

    @property
    def state(self) -> GameState:
        return self._state

    @property
    def question_number(self) -> int:
        """1-based number of the question on screen."""
        return len(self._path) + 1

    @property
    def current_question(self) -> Optional[str]:
        if isinstance(self._cursor, QuestionNode):
            return self._cursor.question
        return None

    @property
    def current_answer(self) -> Optional[str]:
        if isinstance(self._cursor, AnswerNode):
            return self._cursor.answer
        return None

    # -------------------------------------------------------------------------
    # Transitions
    # -------------------------------------------------------------------------

    def answer(self, is_yes: bool) -> Outcome:
        """
        Answer the question under the cursor.

        Moving onto an answer node switches the session to GUESSING. Answering
        while a guess is on screen is a no-op that reports Outcome.PRESENT.
        """
        if self._state == GameState.LEARNING:
            raise InvalidStateError("Waiting for a new question and answer")

        cursor, path, outcome = ops.advance(self._cursor, self._path, is_yes)
        if outcome == Outcome.CONTINUE:
            self._cursor = cursor
            self._path = path
            self._enter_cursor()
            self._touch()
            logger.debug("Advanced to question %d", self.question_number)
        return outcome

    def confirm_guess(self, is_correct: bool) -> Signal:
        """Accept or reject the guess on screen."""
        if self._state != GameState.GUESSING:
            raise InvalidStateError("There is no guess to confirm")

        signal = ops.confirm_guess(is_correct)
        if signal == Signal.RESET:
            self._state = GameState.RESOLVED
            self.games_won += 1
            logger.info("Guessed %r correctly", self.current_answer)
            self.restart()
        else:
            self._state = GameState.LEARNING
            self._touch()
        return signal

    def insert_correction(self, new_question: str, new_answer: str) -> Node:
        """
        Teach the tree a new character after a wrong guess.

        On success the new tree replaces the old one and the session returns
        to the root. On any error nothing changes.
        """
        if self._state != GameState.LEARNING:
            raise InvalidStateError("Corrections are only accepted after a wrong guess")

        new_tree = ops.insert_correction(
            self._tree, self._path, self._cursor, new_question, new_answer
        )
        self._tree = new_tree
        self.games_learned += 1
        logger.info(
            "Learned %r at depth %d", new_answer.strip(), len(self._path)
        )
        self.restart()
        return new_tree

    def rebase(self, tree: Node) -> None:
        """
        Move a pending correction onto a newer copy of the tree.

        The session's choices are replayed on `tree`. The questions asked
        and the guess reached must be the same as before, otherwise the
        position no longer exists and InvalidStateError is raised with
        nothing changed.
        """
        if self._state != GameState.LEARNING:
            raise InvalidStateError("Corrections are only accepted after a wrong guess")

        try:
            cursor, path = ops.follow(tree, [step.choice for step in self._path])
        except MalformedTreeError as e:
            raise InvalidStateError("The tree changed during this round; please start again") from e

        if ops.describe_path(path) != ops.describe_path(self._path) or cursor != self._cursor:
            raise InvalidStateError("The tree changed during this round; please start again")

        self._tree = tree
        self._cursor = cursor
        self._path = path

    def restart(self) -> None:
        """Return to the root with an empty path."""
        self._cursor = self._tree
        self._path = ()
        self._enter_cursor()
        self._touch()

    def reset_tree(self, tree: Optional[Node] = None) -> None:
        """Replace the tree (the seed by default) and restart."""
        self._tree = tree if tree is not None else ops.seed_tree()
        self.restart()

    # -------------------------------------------------------------------------
    # Helpers
    # -------------------------------------------------------------------------

    def _enter_cursor(self) -> None:
        if isinstance(self._cursor, AnswerNode):
            self._state = GameState.GUESSING
        elif isinstance(self._cursor, QuestionNode):
            self._state = GameState.PLAYING
        else:
            raise MalformedTreeError(f"Cursor is not a tree node: {self._cursor!r}")

    def _touch(self) -> None:
        self.revision += 1

"""
Decision Tree Engine Errors

Every failure the engine can report. The server maps these onto HTTP status
codes and Socket.IO `action_error` messages.
"""


class TreeEngineError(Exception):
    """Base class for all engine errors."""


class MalformedTreeError(TreeEngineError):
    """A reachable node is neither a question nor an answer node."""


class NoDivergencePointError(TreeEngineError):
    """A correction was attempted before any question was answered."""

    def __init__(self, message: str = "Nothing to correct yet"):
        super().__init__(message)


class InvalidInputError(TreeEngineError):
    """Correction text is empty or otherwise unusable."""


class InvalidStateError(TreeEngineError):
    """The action is not legal in the session's current state."""

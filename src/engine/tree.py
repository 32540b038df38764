"""
Decision Tree Operations

Traversal, correction and serialization for the guessing tree.

Everything here is pure: functions take a tree (or a cursor and a path) and
return new values. Nothing touches storage or the network.
"""

from typing import Any, Iterator

from .errors import InvalidInputError, MalformedTreeError, NoDivergencePointError
from .types import AnswerNode, Node, Outcome, Path, PathStep, QuestionNode, Signal


# =============================================================================
# Seed
# =============================================================================

SEED_TREE: Node = QuestionNode(
    question="Is your character from a cartoon?",
    yes=QuestionNode(
        question="Is your character an animal?",
        yes=QuestionNode(
            question="Is your character a mouse?",
            yes=AnswerNode("Mickey Mouse"),
            no=AnswerNode("Donald Duck"),
        ),
        no=AnswerNode("Homer Simpson"),
    ),
    no=AnswerNode("Superman"),
)


def seed_tree() -> Node:
    """Return the tree every new store starts from."""
    return SEED_TREE


# =============================================================================
# Traversal
# =============================================================================

def advance(cursor: Node, path: Path, is_yes: bool) -> tuple[Node, Path, Outcome]:
    """
    Move the cursor one step down the tree.

    Args:
        cursor: Node currently presented to the player
        path: Steps taken from the root to `cursor`
        is_yes: The player's answer

    Returns:
        (new_cursor, new_path, outcome). An answer cursor is returned as-is
        with Outcome.PRESENT so the caller can ask for confirmation.
    """
    if isinstance(cursor, QuestionNode):
        step = PathStep(node=cursor, choice=is_yes)
        return cursor.child(is_yes), tuple(path) + (step,), Outcome.CONTINUE
    if isinstance(cursor, AnswerNode):
        return cursor, path, Outcome.PRESENT
    raise MalformedTreeError(f"Cursor is not a tree node: {cursor!r}")


def confirm_guess(is_correct: bool) -> Signal:
    """Map the player's verdict on a guess to the next session move."""
    return Signal.RESET if is_correct else Signal.LEARN


def follow(tree: Node, choices: list[bool]) -> tuple[Node, Path]:
    """Walk `choices` from the root, returning the reached node and its path."""
    cursor: Node = tree
    path: Path = ()
    for choice in choices:
        if not isinstance(cursor, QuestionNode):
            raise MalformedTreeError("Path continues past an answer node")
        cursor, path, _ = advance(cursor, path, choice)
    return cursor, path


# =============================================================================
# Correction
# =============================================================================

def _clean(text: Any, field_name: str) -> str:
    if not isinstance(text, str) or not text.strip():
        raise InvalidInputError(f"{field_name} must not be empty")
    return text.strip()


def _same_node(a: Node, b: Node) -> bool:
    return a is b or a == b


def insert_correction(
    tree: Node,
    path: Path,
    current: Node,
    new_question: str,
    new_answer: str
) -> Node:
    """
    Insert a distinguishing question where the wrong guess was made.

    The wrong guess `current` moves to the "no" branch of a new question whose
    "yes" branch is the player's character. Every ancestor along `path` is
    rebuilt with its chosen child swapped; all other subtrees are shared with
    the old tree.

    Args:
        tree: Root of the current tree
        path: Steps from the root to `current`
        current: The answer node that was guessed wrongly
        new_question: Question that is "yes" for the new character
        new_answer: The player's character

    Returns:
        Root of the corrected tree. `tree` itself is never modified.

    Raises:
        InvalidInputError: empty question/answer, or `current` is not a guess
        NoDivergencePointError: `path` is empty
        MalformedTreeError: `path` does not lead from `tree` to `current`
    """
    question = _clean(new_question, "Question")
    answer = _clean(new_answer, "Answer")
    if not isinstance(current, AnswerNode):
        raise InvalidInputError("Only a guessed answer can be corrected")
    if not path:
        raise NoDivergencePointError()

    replacement = QuestionNode(question=question, yes=AnswerNode(answer), no=current)
    return _rebuild(tree, path, 0, current, replacement)


def _rebuild(
    node: Node,
    path: Path,
    index: int,
    current: AnswerNode,
    replacement: QuestionNode
) -> Node:
    step = path[index]
    if not isinstance(node, QuestionNode) or not _same_node(node, step.node):
        raise MalformedTreeError(
            f"Path step {index} does not match the tree "
            f"(expected {step.node.question!r})"
        )

    child = node.child(step.choice)
    if index == len(path) - 1:
        if not _same_node(child, current):
            raise MalformedTreeError("Path does not end at the guessed answer")
        new_child: Node = replacement
    else:
        new_child = _rebuild(child, path, index + 1, current, replacement)

    if step.choice:
        return QuestionNode(question=node.question, yes=new_child, no=node.no)
    return QuestionNode(question=node.question, yes=node.yes, no=new_child)


# =============================================================================
# Serialization
# =============================================================================

def serialize(tree: Node) -> dict:
    """Convert a tree into nested plain dicts."""
    if isinstance(tree, AnswerNode):
        return {"answer": tree.answer}
    if isinstance(tree, QuestionNode):
        return {
            "question": tree.question,
            "yes": serialize(tree.yes),
            "no": serialize(tree.no),
        }
    raise MalformedTreeError(f"Not a tree node: {tree!r}")


def deserialize(blob: Any) -> Node:
    """
    Rebuild a tree from `serialize` output.

    Raises MalformedTreeError for anything that is not exactly one of the two
    node shapes, at any depth.
    """
    if not isinstance(blob, dict):
        raise MalformedTreeError(f"Expected an object, got {type(blob).__name__}")

    has_question = "question" in blob
    has_answer = "answer" in blob
    if has_question == has_answer:
        raise MalformedTreeError("Node must have exactly one of 'question' or 'answer'")

    if has_answer:
        if not isinstance(blob["answer"], str):
            raise MalformedTreeError("Answer text must be a string")
        return AnswerNode(blob["answer"])

    if not isinstance(blob["question"], str):
        raise MalformedTreeError("Question text must be a string")
    if blob.get("yes") is None or blob.get("no") is None:
        raise MalformedTreeError(f"Question {blob['question']!r} is missing a branch")
    return QuestionNode(
        question=blob["question"],
        yes=deserialize(blob["yes"]),
        no=deserialize(blob["no"]),
    )


# =============================================================================
# Queries
# =============================================================================

def iter_answers(tree: Node) -> Iterator[AnswerNode]:
    """Yield answer leaves, yes-branches first."""
    stack = [tree]
    while stack:
        node = stack.pop()
        if isinstance(node, QuestionNode):
            stack.append(node.no)
            stack.append(node.yes)
        elif isinstance(node, AnswerNode):
            yield node
        else:
            raise MalformedTreeError(f"Not a tree node: {node!r}")


def known_answers(tree: Node) -> list[str]:
    """Every character the tree can currently guess."""
    return [leaf.answer for leaf in iter_answers(tree)]


def tree_depth(tree: Node) -> int:
    """Number of questions on the longest root-to-leaf path."""
    if isinstance(tree, QuestionNode):
        return 1 + max(tree_depth(tree.yes), tree_depth(tree.no))
    return 0


def count_nodes(tree: Node) -> dict[str, int]:
    """Count question and answer nodes."""
    if isinstance(tree, AnswerNode):
        return {"questions": 0, "answers": 1}
    yes = count_nodes(tree.yes)
    no = count_nodes(tree.no)
    return {
        "questions": 1 + yes["questions"] + no["questions"],
        "answers": yes["answers"] + no["answers"],
    }


def describe_path(path: Path) -> list[tuple[str, bool]]:
    """(question, choice) pairs for prompts and client payloads."""
    return [(step.node.question, step.choice) for step in path]

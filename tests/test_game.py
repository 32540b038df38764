"""
Game Session State Machine Tests
"""

import pytest

from src.engine import (
    Game, GameState, Outcome, Signal,
    AnswerNode, QuestionNode,
    InvalidStateError, InvalidInputError, NoDivergencePointError, MalformedTreeError,
    SEED_TREE, serialize,
)


def test_new_game_starts_playing_at_root():
    game = Game()

    assert game.state == GameState.PLAYING
    assert game.tree is SEED_TREE
    assert game.cursor is SEED_TREE
    assert game.path == ()
    assert game.question_number == 1
    assert game.current_question == "Is your character from a cartoon?"
    assert game.current_answer is None


def test_reaching_an_answer_enters_guessing():
    game = Game()
    assert game.answer(True) == Outcome.CONTINUE
    assert game.state == GameState.PLAYING
    assert game.question_number == 2

    assert game.answer(False) == Outcome.CONTINUE
    assert game.state == GameState.GUESSING
    assert game.current_answer == "Homer Simpson"
    assert game.current_question is None


def test_answering_while_guessing_presents_the_guess_again():
    game = Game()
    game.answer(False)
    revision = game.revision

    assert game.answer(True) == Outcome.PRESENT
    assert game.state == GameState.GUESSING
    assert len(game.path) == 1
    assert game.revision == revision


@pytest.mark.parametrize("choices", [[False], [True, False], [True, True, True]])
def test_correct_guess_resets_to_root(choices):
    game = Game()
    for choice in choices:
        game.answer(choice)

    assert game.confirm_guess(True) == Signal.RESET

    assert game.state == GameState.PLAYING
    assert game.path == ()
    assert game.cursor is game.tree
    assert game.games_won == 1


def test_wrong_guess_enters_learning_without_mutation():
    game = Game()
    game.answer(False)

    assert game.confirm_guess(False) == Signal.LEARN

    assert game.state == GameState.LEARNING
    assert game.tree is SEED_TREE
    assert game.current_answer == "Superman"


def test_confirm_guess_outside_guessing_is_rejected():
    game = Game()
    with pytest.raises(InvalidStateError):
        game.confirm_guess(True)


def test_answer_while_learning_is_rejected():
    game = Game()
    game.answer(False)
    game.confirm_guess(False)

    with pytest.raises(InvalidStateError):
        game.answer(True)


def test_correction_replaces_tree_and_restarts():
    game = Game()
    game.answer(True)
    game.answer(False)
    game.confirm_guess(False)

    new_tree = game.insert_correction("Is he yellow?", "Bart Simpson")

    assert game.tree is new_tree
    assert game.state == GameState.PLAYING
    assert game.cursor is new_tree
    assert game.path == ()
    assert game.games_learned == 1
    assert serialize(new_tree.yes.no) == {
        "question": "Is he yellow?",
        "yes": {"answer": "Bart Simpson"},
        "no": {"answer": "Homer Simpson"},
    }

    # The new question is asked next time round
    game.answer(True)
    game.answer(False)
    assert game.current_question == "Is he yellow?"
    game.answer(True)
    assert game.current_answer == "Bart Simpson"


def test_correction_outside_learning_is_rejected():
    game = Game()
    with pytest.raises(InvalidStateError):
        game.insert_correction("Is he yellow?", "Bart Simpson")


def test_invalid_correction_leaves_state_unchanged():
    game = Game()
    game.answer(False)
    game.confirm_guess(False)
    path, cursor, revision = game.path, game.cursor, game.revision

    with pytest.raises(InvalidInputError):
        game.insert_correction("", "Batman")

    assert game.state == GameState.LEARNING
    assert game.tree is SEED_TREE
    assert game.path == path
    assert game.cursor is cursor
    assert game.revision == revision


def test_single_answer_root_cannot_be_corrected():
    root = AnswerNode("Superman")
    game = Game(root)
    assert game.state == GameState.GUESSING

    game.confirm_guess(False)
    with pytest.raises(NoDivergencePointError):
        game.insert_correction("Can he fly?", "Batman")

    assert game.tree is root
    assert game.state == GameState.LEARNING


def test_restart_and_reset_tree():
    game = Game()
    game.answer(False)
    game.restart()
    assert game.path == ()
    assert game.state == GameState.PLAYING

    small = QuestionNode("Is it real?", yes=AnswerNode("Einstein"), no=AnswerNode("Zeus"))
    game.reset_tree(small)
    assert game.tree is small
    assert game.current_question == "Is it real?"

    game.reset_tree()
    assert game.tree is SEED_TREE


def test_revision_increases_on_transitions():
    game = Game()
    seen = [game.revision]
    game.answer(False)
    seen.append(game.revision)
    game.confirm_guess(False)
    seen.append(game.revision)
    game.insert_correction("Can he fly?", "Batman")
    seen.append(game.revision)

    assert seen == sorted(seen)
    assert len(set(seen)) == len(seen)


def test_malformed_root_is_rejected():
    with pytest.raises(MalformedTreeError):
        Game({"answer": "not a node"})


def test_rebase_moves_pending_correction_onto_newer_tree():
    game = Game()
    game.answer(False)
    game.confirm_guess(False)

    newer = QuestionNode(
        "Is your character from a cartoon?",
        yes=QuestionNode("Is he yellow?", yes=AnswerNode("Bart Simpson"), no=SEED_TREE.yes),
        no=AnswerNode("Superman"),
    )
    game.rebase(newer)

    assert game.tree is newer
    assert game.state == GameState.LEARNING
    assert game.current_answer == "Superman"

    learned = game.insert_correction("Is he a detective?", "Batman")
    assert learned.yes is newer.yes
    assert serialize(learned.no) == {
        "question": "Is he a detective?",
        "yes": {"answer": "Batman"},
        "no": {"answer": "Superman"},
    }


def test_rebase_rejects_tree_where_the_guess_was_replaced():
    game = Game()
    game.answer(False)
    game.confirm_guess(False)
    path = game.path

    replaced = QuestionNode(
        "Is your character from a cartoon?",
        yes=SEED_TREE.yes,
        no=QuestionNode("Can he fly?", yes=AnswerNode("Superman"), no=AnswerNode("Batman")),
    )
    with pytest.raises(InvalidStateError):
        game.rebase(replaced)

    assert game.tree is SEED_TREE
    assert game.path == path
    assert game.state == GameState.LEARNING


def test_rebase_rejects_tree_with_different_questions():
    game = Game()
    game.answer(False)
    game.confirm_guess(False)

    with pytest.raises(InvalidStateError):
        game.rebase(QuestionNode("Is it real?", yes=AnswerNode("Einstein"), no=AnswerNode("Superman")))
    with pytest.raises(InvalidStateError):
        game.rebase(AnswerNode("Superman"))

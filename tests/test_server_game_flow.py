"""
Server Game Flow Tests

Route functions are called directly, the way the match tests drive the
server, with the session manager pointed at an in-memory store.
"""

import asyncio

import pytest
from fastapi import HTTPException

from src.engine import SEED_TREE, GameState
from src.server.models import (
    AnswerRequest, GuessRequest, CorrectionRequest, SuggestQuestionRequest,
    PlayerActionRequest, ActionType, AssistantKind,
)
from src.server.routes import game as game_routes
from src.server.routes import assistant as assistant_routes
from src.server.services.tree_storage import MemoryTreeStore
from src.server.services.assistant import AssistantService
from src.server.session import session_manager
from src.ai.llm import LLMConfig
from src.ai.llm.base import LLMProvider, LLMResponse


@pytest.fixture
def store(monkeypatch):
    store = MemoryTreeStore()
    monkeypatch.setattr(session_manager, "store", store)
    monkeypatch.setattr(session_manager, "sessions", {})
    return store


class ScriptedProvider(LLMProvider):
    def __init__(self, reply: dict, gate: asyncio.Event = None):
        self.reply = reply
        self.gate = gate

    async def complete(self, prompt: str, system=None, temperature: float = 0.3) -> LLMResponse:
        raise AssertionError("Not used in this test")

    async def complete_json(self, prompt: str, schema: dict, system=None, temperature: float = 0.1) -> dict:
        if self.gate is not None:
            await self.gate.wait()
        return self.reply

    @property
    def is_available(self) -> bool:
        return True

    @property
    def model_name(self) -> str:
        return "scripted"


def _assistant(reply: dict, gate: asyncio.Event = None) -> AssistantService:
    return AssistantService(
        provider=ScriptedProvider(reply, gate),
        config=LLMConfig(enable_cache=False),
    )


def test_full_round_teaches_and_persists_tree(store):
    """Play to a wrong guess, teach a new character, and find it next round."""

    async def _run():
        state = await game_routes.create_game()
        sid = state.session_id
        assert state.state == "playing"
        assert state.question == "Is your character from a cartoon?"
        assert state.question_number == 1

        result = await game_routes.answer_question(sid, AnswerRequest(answer=True))
        assert result.new_state.question_number == 2

        result = await game_routes.answer_question(sid, AnswerRequest(answer=False))
        assert result.new_state.state == "guessing"
        assert result.new_state.guess == "Homer Simpson"
        assert [s.answer for s in result.new_state.path] == [True, False]

        result = await game_routes.confirm_guess(sid, GuessRequest(correct=False))
        assert result.new_state.state == "learning"

        result = await game_routes.submit_correction(sid, CorrectionRequest(
            question="Is he yellow?", answer="Bart Simpson"
        ))
        assert result.success
        assert result.new_state.state == "playing"
        assert result.new_state.path == []
        assert result.new_state.games_learned == 1
        assert store.save_count == 1

        characters = await game_routes.list_characters()
        assert "Bart Simpson" in characters.characters
        assert characters.total == 5

        # A second session starts on the learned tree
        other = await game_routes.create_game()
        await game_routes.answer_question(other.session_id, AnswerRequest(answer=True))
        result = await game_routes.answer_question(other.session_id, AnswerRequest(answer=False))
        assert result.new_state.question == "Is he yellow?"

    asyncio.run(_run())


def test_correct_guess_resets_session(store):
    async def _run():
        sid = (await game_routes.create_game()).session_id
        await game_routes.answer_question(sid, AnswerRequest(answer=False))

        result = await game_routes.confirm_guess(sid, GuessRequest(correct=True))

        assert result.message == "Yay! I guessed correctly!"
        assert result.new_state.state == "playing"
        assert result.new_state.question_number == 1
        assert result.new_state.games_won == 1
        assert store.save_count == 0

    asyncio.run(_run())


def test_engine_errors_map_to_http_status(store):
    async def _run():
        sid = (await game_routes.create_game()).session_id

        with pytest.raises(HTTPException) as exc:
            await game_routes.confirm_guess(sid, GuessRequest(correct=True))
        assert exc.value.status_code == 409

        await game_routes.answer_question(sid, AnswerRequest(answer=False))
        await game_routes.confirm_guess(sid, GuessRequest(correct=False))

        with pytest.raises(HTTPException) as exc:
            await game_routes.submit_correction(sid, CorrectionRequest(question="", answer="Batman"))
        assert exc.value.status_code == 422
        assert store.save_count == 0

        state = await game_routes.get_game(sid)
        assert state.state == "learning"

        with pytest.raises(HTTPException) as exc:
            await game_routes.get_game("missing")
        assert exc.value.status_code == 404

    asyncio.run(_run())


def test_empty_path_correction_is_conflict(store):
    from src.engine import AnswerNode

    async def _run():
        store.save(AnswerNode("Superman"))
        sid = (await game_routes.create_game()).session_id
        await game_routes.confirm_guess(sid, GuessRequest(correct=False))

        with pytest.raises(HTTPException) as exc:
            await game_routes.submit_correction(sid, CorrectionRequest(
                question="Can he fly?", answer="Batman"
            ))
        assert exc.value.status_code == 409
        assert exc.value.detail == "Nothing to correct yet"

    asyncio.run(_run())


def test_reset_tree_restores_seed_and_restarts_sessions(store):
    async def _run():
        sid = (await game_routes.create_game()).session_id
        await game_routes.answer_question(sid, AnswerRequest(answer=False))
        await game_routes.confirm_guess(sid, GuessRequest(correct=False))
        await game_routes.submit_correction(sid, CorrectionRequest(question="Can he fly?", answer="Batman"))
        await game_routes.answer_question(sid, AnswerRequest(answer=True))

        summary = await game_routes.reset_tree()

        assert summary.answers == 4
        assert summary.depth == 3
        assert store.load() == SEED_TREE
        session = session_manager.get_session(sid)
        assert session.game.tree == SEED_TREE
        assert session.game.state == GameState.PLAYING
        assert session.game.path == ()

    asyncio.run(_run())


def test_handle_action_reports_errors_instead_of_raising(store):
    async def _run():
        session = await session_manager.create_session()

        ok, message = session.handle_action(PlayerActionRequest(
            action_type=ActionType.GUESS, session_id=session.id, value=True
        ))
        assert ok is False
        assert message == "There is no guess to confirm"

        ok, _ = session.handle_action(PlayerActionRequest(
            action_type=ActionType.ANSWER, session_id=session.id
        ))
        assert ok is False

        ok, message = session.handle_action(PlayerActionRequest(
            action_type=ActionType.ANSWER, session_id=session.id, value=False
        ))
        assert ok is True
        assert message == "I think I know! Is it Superman?"

        ok, _ = session.handle_action(PlayerActionRequest(
            action_type=ActionType.RESTART, session_id=session.id
        ))
        assert ok is True
        assert session.game.question_number == 1

    asyncio.run(_run())


def test_assistant_routes(store, monkeypatch):
    async def _run():
        sid = (await game_routes.create_game()).session_id

        monkeypatch.setattr(assistant_routes, "assistant", _assistant({"hint": "Drawn, not filmed."}))
        hint = await assistant_routes.get_hint(sid)
        assert hint.success
        assert hint.kind == AssistantKind.HINT
        assert hint.text == "Drawn, not filmed."

        with pytest.raises(HTTPException) as exc:
            await assistant_routes.get_fact(sid)
        assert exc.value.status_code == 409

        await game_routes.answer_question(sid, AnswerRequest(answer=False))
        await game_routes.confirm_guess(sid, GuessRequest(correct=False))

        monkeypatch.setattr(assistant_routes, "assistant", _assistant({"question": "Is he a billionaire?"}))
        suggestion = await assistant_routes.suggest_question(sid, SuggestQuestionRequest(answer="Batman"))
        assert suggestion.text == "Is he a billionaire?"

        # The suggestion does not touch the tree
        session = session_manager.get_session(sid)
        assert session.game.tree == SEED_TREE
        assert session.game.state == GameState.LEARNING

    asyncio.run(_run())


def test_late_assistant_result_is_flagged_stale(store):
    """An answer given while the assistant is thinking makes its result stale."""

    async def _run():
        session = await session_manager.create_session()
        gate = asyncio.Event()
        service = _assistant({"hint": "Think of Saturday mornings."}, gate)

        task = asyncio.create_task(session.request_assistant(service, AssistantKind.HINT))
        await asyncio.sleep(0)

        session.answer(True)
        gate.set()
        response, is_current = await task

        assert response.success
        assert is_current is False
        assert session.game.question_number == 2

        gate_open = asyncio.Event()
        gate_open.set()
        response, is_current = await session.request_assistant(
            _assistant({"hint": "Fur or feathers?"}, gate_open), AssistantKind.HINT
        )
        assert is_current is True

    asyncio.run(_run())


def test_corrections_from_two_sessions_are_both_kept(store):
    """Each session teaches a different character; the store keeps both."""
    from src.engine import known_answers

    async def _run():
        first = (await game_routes.create_game()).session_id
        second = (await game_routes.create_game()).session_id

        await game_routes.answer_question(second, AnswerRequest(answer=False))
        await game_routes.confirm_guess(second, GuessRequest(correct=False))
        await game_routes.submit_correction(second, CorrectionRequest(
            question="Is he a detective?", answer="Batman"
        ))

        # The first session was created before Batman was taught
        await game_routes.answer_question(first, AnswerRequest(answer=True))
        await game_routes.answer_question(first, AnswerRequest(answer=False))
        await game_routes.confirm_guess(first, GuessRequest(correct=False))
        result = await game_routes.submit_correction(first, CorrectionRequest(
            question="Is he yellow?", answer="Bart Simpson"
        ))
        assert result.success

        stored = known_answers(store.load())
        assert "Batman" in stored
        assert "Bart Simpson" in stored
        assert session_manager.get_session(first).game.tree == store.load()

    asyncio.run(_run())


def test_correction_at_a_guess_another_session_replaced_is_conflict(store):
    async def _run():
        first = (await game_routes.create_game()).session_id
        second = (await game_routes.create_game()).session_id
        for sid in (first, second):
            await game_routes.answer_question(sid, AnswerRequest(answer=False))
            await game_routes.confirm_guess(sid, GuessRequest(correct=False))

        await game_routes.submit_correction(second, CorrectionRequest(
            question="Is he a detective?", answer="Batman"
        ))
        with pytest.raises(HTTPException) as exc:
            await game_routes.submit_correction(first, CorrectionRequest(
                question="Is he green?", answer="Hulk"
            ))

        assert exc.value.status_code == 409
        assert store.save_count == 1
        assert session_manager.get_session(first).game.state == GameState.LEARNING

    asyncio.run(_run())


def test_correct_guess_starts_next_round_on_stored_tree(store):
    async def _run():
        first = (await game_routes.create_game()).session_id
        second = (await game_routes.create_game()).session_id

        await game_routes.answer_question(second, AnswerRequest(answer=False))
        await game_routes.confirm_guess(second, GuessRequest(correct=False))
        await game_routes.submit_correction(second, CorrectionRequest(
            question="Is he a detective?", answer="Batman"
        ))

        await game_routes.answer_question(first, AnswerRequest(answer=True))
        await game_routes.answer_question(first, AnswerRequest(answer=False))
        result = await game_routes.confirm_guess(first, GuessRequest(correct=True))
        assert result.new_state.games_won == 1

        result = await game_routes.answer_question(first, AnswerRequest(answer=False))
        assert result.new_state.question == "Is he a detective?"

    asyncio.run(_run())

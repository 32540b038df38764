"""
Game Assistant Service

Uses an LLM to help the player: hints for the current question, a fun fact
about the guessed character, and a suggested question when the tree needs to
learn someone new.

The assistant only reads what the engine exposes (question text, answer text,
path). Provider failures are reported in the result dict and never raised.
"""

import asyncio
import logging
from typing import Optional

from src.ai.llm import FactCache, LLMConfig, LLMProvider, get_provider
from src.ai.llm.prompts import (
    HINT_SYSTEM, HINT_PROMPT, HINT_SCHEMA,
    FACT_SYSTEM, FACT_PROMPT, FACT_SCHEMA,
    QUESTION_SYSTEM, QUESTION_PROMPT, QUESTION_SCHEMA,
    format_history,
)

logger = logging.getLogger(__name__)


class AssistantService:
    """
    Service for AI-generated hints, facts and questions.

    The provider is resolved lazily from `LLMConfig` so the server starts
    even when no model is reachable.
    """

    def __init__(
        self,
        provider: Optional[LLMProvider] = None,
        config: Optional[LLMConfig] = None,
        cache: Optional[FactCache] = None
    ):
        """
        Args:
            provider: LLM provider to use. Defaults to `get_provider(config)`.
            config: Provider and cache settings. Defaults to the environment.
            cache: Fact cache. Created on first use when caching is enabled.
        """
        self.config = config or LLMConfig.from_env()
        self._provider = provider
        self._cache = cache
        # Set when get_provider failed; resolution is not retried.
        self._resolution_error: Optional[str] = None

    def _get_provider(self) -> Optional[LLMProvider]:
        if self._provider is None and self._resolution_error is None:
            try:
                self._provider = get_provider(self.config)
            except RuntimeError as e:
                logger.info("Assistant unavailable: %s", e)
                self._resolution_error = str(e)
        return self._provider

    def _get_cache(self) -> Optional[FactCache]:
        if self._cache is None and self.config.enable_cache:
            try:
                self._cache = FactCache(ttl_seconds=self.config.cache_ttl_seconds)
            except OSError as e:
                logger.warning("Fact cache disabled: %s", e)
                self.config.enable_cache = False
        return self._cache

    @property
    def is_available(self) -> bool:
        """Check if the LLM provider is available."""
        provider = self._get_provider()
        return provider is not None and provider.is_available

    async def check_available(self) -> bool:
        """`is_available` without blocking the event loop on the first provider check."""
        return await asyncio.to_thread(lambda: self.is_available)

    def _unavailable(self) -> dict:
        return {
            "success": False,
            "error": "AI assistant is not available. Start Ollama or set an API key."
        }

    async def hint(self, question: str, history: list[tuple[str, bool]]) -> dict:
        """
        Explain the current question to the player.

        Args:
            question: Question text on screen
            history: (question, answer) pairs already given

        Returns:
            {"success": True, "hint": str} or {"success": False, "error": str}
        """
        if not await self.check_available():
            return self._unavailable()

        try:
            result = await self._provider.complete_json(
                prompt=HINT_PROMPT.format(question=question, history=format_history(history)),
                schema=HINT_SCHEMA,
                system=HINT_SYSTEM,
                temperature=self.config.temperature
            )
        except Exception as e:
            logger.warning("Hint generation failed: %s", e)
            return {"success": False, "error": str(e)}

        hint = str(result.get("hint") or "").strip()
        if not hint:
            return {"success": False, "error": "The assistant had no hint this time"}
        return {"success": True, "hint": hint}

    async def fact(self, answer: str) -> dict:
        """
        Look up a fun fact about a character.

        Facts are cached by character name.

        Returns:
            {"success": True, "fact": str, "cached": bool} or an error dict
        """
        cache = self._get_cache()
        if cache is not None:
            cached = cache.get(answer)
            if cached:
                return {"success": True, "fact": cached, "cached": True}

        if not await self.check_available():
            return self._unavailable()

        try:
            result = await self._provider.complete_json(
                prompt=FACT_PROMPT.format(answer=answer),
                schema=FACT_SCHEMA,
                system=FACT_SYSTEM,
                temperature=self.config.temperature
            )
        except Exception as e:
            logger.warning("Fact lookup for %r failed: %s", answer, e)
            return {"success": False, "error": str(e)}

        fact = str(result.get("fact") or "").strip()
        if not fact:
            return {"success": False, "error": f"No fact found about {answer}"}

        if cache is not None:
            cache.set(answer, fact, model=self._provider.model_name)
        return {"success": True, "fact": fact, "cached": False}

    async def suggest_question(
        self,
        old_answer: str,
        new_answer: str,
        history: list[tuple[str, bool]]
    ) -> dict:
        """
        Propose a yes/no question separating the new character from the wrong guess.

        The suggestion only pre-fills the correction form; the player still
        submits it.

        Returns:
            {"success": True, "question": str} or an error dict
        """
        if not new_answer.strip():
            return {"success": False, "error": "Tell me who your character was first"}
        if not await self.check_available():
            return self._unavailable()

        try:
            result = await self._provider.complete_json(
                prompt=QUESTION_PROMPT.format(
                    old_answer=old_answer,
                    new_answer=new_answer.strip(),
                    history=format_history(history)
                ),
                schema=QUESTION_SCHEMA,
                system=QUESTION_SYSTEM,
                temperature=self.config.temperature
            )
        except Exception as e:
            logger.warning("Question generation failed: %s", e)
            return {"success": False, "error": str(e)}

        question = str(result.get("question") or "").strip()
        if not question:
            return {"success": False, "error": "The assistant could not think of a question"}
        if not question.endswith("?"):
            question += "?"
        return {"success": True, "question": question}


# Global service instance
assistant = AssistantService()

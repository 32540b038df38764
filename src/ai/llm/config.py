"""
LLM Configuration

Settings for LLM providers and model selection.
"""

from dataclasses import dataclass
from enum import Enum
import logging
import os

logger = logging.getLogger(__name__)


class ProviderType(str, Enum):
    """Supported LLM provider types."""
    OLLAMA = "ollama"
    OPENAI = "openai"
    ANTHROPIC = "anthropic"


@dataclass
class LLMConfig:
    """Configuration for LLM providers."""

    # Provider settings
    provider: ProviderType = ProviderType.OLLAMA

    # Ollama settings
    ollama_host: str = "http://localhost:11434"
    ollama_model: str = "qwen2.5:3b"

    # OpenAI settings
    openai_model: str = "gpt-4o-mini"

    # Anthropic settings
    anthropic_model: str = "claude-3-haiku-20240307"

    # Generation settings
    temperature: float = 0.7
    timeout: float = 30.0

    # Fact caching
    enable_cache: bool = True
    cache_ttl_seconds: int = 7 * 86400

    # API keys from environment
    @property
    def openai_key(self) -> str:
        """Get OpenAI API key from environment."""
        return os.environ.get("OPENAI_API_KEY", "")

    @property
    def anthropic_key(self) -> str:
        """Get Anthropic API key from environment."""
        return os.environ.get("ANTHROPIC_API_KEY", "")

    @classmethod
    def from_env(cls) -> 'LLMConfig':
        """
        Build a config from environment variables.

        TWENTYQ_LLM_PROVIDER picks the provider explicitly; otherwise the
        first API key found wins, and Ollama is the default.
        """
        config = cls.for_api_fallback()

        requested = os.environ.get("TWENTYQ_LLM_PROVIDER", "").strip().lower()
        if requested:
            try:
                config.provider = ProviderType(requested)
            except ValueError:
                logger.warning(
                    "Unknown TWENTYQ_LLM_PROVIDER %r; using %s",
                    requested, config.provider.value
                )

        config.ollama_host = os.environ.get("OLLAMA_HOST", config.ollama_host)
        config.ollama_model = os.environ.get("OLLAMA_MODEL", config.ollama_model)
        return config

    @classmethod
    def for_api_fallback(cls) -> 'LLMConfig':
        """Create config for API fallback when local unavailable."""
        # Prefer Anthropic if key available, else OpenAI
        if os.environ.get("ANTHROPIC_API_KEY"):
            return cls(provider=ProviderType.ANTHROPIC)
        elif os.environ.get("OPENAI_API_KEY"):
            return cls(provider=ProviderType.OPENAI)
        else:
            return cls(provider=ProviderType.OLLAMA)

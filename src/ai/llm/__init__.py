"""
Twenty Questions LLM Subsystem

Provides LLM integration for the game assistant.
Supports local models via Ollama and API fallback to OpenAI/Anthropic.
"""

from .base import LLMProvider, LLMResponse
from .config import LLMConfig, ProviderType
from .cache import FactCache
from .ollama_provider import OllamaProvider
from .api_provider import OpenAIProvider, AnthropicProvider, get_provider

__all__ = [
    'LLMProvider',
    'LLMResponse',
    'LLMConfig',
    'ProviderType',
    'FactCache',
    'OllamaProvider',
    'OpenAIProvider',
    'AnthropicProvider',
    'get_provider',
]

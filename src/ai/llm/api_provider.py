"""
API LLM Providers

OpenAI and Anthropic chat APIs, used when local Ollama is unavailable or an
API key is configured.
"""

from typing import Optional

import aiohttp

from .base import LLMProvider, LLMResponse, json_instructions, parse_json_response


class _HTTPProvider(LLMProvider):
    """Shared plumbing for providers that POST JSON and read JSON back."""

    endpoint = ""
    label = "API"

    def __init__(self, api_key: str, model: str, timeout: float = 30.0):
        """
        Args:
            api_key: Provider API key
            model: Model name
            timeout: Request timeout in seconds
        """
        self.api_key = api_key
        self.model = model
        self.timeout = timeout

    @property
    def is_available(self) -> bool:
        """Check if API key is set."""
        return bool(self.api_key)

    @property
    def model_name(self) -> str:
        """Return the model identifier."""
        return self.model

    def _headers(self) -> dict:
        raise NotImplementedError

    async def _post(self, payload: dict) -> dict:
        timeout = aiohttp.ClientTimeout(total=self.timeout)
        async with aiohttp.ClientSession(timeout=timeout) as session:
            async with session.post(self.endpoint, headers=self._headers(), json=payload) as resp:
                if resp.status != 200:
                    error_text = await resp.text()
                    raise RuntimeError(f"{self.label} error {resp.status}: {error_text}")
                return await resp.json()

    async def complete_json(
        self,
        prompt: str,
        schema: dict,
        system: Optional[str] = None,
        temperature: float = 0.1
    ) -> dict:
        """Generate a JSON-structured completion."""
        json_system = (system or "") + "\nRespond with valid JSON only. No explanations."
        response = await self.complete(
            prompt=json_instructions(prompt, schema),
            system=json_system,
            temperature=temperature
        )
        return parse_json_response(response.content, schema)


class OpenAIProvider(_HTTPProvider):
    """
    LLM provider using the OpenAI chat completions API.

    Requires OPENAI_API_KEY environment variable.
    """

    endpoint = "https://api.openai.com/v1/chat/completions"
    label = "OpenAI"

    def __init__(self, api_key: str, model: str = "gpt-4o-mini", timeout: float = 30.0):
        super().__init__(api_key, model, timeout)

    def _headers(self) -> dict:
        return {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json"
        }

    async def complete(
        self,
        prompt: str,
        system: Optional[str] = None,
        temperature: float = 0.3
    ) -> LLMResponse:
        """Generate a completion using OpenAI API."""
        messages = []
        if system:
            messages.append({"role": "system", "content": system})
        messages.append({"role": "user", "content": prompt})

        data = await self._post({
            "model": self.model,
            "messages": messages,
            "temperature": temperature
        })

        return LLMResponse(
            content=data["choices"][0]["message"]["content"],
            model=self.model,
            tokens_used=data.get("usage", {}).get("total_tokens", 0),
            raw_response=data
        )


class AnthropicProvider(_HTTPProvider):
    """
    LLM provider using the Anthropic messages API.

    Requires ANTHROPIC_API_KEY environment variable.
    """

    endpoint = "https://api.anthropic.com/v1/messages"
    label = "Anthropic"

    def __init__(
        self,
        api_key: str,
        model: str = "claude-3-haiku-20240307",
        timeout: float = 30.0
    ):
        super().__init__(api_key, model, timeout)

    def _headers(self) -> dict:
        return {
            "x-api-key": self.api_key,
            "anthropic-version": "2023-06-01",
            "Content-Type": "application/json"
        }

    async def complete(
        self,
        prompt: str,
        system: Optional[str] = None,
        temperature: float = 0.3
    ) -> LLMResponse:
        """Generate a completion using Anthropic API."""
        payload = {
            "model": self.model,
            "max_tokens": 512,
            "messages": [{"role": "user", "content": prompt}],
            "temperature": temperature
        }
        if system:
            payload["system"] = system

        data = await self._post(payload)

        content = "".join(
            block.get("text", "")
            for block in data.get("content", [])
            if block.get("type") == "text"
        )
        usage = data.get("usage", {})

        return LLMResponse(
            content=content,
            model=self.model,
            tokens_used=usage.get("input_tokens", 0) + usage.get("output_tokens", 0),
            raw_response=data
        )


def get_provider(config) -> LLMProvider:
    """
    Get the appropriate LLM provider based on config.

    Falls back through providers if primary is unavailable:
    1. Ollama (if configured and available)
    2. OpenAI (if API key available)
    3. Anthropic (if API key available)

    Raises:
        RuntimeError: If no provider is available
    """
    from .ollama_provider import OllamaProvider
    from .config import ProviderType

    if config.provider == ProviderType.OLLAMA:
        provider = OllamaProvider(
            host=config.ollama_host,
            model=config.ollama_model,
            timeout=config.timeout
        )
        if provider.is_available:
            return provider

        if config.openai_key:
            return OpenAIProvider(config.openai_key, config.openai_model, config.timeout)
        if config.anthropic_key:
            return AnthropicProvider(config.anthropic_key, config.anthropic_model, config.timeout)

        raise RuntimeError(
            "Ollama not available and no API keys configured. "
            f"Run 'ollama pull {config.ollama_model}' or set OPENAI_API_KEY/ANTHROPIC_API_KEY"
        )

    elif config.provider == ProviderType.OPENAI:
        if not config.openai_key:
            raise RuntimeError("OPENAI_API_KEY not set")
        return OpenAIProvider(config.openai_key, config.openai_model, config.timeout)

    elif config.provider == ProviderType.ANTHROPIC:
        if not config.anthropic_key:
            raise RuntimeError("ANTHROPIC_API_KEY not set")
        return AnthropicProvider(config.anthropic_key, config.anthropic_model, config.timeout)

    raise RuntimeError(f"Unknown provider type: {config.provider}")

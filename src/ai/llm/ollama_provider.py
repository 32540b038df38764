"""
Ollama LLM Provider

Local LLM integration using Ollama.
Models are managed by Ollama and cached in ~/.ollama/models/.
"""

import logging
from typing import Optional

import aiohttp
import requests

from .base import LLMProvider, LLMResponse, json_instructions, parse_json_response

logger = logging.getLogger(__name__)


class OllamaProvider(LLMProvider):
    """
    LLM provider using local Ollama instance.

    Setup:
        1. Install Ollama: curl -fsSL https://ollama.com/install.sh | sh
        2. Pull a model: ollama pull qwen2.5:3b
        3. Start Ollama service: ollama serve (or it runs automatically)
    """

    def __init__(
        self,
        host: str = "http://localhost:11434",
        model: str = "qwen2.5:3b",
        timeout: float = 30.0
    ):
        """
        Initialize Ollama provider.

        Args:
            host: Ollama API host URL
            model: Model name (e.g., "qwen2.5:3b")
            timeout: Request timeout in seconds
        """
        self.host = host.rstrip('/')
        self.model = model
        self.timeout = timeout
        self._available: Optional[bool] = None

    def _list_models(self) -> list[str]:
        r = requests.get(f"{self.host}/api/tags", timeout=2)
        r.raise_for_status()
        return [m.get('name', '') for m in r.json().get('models', [])]

    @property
    def is_available(self) -> bool:
        """Check if Ollama is running and the model has been pulled. Cached."""
        if self._available is not None:
            return self._available

        try:
            model_names = self._list_models()
        except (requests.RequestException, ValueError) as e:
            logger.info("Ollama not reachable at %s: %s", self.host, e)
            self._available = False
            return False

        base_model = self.model.split(':')[0]
        self._available = any(
            self.model in name or base_model in name
            for name in model_names
        )
        if not self._available:
            logger.warning(
                "Model '%s' not found (available: %s). Run: ollama pull %s",
                self.model, model_names, self.model
            )
        return self._available

    @property
    def model_name(self) -> str:
        """Return the model identifier."""
        return self.model

    async def complete(
        self,
        prompt: str,
        system: Optional[str] = None,
        temperature: float = 0.3
    ) -> LLMResponse:
        """Generate a completion using Ollama's /api/generate."""
        payload = {
            "model": self.model,
            "prompt": prompt,
            "stream": False,
            "options": {
                "temperature": temperature
            }
        }
        if system:
            payload["system"] = system

        timeout = aiohttp.ClientTimeout(total=self.timeout)
        async with aiohttp.ClientSession(timeout=timeout) as session:
            async with session.post(f"{self.host}/api/generate", json=payload) as resp:
                if resp.status != 200:
                    error_text = await resp.text()
                    raise RuntimeError(f"Ollama error {resp.status}: {error_text}")

                data = await resp.json()

        return LLMResponse(
            content=data.get("response", ""),
            model=self.model,
            tokens_used=data.get("eval_count", 0),
            raw_response=data
        )

    async def complete_json(
        self,
        prompt: str,
        schema: dict,
        system: Optional[str] = None,
        temperature: float = 0.1
    ) -> dict:
        """Generate a JSON-structured completion."""
        json_system = (system or "") + "\nYou MUST respond with valid JSON only. No explanations, no markdown."
        response = await self.complete(
            prompt=json_instructions(prompt, schema),
            system=json_system,
            temperature=temperature
        )
        return parse_json_response(response.content, schema)

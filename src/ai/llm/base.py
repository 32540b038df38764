"""
LLM Provider Base Classes

Abstract interface for LLM providers (Ollama, OpenAI, Anthropic), plus the
JSON clean-up every provider applies to model output.
"""

import json
import re
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional, Any


@dataclass
class LLMResponse:
    """Response from an LLM completion."""
    content: str
    model: str
    tokens_used: int
    cached: bool = False
    raw_response: Optional[Any] = None


class LLMProvider(ABC):
    """
    Abstract base class for LLM providers.

    All providers must implement async completion methods
    for both raw text and JSON-structured output.
    """

    @abstractmethod
    async def complete(
        self,
        prompt: str,
        system: Optional[str] = None,
        temperature: float = 0.3
    ) -> LLMResponse:
        """
        Generate a completion for the given prompt.

        Args:
            prompt: The user prompt
            system: Optional system prompt
            temperature: Sampling temperature (0.0-1.0)

        Returns:
            LLMResponse with generated content
        """
        pass

    @abstractmethod
    async def complete_json(
        self,
        prompt: str,
        schema: dict,
        system: Optional[str] = None,
        temperature: float = 0.1
    ) -> dict:
        """
        Generate a JSON-structured completion.

        Args:
            prompt: The user prompt
            schema: Field name -> type hint ("str", "bool", "list[str]", ...)
            system: Optional system prompt
            temperature: Sampling temperature (lower for structured output)

        Returns:
            Parsed JSON dict matching the schema
        """
        pass

    @property
    @abstractmethod
    def is_available(self) -> bool:
        """Check if this provider is available and ready."""
        pass

    @property
    @abstractmethod
    def model_name(self) -> str:
        """Return the model identifier."""
        pass


def json_instructions(prompt: str, schema: dict) -> str:
    """Append the schema a JSON completion must follow."""
    schema_str = json.dumps(schema, indent=2)
    return f"""{prompt}

Respond with ONLY valid JSON matching this schema:
{schema_str}

JSON:"""


def parse_json_response(content: str, schema: dict) -> dict:
    """
    Parse JSON from an LLM response, tolerating markdown fences and chatter.

    Falls back to schema defaults when nothing parses.
    """
    content = content.strip()

    if content.startswith("```"):
        content = re.sub(r'^```(?:json)?\s*', '', content)
        content = re.sub(r'\s*```$', '', content)

    try:
        parsed = json.loads(content)
        if isinstance(parsed, dict):
            return parsed
    except json.JSONDecodeError:
        pass

    json_match = re.search(r'\{[\s\S]*\}', content)
    if json_match:
        try:
            parsed = json.loads(json_match.group())
            if isinstance(parsed, dict):
                return parsed
        except json.JSONDecodeError:
            pass

    return defaults_from_schema(schema)


def defaults_from_schema(schema: dict) -> dict:
    """Generate empty values for every field of a schema."""
    result = {}
    for key, value in schema.items():
        if isinstance(value, str):
            if value == "bool":
                result[key] = False
            elif value == "int":
                result[key] = 0
            elif value == "float":
                result[key] = 0.0
            elif value.startswith("list"):
                result[key] = []
            else:
                result[key] = ""
        elif isinstance(value, dict):
            result[key] = defaults_from_schema(value)
        elif isinstance(value, list):
            result[key] = []
        else:
            result[key] = value
    return result

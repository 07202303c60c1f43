"""Base agent abstraction."""

import json
import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Generic, TypeVar, Optional

from ..config import config
from ..errors import GenerationError
from ..services.anthropic import AnthropicClient

logger = logging.getLogger(__name__)

InputT = TypeVar("InputT")
OutputT = TypeVar("OutputT")

PROMPT_TEMPLATE_DIR = Path(__file__).parent.parent.parent.parent / "templates" / "prompts"


def load_prompt(name: str, fallback: str) -> str:
    """Load a prompt template by name, falling back to the inline text."""
    path = PROMPT_TEMPLATE_DIR / f"{name}.txt"
    if path.exists():
        return path.read_text()
    return fallback


class BaseAgent(ABC, Generic[InputT, OutputT]):
    """Abstract base class for AI agents.

    Provides shared functionality for agents that use Claude for generation.
    Subclasses must implement the `run` method and define their prompts.
    """

    def __init__(
        self,
        client: Optional[AnthropicClient] = None,
        model: Optional[str] = None,
    ) -> None:
        """Initialize the agent.

        Args:
            client: AnthropicClient instance. Created if not provided.
            model: Model to use. Defaults to config.default_model.
        """
        self._model = model or config.default_model
        self._client = client or AnthropicClient(model=self._model)
        self._logger = logging.getLogger(f"{__name__}.{self.name}")

    @property
    @abstractmethod
    def name(self) -> str:
        """Return the agent's name."""
        ...

    @property
    @abstractmethod
    def system_prompt(self) -> str:
        """Return the system prompt for this agent."""
        ...

    @property
    def model(self) -> str:
        """Return the model being used."""
        return self._model

    @abstractmethod
    def run(self, input_data: InputT) -> OutputT:
        """Execute the agent's main task.

        Args:
            input_data: Input data for the agent.

        Returns:
            Structured output from the agent.

        Raises:
            GenerationError: If the response is missing or unusable.
        """
        ...

    def _create_message(
        self,
        prompt: str,
        max_tokens: int = 4096,
        temperature: float = 0.7,
    ) -> str:
        """Create a message using the agent's client and system prompt.

        Raises:
            GenerationError: If the request fails or returns no text.
        """
        self._logger.debug(f"Creating message with prompt length: {len(prompt)}")

        try:
            response = self._client.create_message(
                prompt=prompt,
                max_tokens=max_tokens,
                system=self.system_prompt,
                temperature=temperature,
            )
        except Exception as e:
            self._logger.error(f"Error creating message: {e}")
            raise GenerationError(f"{self.name} request failed: {e}") from e

        if not response or not response.strip():
            raise GenerationError(f"{self.name} received an empty response")

        self._logger.debug(f"Received response of length: {len(response)}")
        return response

    def _parse_json_array(self, response: str, key: str) -> list[Any]:
        """Parse a JSON array out of a response, accepting ``{key: [...]}`` too.

        Raises:
            GenerationError: If no JSON array can be parsed.
        """
        json_str = extract_json(response)

        try:
            data = json.loads(json_str)
        except json.JSONDecodeError as e:
            self._logger.error(f"Failed to parse JSON: {e}")
            self._logger.debug(f"Raw response: {response}")
            raise GenerationError(f"Invalid JSON in response: {e}") from e

        items = data.get(key, data) if isinstance(data, dict) else data
        if not isinstance(items, list):
            raise GenerationError(f"Response does not contain a {key} array")
        return items


def extract_json(response: str) -> str:
    """Extract JSON from a response that may contain markdown or other text."""
    # Try to find JSON in code blocks
    if "```json" in response:
        start = response.find("```json") + 7
        end = response.find("```", start)
        if end > start:
            return response[start:end].strip()

    if "```" in response:
        start = response.find("```") + 3
        end = response.find("```", start)
        if end > start:
            return response[start:end].strip()

    # Try to find a raw JSON array or object, whichever opens first
    candidates = [
        (response.find(start_char), start_char, end_char)
        for start_char, end_char in (("[", "]"), ("{", "}"))
        if response.find(start_char) != -1
    ]
    for start, start_char, end_char in sorted(candidates):
        # Find matching end bracket
        depth = 0
        for i, char in enumerate(response[start:], start):
            if char == start_char:
                depth += 1
            elif char == end_char:
                depth -= 1
                if depth == 0:
                    return response[start:i + 1]

    # Return as-is if no JSON structure found
    return response.strip()

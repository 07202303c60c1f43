"""Script agent: turns an idea into a short-form dialogue script."""

import logging

from ..errors import GenerationError
from ..models import ScriptLine
from .base import BaseAgent, load_prompt

logger = logging.getLogger(__name__)

_FALLBACK_SYSTEM_PROMPT = """You are ScriptAgent, a screenwriter for short-form vertical video.
Write a punchy 30-50 second script based on the user's idea.

Output valid JSON only, with no additional text or markdown formatting.
The JSON must be an array of objects of the form
{"character": string, "dialogue": string, "emotion": string}.
"character" is "Narrator" or the name of a character.
Keep every line short and conversational."""


class ScriptAgent(BaseAgent[str, list[ScriptLine]]):
    """Agent for writing the dialogue script of a project."""

    @property
    def name(self) -> str:
        """Return the agent's name."""
        return "ScriptAgent"

    @property
    def system_prompt(self) -> str:
        """Return the system prompt for script writing."""
        return load_prompt("script", _FALLBACK_SYSTEM_PROMPT)

    def run(self, input_data: str) -> list[ScriptLine]:
        """Write a script for the idea.

        Args:
            input_data: The user's idea.

        Returns:
            Script lines in speaking order, with ids ``script-<n>``.

        Raises:
            GenerationError: If the response cannot be parsed as script lines.
        """
        self._logger.info(f"Writing script for: '{input_data}'")

        prompt = f"IDEA: {input_data}\n\nWrite a short-form video script for this idea."
        response = self._create_message(prompt=prompt, temperature=0.8)

        script = self._parse_response(response)
        self._logger.info(f"Generated {len(script)} script lines")
        return script

    def _parse_response(self, response: str) -> list[ScriptLine]:
        items = self._parse_json_array(response, "script")
        if not items:
            raise GenerationError("Script response contains no lines")

        script: list[ScriptLine] = []
        for i, item in enumerate(items):
            if not isinstance(item, dict):
                raise GenerationError(f"Script line {i} is not an object")

            character = item.get("character")
            dialogue = item.get("dialogue")
            if not isinstance(character, str) or not isinstance(dialogue, str):
                raise GenerationError(f"Script line {i} is missing character or dialogue")

            script.append(ScriptLine(
                id=f"script-{i}",
                character=character,
                dialogue=dialogue,
                emotion=str(item.get("emotion") or "neutral"),
            ))

        return script

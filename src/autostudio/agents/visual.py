"""Visual agent: splits a script into storyboard frames."""

import logging
from typing import Any

from pydantic import ValidationError

from ..errors import GenerationError
from ..models import Frame, ScriptLine, Transition
from .base import BaseAgent, load_prompt

logger = logging.getLogger(__name__)

_FALLBACK_SYSTEM_PROMPT = """You are VisualAgent, a film director and visual designer.
Turn the numbered script into a storyboard for a vertical short video.

Requirements:
1. Split the video into 4-8 key frames.
2. Assign script lines to frames with startScriptIndex/endScriptIndex
   (inclusive, 0-based). Frames must cover every line exactly once, in order.
3. visualDescription: a detailed description of what the frame shows.
4. imagePrompt: an English prompt for an image generator, including
   keywords such as photorealistic, 8k, cinematic lighting.
5. audioPrompt: the mood of the background music and sound effects.
6. duration: frame duration in seconds.
7. transition: {"type": one of CUT, FADE_IN, FADE_OUT, CROSS_DISSOLVE,
   "duration": seconds}. Use FADE_IN for the first frame, CUT or
   CROSS_DISSOLVE in the middle and FADE_OUT near the end.

Output valid JSON only: an array of objects with the keys sceneNumber,
duration, visualDescription, imagePrompt, audioPrompt, transition,
startScriptIndex, endScriptIndex."""


class VisualAgent(BaseAgent[list[ScriptLine], list[Frame]]):
    """Agent for turning a script into storyboard frames.

    Every frame carries a contiguous slice of the script; together the
    frames cover the whole script without gaps or overlaps.
    """

    @property
    def name(self) -> str:
        """Return the agent's name."""
        return "VisualAgent"

    @property
    def system_prompt(self) -> str:
        """Return the system prompt for storyboarding."""
        return load_prompt("storyboard", _FALLBACK_SYSTEM_PROMPT)

    def run(self, input_data: list[ScriptLine]) -> list[Frame]:
        """Generate storyboard frames for the script.

        Raises:
            GenerationError: If the script is empty, or the response cannot
                be parsed or does not partition the script.
        """
        if not input_data:
            raise GenerationError("Cannot storyboard an empty script")

        self._logger.info(f"Storyboarding {len(input_data)} script lines")

        script_text = "\n".join(
            f"[{i}] {line.as_prompt_line()}" for i, line in enumerate(input_data)
        )
        prompt = f"SCRIPT:\n{script_text}\n\nCreate the storyboard as JSON."
        response = self._create_message(prompt=prompt, max_tokens=8192)

        frames = self._parse_response(response, input_data)
        self._logger.info(f"Generated {len(frames)} frames")
        return frames

    def _parse_response(self, response: str, script: list[ScriptLine]) -> list[Frame]:
        items = self._parse_json_array(response, "frames")
        if not items:
            raise GenerationError("Storyboard response contains no frames")
        if not all(isinstance(item, dict) for item in items):
            raise GenerationError("Storyboard frames must be objects")

        items = sorted(items, key=lambda item: _as_int(item, "sceneNumber"))

        frames: list[Frame] = []
        expected_start = 0
        for i, item in enumerate(items):
            start = _as_int(item, "startScriptIndex")
            end = _as_int(item, "endScriptIndex")

            # end == start - 1 is an empty slice (a frame without dialogue)
            if start != expected_start or end < start - 1 or end >= len(script):
                raise GenerationError(
                    f"Scene {item.get('sceneNumber')} covers lines {start}-{end}, "
                    f"expected a range starting at {expected_start} within "
                    f"{len(script)} lines"
                )
            expected_start = end + 1

            try:
                frames.append(Frame(
                    id=f"frame-{i}",
                    scene_number=_as_int(item, "sceneNumber"),
                    duration=float(item.get("duration", 0.0)),
                    script_lines=script[start:end + 1],
                    visual_description=str(item.get("visualDescription", "")),
                    image_prompt=str(item.get("imagePrompt", "")),
                    audio_prompt=str(item.get("audioPrompt", "")),
                    transition=_parse_transition(item.get("transition")),
                ))
            except (ValidationError, TypeError, ValueError) as e:
                raise GenerationError(f"Invalid frame {i}: {e}") from e

        if expected_start != len(script):
            raise GenerationError(
                f"Storyboard covers {expected_start} of {len(script)} script lines"
            )

        return frames


def _as_int(item: dict, key: str) -> int:
    value = item.get(key)
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise GenerationError(f"Frame field {key} must be a number, got {value!r}")
    return int(value)


def _parse_transition(data: Any) -> Transition:
    if not data:
        return Transition()
    try:
        return Transition.model_validate(data)
    except ValidationError as e:
        raise GenerationError(f"Invalid transition {data!r}") from e

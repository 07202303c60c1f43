"""Pipeline orchestrator.

Drives a project through its stages::

    IDLE -> PLANNING_SCRIPT -> REVIEW_SCRIPT -> PLANNING_STORYBOARD
         -> REVIEW_STORYBOARD -> PRODUCING -> COMPLETED

Script and storyboard failures are stage-fatal and move the project to
ERROR. Image and speech failures during production only affect their
own scene; the loop carries on and the project still completes.

Every generator call blocks until the service answers, and scenes are
produced one at a time in storyboard order.
"""

import logging
from dataclasses import dataclass
from typing import Any, Callable, Optional

from .errors import GenerationError, InvalidStateError
from .models import (
    AgentTag,
    Frame,
    ProjectState,
    ProjectStatus,
    ScriptLine,
    can_transition,
)
from .models.project import IN_FLIGHT_STATES
from .store import ProjectStore

logger = logging.getLogger(__name__)

# Frame fields owned by the storyboard; user edits may not change them
PROTECTED_FRAME_FIELDS = frozenset({"id", "scene_number", "script_lines"})


@dataclass
class Adapters:
    """The four generation services the pipeline depends on."""

    generate_script: Callable[[str], list[ScriptLine]]
    generate_storyboard: Callable[[list[ScriptLine]], list[Frame]]
    generate_frame_image: Callable[[str], str]
    generate_speech: Callable[[str], Optional[str]]

    @classmethod
    def from_config(cls) -> "Adapters":
        """Build adapters backed by Claude, Imagen and Gemini TTS."""
        from .agents import ScriptAgent, VisualAgent
        from .services import ImagenClient, SpeechClient

        return cls(
            generate_script=ScriptAgent().run,
            generate_storyboard=VisualAgent().run,
            generate_frame_image=ImagenClient().generate_frame_image,
            generate_speech=SpeechClient().generate_speech,
        )


class Orchestrator:
    """Runs the stage state machine for a single project."""

    def __init__(
        self,
        adapters: Adapters,
        store: Optional[ProjectStore] = None,
    ) -> None:
        self._adapters = adapters
        self._store = store or ProjectStore()

    @property
    def store(self) -> ProjectStore:
        return self._store

    @property
    def state(self) -> ProjectState:
        return self._store.state

    def start_project(self, idea: str) -> ProjectState:
        """Start a new project from an idea and write its script.

        Raises:
            ValueError: If the idea is empty.
            InvalidStateError: If another stage is still running.
        """
        if not idea or not idea.strip():
            raise ValueError("Idea must not be empty")

        current = self.state.status
        if current in IN_FLIGHT_STATES:
            raise InvalidStateError(f"Cannot start a new project while {current.value}")

        self._require_transition(ProjectStatus.PLANNING_SCRIPT)
        self._store.update(
            status=ProjectStatus.PLANNING_SCRIPT,
            user_idea=idea,
            script=[],
            frames=[],
            current_frame_index=0,
        )
        logger.info(f"Starting project: {idea}")
        self._log(AgentTag.ORCHESTRATOR, f'New project started: "{idea}"')
        self._log(AgentTag.SCRIPT, "Analysing the idea and writing the script...")

        try:
            script = list(self._adapters.generate_script(idea))
        except Exception as e:
            logger.error(f"Script generation failed: {e}")
            self._fail("Error: script generation failed.")
            return self.state

        self._log(AgentTag.SCRIPT, f"Script complete ({len(script)} lines). Awaiting review.")
        self._store.update(script=script, status=ProjectStatus.REVIEW_SCRIPT)
        return self.state

    def confirm_script(self) -> ProjectState:
        """Approve the script and generate the storyboard.

        Raises:
            InvalidStateError: If the project is not in REVIEW_SCRIPT.
        """
        self._require_status(ProjectStatus.REVIEW_SCRIPT)
        self._set_status(ProjectStatus.PLANNING_STORYBOARD)
        self._log(AgentTag.ORCHESTRATOR, "Script approved. Calling the visual agent.")
        self._log(AgentTag.VISUAL, "Visualising the script and splitting it into frames...")

        script = list(self.state.script)
        try:
            frames = list(self._adapters.generate_storyboard(script))
            check_partition(script, frames)
        except Exception as e:
            logger.error(f"Storyboard generation failed: {e}")
            self._fail("Error: storyboard generation failed.")
            return self.state

        self._log(AgentTag.VISUAL, f"Storyboard complete ({len(frames)} scenes). Awaiting review.")
        self._store.update(
            frames=frames,
            current_frame_index=0,
            status=ProjectStatus.REVIEW_STORYBOARD,
        )
        return self.state

    def confirm_storyboard(self) -> ProjectState:
        """Approve the storyboard and produce every scene.

        The project always ends in COMPLETED, whatever happened to the
        individual scenes.

        Raises:
            InvalidStateError: If the project is not in REVIEW_STORYBOARD.
        """
        self._require_status(ProjectStatus.REVIEW_STORYBOARD)
        self._set_status(ProjectStatus.PRODUCING)
        self._log(AgentTag.ORCHESTRATOR, "Production pipeline started. Generating scene assets.")

        total = len(self.state.frames)
        produced = 0
        for index in range(total):
            if self._produce_frame(index):
                produced += 1

        self._log(
            AgentTag.ORCHESTRATOR,
            f"All work finished: {produced}/{total} scenes produced assets.",
        )
        self._set_status(ProjectStatus.COMPLETED)
        return self.state

    def update_frame(self, index: int, **fields: Any) -> Frame:
        """Apply a user edit, such as a new transition, to one frame.

        Raises:
            InvalidStateError: If there are no frames yet.
            IndexError: If ``index`` is out of range.
            ValueError: If a field is unknown or owned by the storyboard.
        """
        unknown = set(fields) - set(Frame.model_fields)
        if unknown:
            raise ValueError(f"Unknown frame fields: {', '.join(sorted(unknown))}")
        protected = set(fields) & PROTECTED_FRAME_FIELDS
        if protected:
            raise ValueError(f"Frame fields cannot be edited: {', '.join(sorted(protected))}")
        return self._store.update_frame(index, **fields)

    def select_frame(self, index: int) -> None:
        """Select the frame shown to the user."""
        self._store.select_frame(index)

    def _produce_frame(self, index: int) -> bool:
        """Generate the image and speech for one frame.

        Returns:
            True if at least one asset was generated.
        """
        frame = self.state.frames[index]
        scene = frame.scene_number

        self._store.update_frame(index, select=True, is_generating=True)
        self._log(AgentTag.VISUAL, f"Rendering scene {scene} (Imagen)...")

        image_url: Optional[str] = None
        try:
            image_url = _asset_reference(self._adapters.generate_frame_image(frame.image_prompt))
        except Exception as e:
            logger.error(f"Scene {scene} image generation failed: {e}")
            self._log(AgentTag.ORCHESTRATOR, f"Scene {scene}: image generation failed.")

        audio_url: Optional[str] = None
        if frame.script_lines:
            self._log(AgentTag.AUDIO, f"Synthesizing speech for scene {scene}...")
            try:
                audio_url = _asset_reference(self._adapters.generate_speech(frame.first_dialogue))
            except Exception as e:
                logger.error(f"Scene {scene} speech generation failed: {e}")
                self._log(AgentTag.ORCHESTRATOR, f"Scene {scene}: speech generation failed.")

        updates: dict[str, Any] = {"is_generating": False}
        if image_url:
            updates["generated_image_url"] = image_url
        if audio_url:
            updates["generated_audio_url"] = audio_url
        try:
            self._store.update_frame(index, **updates)
        except ValueError as e:
            logger.error(f"Scene {scene} assets could not be stored: {e}")
            self._log(AgentTag.ORCHESTRATOR, f"Scene {scene}: storing assets failed.")
            self._store.update_frame(index, is_generating=False)
            return False

        if image_url or audio_url:
            self._log(AgentTag.ORCHESTRATOR, f"Scene {scene} assets generated.")
            return True

        self._log(AgentTag.ORCHESTRATOR, f"Scene {scene}: no assets were generated.")
        return False

    def _log(self, agent: AgentTag, message: str) -> None:
        self._store.append_log(agent, message)

    def _fail(self, message: str) -> None:
        self._log(AgentTag.ORCHESTRATOR, message)
        self._set_status(ProjectStatus.ERROR)

    def _require_status(self, expected: ProjectStatus) -> None:
        current = self.state.status
        if current != expected:
            raise InvalidStateError(
                f"Expected project status {expected.value}, got {current.value}"
            )

    def _require_transition(self, target: ProjectStatus) -> None:
        current = self.state.status
        if not can_transition(current, target):
            raise InvalidStateError(f"Cannot move from {current.value} to {target.value}")

    def _set_status(self, target: ProjectStatus) -> None:
        self._require_transition(target)
        logger.debug(f"Status {self.state.status.value} -> {target.value}")
        self._store.update(status=target)


def _asset_reference(value: Any) -> Optional[str]:
    """Return a generator result as an asset reference.

    Raises:
        GenerationError: If the result is neither None nor a string.
    """
    if value is None or isinstance(value, str):
        return value
    raise GenerationError(f"Expected an asset reference, got {type(value).__name__}")


def check_partition(script: list[ScriptLine], frames: list[Frame]) -> None:
    """Check that the frames' script lines are exactly the script, in order.

    Raises:
        GenerationError: If lines are missing, duplicated or reordered.
    """
    covered = [line.id for frame in frames for line in frame.script_lines]
    expected = [line.id for line in script]
    if covered != expected:
        raise GenerationError(
            f"Storyboard frames cover {len(covered)} lines that do not match "
            f"the {len(expected)}-line script"
        )

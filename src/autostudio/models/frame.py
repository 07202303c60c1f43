"""Storyboard frame data model."""

from enum import Enum
from typing import List, Optional
from pydantic import BaseModel, Field

from .script import ScriptLine


class TransitionType(str, Enum):
    """Transition into a frame."""
    CUT = "CUT"
    FADE_IN = "FADE_IN"
    FADE_OUT = "FADE_OUT"
    CROSS_DISSOLVE = "CROSS_DISSOLVE"


class Transition(BaseModel):
    """Transition played when a frame starts."""

    type: TransitionType = Field(default=TransitionType.CUT, description="Transition kind")
    duration: float = Field(default=0.0, description="Transition length in seconds", ge=0)

    class Config:
        """Pydantic config."""
        frozen = True


class Frame(BaseModel):
    """One scene of the storyboard, covering a contiguous slice of the script."""

    id: str = Field(..., description="Unique frame identifier")
    scene_number: int = Field(..., description="Ordering key assigned by the storyboard")
    duration: float = Field(..., description="Frame duration in seconds", ge=0)
    script_lines: List[ScriptLine] = Field(default_factory=list, description="Lines spoken in this frame")
    visual_description: str = Field(default="", description="What the frame shows")
    image_prompt: str = Field(default="", description="Prompt for the image generator")
    audio_prompt: str = Field(default="", description="Music/SFX direction")
    transition: Transition = Field(default_factory=Transition, description="Transition into this frame")

    # Generated assets
    generated_image_url: Optional[str] = Field(None, description="Image URL or data URI")
    generated_audio_url: Optional[str] = Field(None, description="Speech data URI")
    is_generating: bool = Field(default=False, description="Production is working on this frame")

    class Config:
        """Pydantic config."""
        frozen = True

    @property
    def first_dialogue(self) -> Optional[str]:
        """Dialogue of the first script line, the only one that gets voiced."""
        if not self.script_lines:
            return None
        return self.script_lines[0].dialogue

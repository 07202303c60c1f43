"""Script data model."""

from pydantic import BaseModel, Field


class ScriptLine(BaseModel):
    """A single line of dialogue in the script."""

    id: str = Field(..., description="Unique line identifier")
    character: str = Field(..., description="Speaker, 'Narrator' or a character name")
    dialogue: str = Field(..., description="Spoken text")
    emotion: str = Field(default="neutral", description="Delivery/emotion tag")

    class Config:
        """Pydantic config."""
        frozen = True

    def as_prompt_line(self) -> str:
        """Render the line the way the storyboard prompt expects it."""
        return f"{self.character} ({self.emotion}): {self.dialogue}"

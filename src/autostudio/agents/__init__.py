"""AI agents for script and storyboard generation."""

from .base import BaseAgent
from .script import ScriptAgent
from .visual import VisualAgent

__all__ = ["BaseAgent", "ScriptAgent", "VisualAgent"]

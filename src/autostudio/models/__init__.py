"""Data models for AutoStudio projects."""

from .script import ScriptLine
from .frame import Frame, Transition, TransitionType
from .project import (
    AgentLogEntry,
    AgentTag,
    ProjectState,
    ProjectStatus,
    STAGE_TRANSITIONS,
    can_transition,
)

__all__ = [
    "ScriptLine",
    "Frame",
    "Transition",
    "TransitionType",
    "AgentLogEntry",
    "AgentTag",
    "ProjectState",
    "ProjectStatus",
    "STAGE_TRANSITIONS",
    "can_transition",
]

"""Project state model."""

from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Dict, FrozenSet, List, Optional
from pydantic import BaseModel, Field, model_validator
import yaml

from .frame import Frame
from .script import ScriptLine


class ProjectStatus(str, Enum):
    """Pipeline stage."""
    IDLE = "IDLE"
    PLANNING_SCRIPT = "PLANNING_SCRIPT"
    REVIEW_SCRIPT = "REVIEW_SCRIPT"
    PLANNING_STORYBOARD = "PLANNING_STORYBOARD"
    REVIEW_STORYBOARD = "REVIEW_STORYBOARD"
    PRODUCING = "PRODUCING"
    COMPLETED = "COMPLETED"
    ERROR = "ERROR"


# Allowed successors of each stage. PLANNING_SCRIPT is reachable from any
# settled stage because submitting a new idea restarts the project.
STAGE_TRANSITIONS: Dict[ProjectStatus, FrozenSet[ProjectStatus]] = {
    ProjectStatus.IDLE: frozenset({ProjectStatus.PLANNING_SCRIPT}),
    ProjectStatus.PLANNING_SCRIPT: frozenset({ProjectStatus.REVIEW_SCRIPT, ProjectStatus.ERROR}),
    ProjectStatus.REVIEW_SCRIPT: frozenset({
        ProjectStatus.PLANNING_STORYBOARD,
        ProjectStatus.PLANNING_SCRIPT,
    }),
    ProjectStatus.PLANNING_STORYBOARD: frozenset({
        ProjectStatus.REVIEW_STORYBOARD,
        ProjectStatus.ERROR,
    }),
    ProjectStatus.REVIEW_STORYBOARD: frozenset({
        ProjectStatus.PRODUCING,
        ProjectStatus.PLANNING_SCRIPT,
    }),
    ProjectStatus.PRODUCING: frozenset({ProjectStatus.COMPLETED}),
    ProjectStatus.COMPLETED: frozenset({ProjectStatus.PLANNING_SCRIPT}),
    ProjectStatus.ERROR: frozenset({ProjectStatus.PLANNING_SCRIPT}),
}

# Stages during which a generator call is in flight
IN_FLIGHT_STATES = frozenset({
    ProjectStatus.PLANNING_SCRIPT,
    ProjectStatus.PLANNING_STORYBOARD,
    ProjectStatus.PRODUCING,
})


def can_transition(current: ProjectStatus, target: ProjectStatus) -> bool:
    """Check whether the stage graph allows moving from current to target."""
    return target in STAGE_TRANSITIONS.get(current, frozenset())


class AgentTag(str, Enum):
    """Which agent wrote an activity log entry."""
    ORCHESTRATOR = "ORCHESTRATOR"
    SCRIPT = "SCRIPT"
    VISUAL = "VISUAL"
    AUDIO = "AUDIO"


class AgentLogEntry(BaseModel):
    """Activity log entry. Never modified once appended."""

    id: str = Field(..., description="Unique entry identifier")
    agent: AgentTag = Field(..., description="Agent that produced the entry")
    message: str = Field(..., description="Human readable message")
    timestamp: datetime = Field(default_factory=datetime.now, description="Creation time")

    class Config:
        """Pydantic config."""
        frozen = True


class ProjectState(BaseModel):
    """Snapshot of a project. Replaced as a whole on every change."""

    status: ProjectStatus = Field(default=ProjectStatus.IDLE, description="Current stage")
    user_idea: str = Field(default="", description="Idea the project was started from")
    script: List[ScriptLine] = Field(default_factory=list, description="Generated script")
    frames: List[Frame] = Field(default_factory=list, description="Storyboard frames")
    logs: List[AgentLogEntry] = Field(default_factory=list, description="Activity log")
    current_frame_index: int = Field(default=0, description="Selected frame")

    class Config:
        """Pydantic config."""
        frozen = True

    @model_validator(mode="after")
    def _check_frame_index(self) -> "ProjectState":
        if self.frames:
            if not 0 <= self.current_frame_index < len(self.frames):
                raise ValueError(
                    f"current_frame_index {self.current_frame_index} out of range "
                    f"for {len(self.frames)} frames"
                )
        elif self.current_frame_index != 0:
            raise ValueError("current_frame_index must be 0 when there are no frames")
        return self

    @property
    def current_frame(self) -> Optional[Frame]:
        """Return the selected frame, if any."""
        if not self.frames:
            return None
        return self.frames[self.current_frame_index]

    def to_yaml(self, path: Path) -> None:
        """Export the project to a YAML file."""
        with open(path, "w", encoding="utf-8") as f:
            yaml.safe_dump(
                self.model_dump(mode="json"),
                f,
                default_flow_style=False,
                allow_unicode=True,
                sort_keys=False,
            )

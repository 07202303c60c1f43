"""Shared pytest fixtures and configuration."""

from unittest.mock import MagicMock

import pytest

from autostudio.models import Frame, ScriptLine, Transition, TransitionType
from autostudio.orchestrator import Adapters, Orchestrator

SCRIPT_DATA = [
    ("Narrator", "Neon rain falls on Sector 9.", "calm"),
    ("K-7", "Target acquired. Pursuit engaged.", "cold"),
    ("Mira", "It's right behind me!", "panicked"),
    ("K-7", "You cannot outrun the grid.", "menacing"),
    ("Mira", "Watch me.", "defiant"),
    ("Narrator", "Somewhere above, the city kept its secrets.", "wistful"),
]

# (start, end) script slices and transitions of the five-scene storyboard
STORYBOARD_LAYOUT = [
    ((0, 1), TransitionType.FADE_IN),
    ((2, 2), TransitionType.CUT),
    ((3, 3), TransitionType.CUT),
    ((4, 4), TransitionType.CROSS_DISSOLVE),
    ((5, 5), TransitionType.FADE_OUT),
]


def make_frames(script, layout):
    """Build frames covering ``script`` with the given (range, transition) layout."""
    frames = []
    for i, ((start, end), transition_type) in enumerate(layout):
        frames.append(Frame(
            id=f"frame-{i}",
            scene_number=i + 1,
            duration=5.0,
            script_lines=script[start:end + 1],
            visual_description=f"Scene {i + 1} description",
            image_prompt=f"prompt {i + 1}",
            audio_prompt="synthwave",
            transition=Transition(type=transition_type, duration=0.5),
        ))
    return frames


@pytest.fixture
def script_lines():
    """Six-line script for the robot chase idea."""
    return [
        ScriptLine(id=f"script-{i}", character=character, dialogue=dialogue, emotion=emotion)
        for i, (character, dialogue, emotion) in enumerate(SCRIPT_DATA)
    ]


@pytest.fixture
def storyboard(script_lines):
    """Five frames partitioning the six-line script."""
    return make_frames(script_lines, STORYBOARD_LAYOUT)


@pytest.fixture
def adapters(script_lines, storyboard):
    """Adapters that succeed with canned results."""
    return Adapters(
        generate_script=MagicMock(return_value=script_lines),
        generate_storyboard=MagicMock(return_value=storyboard),
        generate_frame_image=MagicMock(side_effect=lambda prompt: f"https://img.test/{prompt}"),
        generate_speech=MagicMock(side_effect=lambda text: f"data:audio/wav;base64,{len(text)}"),
    )


@pytest.fixture
def orchestrator(adapters):
    """Orchestrator with a fresh store."""
    return Orchestrator(adapters)


@pytest.fixture
def storyboard_ready(orchestrator):
    """Orchestrator advanced to REVIEW_STORYBOARD."""
    orchestrator.start_project("robot chase in a cyberpunk city")
    orchestrator.confirm_script()
    return orchestrator

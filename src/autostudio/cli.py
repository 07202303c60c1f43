"""CLI entry point for AutoStudio."""

import logging
import typer
from pathlib import Path
from typing import List, Optional

from . import __version__
from .config import config
from .errors import AutoStudioError
from .models import AgentLogEntry, ProjectState, ProjectStatus, Transition, TransitionType

app = typer.Typer(
    name="autostudio",
    help="AI short-form video studio: idea -> script -> storyboard -> scenes",
    no_args_is_help=True
)

AGENT_ICONS = {
    "ORCHESTRATOR": "🎛️ ",
    "SCRIPT": "✍️ ",
    "VISUAL": "🎨",
    "AUDIO": "🔊",
}


def setup_logging(verbose: bool = False) -> None:
    """Configure logging."""
    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(levelname)s: %(message)s",
    )


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"autostudio version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Optional[bool] = typer.Option(
        None,
        "--version",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit"
    )
) -> None:
    """AutoStudio - Create short videos from ideas using AI agents."""
    pass


def parse_transition_edit(value: str) -> tuple[int, Transition]:
    """Parse ``SCENE=TYPE[:SECONDS]``, e.g. ``3=CROSS_DISSOLVE:0.5``.

    Raises:
        typer.BadParameter: If the value is malformed.
    """
    scene, sep, spec = value.partition("=")
    if not sep:
        raise typer.BadParameter(f"Expected SCENE=TYPE[:SECONDS], got '{value}'")

    type_name, _, seconds = spec.partition(":")
    try:
        scene_number = int(scene)
        transition_type = TransitionType(type_name.strip().upper())
        duration = float(seconds) if seconds else 0.5
    except ValueError:
        raise typer.BadParameter(f"Invalid transition edit '{value}'")

    if duration < 0:
        raise typer.BadParameter(f"Transition duration must not be negative: '{value}'")
    return scene_number, Transition(type=transition_type, duration=duration)


def echo_log_entry(entry: AgentLogEntry) -> None:
    icon = AGENT_ICONS.get(entry.agent.value, "•")
    typer.echo(f"{icon} [{entry.agent.value}] {entry.message}")


def echo_script(state: ProjectState) -> None:
    typer.echo("\n📜 Script:")
    for i, line in enumerate(state.script):
        typer.echo(f"   [{i}] {line.character} ({line.emotion}): {line.dialogue}")


def echo_storyboard(state: ProjectState) -> None:
    typer.echo("\n🎞️  Storyboard:")
    for frame in state.frames:
        transition = f"{frame.transition.type.value} {frame.transition.duration}s"
        typer.echo(
            f"   Scene {frame.scene_number}: {frame.duration}s, "
            f"{len(frame.script_lines)} line(s), transition {transition}"
        )
        description = frame.visual_description
        if len(description) > 70:
            description = description[:70] + "..."
        typer.echo(f"      → {description}")


def echo_summary(state: ProjectState) -> None:
    typer.echo("\n📊 Summary:")
    for frame in state.frames:
        image_icon = "✅" if frame.generated_image_url else "❌"
        audio_icon = "✅" if frame.generated_audio_url else ("➖" if not frame.script_lines else "❌")
        typer.echo(f"   Scene {frame.scene_number}: image {image_icon}  audio {audio_icon}")


def _scene_index(state: ProjectState, scene_number: int) -> int:
    for i, frame in enumerate(state.frames):
        if frame.scene_number == scene_number:
            return i
    raise typer.BadParameter(f"No scene {scene_number} in storyboard")


def _edit_transitions_interactively(orchestrator) -> None:
    while True:
        edit = typer.prompt(
            "Edit a transition (SCENE=TYPE[:SECONDS], blank to continue)",
            default="",
            show_default=False,
        )
        if not edit.strip():
            return
        try:
            scene_number, transition = parse_transition_edit(edit)
            index = _scene_index(orchestrator.state, scene_number)
        except typer.BadParameter as e:
            typer.echo(f"⚠️  {e}")
            continue
        orchestrator.update_frame(index, transition=transition)
        typer.echo(f"   Scene {scene_number} → {transition.type.value} {transition.duration}s")


def save_project_assets(state: ProjectState, assets_dir: Path) -> None:
    """Write every generated asset to ``assets_dir``."""
    from .services import save_asset

    for frame in state.frames:
        for kind, reference in (
            ("image", frame.generated_image_url),
            ("audio", frame.generated_audio_url),
        ):
            if not reference:
                continue
            try:
                path = save_asset(reference, assets_dir / f"scene_{frame.scene_number:02d}_{kind}")
                typer.echo(f"   💾 {path}")
            except Exception as e:
                typer.echo(f"⚠️  Could not save scene {frame.scene_number} {kind}: {e}")


@app.command()
def run(
    idea: str = typer.Argument(
        ...,
        help="Creative idea for the video"
    ),
    yes: bool = typer.Option(
        False,
        "--yes",
        "-y",
        help="Approve the script and storyboard without asking"
    ),
    transitions: Optional[List[str]] = typer.Option(
        None,
        "--transition",
        "-t",
        help="Transition edit applied during storyboard review, e.g. 3=CROSS_DISSOLVE:0.5"
    ),
    assets_dir: Optional[Path] = typer.Option(
        None,
        "--assets",
        "-a",
        help="Directory to save generated images and audio"
    ),
    export_path: Optional[Path] = typer.Option(
        None,
        "--export",
        "-e",
        help="Write the finished project to a YAML file"
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable verbose logging"
    ),
) -> None:
    """Run the full pipeline: script, storyboard and scene production."""
    from .orchestrator import Adapters, Orchestrator

    setup_logging(verbose)

    edits = [parse_transition_edit(value) for value in transitions or []]

    try:
        config.validate_required()
        config.validate_google_required()
        orchestrator = Orchestrator(Adapters.from_config())
    except ValueError as e:
        typer.echo(f"❌ Configuration error: {e}")
        raise typer.Exit(1)

    seen_logs = 0

    def on_change(state: ProjectState) -> None:
        nonlocal seen_logs
        for entry in state.logs[seen_logs:]:
            echo_log_entry(entry)
        seen_logs = len(state.logs)

    orchestrator.store.subscribe(on_change)

    typer.echo(f"🎬 AutoStudio: {idea}\n")

    # Script
    try:
        state = orchestrator.start_project(idea)
    except (ValueError, AutoStudioError) as e:
        typer.echo(f"❌ {e}")
        raise typer.Exit(1)

    if state.status == ProjectStatus.ERROR:
        raise typer.Exit(1)

    echo_script(state)
    if not yes and not typer.confirm("\nApprove script?", default=True):
        typer.echo("Stopped at script review.")
        raise typer.Exit(1)

    # Storyboard
    state = orchestrator.confirm_script()
    if state.status == ProjectStatus.ERROR:
        raise typer.Exit(1)

    for scene_number, transition in edits:
        try:
            index = _scene_index(state, scene_number)
        except typer.BadParameter as e:
            typer.echo(f"⚠️  {e}")
            continue
        orchestrator.update_frame(index, transition=transition)

    state = orchestrator.state
    echo_storyboard(state)
    if not yes:
        _edit_transitions_interactively(orchestrator)
        if not typer.confirm("\nStart production?", default=True):
            typer.echo("Stopped at storyboard review.")
            raise typer.Exit(1)

    # Production
    state = orchestrator.confirm_storyboard()
    echo_summary(state)

    if assets_dir:
        typer.echo(f"\n📁 Saving assets to {assets_dir}")
        save_project_assets(state, assets_dir)

    if export_path:
        try:
            export_path.parent.mkdir(parents=True, exist_ok=True)
            state.to_yaml(export_path)
            typer.echo(f"\n✅ Project exported: {export_path}")
        except OSError as e:
            typer.echo(f"❌ Error exporting project: {e}")
            raise typer.Exit(1)


@app.command()
def script(
    idea: str = typer.Argument(
        ...,
        help="Creative idea for the video"
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable verbose logging"
    ),
) -> None:
    """Write a script for an idea without storyboarding it."""
    from .agents import ScriptAgent

    setup_logging(verbose)

    if not idea.strip():
        typer.echo("❌ Idea must not be empty")
        raise typer.Exit(1)

    try:
        agent = ScriptAgent()
        typer.echo(f"✍️  Writing script with {agent.model}...")
        lines = agent.run(idea)
    except (ValueError, AutoStudioError) as e:
        typer.echo(f"❌ Error generating script: {e}")
        raise typer.Exit(1)

    echo_script(ProjectState(user_idea=idea, script=lines))


@app.command()
def imagen(
    prompt: str = typer.Argument(
        ...,
        help="Text description of the image to generate"
    ),
    output: Path = typer.Option(
        Path("./assets/frame.jpg"),
        "--output",
        "-o",
        help="Output image file path"
    ),
    aspect_ratio: Optional[str] = typer.Option(
        None,
        "--aspect-ratio",
        "-a",
        help="Image aspect ratio (1:1, 16:9, 9:16, 4:3, 3:4)"
    ),
    negative: Optional[str] = typer.Option(
        None,
        "--negative",
        "-n",
        help="Negative prompt - things to avoid"
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable verbose logging"
    ),
) -> None:
    """Generate a single image using Google Imagen."""
    from .services import ImagenClient, save_asset

    setup_logging(verbose)
    typer.echo(f"🎨 Generating image with Imagen")
    typer.echo(f"   Prompt: {prompt[:70]}...")

    try:
        client = ImagenClient()
        typer.echo(f"   Model: {client.model}")
    except ValueError as e:
        typer.echo(f"❌ Configuration error: {e}")
        raise typer.Exit(1)

    result = client.generate_image(
        prompt=prompt,
        aspect_ratio=aspect_ratio,
        negative_prompt=negative,
    )

    if result.error_message or not result.data_uri:
        typer.echo(f"❌ Generation failed: {result.error_message}")
        raise typer.Exit(1)

    path = save_asset(result.data_uri, output)
    typer.echo(f"✅ Image saved: {path}")


@app.command()
def speak(
    text: str = typer.Argument(
        ...,
        help="Text to synthesize"
    ),
    output: Path = typer.Option(
        Path("./assets/speech.wav"),
        "--output",
        "-o",
        help="Output audio file path"
    ),
    voice: Optional[str] = typer.Option(
        None,
        "--voice",
        help="Prebuilt voice name (defaults to TTS_VOICE)"
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable verbose logging"
    ),
) -> None:
    """Synthesize speech for a line of dialogue."""
    from .services import SpeechClient, save_asset

    setup_logging(verbose)

    try:
        client = SpeechClient(voice=voice)
    except ValueError as e:
        typer.echo(f"❌ Configuration error: {e}")
        raise typer.Exit(1)

    typer.echo(f"🔊 Synthesizing with {client.model} ({client.voice})")
    audio = client.generate_speech(text)
    if not audio:
        typer.echo("❌ No audio generated")
        raise typer.Exit(1)

    path = save_asset(audio, output)
    typer.echo(f"✅ Audio saved: {path}")


if __name__ == "__main__":
    app()

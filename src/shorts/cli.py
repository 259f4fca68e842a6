"""CLI entry point for the shorts producer."""

import asyncio
import logging
from contextlib import contextmanager
from enum import Enum
from pathlib import Path
from typing import Iterator, List, Optional

import typer

from . import __version__
from .config import config
from .errors import StudioError, ValidationError
from .models import STYLES, AspectRatio, GenerationStatus, Project
from .studio import Studio

app = typer.Typer(
    name="shorts",
    help="AI-powered short video producer",
    no_args_is_help=True
)


class EditField(str, Enum):
    """Editable script fields."""
    TEXT = "text"
    PROMPT = "prompt"
    BGM = "bgm"


WorkspaceOption = typer.Option(
    None,
    "--workspace",
    "-w",
    help="Project workspace directory (defaults to SHORTS_WORKSPACE or the current directory)",
    file_okay=False,
    dir_okay=True,
)

VerboseOption = typer.Option(
    False,
    "--verbose",
    "-v",
    help="Enable verbose logging"
)


def setup_logging(verbose: bool = False) -> None:
    """Configure logging."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(levelname)s: %(message)s",
    )


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"shorts version {__version__}")
        raise typer.Exit()


def _workspace(path: Optional[Path]) -> Path:
    return path or config.workspace


def _load(workspace: Path) -> Project:
    try:
        return Project.load(workspace)
    except FileNotFoundError:
        typer.echo(f"❌ No project found in {workspace}")
        typer.echo("   Run 'shorts draft' to start a new project")
        raise typer.Exit(1)


def _connect(project: Project) -> Studio:
    try:
        return Studio.from_config(project)
    except ValueError as e:
        typer.echo(f"❌ Configuration error: {e}")
        raise typer.Exit(1)


@contextmanager
def _session(studio: Studio, workspace: Path) -> Iterator[None]:
    """Run studio operations and save the project however they end.

    Validation errors are raised before anything changes, so nothing is saved.
    """
    try:
        yield
    except ValidationError as e:
        typer.echo(f"❌ {e}")
        raise typer.Exit(1)
    except StudioError as e:
        studio.project.save(workspace)
        typer.echo(f"❌ {e}")
        raise typer.Exit(1)
    except BaseException:
        studio.project.save(workspace)
        raise
    studio.project.save(workspace)


def _report(studio: Studio) -> None:
    """Print where the project ended up."""
    project = studio.project

    for _, message in sorted(project.scene_errors.items()):
        typer.echo(f"   ⚠️  {message}")

    if project.status == GenerationStatus.ERROR:
        typer.echo(f"❌ {project.status.label}: {project.error}")
        raise typer.Exit(1)

    typer.echo(f"✅ {project.status.label}")


def _scene_indices(scenes: List[int], project: Project) -> List[int]:
    total = project.scene_total
    indices = []
    for number in scenes:
        if not 1 <= number <= total:
            typer.echo(f"❌ Scene {number} does not exist (1-{total})")
            raise typer.Exit(1)
        indices.append(number - 1)
    return list(dict.fromkeys(indices))


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
    """Shorts Creator - script, visuals, narration and packaging with AI."""
    pass


@app.command()
def draft(
    topic: str = typer.Argument(
        ...,
        help="Subject of the short"
    ),
    scenes: Optional[int] = typer.Option(
        None,
        "--scenes",
        "-n",
        help="Number of scenes (default 5)",
        min=1,
        max=20
    ),
    aspect_ratio: AspectRatio = typer.Option(
        AspectRatio.PORTRAIT,
        "--aspect-ratio",
        "-a",
        help="Output aspect ratio"
    ),
    style: str = typer.Option(
        "Photorealistic",
        "--style",
        "-s",
        help=f"Preset visual style ({', '.join(STYLES)})"
    ),
    custom_style: Optional[str] = typer.Option(
        None,
        "--custom-style",
        "-c",
        help="Free-form visual style; overrides --style"
    ),
    workspace: Optional[Path] = WorkspaceOption,
    verbose: bool = VerboseOption,
) -> None:
    """Draft a new script. Discards any previous script and assets."""
    setup_logging(verbose)
    workspace = _workspace(workspace)
    if style not in STYLES and not custom_style:
        typer.echo(f"❌ Unknown style: {style}. Use --custom-style for free-form styles")
        raise typer.Exit(1)

    studio = _connect(Project())
    typer.echo(f"🎬 Drafting: {topic}")

    with _session(studio, workspace):
        asyncio.run(studio.draft_script(
            topic,
            scene_count=scenes,
            aspect_ratio=aspect_ratio.value,
            style=style,
            custom_style=custom_style,
        ))

    script = studio.project.script
    if script is not None:
        typer.echo(f"\n📋 {script.title}")
        for i, scene in enumerate(script.scenes, 1):
            typer.echo(f"   {i}. {scene.text}")
            typer.echo(f"      → {scene.image_prompt[:70]}")
        typer.echo(f"   🎵 {script.bgm_prompts[0]}")

    _report(studio)


@app.command()
def edit(
    field: EditField = typer.Argument(..., help="Field to edit"),
    number: int = typer.Argument(..., help="Scene (or BGM prompt) number, 1-based", min=1),
    value: str = typer.Argument(..., help="New value"),
    workspace: Optional[Path] = WorkspaceOption,
) -> None:
    """Edit a scene line, a scene's visual prompt or a BGM prompt."""
    workspace = _workspace(workspace)
    project = _load(workspace)
    # Edits never reach the generation services
    studio = Studio(writer=None, media=None, project=project)

    try:
        if field == EditField.TEXT:
            studio.update_scene_text(number - 1, value)
        elif field == EditField.PROMPT:
            studio.update_scene_prompt(number - 1, value)
        else:
            studio.update_bgm_prompt(number - 1, value)
    except StudioError as e:
        typer.echo(f"❌ {e}")
        raise typer.Exit(1)

    project.save(workspace)
    typer.echo(f"✏️  Updated {field.value} #{number}")


@app.command()
def image(
    scenes: List[int] = typer.Argument(..., help="Scene numbers to (re)render, 1-based"),
    workspace: Optional[Path] = WorkspaceOption,
    verbose: bool = VerboseOption,
) -> None:
    """Render images for individual scenes. Several scenes render concurrently."""
    setup_logging(verbose)
    workspace = _workspace(workspace)
    studio = _connect(_load(workspace))
    indices = _scene_indices(scenes, studio.project)

    async def run() -> list:
        return await asyncio.gather(
            *(studio.generate_single_image(i) for i in indices),
            return_exceptions=True,
        )

    typer.echo(f"🎨 Rendering {len(indices)} scene(s)")
    with _session(studio, workspace):
        results = asyncio.run(run())

    for i, result in zip(indices, results):
        if isinstance(result, BaseException):
            typer.echo(f"   ❌ scene {i + 1}: {result!r}")
        else:
            typer.echo(f"   {'✅' if result else '❌'} scene {i + 1}")
    _report(studio)


@app.command()
def video(
    scenes: List[int] = typer.Argument(..., help="Scene numbers to animate, 1-based"),
    workspace: Optional[Path] = WorkspaceOption,
    verbose: bool = VerboseOption,
) -> None:
    """Animate scene images into clips. Scenes without an image are skipped."""
    setup_logging(verbose)
    workspace = _workspace(workspace)
    studio = _connect(_load(workspace))
    indices = _scene_indices(scenes, studio.project)

    async def run() -> list:
        return await asyncio.gather(
            *(studio.generate_single_video(i) for i in indices),
            return_exceptions=True,
        )

    typer.echo(f"🎞️  Animating {len(indices)} scene(s); this can take several minutes")
    with _session(studio, workspace):
        results = asyncio.run(run())

    for i, result in zip(indices, results):
        if isinstance(result, BaseException):
            typer.echo(f"   ❌ scene {i + 1}: {result!r}")
        elif result:
            typer.echo(f"   ✅ scene {i + 1}")
        elif not studio.project.images[i]:
            typer.echo(f"   ⏭️  scene {i + 1}: no image yet")
        else:
            typer.echo(f"   ❌ scene {i + 1}")
    _report(studio)


@app.command()
def audio(
    workspace: Optional[Path] = WorkspaceOption,
    verbose: bool = VerboseOption,
) -> None:
    """Synthesize the narration track."""
    setup_logging(verbose)
    workspace = _workspace(workspace)
    studio = _connect(_load(workspace))

    typer.echo("🎙️  Synthesizing narration")
    with _session(studio, workspace):
        asyncio.run(studio.generate_audio())

    if studio.project.audio:
        typer.echo(f"   Duration: {studio.narration_duration():.1f}s")
    _report(studio)


@app.command()
def assets(
    workspace: Optional[Path] = WorkspaceOption,
    verbose: bool = VerboseOption,
) -> None:
    """Render every scene image in order, then synthesize the narration."""
    setup_logging(verbose)
    workspace = _workspace(workspace)
    studio = _connect(_load(workspace))

    typer.echo(f"⚡ Generating assets for {studio.project.scene_total} scenes")
    with _session(studio, workspace):
        asyncio.run(studio.generate_all_assets())

    rendered = sum(1 for img in studio.project.images if img)
    typer.echo(f"   Images: {rendered}/{studio.project.scene_total}")
    _report(studio)


@app.command()
def package(
    output: Optional[Path] = typer.Option(
        None,
        "--output",
        "-o",
        help="Where to write the archive (defaults to <title>_bundle.zip in the workspace)"
    ),
    workspace: Optional[Path] = WorkspaceOption,
    verbose: bool = VerboseOption,
) -> None:
    """Bundle script, narration, images and clips into a ZIP archive."""
    from .packaging import package_filename

    setup_logging(verbose)
    workspace = _workspace(workspace)
    project = _load(workspace)
    studio = Studio(writer=None, media=None, project=project)

    try:
        archive = asyncio.run(studio.build_package())
    except StudioError as e:
        typer.echo(f"❌ {e}")
        raise typer.Exit(1)

    project.save(workspace)
    if archive is None:
        typer.echo(f"❌ {project.error}")
        raise typer.Exit(1)

    output = output or workspace / package_filename(project.script)
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_bytes(archive)
    typer.echo(f"📦 Package saved: {output} ({len(archive) / 1024:.0f} KB)")


@app.command()
def preview(
    output: Path = typer.Option(
        Path("preview.mp4"),
        "--output",
        "-o",
        help="Output video path"
    ),
    fps: int = typer.Option(24, "--fps", help="Frames per second", min=1, max=60),
    transition: float = typer.Option(
        0.0,
        "--transition",
        "-t",
        help="Crossfade between scenes in seconds"
    ),
    no_subtitles: bool = typer.Option(
        False,
        "--no-subtitles",
        help="Do not overlay narration lines"
    ),
    workspace: Optional[Path] = WorkspaceOption,
    verbose: bool = VerboseOption,
) -> None:
    """Render a slideshow preview synced to the narration."""
    from .editor.preview import render_preview

    setup_logging(verbose)
    project = _load(_workspace(workspace))

    try:
        path = render_preview(
            project,
            output,
            fps=fps,
            transition=transition,
            subtitles=not no_subtitles,
        )
    except ValueError as e:
        typer.echo(f"❌ {e}")
        raise typer.Exit(1)

    typer.echo(f"✅ Preview saved: {path}")


@app.command()
def status(
    workspace: Optional[Path] = WorkspaceOption,
) -> None:
    """Show project status."""
    project = _load(_workspace(workspace))
    script = project.script

    typer.echo(f"📁 Topic: {project.topic}")
    typer.echo(f"   Status: {project.status.label}")
    typer.echo(f"   Style: {project.style}")
    typer.echo(f"   Aspect ratio: {project.aspect_ratio.value}")
    if project.error:
        typer.echo(f"   Error: {project.error}")

    if script is None:
        return

    typer.echo(f"\n📋 {script.title}")
    for i, scene in enumerate(script.scenes):
        image_icon = "🖼️ " if project.images[i] else "⏳"
        video_icon = "🎞️ " if project.videos[i] else "  "
        typer.echo(f"   {image_icon}{video_icon} {i + 1}. {scene.text}")
        if i in project.scene_errors:
            typer.echo(f"      ⚠️  {project.scene_errors[i]}")

    for i, prompt in enumerate(script.bgm_prompts, 1):
        typer.echo(f"   🎵 {i}. {prompt}")

    narration = "✅" if project.audio else "⏳"
    packaged = "✅" if project.package else "⏳"
    typer.echo(f"\n   Narration: {narration}   Package: {packaged}")


if __name__ == "__main__":
    app()

"""CLI entry point for refcap.

Usage:
    refcap run                          # Run full pipeline
    refcap run-step s01_capture_views   # Run single step
    refcap capture --scene scene.yaml   # One-shot capture with inline options
    refcap info                         # Show pipeline info
"""

from __future__ import annotations

from contextlib import contextmanager
from pathlib import Path
from typing import Callable, Iterator

import typer
from rich.console import Console
from rich.progress import Progress
from rich.table import Table

from refcap.core.errors import RefcapError
from refcap.core.logging import setup_logging

app = typer.Typer(name="refcap", help="Four-direction reference captures of 3D assets")
console = Console()

DEFAULT_CONFIG = Path("configs/pipeline.yaml")


@contextmanager
def _capture_progress() -> Iterator[Callable[[str, float], None]]:
    """Rich progress bar driven by the capture step's progress callback."""
    with Progress(console=console, transient=True) as progress:
        task = progress.add_task("Capturing", total=1.0)

        def on_progress(asset_name: str, fraction: float) -> None:
            progress.update(task, completed=fraction, description=asset_name or "Capturing")

        yield on_progress


def _print_results(output) -> None:
    table = Table(title=f"Capture: {output.output_dir}")
    table.add_column("Asset", style="cyan")
    table.add_column("Status")
    table.add_column("Files", justify="right")
    table.add_column("Reason", style="dim")

    styles = {"captured": "green", "skipped": "yellow", "failed": "red"}
    for r in output.results:
        table.add_row(
            r.asset_name,
            f"[{styles[r.status]}]{r.status}[/{styles[r.status]}]",
            str(len(r.paths)),
            r.reason or "-",
        )
    console.print(table)
    console.print(
        f"[green]Done.[/green] Files: {output.files_written}, Output: {output.output_dir}"
    )


@app.command()
def run(config: Path = typer.Option(DEFAULT_CONFIG, help="Pipeline config path")) -> None:
    """Run the full pipeline."""
    setup_logging()
    from refcap.core.pipeline_runner import run_pipeline

    try:
        with _capture_progress() as on_progress:
            results = run_pipeline(config, step_options={"progress_callback": on_progress})
    except (RefcapError, ValueError) as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)

    for output in results.values():
        if hasattr(output, "files_written"):
            _print_results(output)


@app.command()
def run_step(
    step_name: str = typer.Argument(..., help="Step name (e.g. s01_capture_views)"),
    config: Path = typer.Option(DEFAULT_CONFIG, help="Pipeline config path"),
    input_json: str = typer.Option(None, "--input", "-i", help="Input as JSON string"),
) -> None:
    """Run a single pipeline step."""
    import json

    setup_logging()
    from refcap.core.pipeline_runner import load_pipeline_config, import_step_class, load_step_config

    pipeline_cfg = load_pipeline_config(config)
    entry = next((s for s in pipeline_cfg.steps if s.name == step_name), None)
    if entry is None:
        console.print(f"[red]Step '{step_name}' not found in pipeline config[/red]")
        raise typer.Exit(1)

    step_cls = import_step_class(entry.module)
    step_config = load_step_config(Path(entry.config_file), step_cls.config_type)
    step_instance = step_cls(config=step_config, data_root=pipeline_cfg.data_root)

    input_data = json.loads(input_json) if input_json else {}

    console.print(f"[green]Running step: {step_name}[/green]")
    step_input = step_cls.input_type(**input_data)
    try:
        output = step_instance.execute(step_input)
    except (RefcapError, ValueError) as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)
    console.print(f"[green]Done. Output:[/green] {output.model_dump_json(indent=2)}")


@app.command()
def capture(
    scene: Path = typer.Option(Path("configs/scene.yaml"), help="Host scene YAML"),
    assets: Path = typer.Option(Path("assets"), help="Asset catalog root"),
    folder: str = typer.Option("Png_folder", help="Catalog folder to capture"),
    output: Path = typer.Option(Path("CapturedPNGs"), help="Output folder"),
    width: int = typer.Option(1024, help="Image width (px)"),
    height: int = typer.Option(1024, help="Image height (px)"),
    msaa: int = typer.Option(4, help="Antialias samples (1, 2, 4, 8)"),
    light: bool = typer.Option(True, help="Add a temporary directional light"),
) -> None:
    """Capture every asset in one folder without a pipeline config."""
    setup_logging()
    from refcap.steps.s00_collect_assets.config import CollectAssetsConfig
    from refcap.steps.s00_collect_assets.contracts import CollectAssetsInput
    from refcap.steps.s00_collect_assets.step import CollectAssetsStep
    from refcap.steps.s01_capture_views.config import CaptureConfig
    from refcap.steps.s01_capture_views.contracts import CaptureInput
    from refcap.steps.s01_capture_views.step import CaptureViewsStep

    try:
        capture_cfg = CaptureConfig(
            scene_file=scene.resolve(),
            output_dir=output,
            width=width,
            height=height,
            msaa=msaa,
            add_directional_light=light,
        )
        collected = CollectAssetsStep(
            config=CollectAssetsConfig(catalog_root=assets.resolve(), folder=folder),
            data_root=Path.cwd(),
        ).execute(CollectAssetsInput())

        with _capture_progress() as on_progress:
            result = CaptureViewsStep(
                config=capture_cfg, data_root=Path.cwd(), progress_callback=on_progress,
            ).execute(CaptureInput(assets=collected.assets))
    except (RefcapError, ValueError) as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)

    _print_results(result)


@app.command()
def info(config: Path = typer.Option(DEFAULT_CONFIG, help="Pipeline config path")) -> None:
    """Show pipeline steps and their status."""
    from refcap.core.pipeline_runner import load_pipeline_config

    pipeline_cfg = load_pipeline_config(config)
    table = Table(title=f"Pipeline: {pipeline_cfg.project_name}")
    table.add_column("#", style="dim")
    table.add_column("Step", style="cyan")
    table.add_column("Module", style="green")
    table.add_column("Enabled", style="yellow")
    table.add_column("Depends On", style="dim")

    for i, step in enumerate(pipeline_cfg.steps, 1):
        table.add_row(
            str(i),
            step.name,
            step.module,
            "Y" if step.enabled else "N",
            ", ".join(step.depends_on) if step.depends_on else "-",
        )
    console.print(table)


if __name__ == "__main__":
    app()

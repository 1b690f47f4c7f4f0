from __future__ import annotations

import asyncio
import logging
from pathlib import Path

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from ..config import AppConfig, load_config
from ..core import CoverExtractionService
from ..detection import is_audio_file
from ..models import ExtractionRequest, ImageFormat, MediaKind
from ..runlog import RunLogger
from ..tools import ToolKind, get_prober
from ..utils import slugify

console = Console()

app = typer.Typer(help="Fallback cover extraction for PDF, EPUB and audiobook files")


def _load_config(path: Path | None) -> AppConfig:
    cfg = load_config(path)
    logging.basicConfig(
        level=cfg.runtime.log_level,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
    )
    return cfg


def _output_name(source: Path, image_format: ImageFormat, suffix: str = "") -> str:
    return f"{slugify(source.stem)}-cover{suffix}{image_format.extension}"


def _unique_output_name(source: Path, image_format: ImageFormat, taken: set[str]) -> str:
    name = _output_name(source, image_format)
    counter = 2
    while name.lower() in taken:
        name = _output_name(source, image_format, f"-{counter}")
        counter += 1
    taken.add(name.lower())
    return name


def _collect_sources(paths: list[Path], kind: MediaKind) -> list[Path]:
    sources: list[Path] = []
    for path in paths:
        if path.is_dir() and kind is MediaKind.AUDIOBOOK and any(
            is_audio_file(child) for child in path.iterdir() if child.is_file()
        ):
            sources.append(path)
            continue
        if path.is_dir():
            sources.extend(sorted(child for child in path.iterdir() if child.is_file()))
        elif path.is_file():
            sources.append(path)
    return sources


@app.command()
def extract(
    source: Path,
    kind: MediaKind = typer.Option(MediaKind.BOOK, "--kind", help="Media kind of the source"),
    output: Path | None = typer.Option(None, "--output", "-o", help="Where to write the cover"),
    config: Path | None = typer.Option(None, "--config", help="Path to config.toml"),
) -> None:
    cfg = _load_config(config)
    service = CoverExtractionService(cfg.extraction)
    result = service.extract_cover_sync(ExtractionRequest(source_path=source, media_kind=kind))
    if result.image is None or result.image_format is None:
        console.print(f"[yellow]No image[/yellow]: {source}")
        raise typer.Exit(1)
    destination = output or Path(_output_name(source, result.image_format))
    destination.parent.mkdir(parents=True, exist_ok=True)
    destination.write_bytes(result.image)
    console.print(
        f"[green]Success[/green]: {source.name} -> {destination} "
        f"({result.image_format.value}, {len(result.image)} bytes)"
    )


@app.command()
def batch(
    path: list[Path],
    output_dir: Path = typer.Option(Path("covers"), "--output-dir", help="Directory for extracted covers"),
    kind: MediaKind = typer.Option(MediaKind.BOOK, "--kind", help="Media kind of the sources"),
    parallel: int | None = typer.Option(None, "--parallel", min=1, help="Concurrent extractions"),
    config: Path | None = typer.Option(None, "--config", help="Path to config.toml"),
) -> None:
    cfg = _load_config(config)
    output_dir.mkdir(parents=True, exist_ok=True)
    run_logger = RunLogger(output_dir / cfg.runtime.log_file)
    service = CoverExtractionService(cfg.extraction, run_logger=run_logger)
    sources = _collect_sources(path, kind)
    requests = [ExtractionRequest(source_path=source, media_kind=kind) for source in sources]
    results, summary = asyncio.run(
        service.extract_many(requests, parallelism=parallel or cfg.runtime.parallelism)
    )

    table = Table(title="Batch summary")
    table.add_column("Source")
    table.add_column("Format")
    table.add_column("Output")
    taken: set[str] = set()
    for source, result in zip(sources, results):
        if result.image is not None and result.image_format is not None:
            destination = output_dir / _unique_output_name(source, result.image_format, taken)
            destination.write_bytes(result.image)
            table.add_row(str(source), result.image_format.value, str(destination))
        else:
            table.add_row(str(source), "-", "-")
    console.print(table)
    console.print(
        f"Processed {summary.total} sources: "
        f"{summary.images} covers found, {summary.misses} without image. "
        f"Run log: {run_logger.path}"
    )


@app.command()
def status() -> None:
    prober = get_prober()
    table = Table(title="External tools")
    table.add_column("Tool")
    table.add_column("Available")
    table.add_column("Path")
    for kind in ToolKind:
        availability = prober.availability(kind)
        marker = "[green]yes[/green]" if availability.available else "[red]no[/red]"
        table.add_row(kind.value, marker, availability.resolved_path or "-")
    console.print(table)


if __name__ == "__main__":
    app()

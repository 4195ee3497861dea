"""CLI entry point for transcache."""

from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import Callable
from pathlib import Path
from typing import Annotated

import typer
import yaml
from rich import print as rprint
from rich.logging import RichHandler
from rich.syntax import Syntax
from rich.table import Table

from transcache_core.cache import FileSnapshot, TransformCache
from transcache_core.config import TranscacheConfig, TransformOptions, load_config
from transcache_core.config.loader import DEFAULT_CONFIG_TEMPLATE
from transcache_core.eligibility import EligibilityError, EligibilitySet, match_files
from transcache_core.plugins import PluginNotFoundError, build_transform
from transcache_core.stage import CachingTransformStage, StageStats

app = typer.Typer(
    name="transcache",
    help="Run a source transform over a build tree, skipping files whose bytes did not change.",
)

config_app = typer.Typer(help="Manage transcache configuration.")
app.add_typer(config_app, name="config")

# Global state
_config: TranscacheConfig | None = None

_LOG_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "error": logging.ERROR,
}


class _JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "level": record.levelname.lower(),
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            payload["exc"] = self.formatException(record.exc_info)
        return json.dumps(payload)


def _configure_logging(cfg: TranscacheConfig, verbose: bool) -> None:
    if cfg.log_format == "json":
        handler: logging.Handler = logging.StreamHandler()
        handler.setFormatter(_JsonFormatter())
    else:
        handler = RichHandler(show_path=False)
    level = logging.DEBUG if verbose else _LOG_LEVELS[cfg.log_level]
    logging.basicConfig(level=level, handlers=[handler], force=True)


def _get_config() -> TranscacheConfig:
    if _config is None:
        return load_config()
    return _config


@app.callback()
def main(
    config: Annotated[
        str | None, typer.Option("--config", "-c", help="Path to transcache.yaml")
    ] = None,
    verbose: Annotated[
        bool, typer.Option("--verbose", "-v", help="Log every cache decision")
    ] = False,
) -> None:
    """Global options."""
    global _config
    try:
        _config = load_config(config)
    except ValueError as e:
        rprint(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)
    _configure_logging(_config, verbose)


def _resolve_root(root: str | None, cfg: TranscacheConfig) -> Path:
    return Path(root if root is not None else cfg.eligibility.root).resolve()


def _eligible_files(root: Path, cfg: TranscacheConfig) -> EligibilitySet:
    try:
        return EligibilitySet.from_globs(
            root,
            include=cfg.eligibility.include,
            always_include=cfg.eligibility.always_include,
            exclude=cfg.eligibility.exclude,
        )
    except EligibilityError as e:
        rprint(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)


def _source_files(root: Path, out_dir: Path, cfg: TranscacheConfig) -> list[FileSnapshot]:
    """Snapshots of every file the stage sees, in a stable order."""
    exclude: list[str] = []
    if out_dir.is_relative_to(root):
        exclude.append(out_dir.relative_to(root).as_posix() + "/")
    sources = match_files(root, include=cfg.eligibility.sources, exclude=exclude)
    return [FileSnapshot.from_path(root / rel, root) for rel in sources]


class OutputError(Exception):
    """Raised when a stage output cannot be written under the output directory."""


def _write_output(file: FileSnapshot, out_dir: Path) -> None:
    dest = out_dir / file.relative
    try:
        dest.parent.mkdir(parents=True, exist_ok=True)
        dest.write_bytes(file.contents)
    except OSError as e:
        raise OutputError(f"{dest}: {e}") from e


async def _run_passes(
    files: list[FileSnapshot],
    stage_factory: Callable[[], CachingTransformStage],
    out_dir: Path,
    passes: int,
) -> list[StageStats]:
    results: list[StageStats] = []
    for _ in range(passes):
        stage = stage_factory()
        async for output in stage.run(files):
            _write_output(output, out_dir)
        results.append(stage.stats)
    return results


def _display_stats(results: list[StageStats], cache: TransformCache) -> None:
    table = Table(title=f"Transform cache ({len(cache)} entries)")
    table.add_column("Pass", justify="right")
    table.add_column("Passthrough", justify="right")
    table.add_column("Hits", justify="right", style="green")
    table.add_column("Misses", justify="right", style="yellow")
    for i, stats in enumerate(results, start=1):
        table.add_row(str(i), str(stats.passed_through), str(stats.hits), str(stats.misses))
    rprint(table)


@app.command()
def eligible(
    root: str | None = typer.Argument(None, help="Project root (default: eligibility.root)"),
) -> None:
    """List the files the transform applies to."""
    cfg = _get_config()
    root_path = _resolve_root(root, cfg)
    files = _eligible_files(root_path, cfg)

    table = Table(title=f"Eligible files ({len(files)})")
    table.add_column("Path", style="cyan")
    for path in files:
        table.add_row(path)
    rprint(table)


@app.command()
def build(
    root: str | None = typer.Argument(None, help="Project root (default: eligibility.root)"),
    out: Annotated[
        str | None, typer.Option("--out", "-o", help="Override output directory")
    ] = None,
    fortesting: bool = typer.Option(False, "--fortesting", help="Target a test build"),
    esm: bool = typer.Option(False, "--esm", help="Target module output"),
    single_pass: bool = typer.Option(False, "--single-pass", help="Target single-pass output"),
    check_types: bool = typer.Option(False, "--check-types", help="Type-checking pass"),
    passes: int = typer.Option(1, "--passes", min=1, help="Run the stage N times in-process"),
) -> None:
    """Transform the source tree, reusing cached output for unchanged files."""
    cfg = _get_config()
    root_path = _resolve_root(root, cfg)
    out_dir = Path(out or cfg.output.out_dir)
    if not out_dir.is_absolute():
        out_dir = (root_path / out_dir).resolve()

    options = TransformOptions(
        targets_test_build=fortesting,
        targets_module_output=esm,
        targets_single_pass_output=single_pass,
        is_type_checking_pass=check_types,
    )

    eligible_set = _eligible_files(root_path, cfg)
    try:
        transform = build_transform(cfg.transform)
    except PluginNotFoundError as e:
        rprint(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    files = _source_files(root_path, out_dir, cfg)
    cache = TransformCache()

    def _new_stage() -> CachingTransformStage:
        return CachingTransformStage(
            transform,
            eligible_set,
            cache,
            options,
            key_on_options=cfg.cache.key_on_options,
        )

    rprint(
        f"[bold]Transforming[/bold] {len(eligible_set)} eligible of {len(files)} "
        f"source file(s) into {out_dir}"
    )
    try:
        results = asyncio.run(_run_passes(files, _new_stage, out_dir, passes))
    except OutputError as e:
        rprint(f"[red]Cannot write output:[/red] {e}")
        raise typer.Exit(1)
    except Exception as e:
        rprint(f"[red]Transform failed:[/red] {e}")
        raise typer.Exit(1)

    _display_stats(results, cache)


@config_app.command("show")
def config_show() -> None:
    """Show current resolved configuration."""
    cfg = _get_config()
    rprint(Syntax(yaml.dump(cfg.model_dump(), default_flow_style=False), "yaml"))


@config_app.command("init")
def config_init(
    force: bool = typer.Option(False, "--force", help="Overwrite existing config"),
) -> None:
    """Create default transcache.yaml in current directory."""
    target = Path("transcache.yaml")
    if target.exists() and not force:
        rprint("[yellow]transcache.yaml already exists.[/yellow] Use --force to overwrite.")
        raise typer.Exit(1)
    target.write_text(DEFAULT_CONFIG_TEMPLATE)
    rprint(f"[green]Created[/green] {target}")

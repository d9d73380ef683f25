"""CLI entry point for obsidian-typst."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Annotated

import typer
from rich import print as rprint
from rich.logging import RichHandler
from rich.syntax import Syntax
from rich.table import Table

from obsidian_typst.api import TypstAPI
from obsidian_typst.config import DEFAULT_CONFIG_TEMPLATE, ObsidianTypstConfig, load_config
from obsidian_typst.models import ConversionError, NoteRef
from obsidian_typst.orchestrator import TransformOrchestrator, build_typst_path
from obsidian_typst.scripts import DirectoryScriptStore
from obsidian_typst.sync import VaultExporter
from obsidian_typst.vault import FileSystemVault

app = typer.Typer(
    name="obsidian-typst",
    help="Convert Obsidian notes to Typst.",
)

config_app = typer.Typer(help="Manage obsidian-typst configuration.")
app.add_typer(config_app, name="config")

CONFIG_FILENAME = "obsidian-typst.yaml"
_LOG_LEVELS = {"debug": logging.DEBUG, "info": logging.INFO, "warn": logging.WARNING, "error": logging.ERROR}

# Global state
_config: ObsidianTypstConfig | None = None


def _get_config() -> ObsidianTypstConfig:
    if _config is None:
        return load_config()
    return _config


def _setup_logging(cfg: ObsidianTypstConfig) -> None:
    level = _LOG_LEVELS[cfg.log_level]
    if cfg.log_format == "rich":
        handler: logging.Handler = RichHandler(show_path=False, rich_tracebacks=True)
        handler.setFormatter(logging.Formatter("%(message)s"))
    else:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s"))
    logging.basicConfig(level=level, handlers=[handler], force=True)


@app.callback()
def main(
    config: Annotated[
        str | None, typer.Option("--config", "-c", help=f"Path to {CONFIG_FILENAME}")
    ] = None,
) -> None:
    """Global options."""
    global _config
    try:
        _config = load_config(config)
    except ValueError as e:
        rprint(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)
    _setup_logging(_config)


def _vault_root(cfg: ObsidianTypstConfig, vault: str) -> Path:
    return Path(vault or cfg.vault_path or ".")


def _script_store(cfg: ObsidianTypstConfig, vault_root: Path) -> DirectoryScriptStore:
    directory = Path(cfg.scripts.directory)
    if not directory.is_absolute():
        directory = vault_root / directory
    return DirectoryScriptStore(directory)


def _orchestrator(cfg: ObsidianTypstConfig, vault_root: Path) -> TransformOrchestrator:
    return TransformOrchestrator(
        script_store=_script_store(cfg, vault_root),
        template_mapping=cfg.scripts.template_mapping,
    )


def _note_path(note: str, vault_root: Path) -> str:
    path = Path(note)
    if not path.is_absolute():
        path = Path.cwd() / path
    try:
        return path.resolve().relative_to(vault_root.resolve()).as_posix()
    except ValueError:
        raise typer.BadParameter(f"{note} is not inside the vault {vault_root}") from None


def _display_report(title: str, report) -> None:
    table = Table(title=title)
    table.add_column("Metric", style="cyan")
    table.add_column("Value", justify="right", style="green")
    table.add_row("Exported", str(report.exported))
    table.add_row("Skipped", str(report.skipped))
    table.add_row("Errors", str(len(report.errors)))
    table.add_row("Duration", f"{report.duration:.2f}s")
    rprint(table)

    for err in report.errors:
        rprint(f"  [red]error:[/red] {err.file}: {err.error}")


@app.command()
def convert(
    note: str = typer.Argument(..., help="Markdown note to convert"),
    vault: Annotated[str, typer.Option("--vault", "-v", help="Vault root (defaults to vault_path)")] = "",
    output: Annotated[str | None, typer.Option("--output", "-o", help="Write Typst to file")] = None,
    strategy: Annotated[str | None, typer.Option("--strategy", help="structural | script")] = None,
    script: Annotated[str | None, typer.Option("--script", help="Transform script name")] = None,
    max_depth: Annotated[int | None, typer.Option("--max-depth", help="Maximum embed depth")] = None,
) -> None:
    """Convert a single note to Typst."""
    cfg = _get_config()
    vault_root = _vault_root(cfg, vault)
    rel = _note_path(note, vault_root)

    overrides = {"strategy": strategy, "script_name": script, "max_embed_depth": max_depth}
    options = {**cfg.conversion_defaults(), **{k: v for k, v in overrides.items() if v is not None}}
    if script and strategy is None:
        options["strategy"] = "script"

    fs_vault = FileSystemVault(vault_root, ignore=cfg.export.ignore_patterns)
    api = TypstAPI(_orchestrator(cfg, vault_root), fs_vault.environment(), defaults=options)

    try:
        typst = asyncio.run(api.convert_async(NoteRef(rel)))
    except ConversionError as e:
        rprint(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    if output:
        Path(output).write_text(typst, encoding="utf-8")
        rprint(f"[green]Written to[/green] {output}")
    else:
        typer.echo(typst, nl=False)


@app.command()
def export(
    vault: Annotated[str, typer.Option("--vault", "-v", help="Vault root (defaults to vault_path)")] = "",
    dry_run: Annotated[bool, typer.Option("--dry-run", help="Show what would be exported")] = False,
) -> None:
    """Export every note tagged with a trigger tag to a .typ file beside it."""
    cfg = _get_config()
    vault_root = _vault_root(cfg, vault)
    if not vault_root.is_dir():
        rprint(f"[red]Error:[/red] vault not found: {vault_root}")
        raise typer.Exit(1)

    fs_vault = FileSystemVault(vault_root, ignore=cfg.export.ignore_patterns)
    exporter = VaultExporter(
        vault=fs_vault,
        orchestrator=_orchestrator(cfg, vault_root),
        trigger_tags=cfg.export.trigger_tags,
        options=cfg.conversion_defaults(),
        debounce=cfg.export.debounce,
    )

    if dry_run:
        notes = list(fs_vault.iter_notes())
        if not notes:
            rprint("[yellow]No notes found.[/yellow]")
            raise typer.Exit(0)
        table = Table(title="Dry Run: notes in the vault")
        table.add_column("Note", style="cyan")
        table.add_column("Destination", style="green")
        for rel in notes:
            table.add_row(rel, build_typst_path(rel))
        rprint(table)
        return

    report = asyncio.run(exporter.export())
    _display_report("Typst Export", report)
    if report.errors:
        raise typer.Exit(1)


@app.command()
def watch(
    vault: Annotated[str, typer.Option("--vault", "-v", help="Vault root (defaults to vault_path)")] = "",
) -> None:
    """Export once, then re-export tagged notes whenever they change."""
    cfg = _get_config()
    vault_root = _vault_root(cfg, vault)
    if not vault_root.is_dir():
        rprint(f"[red]Error:[/red] vault not found: {vault_root}")
        raise typer.Exit(1)

    fs_vault = FileSystemVault(vault_root, ignore=cfg.export.ignore_patterns)
    exporter = VaultExporter(
        vault=fs_vault,
        orchestrator=_orchestrator(cfg, vault_root),
        trigger_tags=cfg.export.trigger_tags,
        options=cfg.conversion_defaults(),
        debounce=cfg.export.debounce,
    )

    _display_report("Initial Export", asyncio.run(exporter.export()))
    rprint(f"[bold]Watching[/bold] {vault_root}")
    exporter.watch()


@app.command()
def scripts(
    vault: Annotated[str, typer.Option("--vault", "-v", help="Vault root (defaults to vault_path)")] = "",
) -> None:
    """List available transform scripts."""
    cfg = _get_config()
    store = _script_store(cfg, _vault_root(cfg, vault))

    table = Table(title="Transform Scripts")
    table.add_column("Name", style="cyan")
    table.add_column("Source", style="green")
    for name in store.list_scripts():
        path = store.directory / f"{name}.py" if store.directory else None
        table.add_row(name, str(path) if path and path.is_file() else "built-in")
    rprint(table)


@config_app.command("show")
def config_show() -> None:
    """Show current resolved configuration."""
    import yaml

    cfg = _get_config()
    rprint(Syntax(yaml.dump(cfg.model_dump(), default_flow_style=False, allow_unicode=True), "yaml"))


@config_app.command("init")
def config_init(
    force: bool = typer.Option(False, "--force", help="Overwrite existing config"),
) -> None:
    """Create default obsidian-typst.yaml in current directory."""
    target = Path(CONFIG_FILENAME)
    if target.exists() and not force:
        rprint(f"[yellow]{CONFIG_FILENAME} already exists.[/yellow] Use --force to overwrite.")
        raise typer.Exit(1)
    target.write_text(DEFAULT_CONFIG_TEMPLATE, encoding="utf-8")
    rprint(f"[green]Created[/green] {target}")

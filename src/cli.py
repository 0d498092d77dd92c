"""CLI interface for quire."""

import json
import logging
from pathlib import Path
from typing import Annotated, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

from quire.config import QuireConfig, load_config, merge_cli_overrides
from quire.content.models import ContentRecord, LoadMode
from quire.content.services import get_content_by_slug, load_all_content
from quire.errors import ContentError

app = typer.Typer(
    name="quire",
    help="Load MDX content directories into sorted, normalized records.",
)

console = Console()
err_console = Console(stderr=True)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        from quire import __version__

        console.print(f"quire {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    verbose: Annotated[
        bool,
        typer.Option("--verbose", help="Log per-file progress."),
    ] = False,
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            "-v",
            help="Show version and exit.",
            callback=version_callback,
            is_eager=True,
        ),
    ] = False,
) -> None:
    """Quire - MDX content loader."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=err_console, show_path=False)],
        force=True,
    )


def _resolve_config(
    config_path: Path | None,
    directory: Path | None,
    content_type: str | None,
    mode: LoadMode | None = None,
) -> QuireConfig:
    config = load_config(config_path)
    return merge_cli_overrides(
        config,
        content_directory=str(directory) if directory is not None else None,
        content_type=content_type,
        mode=mode,
    )


def _dump_json(data: object) -> None:
    # front matter may carry YAML dates in free-form keys
    typer.echo(json.dumps(data, indent=2, default=str))


def _records_table(records: list[ContentRecord], title: str) -> Table:
    table = Table(title=title)
    table.add_column("Slug", style="cyan")
    table.add_column("Date")
    table.add_column("Title")
    table.add_column("Tags", style="magenta")
    for record in records:
        fm = record.frontmatter
        table.add_row(
            record.slug,
            fm.date or "-",
            fm.title or "",
            ", ".join(tag.slug for tag in fm.tags),
        )
    return table


@app.command("list")
def list_cmd(
    directory: Annotated[
        Optional[Path],
        typer.Argument(help="Content directory. Defaults to [content] directory."),
    ] = None,
    content_type: Annotated[
        Optional[str],
        typer.Option("--type", "-t", help="Content type label injected into front matter."),
    ] = None,
    full: Annotated[
        Optional[bool],
        typer.Option("--full/--slim", help="Keep the compiled body in each record."),
    ] = None,
    as_json: Annotated[
        bool,
        typer.Option("--json", help="Print records as JSON."),
    ] = False,
    config_path: Annotated[
        Optional[Path],
        typer.Option("--config", "-c", help="Path to a .quire.toml file."),
    ] = None,
) -> None:
    """List every record in a content directory, newest first."""
    mode = None if full is None else (LoadMode.FULL if full else LoadMode.SLIM)
    config = _resolve_config(config_path, directory, content_type, mode)

    try:
        records = load_all_content(
            config.content.directory,
            config.content.type,
            config.content.mode,
            compiler=config.to_compiler(),
            registry=config.to_tag_registry(),
        )
    except ContentError as exc:
        err_console.print(f"[red]Error:[/red] {escape(str(exc))}")
        raise typer.Exit(1)

    if as_json:
        _dump_json([record.to_dict() for record in records])
        return

    if not records:
        console.print(f"[yellow]No content found in {config.content.directory}[/yellow]")
        return
    console.print(_records_table(records, f"{config.content.type} ({len(records)})"))


@app.command("show")
def show_cmd(
    slug: Annotated[str, typer.Argument(help="Slug of the record, with or without .mdx.")],
    directory: Annotated[
        Optional[Path],
        typer.Option("--dir", "-d", help="Content directory. Defaults to [content] directory."),
    ] = None,
    content_type: Annotated[
        Optional[str],
        typer.Option("--type", "-t", help="Content type label injected into front matter."),
    ] = None,
    as_json: Annotated[
        bool,
        typer.Option("--json", help="Print the full record as JSON."),
    ] = False,
    config_path: Annotated[
        Optional[Path],
        typer.Option("--config", "-c", help="Path to a .quire.toml file."),
    ] = None,
) -> None:
    """Show a single record, including its compiled body."""
    config = _resolve_config(config_path, directory, content_type)

    try:
        record = get_content_by_slug(
            slug,
            config.content.directory,
            config.content.type,
            compiler=config.to_compiler(),
            registry=config.to_tag_registry(),
        )
    except ContentError as exc:
        err_console.print(f"[red]Error:[/red] {escape(str(exc))}")
        raise typer.Exit(1)

    if as_json:
        _dump_json(record.to_dict())
        return

    fm = record.frontmatter
    console.print(f"[bold]{escape(fm.title or record.slug)}[/bold]")
    if fm.subtitle:
        console.print(fm.subtitle, markup=False)
    console.print(f"Date: {fm.date or '-'}")
    if fm.author:
        console.print(f"Author: {fm.author}", markup=False)
    if fm.tags:
        console.print("Tags: " + ", ".join(tag.name for tag in fm.tags), markup=False)
    if record.source is not None:
        console.print()
        console.print(record.source.compiled_source, markup=False, highlight=False)

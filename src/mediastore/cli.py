"""Command line interface for mediastore."""

from __future__ import annotations

import logging
from datetime import datetime
from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from mediastore.config import FOLDER_ENV, AppConfig
from mediastore.ingestion.remote import add_file_from_remote
from mediastore.storage.folder import (
    MediaRemovalError,
    add_data_to_folder_uniquely,
    data_for_file,
    remove_files,
)
from mediastore.utils.files import (
    is_syncable_size,
    iter_media_files,
    sha1_hex,
    sha1_of_data,
    sha1_of_file,
)
from mediastore.utils.names import normalize_filename


console = Console()
app = typer.Typer(help="mediastore - inspect and manage a synced media folder")

FOLDER_HELP = f"Media folder path (defaults to ${FOLDER_ENV}, then the current directory)"


def _setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(level=level, format="[%(levelname)s] %(message)s")


def _load_config(folder: Optional[Path]) -> AppConfig:
    try:
        return AppConfig.from_env(media_folder=folder)
    except ValueError as exc:
        raise typer.BadParameter(str(exc)) from exc


def _resolve_folder(config: AppConfig) -> Path:
    return config.resolve_media_folder(Path.cwd())


def _ensure_folder(folder: Path) -> None:
    folder.mkdir(parents=True, exist_ok=True)


@app.command()
def normalize(
    names: List[str] = typer.Argument(..., help="Filenames to normalize."),
) -> None:
    """Show how filenames would be stored on disk."""
    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("Name")
    table.add_column("Normalized")

    for name in names:
        normalized = normalize_filename(name)
        shown = escape(normalized)
        if normalized != name:
            shown = f"[yellow]{shown}[/yellow]"
        table.add_row(escape(repr(name)), shown)

    console.print(table)


@app.command("hash")
def hash_files(
    files: List[Path] = typer.Argument(..., help="Files to hash.", exists=True, dir_okay=False),
) -> None:
    """Print the SHA1 of each file."""
    for path in files:
        console.print(f"{sha1_hex(sha1_of_file(path))}  {path}")


@app.command()
def add(
    source: Path = typer.Argument(..., help="File to add.", exists=True, dir_okay=False),
    name: Optional[str] = typer.Option(None, "--name", help="Desired filename"),
    folder: Path = typer.Option(None, "--folder", "-f", help=FOLDER_HELP),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose logging"),
) -> None:
    """Add a local file to the media folder without clobbering different content."""
    _setup_logging(verbose)
    resolved = _resolve_folder(_load_config(folder))
    _ensure_folder(resolved)

    data = source.read_bytes()
    desired = name or source.name
    try:
        used = add_data_to_folder_uniquely(resolved, desired, data, sha1_of_data(data))
    except OSError as exc:
        console.print(f"[red]Failed to add {escape(desired)}: {escape(str(exc))}[/red]")
        raise typer.Exit(code=1)

    if used != desired:
        console.print(f"Added [bold]{escape(desired)}[/bold] as [bold]{escape(used)}[/bold]")
    else:
        console.print(f"Added [bold]{escape(used)}[/bold]")


@app.command()
def ingest(
    source: Path = typer.Argument(..., help="File to store.", exists=True, dir_okay=False),
    name: Optional[str] = typer.Option(None, "--name", help="Filename as sent by the server"),
    folder: Path = typer.Option(None, "--folder", "-f", help=FOLDER_HELP),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose logging"),
) -> None:
    """Store a file the way a download from the sync server would be stored."""
    _setup_logging(verbose)
    resolved = _resolve_folder(_load_config(folder))
    _ensure_folder(resolved)

    try:
        added = add_file_from_remote(resolved, name or source.name, source.read_bytes())
    except OSError as exc:
        console.print(f"[red]Failed to store {escape(name or source.name)}: {escape(str(exc))}[/red]")
        raise typer.Exit(code=1)

    table = Table(show_header=False)
    table.add_row("File", escape(added.fname))
    table.add_row("SHA1", sha1_hex(added.sha1))
    table.add_row("Modified", str(added.mtime))
    table.add_row("Renamed from", escape(added.renamed_from or "-"))
    console.print(table)


@app.command("read")
def read_file(
    name: str = typer.Argument(..., help="Filename in the media folder"),
    out: Path = typer.Option(..., "--out", "-o", help="Where to write the contents"),
    folder: Path = typer.Option(None, "--folder", "-f", help=FOLDER_HELP),
) -> None:
    """Copy a file out of the media folder."""
    resolved = _resolve_folder(_load_config(folder))
    data = data_for_file(resolved, name)
    if data is None:
        console.print(f"[yellow]{escape(name)} not found in {resolved}[/yellow]")
        raise typer.Exit(code=1)

    out.write_bytes(data)
    console.print(f"Wrote {len(data)} bytes to [bold]{out}[/bold]")


@app.command()
def remove(
    names: List[str] = typer.Argument(..., help="Filenames to move to the trash."),
    folder: Path = typer.Option(None, "--folder", "-f", help=FOLDER_HELP),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose logging"),
) -> None:
    """Move files from the media folder to the trash."""
    _setup_logging(verbose)
    resolved = _resolve_folder(_load_config(folder))

    try:
        remove_files(resolved, names)
    except MediaRemovalError as exc:
        console.print(f"[red]{escape(str(exc))}[/red]")
        raise typer.Exit(code=1)

    console.print(f"Moved {len(names)} files to the trash.")


@app.command()
def scan(
    folder: Path = typer.Option(None, "--folder", "-f", help=FOLDER_HELP),
) -> None:
    """List files in the media folder, flagging ones that can't be synced as-is."""
    config = _load_config(folder)
    resolved = _resolve_folder(config)

    if not resolved.is_dir():
        raise typer.BadParameter(f"Media folder not found: {resolved}")

    entries = list(iter_media_files(resolved))
    if not entries:
        console.print("[yellow]No media files found.[/yellow]")
        return

    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("File")
    table.add_column("Size", justify="right")
    table.add_column("Modified")
    table.add_column("Status")

    for entry in entries:
        if not is_syncable_size(entry.size, config.max_sync_filesize):
            status = "[red]too large[/red]"
        elif not entry.normalized:
            status = "[yellow]needs rename[/yellow]"
        else:
            status = "ok"
        modified = datetime.fromtimestamp(entry.mtime).strftime("%Y-%m-%d %H:%M")
        table.add_row(escape(entry.fname), str(entry.size), modified, status)

    console.print(table)

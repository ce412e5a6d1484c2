"""Main CLI application."""

import logging
from pathlib import Path
from typing import Annotated, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler

from chapterizer.commands.info import execute_info
from chapterizer.commands.parse import check_archive_size, execute_parse
from chapterizer.config import Settings
from chapterizer.errors import EpubError

app = typer.Typer(
    name="chapterizer",
    help="Extract narrative chapters from EPUB files.",
    add_completion=False,
    no_args_is_help=True,
)

console = Console()
err_console = Console(stderr=True)


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=err_console, show_path=False)],
        force=True,
    )


def _check_book(book_path: Path, settings: Settings) -> None:
    """Exit early for files the parser should not be given."""
    if book_path.suffix.lower() != ".epub":
        console.print(f"[red]Unsupported file format: {book_path.suffix}[/]")
        console.print("[dim]Supported formats: .epub[/]")
        raise typer.Exit(1)

    size_error = check_archive_size(book_path, settings)
    if size_error:
        console.print(f"[red]{size_error}[/]")
        raise typer.Exit(1)


def _report(error: EpubError) -> None:
    console.print(f"[red]Error: {error.user_message}[/]")
    if error.message != error.user_message:
        console.print(f"[dim]{error.message}[/]")


@app.callback()
def main(
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Show parser log output"),
    ] = False,
) -> None:
    """Extract narrative chapters from EPUB files."""
    _configure_logging(verbose)


@app.command()
def parse(
    book_path: Annotated[
        Path,
        typer.Argument(
            help="Path to the EPUB file",
            exists=True,
            file_okay=True,
            dir_okay=False,
            resolve_path=True,
        ),
    ],
    as_json: Annotated[
        bool,
        typer.Option("--json", help="Print the result as JSON"),
    ] = False,
    output: Annotated[
        Optional[Path],
        typer.Option(
            "--output",
            "-o",
            help="Write the JSON result to this file",
        ),
    ] = None,
    max_chapters: Annotated[
        Optional[int],
        typer.Option(
            "--max-chapters",
            "-n",
            help="Keep only the first N chapters",
            min=1,
        ),
    ] = None,
    quiet: Annotated[
        bool,
        typer.Option(
            "--quiet",
            "-q",
            help="Suppress progress output",
        ),
    ] = False,
) -> None:
    """Parse an EPUB file and list its chapters."""
    settings = Settings()
    _check_book(book_path, settings)

    try:
        execute_parse(
            book_path=book_path,
            as_json=as_json,
            output=output,
            max_chapters=max_chapters,
            quiet=quiet,
            console=console,
            settings=settings,
        )
    except EpubError as e:
        _report(e)
        raise typer.Exit(1)


@app.command()
def info(
    book_path: Annotated[
        Path,
        typer.Argument(
            help="Path to the EPUB file",
            exists=True,
            file_okay=True,
            dir_okay=False,
            resolve_path=True,
        ),
    ],
) -> None:
    """Display book metadata and table of contents."""
    settings = Settings()
    _check_book(book_path, settings)

    try:
        execute_info(book_path, console, settings)
    except EpubError as e:
        _report(e)
        raise typer.Exit(1)


if __name__ == "__main__":
    app()

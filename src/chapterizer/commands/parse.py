"""Parse command implementation."""

import json
from pathlib import Path

from rich.console import Console
from rich.panel import Panel
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.table import Table

from chapterizer.config import Settings
from chapterizer.core.pipeline import EpubParser
from chapterizer.models.output import ParseResult


def check_archive_size(book_path: Path, settings: Settings) -> str | None:
    """Return an error message if the file exceeds the configured limit."""
    max_bytes = settings.max_archive_size_mb * 1024 * 1024
    size = book_path.stat().st_size
    if size > max_bytes:
        return (
            f"File too large ({size / 1024 / 1024:.1f} MB). "
            f"Maximum size is {settings.max_archive_size_mb} MB."
        )
    return None


def load_book(
    book_path: Path, settings: Settings, console: Console, quiet: bool = False
) -> ParseResult:
    """Parse a book, showing a spinner unless quiet."""
    parser = EpubParser(settings)
    if quiet:
        return parser.parse_file(book_path)

    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        console=console,
        transient=True,
    ) as progress:
        progress.add_task(f"Parsing {book_path.name}...", total=None)
        return parser.parse_file(book_path)


def display_book_info(result: ParseResult, console: Console) -> None:
    """Display the book panel."""
    meta = result.metadata
    info = result.processing_info
    info_lines = [
        f"[bold]{meta.title}[/]",
        f"[dim]Author:[/] {meta.author}",
        f"[dim]Language:[/] {meta.language}",
        f"[dim]Sections:[/] {info.total_sections}",
        f"[dim]Chapters:[/] {info.chapter_count}",
    ]
    if info.used_fallback:
        info_lines.append("")
        info_lines.append(
            "[yellow]No chapters matched; using the longest sections instead[/]"
        )
    console.print(Panel("\n".join(info_lines), title="Book Info", border_style="green"))


def display_chapters(result: ParseResult, console: Console) -> None:
    """Display the chapter table."""
    table = Table(title="Chapters", show_header=True, header_style="bold cyan")
    table.add_column("#", style="dim", width=4)
    table.add_column("Title", style="white")
    table.add_column("File", style="dim")
    table.add_column("Words", justify="right", style="green")

    for i, chapter in enumerate(result.chapters):
        table.add_row(
            str(i + 1), chapter.title, chapter.href, f"{chapter.word_count:,}"
        )
    console.print(table)


def display_excluded(result: ParseResult, console: Console) -> None:
    """Display the excluded-section audit trail."""
    excluded = result.processing_info.excluded_sections
    if not excluded:
        return
    console.print()
    console.print("[bold]Excluded sections[/]")
    for entry in excluded:
        console.print(f"  [dim]-[/] {entry}")


def execute_parse(
    book_path: Path,
    as_json: bool,
    output: Path | None,
    max_chapters: int | None,
    quiet: bool,
    console: Console,
    settings: Settings,
) -> ParseResult:
    """Execute the parse command."""
    result = load_book(book_path, settings, console, quiet=quiet or as_json)

    if max_chapters:
        result = result.model_copy(update={"chapters": result.chapters[:max_chapters]})

    if output is not None:
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_text(
            json.dumps(result.to_payload(), indent=2, ensure_ascii=False),
            encoding="utf-8",
        )

    if as_json:
        console.print_json(data=result.to_payload())
        return result

    if not quiet:
        console.print()
        display_book_info(result, console)
        console.print()
        display_chapters(result, console)
        display_excluded(result, console)
        if output is not None:
            console.print()
            console.print(f"[dim]Wrote[/] {output}")

    return result

"""Info command implementation."""

from pathlib import Path

from rich.console import Console
from rich.panel import Panel
from rich.tree import Tree

from chapterizer.commands.parse import load_book
from chapterizer.config import Settings
from chapterizer.models.book import TOCEntry


def _add_entries(branch: Tree, entries: list[TOCEntry]) -> None:
    for entry in entries:
        label = entry.title
        if entry.href:
            label += f" [dim]({entry.href})[/]"
        _add_entries(branch.add(label), entry.children)


def execute_info(book_path: Path, console: Console, settings: Settings) -> None:
    """Display book metadata and table of contents."""
    result = load_book(book_path, settings, console)
    meta = result.metadata

    info_lines = [
        f"[bold]{meta.title}[/]",
        "",
        f"[dim]Author:[/] {meta.author}",
        f"[dim]Language:[/] {meta.language}",
        f"[dim]Publisher:[/] {meta.publisher or 'Unknown'}",
        f"[dim]Published:[/] {meta.publication_date or 'Unknown'}",
        f"[dim]Identifier:[/] {meta.identifier or 'Unknown'}",
        f"[dim]Total Sections:[/] {result.processing_info.total_sections}",
    ]
    if meta.description:
        info_lines.extend(["", meta.description])

    console.print()
    console.print(
        Panel("\n".join(info_lines), title="Book Information", border_style="green")
    )

    console.print()
    tree = Tree("[bold cyan]Table of Contents[/]")
    _add_entries(tree, result.toc)
    console.print(tree)
    console.print()

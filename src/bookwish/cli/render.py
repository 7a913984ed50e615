# ABOUTME: Rich rendering helpers shared by the bookwish CLI commands.
# ABOUTME: Tables for scored backend candidates and catalog metadata, plus the acquisition summary.

from rich.console import Console
from rich.table import Table

from bookwish.core.result import AcquisitionResult
from bookwish.matching.scoring import MatchSelection
from bookwish.metadata.types import MetadataCandidate


def selection_table(selection: MatchSelection, title: str) -> Table:
    """Ranked candidates with their scores and the reasons behind them."""
    table = Table(title=title)
    table.add_column("#", style="bold", width=3)
    table.add_column("Name")
    table.add_column("Score", justify="right")
    table.add_column("Reasons", style="dim")
    table.add_column("In library", justify="center")

    chosen = selection.best.candidate if selection.best else None
    for i, scored in enumerate(selection.ranked, start=1):
        name = scored.candidate.name
        if chosen is not None and scored.candidate == chosen:
            name = f"[green]{name}[/green]"
        table.add_row(
            str(i),
            name,
            str(scored.score),
            "\n".join(scored.reasons),
            "yes" if scored.candidate.exists else "",
        )
    return table


def print_selection(console: Console, selection: MatchSelection, title: str) -> None:
    if not selection.ranked:
        console.print("[yellow]No candidates found.[/yellow]")
        return
    console.print(selection_table(selection, title))
    if selection.best is None:
        console.print("[red]No candidate passed the threshold.[/red]")
    elif selection.ambiguous:
        console.print("[yellow]Low confidence: the top two candidates are close.[/yellow]")


def metadata_table(candidates: list[MetadataCandidate]) -> Table:
    table = Table(title="Catalog matches")
    table.add_column("#", style="bold", width=3)
    table.add_column("Title")
    table.add_column("Author")
    table.add_column("Year", width=5)
    table.add_column("ISBN")
    table.add_column("Confidence", justify="right")
    table.add_column("Source")

    for i, candidate in enumerate(candidates, start=1):
        meta = candidate.metadata
        table.add_row(
            str(i),
            meta.title,
            meta.author or "[dim]unknown[/dim]",
            str(meta.year) if meta.year else "-",
            meta.isbn or "-",
            f"{candidate.confidence:.0%}",
            candidate.source,
        )
    return table


def print_result(console: Console, result: AcquisitionResult) -> None:
    """Summarize an acquisition outcome."""
    if result.resolved and result.book is not None and result.author is not None:
        verb = "Added" if result.book_created else "Found"
        console.print(f"[green]{verb}:[/green] {result.book.title} by {result.author.name}")
        if result.author_created:
            console.print(f"  [dim]New author:[/dim] {result.author.name}")
        if result.search_error:
            console.print(f"  [yellow]Search not triggered:[/yellow] {result.search_error}")
        elif result.search_command_id is not None:
            console.print(
                f"  [dim]Search command {result.search_command_id} ({result.search_status})[/dim]"
            )
    else:
        reason = result.failure.value if result.failure else result.status.value
        console.print(f"[red]{reason}:[/red] {result.message}")

    for warning in result.warnings:
        console.print(f"  [yellow]Warning:[/yellow] {warning}")

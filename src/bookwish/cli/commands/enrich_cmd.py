# ABOUTME: The `bookwish enrich` command: look a request up in Open Library and Google Books.
# ABOUTME: Prints the ranked catalog matches and the enriched request that would be submitted.

import click
from rich.console import Console

from bookwish.cli.options import create_enricher, google_key_option
from bookwish.cli.render import metadata_table
from bookwish.matching.preprocess import RequestInput


@click.command("enrich")
@click.argument("title")
@click.option("-a", "--author", default="", help="Author of the book.")
@click.option("--isbn", default=None, help="ISBN, if known.")
@google_key_option
def enrich(title: str, author: str, isbn: str | None, google_key: str | None) -> None:
    """Show public catalog matches for TITLE."""
    console = Console()
    enricher = create_enricher(google_key)
    request = RequestInput(title=title, author=author, isbn=isbn)

    candidates = enricher.candidates(request)
    if not candidates:
        console.print("[yellow]No catalog matches found.[/yellow]")
        return
    console.print(metadata_table(candidates))

    result = enricher.enrich(request)
    if result.enriched:
        enriched = result.request
        console.print(
            f"\n[green]Would request:[/green] {enriched.title} by "
            f"{enriched.author or 'unknown'} (ISBN {enriched.isbn or 'unknown'})"
        )
    else:
        console.print("\n[yellow]No match was confident enough to enrich the request.[/yellow]")

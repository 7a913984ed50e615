# ABOUTME: The `bookwish candidates` commands: show how Readarr lookup results score.
# ABOUTME: Audit view of the matchers' ranking and reasons; nothing is created or searched.

import click
from rich.console import Console

from bookwish.cli.options import create_catalog, readarr_options
from bookwish.cli.render import print_selection
from bookwish.matching.authors import select_author
from bookwish.matching.books import select_book
from bookwish.matching.preprocess import RequestInput, preprocess_book_data
from bookwish.readarr.http import CatalogError


@click.group("candidates")
def candidates() -> None:
    """Score Readarr lookup results without changing anything."""


@candidates.command("author")
@click.argument("name")
@readarr_options
def author_candidates(name: str, readarr_url: str, api_key: str) -> None:
    """Rank Readarr author lookup results for NAME."""
    console = Console()
    catalog = create_catalog(readarr_url, api_key)
    try:
        results = catalog.lookup_author(name)
    except CatalogError as exc:
        raise click.ClickException(str(exc)) from exc
    print_selection(console, select_author(results, name), f"Authors for {name!r}")


@candidates.command("book")
@click.argument("title")
@click.option("-a", "--author", default="", help="Author of the book.")
@readarr_options
def book_candidates(title: str, author: str, readarr_url: str, api_key: str) -> None:
    """Rank Readarr book lookup results for TITLE."""
    console = Console()
    processed = preprocess_book_data(RequestInput(title=title, author=author))
    if processed.author != author or processed.title != title:
        console.print(f"[dim]Interpreted as:[/dim] {processed.title} by {processed.author}")

    catalog = create_catalog(readarr_url, api_key)
    term = f"{processed.title} {processed.author}".strip()
    try:
        results = catalog.lookup_book(term)
    except CatalogError as exc:
        raise click.ClickException(str(exc)) from exc
    selection = select_book(results, processed.title, processed.author)
    print_selection(console, selection, f"Books for {processed.title!r}")

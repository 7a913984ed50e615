# ABOUTME: The `bookwish request` command: resolve a title/author in Readarr and start a search.
# ABOUTME: Optionally enriches the request from public catalogs first.

import logging

import click
from rich.console import Console

from bookwish.cli.options import (
    create_catalog,
    create_enricher,
    google_key_option,
    readarr_options,
    root_folder_option,
)
from bookwish.cli.render import print_result
from bookwish.core.orchestrator import AcquisitionOrchestrator, OrchestratorSettings
from bookwish.core.result import ConfigurationError
from bookwish.matching.preprocess import RequestInput
from bookwish.readarr.http import CatalogError

logger = logging.getLogger(__name__)


@click.command("request")
@click.argument("title")
@click.option("-a", "--author", default="", help="Author of the requested book.")
@click.option("--isbn", default=None, help="ISBN, if known.")
@click.option(
    "-t",
    "--tag",
    "tags",
    multiple=True,
    help="Tag to attach to created records (repeatable).",
)
@click.option(
    "--enrich/--no-enrich",
    default=False,
    help="Fill in a missing author or ISBN from Open Library and Google Books first.",
)
@readarr_options
@root_folder_option
@google_key_option
def request(
    title: str,
    author: str,
    isbn: str | None,
    tags: tuple[str, ...],
    enrich: bool,
    readarr_url: str,
    api_key: str,
    root_folder: str | None,
    google_key: str | None,
) -> None:
    """Request TITLE: find or add it in Readarr and trigger a search."""
    console = Console()
    book_request = RequestInput(title=title, author=author, isbn=isbn)

    if enrich:
        enrichment = create_enricher(google_key).enrich(book_request)
        if enrichment.request != book_request:
            console.print(
                f"[dim]Enriched:[/dim] {enrichment.request.title} by "
                f"{enrichment.request.author or 'unknown'}"
            )
        book_request = enrichment.request

    if not book_request.author:
        console.print("[yellow]No author given; resolution will likely fail.[/yellow]")

    orchestrator = AcquisitionOrchestrator(
        create_catalog(readarr_url, api_key),
        settings=OrchestratorSettings(root_folder=root_folder),
    )
    try:
        result = orchestrator.acquire(book_request, tags=tags)
    except ConfigurationError as exc:
        raise click.ClickException(f"Readarr is not configured: {exc}") from exc
    except CatalogError as exc:
        raise click.ClickException(str(exc)) from exc

    print_result(console, result)
    if not result.resolved:
        raise SystemExit(1)

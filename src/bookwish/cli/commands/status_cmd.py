# ABOUTME: The `bookwish status` command: report whether a Readarr book has been downloaded.
# ABOUTME: Prints download state, progress, size on disk, and the file path when present.

import click
from rich.console import Console

from bookwish.cli.options import create_catalog, readarr_options
from bookwish.readarr.http import CatalogError


@click.command("status")
@click.argument("book_id", type=int)
@readarr_options
def status(book_id: int, readarr_url: str, api_key: str) -> None:
    """Show the download status of Readarr book BOOK_ID."""
    console = Console()
    catalog = create_catalog(readarr_url, api_key)
    try:
        book_status = catalog.get_book_status(book_id)
    except CatalogError as exc:
        raise click.ClickException(str(exc)) from exc

    state = "[green]downloaded[/green]" if book_status.is_downloaded else "[yellow]missing[/yellow]"
    console.print(f"[bold]{book_status.title}[/bold] ({book_id}): {state}")
    console.print(f"  Progress: {book_status.percent_of_book:.0f}%")
    console.print(f"  Size on disk: {book_status.size_on_disk} bytes")
    if book_status.book_file_path:
        console.print(f"  File: {book_status.book_file_path}")

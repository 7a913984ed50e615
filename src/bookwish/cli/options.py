# ABOUTME: Shared Click options and client factories for bookwish CLI commands.
# ABOUTME: Backend URL, API key, and root folder come from flags or READARR_* environment variables.

from collections.abc import Callable
from typing import Any

import click

from bookwish.metadata.cache import TTLCache
from bookwish.metadata.enricher import RequestEnricher
from bookwish.metadata.googlebooks import GoogleBooksProvider
from bookwish.metadata.http import CachingHttpClient, MetadataHttpClient
from bookwish.metadata.openlibrary import OpenLibraryProvider
from bookwish.readarr.client import ReadarrCatalog
from bookwish.readarr.http import ReadarrHttpClient


def readarr_options(func: Callable[..., Any]) -> Callable[..., Any]:
    """Attach --readarr-url and --api-key to a command."""
    func = click.option(
        "--api-key",
        envvar="READARR_API_KEY",
        required=True,
        help="Readarr API key (env: READARR_API_KEY).",
    )(func)
    func = click.option(
        "--readarr-url",
        envvar="READARR_API_URL",
        required=True,
        help="Readarr base URL, e.g. http://localhost:8787 (env: READARR_API_URL).",
    )(func)
    return func


root_folder_option = click.option(
    "--root-folder",
    envvar="READARR_ROOT_FOLDER",
    default=None,
    help="Root folder for new authors (default: the first configured; env: READARR_ROOT_FOLDER).",
)

google_key_option = click.option(
    "--google-key",
    envvar="GOOGLE_BOOKS_API_KEY",
    default=None,
    help="Google Books API key (env: GOOGLE_BOOKS_API_KEY).",
)


def create_catalog(readarr_url: str, api_key: str) -> ReadarrCatalog:
    """Create the Readarr-backed acquisition catalog."""
    return ReadarrCatalog(ReadarrHttpClient(readarr_url, api_key))


def create_enricher(google_key: str | None = None) -> RequestEnricher:
    """Create an enricher querying Open Library, then Google Books, through one cache."""
    http_client = CachingHttpClient(MetadataHttpClient(), TTLCache())
    return RequestEnricher(
        [
            OpenLibraryProvider(http_client=http_client),
            GoogleBooksProvider(http_client=http_client, api_key=google_key),
        ]
    )

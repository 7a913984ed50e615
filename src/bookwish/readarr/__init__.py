# ABOUTME: Acquisition backend package: the catalog protocol and its Readarr implementation.
# ABOUTME: Exports the protocol, the Readarr client, and the HTTP transport.

from bookwish.readarr.catalog import AcquisitionCatalog, ProfileOptions, Profiles, SearchCommand
from bookwish.readarr.client import ReadarrCatalog
from bookwish.readarr.http import CatalogError, ReadarrHttpClient
from bookwish.readarr.parser import BookStatus

__all__ = [
    "AcquisitionCatalog",
    "BookStatus",
    "CatalogError",
    "ProfileOptions",
    "Profiles",
    "ReadarrCatalog",
    "ReadarrHttpClient",
    "SearchCommand",
]

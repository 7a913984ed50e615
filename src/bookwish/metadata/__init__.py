# ABOUTME: Metadata package for enriching book requests from public catalogs.
# ABOUTME: Exports the metadata records, the provider protocol, and the request enricher.

from bookwish.metadata.enricher import EnrichmentResult, RequestEnricher
from bookwish.metadata.provider import MetadataProvider
from bookwish.metadata.types import BookMetadata, MetadataCandidate

__all__ = [
    "BookMetadata",
    "EnrichmentResult",
    "MetadataCandidate",
    "MetadataProvider",
    "RequestEnricher",
]

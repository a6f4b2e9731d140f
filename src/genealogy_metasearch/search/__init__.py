"""
Metasearch over the trees of a host.

Normalizes a request, searches each target tree and merges the
results into one response.
"""

from genealogy_metasearch.search.aggregator import SearchResponse, aggregate
from genealogy_metasearch.search.engine import (
    CollectionResult,
    CollectionSearchEngine,
    MatchRecord,
    format_details,
)
from genealogy_metasearch.search.federated import FederatedSearch, FederatedSearchConfig
from genealogy_metasearch.search.query import SearchQuery, normalize, parse_since

__all__ = [
    "SearchQuery",
    "normalize",
    "parse_since",
    "MatchRecord",
    "CollectionResult",
    "CollectionSearchEngine",
    "format_details",
    "SearchResponse",
    "aggregate",
    "FederatedSearch",
    "FederatedSearchConfig",
]

"""Merges per-collection results into the response sent to the aggregator."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping, Sequence

from genealogy_metasearch.search.engine import CollectionResult
from genealogy_metasearch.search.query import SearchQuery
from genealogy_metasearch.settings.manager import MetaSearchSettings


@dataclass
class SearchResponse:
    """Response of one metasearch request."""
    database_name: str = ""
    database_url: str = ""
    empty: bool = False
    hits: dict[str, CollectionResult] = field(default_factory=dict)
    search_time_ms: float = 0.0

    @property
    def failed_collections(self) -> list[str]:
        return [name for name, result in self.hits.items() if result.failed]

    @property
    def total_count(self) -> int:
        return sum(len(r.entries) for r in self.hits.values())

    def to_dict(self) -> dict[str, Any]:
        return {
            "database_name": self.database_name,
            "database_url": self.database_url,
            "empty": self.empty,
            "hits": {name: result.to_dict() for name, result in self.hits.items()},
        }


def aggregate(
    query: SearchQuery,
    results: Mapping[str, CollectionResult],
    order: Sequence[str],
    settings: MetaSearchSettings,
) -> SearchResponse:
    """
    Compose the response.

    Args:
        query: The normalized query
        results: Result per searched collection
        order: Collection names in registry display order
        settings: Snapshot providing the echoed dataset name and URL

    Returns:
        SearchResponse with hits in `order`; empty queries carry no hits
    """
    response = SearchResponse(
        database_name=settings.database_name,
        database_url=settings.database_url,
        empty=query.empty,
    )
    if query.empty:
        return response

    for name in order:
        if name in results:
            response.hits[name] = results[name]
    return response

"""
Federated metasearch.

Handles one request end to end:
1. Snapshot the settings
2. Check the caller's key
3. Normalize the query
4. Resolve the target trees
5. Search every tree (in parallel), isolating failures per tree
6. Aggregate in registry order
"""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Any, Mapping

from genealogy_metasearch.access.credentials import CredentialVerifier
from genealogy_metasearch.registry.collections import CollectionRegistry
from genealogy_metasearch.search.aggregator import SearchResponse, aggregate
from genealogy_metasearch.search.engine import CollectionResult, CollectionSearchEngine
from genealogy_metasearch.search.query import SearchQuery, normalize
from genealogy_metasearch.settings.manager import MetaSearchSettings, SettingsManager
from genealogy_metasearch.store.base import RecordStore

logger = logging.getLogger(__name__)


@dataclass
class FederatedSearchConfig:
    """Configuration for federated search."""
    parallel: bool = True
    timeout_per_collection: float = 30.0


class FederatedSearch:
    """
    Metasearch across the public trees of a host.

    Example:
        search = FederatedSearch(store, SettingsManager(MemoryPreferenceStore()))
        response = await search.search({"lastname": "Hartenthaler"})
    """

    def __init__(
        self,
        store: RecordStore,
        settings: SettingsManager,
        config: FederatedSearchConfig | None = None,
        verifier: CredentialVerifier | None = None,
    ):
        self.store = store
        self.settings = settings
        self.config = config or FederatedSearchConfig()
        self.verifier = verifier or CredentialVerifier()

    async def search(self, params: Mapping[str, Any]) -> SearchResponse:
        """
        Answer one metasearch request.

        Args:
            params: Raw request parameters (key, trees, lastname,
                placename, placeid, since)

        Raises:
            AuthError: Key missing or wrong
            ValidationError: Bad since-date or malformed tree name
            NotFoundError: A requested tree is unknown or not public
        """
        start_time = time.perf_counter()
        settings = self.settings.snapshot()

        key = params.get("key")
        self.verifier.require(
            "" if key is None else str(key),
            settings.secret_key,
            settings.use_hash,
        )

        query = normalize(params)
        registry = CollectionRegistry(self.store, settings)
        targets = await registry.require(query.trees)

        if query.empty:
            logger.debug("Empty query; no tree searched")
            return aggregate(query, {}, [], settings)

        order = await registry.in_display_order(targets)
        results = await self.search_trees(query, order, settings)

        response = aggregate(query, results, order, settings)
        response.search_time_ms = (time.perf_counter() - start_time) * 1000
        logger.info(
            "Metasearch %s over %d trees: %d hits (%.1f ms)",
            query.describe(), len(order), response.total_count, response.search_time_ms,
        )
        return response

    async def search_trees(
        self,
        query: SearchQuery,
        trees: list[str],
        settings: MetaSearchSettings,
    ) -> dict[str, CollectionResult]:
        """Search the given trees; a failing tree yields an error result."""
        engine = CollectionSearchEngine(
            self.store,
            max_hits=settings.max_hit,
            surname_match=settings.surname_match,
            base_url=settings.database_url,
        )
        if self.config.parallel:
            return await self._search_parallel(engine, query, trees)
        return await self._search_sequential(engine, query, trees)

    async def _search_one(
        self,
        engine: CollectionSearchEngine,
        query: SearchQuery,
        tree: str,
    ) -> CollectionResult:
        try:
            return await asyncio.wait_for(
                engine.search(tree, query),
                timeout=self.config.timeout_per_collection,
            )
        except asyncio.TimeoutError:
            logger.warning("Search in tree %s timed out", tree)
            return CollectionResult.failure(tree, "Search timed out")
        except Exception as e:
            logger.warning("Search in tree %s failed: %s", tree, e)
            return CollectionResult.failure(tree, str(e) or type(e).__name__)

    async def _search_parallel(
        self,
        engine: CollectionSearchEngine,
        query: SearchQuery,
        trees: list[str],
    ) -> dict[str, CollectionResult]:
        """Execute searches in parallel across trees."""
        results = await asyncio.gather(
            *(self._search_one(engine, query, tree) for tree in trees)
        )
        return {r.collection: r for r in results}

    async def _search_sequential(
        self,
        engine: CollectionSearchEngine,
        query: SearchQuery,
        trees: list[str],
    ) -> dict[str, CollectionResult]:
        """Execute searches one tree after another."""
        results = {}
        for tree in trees:
            results[tree] = await self._search_one(engine, query, tree)
        return results

    async def trees(self) -> list[str]:
        """Names of the public trees in display order."""
        registry = CollectionRegistry(self.store, self.settings.snapshot())
        return await registry.public_names()

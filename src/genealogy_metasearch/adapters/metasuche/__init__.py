"""Metasuche Adapter.

Exposes the metasearch endpoint expected by the CompGen aggregator.
"""

from genealogy_metasearch.adapters.metasuche.api import router as metasearch_router

__all__ = ["metasearch_router"]

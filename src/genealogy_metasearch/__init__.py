"""
Genealogy MetaSearch

Federated search endpoint over the public trees of a genealogy host,
answering the "Metasuche" aggregator of CompGen.
"""

__version__ = "2.1.18"
__author__ = "Hermann Hartenthaler"

from genealogy_metasearch.core.errors import (
    AuthError,
    MetaSearchError,
    NotFoundError,
    ValidationError,
)
from genealogy_metasearch.search import FederatedSearch, SearchQuery, SearchResponse
from genealogy_metasearch.settings import SettingsManager

__all__ = [
    "AuthError",
    "MetaSearchError",
    "NotFoundError",
    "ValidationError",
    "FederatedSearch",
    "SearchQuery",
    "SearchResponse",
    "SettingsManager",
]

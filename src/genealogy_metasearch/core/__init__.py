"""Core models, errors and the GEDCOM reader."""

from genealogy_metasearch.core.errors import (
    AuthError,
    MetaSearchError,
    NotFoundError,
    ValidationError,
)
from genealogy_metasearch.core.models import (
    Collection,
    Event,
    GenealogyDate,
    Name,
    Person,
    Place,
    SurnameMatch,
    day_count,
)

__all__ = [
    "AuthError",
    "MetaSearchError",
    "NotFoundError",
    "ValidationError",
    "Collection",
    "Event",
    "GenealogyDate",
    "Name",
    "Person",
    "Place",
    "SurnameMatch",
    "day_count",
]

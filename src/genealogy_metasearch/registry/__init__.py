"""Collection Registry for searchable trees."""

from genealogy_metasearch.registry.collections import CollectionRegistry, is_well_formed

__all__ = ["CollectionRegistry", "is_well_formed"]

"""
Record stores.

Provides read access to the host's trees:
- In memory (tests, embedding)
- GEDCOM exports declared in a YAML catalog
"""

from genealogy_metasearch.store.base import RecordStore
from genealogy_metasearch.store.gedcom_store import GedcomRecordStore, TreeDefinition
from genealogy_metasearch.store.memory import MemoryRecordStore

__all__ = [
    "RecordStore",
    "GedcomRecordStore",
    "TreeDefinition",
    "MemoryRecordStore",
]

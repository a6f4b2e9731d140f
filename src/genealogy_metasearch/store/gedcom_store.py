"""
Record store over GEDCOM files.

Trees are declared in a YAML catalog; each entry points at the
GEDCOM export of one tree:

    trees:
      kennedy:
        title: Kennedy family
        gedcom: kennedy.ged   # relative to the catalog file
        sort_order: 1
        enabled: true
        public: true
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

from genealogy_metasearch.core.gedcom import GedcomReader
from genealogy_metasearch.core.matching import surname_matches
from genealogy_metasearch.core.models import Collection, Person, SurnameMatch
from genealogy_metasearch.store.base import RecordStore

logger = logging.getLogger(__name__)


@dataclass
class TreeDefinition:
    """Catalog entry for one tree."""

    collection: Collection
    gedcom: Path

    @classmethod
    def from_dict(cls, name: str, data: dict[str, Any], base_dir: Path) -> TreeDefinition:
        """Create from dictionary (YAML data)."""
        gedcom = Path(data.get("gedcom", f"{name}.ged"))
        if not gedcom.is_absolute():
            gedcom = base_dir / gedcom

        return cls(
            collection=Collection(
                name=name,
                title=data.get("title") or "",
                sort_order=int(data.get("sort_order", 0)),
                enabled=bool(data.get("enabled", True)),
                public=bool(data.get("public", True)),
            ),
            gedcom=gedcom,
        )


class GedcomRecordStore(RecordStore):
    """
    Record store reading one GEDCOM file per tree.

    Files are parsed on first use and cached. A file that fails to
    parse stays failed until `reload()`, which drops the cache after
    the host re-exports a tree.
    """

    def __init__(self, catalog_path: Path | str):
        self._catalog_path = Path(catalog_path)
        self._trees: dict[str, TreeDefinition] = {}
        self._people: dict[str, list[Person]] = {}
        self._failures: dict[str, Exception] = {}
        self._locks: dict[str, asyncio.Lock] = {}
        self._load_catalog()

    def _load_catalog(self) -> None:
        """Load tree definitions from the YAML catalog."""
        if not self._catalog_path.exists():
            raise FileNotFoundError(f"Catalog file not found: {self._catalog_path}")

        with open(self._catalog_path) as f:
            data = yaml.safe_load(f) or {}

        base_dir = self._catalog_path.parent
        for name, tree_data in (data.get("trees") or {}).items():
            self._trees[str(name)] = TreeDefinition.from_dict(str(name), tree_data or {}, base_dir)

    def reload(self) -> None:
        """Re-read the catalog and forget parsed trees."""
        self._trees.clear()
        self._people.clear()
        self._failures.clear()
        self._load_catalog()

    async def list_collections(self) -> list[Collection]:
        """Trees ordered by sort_order, then title."""
        collections = [t.collection for t in self._trees.values()]
        collections.sort(key=lambda c: (c.sort_order, c.title.casefold()))
        return collections

    async def find_candidates(
        self,
        collection: str,
        surname: str | None = None,
        policy: SurnameMatch = SurnameMatch.EXACT,
    ) -> list[Person]:
        people = await self._tree_people(collection)
        if not surname:
            return list(people)
        return [p for p in people if surname_matches(p, surname, policy)]

    async def _tree_people(self, name: str) -> list[Person]:
        tree = self._trees[name]

        if name not in self._people:
            lock = self._locks.setdefault(name, asyncio.Lock())
            async with lock:
                if name in self._failures:
                    raise self._failures[name]
                if name not in self._people:
                    try:
                        people = await asyncio.to_thread(self._read_tree, tree)
                    except Exception as e:
                        logger.warning("Cannot read tree %s from %s: %s", name, tree.gedcom, e)
                        self._failures[name] = e
                        raise
                    self._people[name] = people

        return self._people[name]

    @staticmethod
    def _read_tree(tree: TreeDefinition) -> list[Person]:
        people = GedcomReader().load(tree.gedcom).people()
        logger.debug("Loaded %d individuals from %s", len(people), tree.gedcom)
        return people

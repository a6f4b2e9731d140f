"""Collection Registry: which trees may be searched, and in what order."""

from __future__ import annotations

import logging
import re
from typing import Sequence

from genealogy_metasearch.core.errors import NotFoundError, ValidationError
from genealogy_metasearch.core.models import Collection
from genealogy_metasearch.settings.manager import MetaSearchSettings
from genealogy_metasearch.store.base import RecordStore

logger = logging.getLogger(__name__)

MAX_NAME_LENGTH = 255

_INVALID_NAME_CHARS = re.compile(r"[\x00-\x1f\x7f/\\?#%]")


def is_well_formed(name: str) -> bool:
    """Whether a string can be a tree name at all."""
    return 0 < len(name) <= MAX_NAME_LENGTH and not _INVALID_NAME_CHARS.search(name)


class CollectionRegistry:
    """
    Public collections for one request.

    Built from a settings snapshot; the collection list is read from
    the store once and reused for the lifetime of the registry.
    """

    def __init__(self, store: RecordStore, settings: MetaSearchSettings):
        self.store = store
        self.settings = settings
        self._public: list[Collection] | None = None

    async def public_collections(self) -> list[Collection]:
        """
        Public, enabled collections in display order.

        Trees listed in the tree_order preference come first, in that
        order; the rest follow in the store's natural order.
        """
        if self._public is None:
            disabled = set(self.settings.disabled_trees)
            collections = [
                c for c in await self.store.list_collections()
                if c.searchable and c.name not in disabled
            ]

            position = {name: i for i, name in enumerate(self.settings.tree_order)}
            natural = {c.name: i for i, c in enumerate(collections)}
            collections.sort(key=lambda c: (
                position.get(c.name, len(position)),
                natural[c.name],
            ))
            self._public = collections

        return self._public

    async def public_names(self) -> list[str]:
        return [c.name for c in await self.public_collections()]

    async def default_targets(self) -> list[str]:
        """Configured default trees that are public, or all public trees."""
        public = await self.public_names()
        if not self.settings.default_trees:
            return public

        targets = [name for name in self.settings.default_trees if name in public]
        skipped = [name for name in self.settings.default_trees if name not in public]
        if skipped:
            logger.warning("Default trees not searchable: %s", ", ".join(skipped))
        return targets

    async def resolve(self, names: Sequence[str]) -> tuple[list[str], list[str]]:
        """
        Validate requested tree names.

        Args:
            names: Requested names; empty means the default set

        Returns:
            (valid names in request order, invalid names)
        """
        requested: list[str] = []
        for raw in names:
            name = raw.strip()
            if name and name not in requested:
                requested.append(name)

        if not requested:
            return await self.default_targets(), []

        public = set(await self.public_names())
        valid = [n for n in requested if n in public]
        invalid = [n for n in requested if n not in public]
        return valid, invalid

    async def require(self, names: Sequence[str]) -> list[str]:
        """
        Resolve names, failing the request on any invalid entry.

        Raises:
            ValidationError: A name is not a well-formed tree name
            NotFoundError: A name is not a public, enabled tree
        """
        valid, invalid = await self.resolve(names)

        malformed = [n for n in invalid if not is_well_formed(n)]
        if malformed:
            raise ValidationError(
                "Invalid tree name: " + ", ".join(repr(n) for n in malformed),
                error_class="invalid collection name",
            )
        if invalid:
            logger.info("Requested trees not found: %s", ", ".join(invalid))
            raise NotFoundError(invalid)

        return valid

    async def in_display_order(self, names: Sequence[str]) -> list[str]:
        """Restrict the display order to the given names."""
        wanted = set(names)
        return [n for n in await self.public_names() if n in wanted]

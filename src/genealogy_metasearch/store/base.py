"""
Base class for collection record stores.

A record store is the host's view of its trees: which collections
exist and which persons they hold. Metasearch only reads from it.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from genealogy_metasearch.core.models import Collection, Person, SurnameMatch


class RecordStore(ABC):
    """
    Abstract base class for record stores.

    All stores (in-memory, GEDCOM files, ...) must implement
    this interface.
    """

    @abstractmethod
    async def list_collections(self) -> list[Collection]:
        """
        All collections known to the host, in their natural order.

        Includes disabled and non-public collections; filtering is
        the registry's job.
        """
        pass

    @abstractmethod
    async def find_candidates(
        self,
        collection: str,
        surname: str | None = None,
        policy: SurnameMatch = SurnameMatch.EXACT,
    ) -> list[Person]:
        """
        Persons of one collection that may match a surname.

        Args:
            collection: Collection name
            surname: Surname filter; None returns every person
            policy: How the surname is compared

        Returns:
            Candidate persons in the collection's natural order.
            Stores may return a superset; the search engine applies
            the exact rules again.

        Raises:
            KeyError: Unknown collection
        """
        pass

    async def connect(self) -> None:
        """Open the store."""
        pass

    async def close(self) -> None:
        """Release the store."""
        pass

    async def __aenter__(self):
        """Async context manager entry."""
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        await self.close()
        return False

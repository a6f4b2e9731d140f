"""In-memory record store."""

from __future__ import annotations

from genealogy_metasearch.core.matching import surname_matches
from genealogy_metasearch.core.models import Collection, Person, SurnameMatch
from genealogy_metasearch.store.base import RecordStore


class MemoryRecordStore(RecordStore):
    """Record store over collections and persons held in memory."""

    def __init__(
        self,
        collections: list[Collection] | None = None,
        people: dict[str, list[Person]] | None = None,
    ):
        self._collections = list(collections or [])
        self._people: dict[str, list[Person]] = {
            c.name: [] for c in self._collections
        }
        for name, persons in (people or {}).items():
            self._people.setdefault(name, []).extend(persons)

    def add_collection(self, collection: Collection, people: list[Person] | None = None) -> None:
        self._collections.append(collection)
        self._people.setdefault(collection.name, []).extend(people or [])

    def add_person(self, collection: str, person: Person) -> None:
        self._people[collection].append(person)

    async def list_collections(self) -> list[Collection]:
        return list(self._collections)

    async def find_candidates(
        self,
        collection: str,
        surname: str | None = None,
        policy: SurnameMatch = SurnameMatch.EXACT,
    ) -> list[Person]:
        people = self._people[collection]
        if not surname:
            return list(people)
        return [p for p in people if surname_matches(p, surname, policy)]

"""
Per-collection search.

Runs one normalized query against one collection and returns an
ordered, capped list of hits plus a truncation flag.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Any
from urllib.parse import quote

from genealogy_metasearch.core.matching import (
    changed_since,
    place_id_matches,
    place_matches,
    surname_matches,
)
from genealogy_metasearch.core.models import Event, Name, Person, SurnameMatch
from genealogy_metasearch.search.query import SearchQuery
from genealogy_metasearch.store.base import RecordStore

logger = logging.getLogger(__name__)


@dataclass
class MatchRecord:
    """One hit as sent to the aggregator."""
    lastname: str
    firstname: str
    details: str = ""
    url: str = ""

    def to_dict(self) -> dict[str, str]:
        return {
            "lastname": self.lastname,
            "firstname": self.firstname,
            "details": self.details,
            "url": self.url,
        }


@dataclass
class CollectionResult:
    """Hits of one collection."""
    collection: str
    entries: list[MatchRecord] = field(default_factory=list)
    more: bool = False
    error: str | None = None
    search_time_ms: float = 0.0

    @property
    def failed(self) -> bool:
        return self.error is not None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "entries": [e.to_dict() for e in self.entries],
            "more": self.more,
        }
        if self.error is not None:
            data["error"] = self.error
        return data

    @classmethod
    def failure(cls, collection: str, error: str) -> CollectionResult:
        return cls(collection=collection, error=error)


def _event_summary(symbol: str, event: Event | None) -> str:
    """"* 1957 Ennetach"; empty when neither year nor place is known."""
    if event is None:
        return ""
    year = event.date.year if event.date and event.date.year else None
    place = event.place.short_name if event.place else ""
    text = " ".join(str(p) for p in (year, place) if p)
    return f"{symbol} {text}" if text else ""


def format_details(person: Person) -> str:
    """Birth and death year and place of a person."""
    parts = [
        _event_summary("*", person.birth),
        _event_summary("†", person.death),
    ]
    return ", ".join(p for p in parts if p)


def person_url(base_url: str, collection: str, xref: str) -> str:
    """Link to the individual page of the host, or the bare id without a base URL."""
    if not base_url:
        return xref
    return f"{base_url.rstrip('/')}/tree/{quote(collection, safe='')}/individual/{quote(xref, safe='')}"


class CollectionSearchEngine:
    """
    Searches one collection at a time.

    Args:
        store: Record store holding the collections
        max_hits: Maximum entries returned per collection
        surname_match: Surname comparison policy
        base_url: Base URL of the host, used for hit links
    """

    def __init__(
        self,
        store: RecordStore,
        max_hits: int,
        surname_match: SurnameMatch = SurnameMatch.EXACT,
        base_url: str = "",
    ):
        if max_hits < 1:
            raise ValueError(f"max_hits must be at least 1: {max_hits}")
        self.store = store
        self.max_hits = max_hits
        self.surname_match = surname_match
        self.base_url = base_url

    def matches(self, person: Person, query: SearchQuery) -> bool:
        """Whether a person satisfies every supplied criterion."""
        return (
            surname_matches(person, query.lastname, self.surname_match)
            and place_matches(person, query.placename)
            and place_id_matches(person, query.placeid)
            and changed_since(person, query.since_day_count)
        )

    @staticmethod
    def _display_name(person: Person) -> Name:
        return person.primary_name or Name()

    def _sort_key(self, person: Person) -> tuple[str, str, str]:
        surname, given = self._display_name(person).sort_key()
        return (surname, given, person.id.casefold())

    def to_record(self, collection: str, person: Person) -> MatchRecord:
        name = self._display_name(person)
        return MatchRecord(
            lastname=name.surname,
            firstname=name.given,
            details=format_details(person),
            url=person_url(self.base_url, collection, person.id),
        )

    async def search(self, collection: str, query: SearchQuery) -> CollectionResult:
        """
        Search one collection.

        Store errors propagate; isolating them per collection is the
        caller's job.
        """
        start_time = time.perf_counter()

        candidates = await self.store.find_candidates(
            collection,
            surname=query.lastname or None,
            policy=self.surname_match,
        )
        hits = [p for p in candidates if self.matches(p, query)]
        hits.sort(key=self._sort_key)

        more = len(hits) > self.max_hits
        entries = [self.to_record(collection, p) for p in hits[:self.max_hits]]

        elapsed = (time.perf_counter() - start_time) * 1000
        logger.debug(
            "Searched %s: %d candidates, %d hits, more=%s (%.1f ms)",
            collection, len(candidates), len(hits), more, elapsed,
        )

        return CollectionResult(
            collection=collection,
            entries=entries,
            more=more,
            search_time_ms=elapsed,
        )

"""
Core data models for metasearch over genealogical collections.

These models describe what a search reads from a collection:
- Persons with one or more name records
- Life events with date, place and place-authority (GOV) identifier
- The collection (tree) itself with its visibility and ordering
"""

from __future__ import annotations

from datetime import date
from enum import Enum
from typing import Iterator, Literal

from pydantic import BaseModel, Field, field_validator

# Offset between date.toordinal() and the Julian Day Number of the same day.
JULIAN_DAY_OFFSET = 1721425


def day_count(value: date) -> int:
    """Return the Julian Day Number of a Gregorian date."""
    return value.toordinal() + JULIAN_DAY_OFFSET


class DateModifier(str, Enum):
    """GEDCOM-compliant date modifiers."""
    EXACT = "exact"
    ABOUT = "ABT"
    BEFORE = "BEF"
    AFTER = "AFT"
    BETWEEN = "BET"
    FROM = "FROM"
    CALCULATED = "CAL"
    ESTIMATED = "EST"


class SurnameMatch(str, Enum):
    """How a requested surname is compared with stored surnames."""
    EXACT = "exact"
    PREFIX = "prefix"


class GenealogyDate(BaseModel):
    """
    GEDCOM date as found in a record.

    Only the first date of a range is kept; a search only needs
    the year for display and a day count for comparisons.
    """
    year: int | None = None
    month: int | None = Field(None, ge=1, le=12)
    day: int | None = Field(None, ge=1, le=31)
    modifier: DateModifier = DateModifier.EXACT
    original_text: str | None = None

    @field_validator("day")
    @classmethod
    def validate_day(cls, v: int | None, info) -> int | None:
        if v is not None and info.data.get("month") is None:
            raise ValueError("Cannot specify day without month")
        return v

    @classmethod
    def from_gedcom(cls, date_str: str) -> GenealogyDate:
        """Parse a GEDCOM date string like "ABT 12 NOV 1957"."""
        months = {
            "JAN": 1, "FEB": 2, "MAR": 3, "APR": 4, "MAY": 5, "JUN": 6,
            "JUL": 7, "AUG": 8, "SEP": 9, "OCT": 10, "NOV": 11, "DEC": 12
        }
        modifiers = {m.value for m in DateModifier if m != DateModifier.EXACT}

        parts = date_str.upper().split()
        modifier = DateModifier.EXACT
        year = month = day = None

        idx = 0
        if parts and parts[0] in modifiers:
            modifier = DateModifier(parts[0])
            idx = 1

        # Stop at the second half of a range
        while idx < len(parts) and parts[idx] not in ("AND", "TO"):
            token = parts[idx]
            if token in months:
                month = months[token]
            elif token.isdigit():
                num = int(token)
                if num > 31 or len(token) >= 3:
                    year = num
                elif num >= 1:
                    day = num
            idx += 1

        if month is None:
            day = None

        return cls(
            year=year, month=month, day=day,
            modifier=modifier,
            original_text=date_str,
        )

    def to_date(self) -> date | None:
        """Earliest calendar date covered, or None without a year."""
        if not self.year:
            return None
        try:
            return date(self.year, self.month or 1, self.day or 1)
        except ValueError:
            return None

    def to_day_count(self) -> int | None:
        """Julian Day Number of the earliest day covered."""
        value = self.to_date()
        return day_count(value) if value else None


class Place(BaseModel):
    """
    Place of an event.

    `name` is the full GEDCOM place string ("Ennetach, Sigmaringen, ...");
    `gov_id` the identifier in the GOV place authority, when known.
    """
    name: str = ""
    gov_id: str | None = None

    @property
    def short_name(self) -> str:
        """First jurisdiction of the place string."""
        return self.name.split(",")[0].strip()


class Event(BaseModel):
    """A life event (birth, death, residence, ...)."""
    event_type: str  # BIRT, DEAT, CHR, BURI, RESI, ...
    date: GenealogyDate | None = None
    place: Place | None = None


class Name(BaseModel):
    """One name record of a person."""
    given: str = ""
    surname: str = ""
    name_type: Literal["birth", "married", "aka", "other"] = "birth"
    preferred: bool = False

    def full_name(self) -> str:
        """Return "Given Surname"."""
        return " ".join(p for p in (self.given, self.surname) if p)

    def sort_key(self) -> tuple[str, str]:
        return (self.surname.casefold(), self.given.casefold())


class Person(BaseModel):
    """
    Individual as read from a collection.

    Birth and death are held separately from the other events;
    `events()` yields all of them.
    """
    id: str
    names: list[Name] = Field(default_factory=list)
    birth: Event | None = None
    death: Event | None = None
    other_events: list[Event] = Field(default_factory=list)
    changed: int | None = None  # day count of the last change

    @property
    def primary_name(self) -> Name | None:
        """The preferred name record, else the first one."""
        for name in self.names:
            if name.preferred:
                return name
        return self.names[0] if self.names else None

    def events(self) -> Iterator[Event]:
        if self.birth:
            yield self.birth
        if self.death:
            yield self.death
        yield from self.other_events

    def places(self) -> Iterator[Place]:
        for event in self.events():
            if event.place:
                yield event.place

    def birth_year(self) -> int | None:
        if self.birth and self.birth.date:
            return self.birth.date.year
        return None

    def death_year(self) -> int | None:
        if self.death and self.death.date:
            return self.death.date.year
        return None


class Collection(BaseModel):
    """
    A searchable genealogical dataset ("tree").

    Owned by the host; only public and enabled collections are
    ever exposed to search.
    """
    name: str
    title: str = ""
    sort_order: int = 0
    enabled: bool = True
    public: bool = True

    @property
    def searchable(self) -> bool:
        return self.enabled and self.public

    def display_title(self) -> str:
        return f"{self.name} ({self.title})" if self.title else self.name

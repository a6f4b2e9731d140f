"""
GEDCOM 5.5.1 reader for searchable person records.

Handles:
- Parsing GEDCOM lines into level-0 records
- Name records with GIVN/SURN/TYPE/_PRIM substructures
- Individual events with DATE, PLAC and the GOV identifier (_GOV)
- The last-change date (CHAN/DATE)
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, Iterator

from genealogy_metasearch.core.models import (
    Event,
    GenealogyDate,
    Name,
    Person,
    Place,
)

# Individual event tags that carry a place worth searching
EVENT_TAGS = frozenset({
    "BIRT", "CHR", "BAPM", "DEAT", "BURI", "CREM", "ADOP",
    "BARM", "BASM", "BLES", "CHRA", "CONF", "FCOM", "ORDN",
    "NATU", "EMIG", "IMMI", "CENS", "PROB", "WILL", "GRAD",
    "RETI", "RESI", "OCCU", "EDUC", "EVEN",
})

# Single-byte character sets from the HEAD/CHAR line; ANSEL is read as
# cp1252, which keeps ASCII names intact
LEGACY_CHARSETS = frozenset({"ANSI", "ANSEL", "WINDOWS", "CP1252", "IBMPC"})

_CHAR_PATTERN = re.compile(rb'^\s*1\s+CHAR\s+(\S+)', re.MULTILINE)

NAME_TYPES = {
    "birth": "birth",
    "married": "married",
    "aka": "aka",
    "maiden": "birth",
}


@dataclass
class GedcomLine:
    """A single parsed GEDCOM line."""
    level: int
    tag: str
    value: str = ""
    xref: str | None = None  # @I123@ style ID

    @classmethod
    def parse(cls, line: str) -> GedcomLine | None:
        """Parse a GEDCOM line."""
        line = line.strip()
        if not line:
            return None

        # Pattern: level [xref] tag [value]
        # Examples:
        #   0 @I1@ INDI
        #   1 NAME John /Smith/
        #   2 DATE 15 JAN 1862
        match = re.match(
            r'^(\d+)\s+(?:(@[^@]+@)\s+)?(\S+)(?:\s(.*))?$',
            line
        )
        if not match:
            return None

        return cls(
            level=int(match.group(1)),
            tag=match.group(3).upper(),
            value=(match.group(4) or "").strip(),
            xref=match.group(2),
        )


@dataclass
class GedcomRecord:
    """A complete GEDCOM record (level 0 + subordinates)."""
    id: str | None  # @I123@ style
    tag: str  # INDI, FAM, SOUR, etc.
    lines: list[GedcomLine] = field(default_factory=list)

    def blocks(self, tag: str | None = None) -> Iterator[tuple[GedcomLine, list[GedcomLine]]]:
        """Yield each level-1 line with the lines nested beneath it."""
        yield from _blocks(self.lines[1:], 1, tag)


def _blocks(
    lines: list[GedcomLine],
    level: int,
    tag: str | None = None,
) -> Iterator[tuple[GedcomLine, list[GedcomLine]]]:
    head: GedcomLine | None = None
    body: list[GedcomLine] = []

    for line in lines:
        if line.level == level:
            if head is not None and (tag is None or head.tag == tag):
                yield head, body
            head, body = line, []
        elif line.level > level and head is not None:
            body.append(line)

    if head is not None and (tag is None or head.tag == tag):
        yield head, body


def decode_gedcom(data: bytes) -> str:
    """
    Decode a GEDCOM file.

    The charset comes from the `1 CHAR` header line. UTF-8 is the
    default; undecodable bytes become U+FFFD instead of failing
    the whole file.
    """
    match = _CHAR_PATTERN.search(data[:4096])
    charset = match.group(1).decode("ascii", "replace").upper() if match else "UTF-8"

    if charset in LEGACY_CHARSETS:
        return data.decode("cp1252", errors="replace")
    return data.decode("utf-8-sig", errors="replace")


def _first_value(lines: list[GedcomLine], level: int, tag: str) -> str | None:
    for head, _ in _blocks(lines, level, tag):
        return head.value
    return None


class GedcomReader:
    """
    Reads individuals from a GEDCOM file.

    Only INDI records are converted; families, sources and notes
    are skipped.
    """

    def __init__(self):
        self.records: dict[str, GedcomRecord] = {}
        self.individuals: dict[str, GedcomRecord] = {}

    def load(self, path: str | Path) -> GedcomReader:
        """Load a GEDCOM file."""
        path = Path(path)
        return self.loads(decode_gedcom(path.read_bytes()))

    def loads(self, content: str) -> GedcomReader:
        """Load GEDCOM content from a string."""
        self._parse(content.splitlines())
        return self

    def _parse(self, lines: Iterable[str]) -> None:
        current_record: GedcomRecord | None = None

        for raw in lines:
            parsed = GedcomLine.parse(raw)
            if not parsed:
                continue

            if parsed.level == 0:
                if current_record:
                    self._store(current_record)
                current_record = GedcomRecord(
                    id=parsed.xref,
                    tag=parsed.tag,
                    lines=[parsed],
                )
            elif current_record:
                current_record.lines.append(parsed)

        if current_record:
            self._store(current_record)

    def _store(self, record: GedcomRecord) -> None:
        key = record.id or record.tag
        self.records[key] = record
        if record.tag == "INDI" and record.id:
            self.individuals[record.id] = record

    def people(self) -> list[Person]:
        """All individuals in file order."""
        return [self._to_person(record) for record in self.individuals.values()]

    def get_person(self, xref: str) -> Person | None:
        """Convert one individual, by "I1" or "@I1@"."""
        record = self.individuals.get(f"@{xref.strip('@')}@")
        return self._to_person(record) if record else None

    def _to_person(self, record: GedcomRecord) -> Person:
        person = Person(id=(record.id or "").strip("@"))

        for head, body in record.blocks():
            if head.tag == "NAME":
                person.names.append(_parse_name(head.value, body))
            elif head.tag in EVENT_TAGS:
                event = _parse_event(head.tag, body)
                if head.tag == "BIRT" and person.birth is None:
                    person.birth = event
                elif head.tag == "DEAT" and person.death is None:
                    person.death = event
                else:
                    person.other_events.append(event)
            elif head.tag == "CHAN":
                changed = _first_value(body, 2, "DATE")
                if changed:
                    person.changed = GenealogyDate.from_gedcom(changed).to_day_count()

        return person


def _parse_name(value: str, body: list[GedcomLine]) -> Name:
    """Parse "Given /Surname/ suffix" plus GIVN/SURN overrides."""
    match = re.match(r'^([^/]*)/([^/]*)/?(.*)$', value)
    if match:
        given = match.group(1).strip()
        surname = match.group(2).strip()
    else:
        given, surname = value.strip(), ""

    given = _first_value(body, 2, "GIVN") or given
    surname = _first_value(body, 2, "SURN") or surname
    name_type = NAME_TYPES.get((_first_value(body, 2, "TYPE") or "birth").lower(), "other")
    preferred = (_first_value(body, 2, "_PRIM") or "").upper() == "Y"

    return Name(given=given, surname=surname, name_type=name_type, preferred=preferred)


def _parse_event(tag: str, body: list[GedcomLine]) -> Event:
    event = Event(event_type=tag)

    date_value = _first_value(body, 2, "DATE")
    if date_value:
        event.date = GenealogyDate.from_gedcom(date_value)

    for head, place_body in _blocks(body, 2, "PLAC"):
        event.place = Place(
            name=head.value,
            gov_id=_first_value(place_body, 3, "_GOV"),
        )
        break

    return event

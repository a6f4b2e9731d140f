"""
Query parameters of a metasearch request.

The aggregator sends:
- lastname  - surname
- placename - fragment of a place name
- placeid   - GOV identifier of a place
- since     - only records changed after this date, YYYY-MM-DD
- trees     - comma-separated tree names (the older `tree` is accepted too)
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date
from typing import Any, Mapping

from genealogy_metasearch.core.errors import ValidationError
from genealogy_metasearch.core.models import day_count
from genealogy_metasearch.settings.manager import split_names

# First year of the Gregorian calendar
MIN_YEAR = 1582

_DATE_PATTERN = re.compile(r"^(\d{4})-(\d{2})-(\d{2})$")


@dataclass(frozen=True)
class SearchQuery:
    """A normalized metasearch query."""
    lastname: str = ""
    placename: str = ""
    placeid: str = ""
    since: date | None = None
    trees: tuple[str, ...] = ()

    @property
    def since_day_count(self) -> int | None:
        return day_count(self.since) if self.since else None

    @property
    def empty(self) -> bool:
        """No name or place criterion; a since-date alone does not count."""
        return not (self.lastname or self.placename or self.placeid)

    def describe(self) -> str:
        parts = [
            f"{label}={value!r}"
            for label, value in (
                ("lastname", self.lastname),
                ("placename", self.placename),
                ("placeid", self.placeid),
                ("since", self.since.isoformat() if self.since else ""),
            )
            if value
        ]
        return " ".join(parts) or "<empty>"


def parse_since(value: str, today: date | None = None) -> date:
    """
    Parse a YYYY-MM-DD change-date cutoff.

    Raises:
        ValidationError: Malformed, not a calendar date, before 1582
            or after today.
    """
    today = today or date.today()

    match = _DATE_PATTERN.match(value)
    if not match:
        raise ValidationError(f"Bad date format (expected YYYY-MM-DD): {value}")

    year, month, day = (int(g) for g in match.groups())
    if year < MIN_YEAR:
        raise ValidationError(f"Bad date, year before {MIN_YEAR}: {value}")

    try:
        parsed = date(year, month, day)
    except ValueError:
        raise ValidationError(f"Bad date, no such day: {value}")

    if parsed > today:
        raise ValidationError(f"Bad date, in the future: {value}")

    return parsed


def _text(params: Mapping[str, Any], name: str) -> str:
    value = params.get(name)
    return "" if value is None else str(value).strip()


def normalize(params: Mapping[str, Any], today: date | None = None) -> SearchQuery:
    """
    Build a SearchQuery from raw request parameters.

    Args:
        params: Request parameters (query string or form values)
        today: Upper bound for `since`; defaults to the current date

    Raises:
        ValidationError: `since` is present but not a valid date
    """
    since_raw = _text(params, "since")
    since = parse_since(since_raw, today) if since_raw else None

    trees_raw = _text(params, "trees") or _text(params, "tree")

    return SearchQuery(
        lastname=_text(params, "lastname"),
        placename=_text(params, "placename"),
        placeid=_text(params, "placeid"),
        since=since,
        trees=split_names(trees_raw),
    )

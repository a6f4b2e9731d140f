"""Match rules applied to a person for each search criterion."""

from __future__ import annotations

from genealogy_metasearch.core.models import Person, SurnameMatch


def fold(text: str | None) -> str:
    """Case-insensitive comparison form."""
    return (text or "").strip().casefold()


def surname_matches(
    person: Person,
    wanted: str,
    policy: SurnameMatch = SurnameMatch.EXACT,
) -> bool:
    """Whether any name record of the person carries the surname."""
    wanted = fold(wanted)
    if not wanted:
        return True

    for name in person.names:
        surname = fold(name.surname)
        if policy == SurnameMatch.PREFIX:
            if surname.startswith(wanted):
                return True
        elif surname == wanted:
            return True
    return False


def place_matches(person: Person, fragment: str) -> bool:
    """Whether any event place contains the fragment."""
    fragment = fold(fragment)
    if not fragment:
        return True
    return any(fragment in fold(place.name) for place in person.places())


def place_id_matches(person: Person, place_id: str) -> bool:
    """Whether any event place carries the GOV identifier."""
    place_id = fold(place_id)
    if not place_id:
        return True
    return any(place.gov_id and fold(place.gov_id) == place_id for place in person.places())


def changed_since(person: Person, since: int | None) -> bool:
    """
    Whether the person changed strictly after the day count.

    Records without a change date never pass a since-filter.
    """
    if since is None:
        return True
    return person.changed is not None and person.changed > since

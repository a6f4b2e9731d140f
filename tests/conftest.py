"""Pytest configuration and shared fixtures."""

from __future__ import annotations

from datetime import date
from pathlib import Path

import pytest

from genealogy_metasearch.core.models import (
    Collection,
    Event,
    GenealogyDate,
    Name,
    Person,
    Place,
    day_count,
)
from genealogy_metasearch.search.federated import FederatedSearch, FederatedSearchConfig
from genealogy_metasearch.settings.manager import SettingsManager
from genealogy_metasearch.settings.preferences import MemoryPreferenceStore
from genealogy_metasearch.store.memory import MemoryRecordStore

SECRET = "s3cret12"


def make_person(
    id: str,
    given: str,
    surname: str,
    birth: tuple[int | None, str] | None = None,
    death: tuple[int | None, str] | None = None,
    gov_id: str | None = None,
    changed: date | None = None,
    other_names: list[Name] | None = None,
) -> Person:
    """Build a person with optional birth/death (year, place)."""
    person = Person(id=id, names=[Name(given=given, surname=surname)] + (other_names or []))
    if birth:
        year, place = birth
        person.birth = Event(
            event_type="BIRT",
            date=GenealogyDate(year=year) if year else None,
            place=Place(name=place, gov_id=gov_id) if place else None,
        )
    if death:
        year, place = death
        person.death = Event(
            event_type="DEAT",
            date=GenealogyDate(year=year) if year else None,
            place=Place(name=place) if place else None,
        )
    if changed:
        person.changed = day_count(changed)
    return person


# =============================================================================
# Sample Data Fixtures
# =============================================================================

@pytest.fixture
def hermann() -> Person:
    """Hermann Hartenthaler, born 1957 in Ennetach."""
    return make_person(
        "I1", "Hermann", "Hartenthaler",
        birth=(1957, "Ennetach, Mengen, Sigmaringen, Baden-Württemberg, Deutschland"),
        gov_id="ENNACHJN48BA",
        changed=date(2021, 5, 3),
    )


@pytest.fixture
def kennedy_people(hermann: Person) -> list[Person]:
    return [
        hermann,
        make_person(
            "I2", "John Fitzgerald", "Kennedy",
            birth=(1917, "Brookline, Massachusetts, USA"),
            death=(1963, "Dallas, Texas, USA"),
            changed=date(2019, 2, 14),
        ),
        make_person(
            "I3", "Rose", "Kennedy",
            birth=(1890, "Boston, Massachusetts, USA"),
            death=(1995, "Hyannis Port, Massachusetts, USA"),
        ),
    ]


@pytest.fixture
def collections() -> list[Collection]:
    return [
        Collection(name="kennedy", title="Kennedy family", sort_order=1),
        Collection(name="hartenthaler", title="Hartenthaler", sort_order=2),
        Collection(name="private", title="Private tree", sort_order=3, public=False),
        Collection(name="archived", title="Archived tree", sort_order=4, enabled=False),
    ]


@pytest.fixture
def memory_store(collections: list[Collection], kennedy_people: list[Person]) -> MemoryRecordStore:
    """Store with a kennedy tree, a second public tree and two hidden ones."""
    return MemoryRecordStore(
        collections=collections,
        people={
            "kennedy": kennedy_people,
            "hartenthaler": [
                make_person(
                    "I10", "Anna", "Hartenthaler",
                    birth=(1930, "Mengen, Sigmaringen, Baden-Württemberg, Deutschland"),
                    changed=date(2018, 1, 1),
                ),
            ],
            "private": [make_person("I20", "Hidden", "Hartenthaler")],
            "archived": [make_person("I30", "Old", "Hartenthaler")],
        },
    )


# =============================================================================
# Settings Fixtures
# =============================================================================

@pytest.fixture
def preferences() -> MemoryPreferenceStore:
    """Cleartext secret configured."""
    return MemoryPreferenceStore({
        "secret_key": SECRET,
        "use_hash": "0",
        "database_name": "Hartenthaler genealogy",
        "database_url": "https://example.org/webtrees/",
    })


@pytest.fixture
def settings_manager(preferences: MemoryPreferenceStore) -> SettingsManager:
    return SettingsManager(preferences)


@pytest.fixture
def federated(memory_store: MemoryRecordStore, settings_manager: SettingsManager) -> FederatedSearch:
    return FederatedSearch(
        memory_store,
        settings_manager,
        FederatedSearchConfig(timeout_per_collection=5.0),
    )


# =============================================================================
# GEDCOM Fixtures
# =============================================================================

@pytest.fixture
def sample_gedcom_content() -> str:
    """Sample GEDCOM with name records, GOV ids and change dates."""
    return """0 HEAD
1 SOUR webtrees
1 GEDC
2 VERS 5.5.1
2 FORM LINEAGE-LINKED
1 CHAR UTF-8
0 @I1@ INDI
1 NAME Hermann /Hartenthaler/
2 GIVN Hermann
2 SURN Hartenthaler
1 SEX M
1 BIRT
2 DATE 12 MAR 1957
2 PLAC Ennetach, Mengen, Sigmaringen, Baden-Württemberg, Deutschland
3 _GOV ENNACHJN48BA
1 FAMC @F1@
1 CHAN
2 DATE 3 MAY 2021
3 TIME 10:15:00
0 @I2@ INDI
1 NAME Anna /Müller/
2 TYPE birth
1 NAME Anna /Hartenthaler/
2 TYPE married
2 _PRIM Y
1 BIRT
2 DATE ABT 1930
2 PLAC Mengen, Sigmaringen, Baden-Württemberg, Deutschland
1 DEAT
2 DATE 1 JAN 2001
2 PLAC Sigmaringen, Baden-Württemberg, Deutschland
1 FAMS @F1@
1 CHAN
2 DATE 14 FEB 2019
0 @I3@ INDI
1 NAME John Fitzgerald /Kennedy/
1 BIRT
2 DATE 29 MAY 1917
2 PLAC Brookline, Massachusetts, USA
1 DEAT
2 DATE 22 NOV 1963
2 PLAC Dallas, Texas, USA
1 RESI
2 DATE BET 1953 AND 1963
2 PLAC Washington, District of Columbia, USA
0 @F1@ FAM
1 WIFE @I2@
1 CHIL @I1@
1 MARR
2 DATE 1955
2 PLAC Ennetach, Mengen, Sigmaringen, Baden-Württemberg, Deutschland
0 TRLR
"""


@pytest.fixture
def sample_gedcom_file(tmp_path: Path, sample_gedcom_content: str) -> Path:
    """Create a temporary GEDCOM file."""
    gedcom_path = tmp_path / "kennedy.ged"
    gedcom_path.write_text(sample_gedcom_content, encoding="utf-8")
    return gedcom_path


@pytest.fixture
def catalog_file(tmp_path: Path, sample_gedcom_file: Path) -> Path:
    """YAML catalog with one public tree, one private and one disabled."""
    (tmp_path / "empty.ged").write_text("0 HEAD\n0 TRLR\n", encoding="utf-8")
    catalog = tmp_path / "trees.yaml"
    catalog.write_text(
        """trees:
  kennedy:
    title: Kennedy family
    gedcom: kennedy.ged
    sort_order: 2
  demo:
    title: Demo tree
    gedcom: empty.ged
    sort_order: 1
  private:
    title: Private tree
    gedcom: kennedy.ged
    public: false
  old:
    gedcom: empty.ged
    enabled: false
""",
        encoding="utf-8",
    )
    return catalog

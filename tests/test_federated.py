"""Tests for the federated search pipeline."""

from __future__ import annotations

import asyncio
from datetime import date

import pytest

from genealogy_metasearch.core.errors import AuthError, NotFoundError, ValidationError
from genealogy_metasearch.core.models import Collection, Person, SurnameMatch
from genealogy_metasearch.search.federated import FederatedSearch, FederatedSearchConfig
from genealogy_metasearch.settings.manager import SettingsManager
from genealogy_metasearch.settings.preferences import MemoryPreferenceStore
from genealogy_metasearch.store.memory import MemoryRecordStore

from conftest import SECRET, make_person


class CountingStore(MemoryRecordStore):
    """Records which collections were searched."""

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.searched: list[str] = []

    async def find_candidates(self, collection, surname=None, policy=SurnameMatch.EXACT):
        self.searched.append(collection)
        return await super().find_candidates(collection, surname, policy)


class FlakyStore(CountingStore):
    """One tree raises, one tree hangs."""

    async def find_candidates(self, collection, surname=None, policy=SurnameMatch.EXACT):
        if collection == "broken":
            raise OSError("database unavailable")
        if collection == "slow":
            await asyncio.sleep(10)
        return await super().find_candidates(collection, surname, policy)


@pytest.fixture
def counting_store(collections: list[Collection], memory_store: MemoryRecordStore) -> CountingStore:
    store = CountingStore(collections)
    for c in collections:
        for person in memory_store._people[c.name]:
            store.add_person(c.name, person)
    return store


@pytest.fixture
def counting_search(counting_store: CountingStore, settings_manager: SettingsManager) -> FederatedSearch:
    return FederatedSearch(counting_store, settings_manager)


@pytest.mark.asyncio
class TestScenarios:
    """End-to-end request scenarios."""

    async def test_single_hit(self, federated: FederatedSearch):
        """Test a search with one hit."""
        response = await federated.search({
            "key": SECRET, "trees": "kennedy", "lastname": "Hartenthaler",
        })
        data = response.to_dict()
        assert data["empty"] is False
        assert list(data["hits"]) == ["kennedy"]
        kennedy = data["hits"]["kennedy"]
        assert kennedy["more"] is False
        assert kennedy["entries"] == [{
            "lastname": "Hartenthaler",
            "firstname": "Hermann",
            "details": "* 1957 Ennetach",
            "url": "https://example.org/webtrees/tree/kennedy/individual/I1",
        }]
        assert data["database_name"] == "Hartenthaler genealogy"

    async def test_wrong_key(self, federated: FederatedSearch):
        """Test that a wrong key is rejected."""
        with pytest.raises(AuthError) as exc_info:
            await federated.search({"key": "wrong", "trees": "kennedy", "lastname": "Hartenthaler"})
        assert "hits" not in exc_info.value.to_payload()

    async def test_missing_key(self, federated: FederatedSearch):
        """Test that a missing key is rejected."""
        with pytest.raises(AuthError):
            await federated.search({"lastname": "Hartenthaler"})

    async def test_unknown_tree_searches_nothing(self, counting_search: FederatedSearch,
                                                 counting_store: CountingStore):
        """Test that an unknown tree fails the whole request."""
        with pytest.raises(NotFoundError) as exc_info:
            await counting_search.search({"key": SECRET, "trees": "kennedy,ghost", "lastname": "Hartenthaler"})
        assert exc_info.value.names == ["ghost"]
        assert "ghost" in exc_info.value.message
        assert counting_store.searched == []

    async def test_private_tree_not_found(self, federated: FederatedSearch):
        """Test that private trees are reported as not found."""
        with pytest.raises(NotFoundError):
            await federated.search({"key": SECRET, "trees": "private", "lastname": "Hartenthaler"})


@pytest.mark.asyncio
class TestPipeline:
    async def test_no_secret_allows_any_key(self, memory_store: MemoryRecordStore):
        """Test open access without a configured secret."""
        search = FederatedSearch(memory_store, SettingsManager(MemoryPreferenceStore()))
        for key in (None, "", "anything"):
            response = await search.search({"key": key, "lastname": "Hartenthaler"})
            assert not response.empty

    async def test_hashed_secret(self, memory_store: MemoryRecordStore):
        """Test access with a hashed secret."""
        manager = SettingsManager(MemoryPreferenceStore())
        manager.update_secret(SECRET, use_hash=True)
        search = FederatedSearch(memory_store, manager)
        response = await search.search({"key": SECRET, "lastname": "Hartenthaler"})
        assert not response.empty
        with pytest.raises(AuthError):
            await search.search({"key": "wrong", "lastname": "Hartenthaler"})

    @pytest.mark.parametrize("since", [None, "2020-01-01"])
    async def test_empty_query_searches_nothing(self, counting_search: FederatedSearch,
                                                counting_store: CountingStore, since):
        """Test that an empty query touches no tree."""
        response = await counting_search.search({"key": SECRET, "since": since, "lastname": " "})
        assert response.empty is True
        assert response.hits == {}
        assert counting_store.searched == []
        assert "hits" in response.to_dict()

    async def test_empty_query_still_validates_trees(self, counting_search: FederatedSearch):
        """Test tree validation for empty queries."""
        with pytest.raises(NotFoundError):
            await counting_search.search({"key": SECRET, "trees": "ghost"})

    async def test_auth_checked_before_validation(self, federated: FederatedSearch):
        """Test that the key is checked before the parameters."""
        with pytest.raises(AuthError):
            await federated.search({"key": "wrong", "since": "not-a-date", "trees": "ghost"})

    async def test_bad_date(self, federated: FederatedSearch):
        """Test rejection of a malformed since date."""
        with pytest.raises(ValidationError) as exc_info:
            await federated.search({"key": SECRET, "lastname": "X", "since": "2023-13-01"})
        assert exc_info.value.error_class == "bad date"

    async def test_default_trees_in_registry_order(self, federated: FederatedSearch):
        """Test default targets in registry order."""
        response = await federated.search({"key": SECRET, "lastname": "Hartenthaler"})
        assert list(response.hits) == ["kennedy", "hartenthaler"]
        assert response.hits["hartenthaler"].entries[0].firstname == "Anna"

    async def test_hits_follow_registry_not_request_order(self, federated: FederatedSearch):
        """Test response order independent of request order."""
        response = await federated.search({
            "key": SECRET, "trees": "hartenthaler,kennedy", "lastname": "Hartenthaler",
        })
        assert list(response.hits) == ["kennedy", "hartenthaler"]

    async def test_configured_tree_order(self, federated: FederatedSearch, settings_manager: SettingsManager):
        """Test the tree order preference."""
        settings_manager.set_tree_order("hartenthaler")
        response = await federated.search({"key": SECRET, "lastname": "Hartenthaler"})
        assert list(response.hits) == ["hartenthaler", "kennedy"]

    async def test_max_hit_from_settings(self, federated: FederatedSearch, settings_manager: SettingsManager):
        """Test the hit limit preference."""
        settings_manager.set_max_hit(1)
        response = await federated.search({"key": SECRET, "trees": "kennedy", "placename": ","})
        result = response.hits["kennedy"]
        assert len(result.entries) == 1
        assert result.more is True

    async def test_since_filter(self, federated: FederatedSearch):
        """Test the change date filter."""
        response = await federated.search({
            "key": SECRET, "trees": "kennedy", "placename": "a", "since": "2020-01-01",
        })
        assert [e.firstname for e in response.hits["kennedy"].entries] == ["Hermann"]

    async def test_trees_listing(self, federated: FederatedSearch):
        """Test listing searchable trees."""
        assert await federated.trees() == ["kennedy", "hartenthaler"]


@pytest.mark.asyncio
class TestIsolation:
    """A failing tree does not fail the request."""

    @pytest.fixture
    def flaky_search(self, settings_manager: SettingsManager) -> tuple[FederatedSearch, FlakyStore]:
        person = make_person("I1", "Hermann", "Hartenthaler", changed=date(2021, 1, 1))
        store = FlakyStore(
            [Collection(name="broken"), Collection(name="slow"), Collection(name="good")],
            {"broken": [person], "slow": [person], "good": [person]},
        )
        search = FederatedSearch(
            store, settings_manager, FederatedSearchConfig(timeout_per_collection=0.1),
        )
        return search, store

    async def test_failures_are_reported_per_tree(self, flaky_search):
        """Test that one failing tree does not affect the others."""
        search, _ = flaky_search
        response = await search.search({"key": SECRET, "lastname": "Hartenthaler"})

        assert list(response.hits) == ["broken", "slow", "good"]
        assert response.hits["broken"].error == "database unavailable"
        assert response.hits["slow"].error == "Search timed out"
        assert response.hits["good"].error is None
        assert len(response.hits["good"].entries) == 1
        assert response.failed_collections == ["broken", "slow"]

        data = response.to_dict()
        assert data["hits"]["broken"] == {"entries": [], "more": False, "error": "database unavailable"}
        assert "error" not in data["hits"]["good"]

    async def test_sequential_mode(self, flaky_search):
        """Test searching trees one after another."""
        search, store = flaky_search
        search.config.parallel = False
        response = await search.search({"key": SECRET, "lastname": "Hartenthaler"})
        assert response.failed_collections == ["broken", "slow"]
        assert store.searched == ["good"]


@pytest.mark.asyncio
async def test_settings_snapshot_per_request(federated: FederatedSearch, settings_manager: SettingsManager):
    """A request uses the settings read at its start."""
    first = await federated.search({"key": SECRET, "trees": "kennedy", "placename": ","})
    settings_manager.set_max_hit(1)
    second = await federated.search({"key": SECRET, "trees": "kennedy", "placename": ","})
    assert len(first.hits["kennedy"].entries) == 3
    assert len(second.hits["kennedy"].entries) == 1


@pytest.mark.asyncio
async def test_people_without_names(settings_manager: SettingsManager):
    """Test hits for people without a name record."""
    store = MemoryRecordStore([Collection(name="t")], {"t": [Person(id="I1")]})
    search = FederatedSearch(store, settings_manager)
    response = await search.search({"key": SECRET, "placeid": "X"})
    assert response.hits["t"].entries == []

"""Runtime configuration of the metasearch service."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from genealogy_metasearch.search.federated import FederatedSearchConfig
from genealogy_metasearch.settings.preferences import (
    MemoryPreferenceStore,
    PreferenceStore,
    YamlPreferenceStore,
)
from genealogy_metasearch.store.gedcom_store import GedcomRecordStore


@dataclass
class MetaSearchConfig:
    """Configuration for the metasearch service."""

    # YAML catalog of the trees
    catalog_path: Path = Path("trees.yaml")

    # YAML file with the plugin preferences; None keeps them in memory
    preferences_path: Path | None = Path("preferences.yaml")

    # Search behaviour
    timeout_per_collection: float = 30.0
    parallel: bool = True

    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> MetaSearchConfig:
        """Read the METASEARCH_* environment variables."""
        preferences = os.getenv("METASEARCH_PREFERENCES", "preferences.yaml")
        return cls(
            catalog_path=Path(os.getenv("METASEARCH_CATALOG", "trees.yaml")),
            preferences_path=Path(preferences) if preferences else None,
            timeout_per_collection=float(os.getenv("METASEARCH_TIMEOUT", "30")),
            parallel=os.getenv("METASEARCH_PARALLEL", "1").lower() not in ("0", "false", "no", "off"),
            log_level=os.getenv("METASEARCH_LOG_LEVEL", "INFO").upper(),
        )

    def search_config(self) -> FederatedSearchConfig:
        return FederatedSearchConfig(
            parallel=self.parallel,
            timeout_per_collection=self.timeout_per_collection,
        )

    def preference_store(self) -> PreferenceStore:
        if self.preferences_path is None:
            return MemoryPreferenceStore()
        return YamlPreferenceStore(self.preferences_path)

    def record_store(self) -> GedcomRecordStore:
        return GedcomRecordStore(self.catalog_path)

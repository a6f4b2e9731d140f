"""Plugin preferences and settings snapshots."""

from genealogy_metasearch.settings.manager import (
    MAX_HIT_DEFAULT,
    MetaSearchSettings,
    Pref,
    SettingsManager,
    split_names,
)
from genealogy_metasearch.settings.preferences import (
    MemoryPreferenceStore,
    PreferenceStore,
    YamlPreferenceStore,
)

__all__ = [
    "MAX_HIT_DEFAULT",
    "MetaSearchSettings",
    "Pref",
    "SettingsManager",
    "split_names",
    "MemoryPreferenceStore",
    "PreferenceStore",
    "YamlPreferenceStore",
]

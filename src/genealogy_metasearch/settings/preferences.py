"""
Preference storage.

Preferences are string key/value pairs, the way the host CMS keeps
module settings. A missing key and an empty string are different:
migrations rely on telling them apart.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path

import yaml


class PreferenceStore(ABC):
    """Key/value store for plugin preferences."""

    @abstractmethod
    def get(self, key: str, default: str = "") -> str:
        """Return the stored value, or `default` if the key is unset."""
        pass

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        """Store a value."""
        pass

    @abstractmethod
    def has(self, key: str) -> bool:
        """Whether the key has ever been set."""
        pass


class MemoryPreferenceStore(PreferenceStore):
    """Preferences held in a dict."""

    def __init__(self, values: dict[str, str] | None = None):
        self._values = dict(values or {})

    def get(self, key: str, default: str = "") -> str:
        return self._values.get(key, default)

    def set(self, key: str, value: str) -> None:
        self._values[key] = str(value)

    def has(self, key: str) -> bool:
        return key in self._values

    def as_dict(self) -> dict[str, str]:
        return dict(self._values)


class YamlPreferenceStore(MemoryPreferenceStore):
    """Preferences persisted to a YAML file on every write."""

    def __init__(self, path: Path | str):
        self.path = Path(path)
        super().__init__(self._load())

    def _load(self) -> dict[str, str]:
        if not self.path.exists():
            return {}

        with open(self.path) as f:
            data = yaml.safe_load(f) or {}

        if not isinstance(data, dict):
            raise ValueError(f"Preferences file is not a mapping: {self.path}")

        return {str(k): "" if v is None else str(v) for k, v in data.items()}

    def set(self, key: str, value: str) -> None:
        super().set(key, value)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.path, "w") as f:
            yaml.safe_dump(self.as_dict(), f, default_flow_style=False, sort_keys=True)

"""
Metasearch settings: typed snapshots and administrative writes.

Requests only ever read a `MetaSearchSettings` snapshot; all writes
go through `SettingsManager` so the secret invariants hold (a hashed
secret is never stored as cleartext, and a hash is never "unhashed").
"""

from __future__ import annotations

import logging
from typing import Iterable

from pydantic import BaseModel, ConfigDict, Field

from genealogy_metasearch.access.credentials import check_new_secret, hash_secret
from genealogy_metasearch.core.errors import ValidationError
from genealogy_metasearch.core.models import SurnameMatch
from genealogy_metasearch.settings.preferences import PreferenceStore

logger = logging.getLogger(__name__)

MAX_HIT_DEFAULT = 20


class Pref:
    """Preference keys."""
    MODULE_VERSION = "module_version"
    SECRET_KEY = "secret_key"
    USE_HASH = "use_hash"
    MAX_HIT = "max_hit"
    DEFAULT_TREES = "default_trees"
    TREE_ORDER = "tree_order"
    DISABLED_TREES = "disabled_trees"
    DATABASE_NAME = "database_name"
    DATABASE_URL = "database_url"
    SURNAME_MATCH = "surname_match"


class MetaSearchSettings(BaseModel):
    """Immutable per-request view of the preferences."""
    model_config = ConfigDict(frozen=True)

    secret_key: str = ""
    use_hash: bool = False
    max_hit: int = Field(default=MAX_HIT_DEFAULT, ge=1)
    default_trees: tuple[str, ...] = ()
    tree_order: tuple[str, ...] = ()
    disabled_trees: tuple[str, ...] = ()
    database_name: str = ""
    database_url: str = ""
    surname_match: SurnameMatch = SurnameMatch.EXACT

    @property
    def secret_configured(self) -> bool:
        return bool(self.secret_key)


def split_names(value: str | Iterable[str]) -> tuple[str, ...]:
    """Split a comma-separated list of tree names; trim and deduplicate."""
    items = value.split(",") if isinstance(value, str) else value
    names: list[str] = []
    for item in items:
        name = item.strip()
        if name and name not in names:
            names.append(name)
    return tuple(names)


def _to_bool(value: str) -> bool:
    return value.strip().lower() in ("1", "true", "yes", "on")


class SettingsManager:
    """
    Reads and writes metasearch preferences.

    Args:
        store: Backing preference store
    """

    def __init__(self, store: PreferenceStore):
        self.store = store

    def snapshot(self) -> MetaSearchSettings:
        """Read all preferences into one immutable snapshot."""
        get = self.store.get

        max_hit = MAX_HIT_DEFAULT
        raw_max_hit = get(Pref.MAX_HIT, str(MAX_HIT_DEFAULT))
        try:
            max_hit = int(raw_max_hit)
        except ValueError:
            logger.warning("Ignoring malformed max_hit preference: %r", raw_max_hit)
        if max_hit < 1:
            logger.warning("Ignoring max_hit below 1: %d", max_hit)
            max_hit = MAX_HIT_DEFAULT

        surname_match = SurnameMatch.EXACT
        raw_match = get(Pref.SURNAME_MATCH, SurnameMatch.EXACT.value)
        try:
            surname_match = SurnameMatch(raw_match.strip().lower())
        except ValueError:
            logger.warning("Ignoring unknown surname_match preference: %r", raw_match)

        return MetaSearchSettings(
            secret_key=get(Pref.SECRET_KEY),
            use_hash=_to_bool(get(Pref.USE_HASH, "0")),
            max_hit=max_hit,
            default_trees=split_names(get(Pref.DEFAULT_TREES)),
            tree_order=split_names(get(Pref.TREE_ORDER)),
            disabled_trees=split_names(get(Pref.DISABLED_TREES)),
            database_name=get(Pref.DATABASE_NAME),
            database_url=get(Pref.DATABASE_URL),
            surname_match=surname_match,
        )

    # =========================================
    # Secret
    # =========================================

    def update_secret(self, new_secret: str, use_hash: bool) -> None:
        """
        Apply the administrator's secret settings.

        A blank `new_secret` only switches hash-mode: switching it off
        clears the stored hash, switching it on hashes the stored
        cleartext secret.

        Raises:
            ValidationError: The new secret is rejected; nothing is saved.
        """
        was_hashed = _to_bool(self.store.get(Pref.USE_HASH, "0"))

        if not new_secret:
            current = self.store.get(Pref.SECRET_KEY)
            if was_hashed and not use_hash:
                self.store.set(Pref.SECRET_KEY, "")
                logger.info("Hash-mode switched off; stored secret cleared")
            elif not was_hashed and use_hash and current:
                self.store.set(Pref.SECRET_KEY, hash_secret(current))
                logger.info("Hash-mode switched on; stored secret hashed")
        else:
            check_new_secret(new_secret)
            if use_hash:
                self.store.set(Pref.SECRET_KEY, hash_secret(new_secret))
            else:
                self.store.set(Pref.SECRET_KEY, new_secret)
            logger.info("Secret key updated (hashed=%s)", use_hash)

        self.store.set(Pref.USE_HASH, "1" if use_hash else "0")

    # =========================================
    # Search behaviour
    # =========================================

    def set_max_hit(self, max_hit: int) -> None:
        if max_hit < 1:
            raise ValidationError(
                f"Maximum number of hits must be at least 1: {max_hit}",
                error_class="invalid setting",
            )
        self.store.set(Pref.MAX_HIT, str(max_hit))

    def set_surname_match(self, policy: SurnameMatch | str) -> None:
        try:
            policy = SurnameMatch(policy)
        except ValueError:
            raise ValidationError(
                f"Unknown surname match policy: {policy}",
                error_class="invalid setting",
            )
        self.store.set(Pref.SURNAME_MATCH, policy.value)

    def set_default_trees(self, names: str | Iterable[str]) -> None:
        self.store.set(Pref.DEFAULT_TREES, ",".join(split_names(names)))

    def set_tree_order(self, names: str | Iterable[str]) -> None:
        self.store.set(Pref.TREE_ORDER, ",".join(split_names(names)))

    def set_disabled_trees(self, names: str | Iterable[str]) -> None:
        self.store.set(Pref.DISABLED_TREES, ",".join(split_names(names)))

    def set_database(self, name: str | None = None, url: str | None = None) -> None:
        """Set the dataset display name and/or base URL echoed in responses."""
        if name is not None:
            self.store.set(Pref.DATABASE_NAME, name.strip())
        if url is not None:
            self.store.set(Pref.DATABASE_URL, url.strip())

    # =========================================
    # Upgrades
    # =========================================

    def migrate(self, version: str) -> bool:
        """
        Bring preferences written by older releases up to date.

        Secrets stored before hash-mode existed have no use_hash
        preference; they are cleartext.

        Returns:
            True if a preference had to be migrated
        """
        migrated = False

        if self.store.get(Pref.SECRET_KEY) and not self.store.has(Pref.USE_HASH):
            self.store.set(Pref.USE_HASH, "0")
            logger.info("Preferences migrated to version %s: use_hash=0", version)
            migrated = True

        if self.store.get(Pref.MODULE_VERSION) != version:
            self.store.set(Pref.MODULE_VERSION, version)

        return migrated

"""Access control for the metasearch endpoint."""

from genealogy_metasearch.access.credentials import (
    AccessDecision,
    CredentialVerifier,
    check_new_secret,
    hash_secret,
)

__all__ = ["AccessDecision", "CredentialVerifier", "check_new_secret", "hash_secret"]

"""
Access key checks for the metasearch endpoint.

The configured secret is stored either as cleartext or as a bcrypt
hash; hashes written by the PHP host ($2y$) verify unchanged.
"""

from __future__ import annotations

import hmac
import html
import logging
from dataclasses import dataclass

from passlib.context import CryptContext

from genealogy_metasearch.core.errors import AuthError, ValidationError

logger = logging.getLogger(__name__)

MIN_SECRET_LENGTH = 8

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


@dataclass(frozen=True)
class AccessDecision:
    """Outcome of a key check."""
    allowed: bool
    reason: str | None = None  # "missing key" or "key mismatch"

    def __bool__(self) -> bool:
        return self.allowed


ALLOWED = AccessDecision(allowed=True)


class CredentialVerifier:
    """
    Verifies a caller-supplied key against the configured secret.

    An empty configured secret means no authentication is set up,
    so every caller is allowed.
    """

    def __init__(self, context: CryptContext | None = None):
        self.context = context or pwd_context

    def verify(
        self,
        provided_key: str,
        configured_secret: str,
        hash_mode: bool,
    ) -> AccessDecision:
        """
        Check a key.

        Args:
            provided_key: Key from the request (may be empty)
            configured_secret: Stored secret, cleartext or bcrypt hash
            hash_mode: Whether `configured_secret` is a hash

        Returns:
            AccessDecision
        """
        if not configured_secret:
            return ALLOWED

        if not provided_key:
            return AccessDecision(allowed=False, reason="missing key")

        if hash_mode:
            matched = self._verify_hash(provided_key, configured_secret)
        else:
            matched = hmac.compare_digest(
                provided_key.encode("utf-8"),
                configured_secret.encode("utf-8"),
            )

        if matched:
            return ALLOWED
        return AccessDecision(allowed=False, reason="key mismatch")

    def _verify_hash(self, provided_key: str, hashed: str) -> bool:
        try:
            return self.context.verify(provided_key, hashed)
        except ValueError:
            logger.warning("Stored secret is not a valid bcrypt hash")
            return False

    def require(
        self,
        provided_key: str,
        configured_secret: str,
        hash_mode: bool,
    ) -> None:
        """Raise AuthError unless the key is accepted."""
        decision = self.verify(provided_key, configured_secret, hash_mode)
        if not decision:
            logger.info("Metasearch request denied: %s", decision.reason)
            message = "Missing key" if decision.reason == "missing key" else "Invalid key"
            raise AuthError(message)


def hash_secret(secret: str) -> str:
    """Return a bcrypt hash of a secret."""
    return pwd_context.hash(secret)


def check_new_secret(secret: str) -> None:
    """
    Reject secrets an administrator may not set.

    Raises:
        ValidationError: Too short, or contains characters that
            HTML escaping would change.
    """
    if len(secret) < MIN_SECRET_LENGTH:
        raise ValidationError(
            "The provided secret key is too short. "
            f"Please provide a minimum length of {MIN_SECRET_LENGTH} characters.",
            error_class="invalid secret",
        )
    if html.escape(secret, quote=True) != secret:
        raise ValidationError(
            "The provided secret key contains characters, which are not accepted. "
            "Please provide a different key.",
            error_class="invalid secret",
        )

"""Errors raised while serving a metasearch request."""

from __future__ import annotations


class MetaSearchError(Exception):
    """
    Request-fatal error.

    `error_class` is the short class string sent to the aggregator,
    `status_code` the HTTP status used by the web adapter.
    """
    error_class = "error"
    status_code = 500

    def __init__(self, message: str, error_class: str | None = None):
        self.message = message
        if error_class:
            self.error_class = error_class
        super().__init__(message)

    def to_payload(self) -> dict[str, dict[str, str]]:
        return {"error": {"message": self.message, "class": self.error_class}}


class AuthError(MetaSearchError):
    """Missing or wrong access key."""
    error_class = "invalid key"
    status_code = 401


class ValidationError(MetaSearchError):
    """Malformed request parameter or setting."""
    error_class = "bad date"
    status_code = 400


class NotFoundError(MetaSearchError):
    """Unknown, disabled or non-public collection."""
    error_class = "tree not found"
    status_code = 404

    def __init__(self, names: list[str]):
        self.names = list(names)
        super().__init__("Tree not found: " + ", ".join(self.names))

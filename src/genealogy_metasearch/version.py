"""
Latest release check.

Asks the GitHub API for the latest published release of the plugin,
so the admin pages can point out available updates.
"""

from __future__ import annotations

import logging
import re
import time

import httpx
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from genealogy_metasearch import __version__

logger = logging.getLogger(__name__)

GITHUB_REPO = "hartenthaler/hh_metasearch"
GITHUB_API_LATEST_VERSION = f"https://api.github.com/repos/{GITHUB_REPO}/releases/latest"

CACHE_SECONDS = 24 * 60 * 60

_TAG_PATTERN = re.compile(r"^v(\d+\.\d+\.\d+)")


def parse_tag(tag: str) -> str | None:
    """"v2.1.18" -> "2.1.18"; None for anything else."""
    match = _TAG_PATTERN.match(tag.strip())
    return match.group(1) if match else None


class LatestVersionChecker:
    """
    Cached lookup of the latest released version.

    Any failure (network, HTTP status, unexpected payload) answers
    with the running version, so callers never see an error.

    Args:
        current: Version of the running code
        url: GitHub "latest release" endpoint
        client: HTTP client to use; a short-lived one is created otherwise
        timeout: Request timeout in seconds
    """

    def __init__(
        self,
        current: str = __version__,
        url: str = GITHUB_API_LATEST_VERSION,
        client: httpx.AsyncClient | None = None,
        timeout: float = 3.0,
    ):
        self.current = current
        self.url = url
        self.timeout = timeout
        self._client = client
        self._cached: str | None = None
        self._cached_at = 0.0

    async def latest_version(self) -> str:
        """Latest released version, cached for a day."""
        if self._cached is not None and time.monotonic() - self._cached_at < CACHE_SECONDS:
            return self._cached

        version = self.current
        try:
            data = await self._fetch()
        except httpx.HTTPError as e:
            logger.info("Latest version check failed: %s", e)
        else:
            tag = data.get("tag_name") if isinstance(data, dict) else None
            parsed = parse_tag(tag) if isinstance(tag, str) else None
            if parsed:
                version = parsed
            else:
                logger.info("No release tag in latest version answer")

        self._cached = version
        self._cached_at = time.monotonic()
        return version

    async def update_available(self) -> bool:
        latest = await self.latest_version()
        return _version_tuple(latest) > _version_tuple(self.current)

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=0.5, min=0.5, max=4),
        retry=retry_if_exception_type(httpx.TransportError),
        reraise=True,
    )
    async def _fetch(self) -> object:
        """GET the release document; raises httpx.HTTPError on failure."""
        if self._client is not None:
            response = await self._client.get(self.url, timeout=self.timeout)
        else:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.get(self.url)

        response.raise_for_status()
        try:
            return response.json()
        except ValueError:
            return None


def _version_tuple(version: str) -> tuple[int, ...]:
    parts = []
    for part in version.split("."):
        if not part.isdigit():
            break
        parts.append(int(part))
    return tuple(parts)

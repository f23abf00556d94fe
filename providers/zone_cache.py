"""
providers/zone_cache.py

Responsibility: Caches provider zone identifiers per (API token, root domain)
for the lifetime of the process.
Does NOT: perform the zone lookup itself; callers pass the lookup coroutine.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Awaitable, Callable

logger = logging.getLogger(__name__)


class ZoneResolutionCache:
    """
    Maps (credential, root domain) to a zone id.

    Entries are never invalidated: zone ids are treated as immutable while
    the process runs. The lock only guards the dict; it is never held while
    the lookup is awaited, so two concurrent misses on the same key may both
    hit the provider and the last one to finish wins.
    """

    def __init__(self) -> None:
        self._zones: dict[str, dict[str, str]] = {}
        self._lock = threading.Lock()

    async def resolve(
        self,
        credential: str,
        root_domain: str,
        lookup: Callable[[], Awaitable[str]],
    ) -> str:
        """
        Returns the zone id for root_domain, calling lookup() on a miss.

        Args:
            credential: The API token the zone belongs to.
            root_domain: The zone name, e.g. "example.com".
            lookup: Coroutine function that queries the provider and returns
                the zone id. Errors it raises propagate and nothing is cached.

        Returns:
            The zone id string.
        """
        cached = self.get(credential, root_domain)
        if cached is not None:
            logger.debug("Using cached zone_id for %s: %s", root_domain, cached)
            return cached

        logger.debug("Querying zone_id for domain: %s", root_domain)
        zone_id = await lookup()

        with self._lock:
            self._zones.setdefault(credential, {})[root_domain] = zone_id
        return zone_id

    def get(self, credential: str, root_domain: str) -> str | None:
        with self._lock:
            return self._zones.get(credential, {}).get(root_domain)

    def clear(self) -> None:
        with self._lock:
            self._zones.clear()


# Process-wide instance shared by every CloudflareClient
zone_cache = ZoneResolutionCache()

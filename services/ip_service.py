"""
services/ip_service.py

Responsibility: Fetches the current public IP address of the host machine
from a configurable lookup URL.
Does NOT: parse DNS records, interact with DNS providers, or read config files.
"""

from __future__ import annotations

import logging

import httpx

from exceptions import IpFetchError

logger = logging.getLogger(__name__)

# NOTE: whatismyip.akamai.com returns the caller's public address as plain text.
DEFAULT_IP_URL = "http://whatismyip.akamai.com"


class IpService:
    """
    Fetches the host machine's current public IP address.

    Uses an injected httpx.AsyncClient so the service is fully testable
    without real network calls (use respx.mock in tests). The client should
    be created with trust_env=False so proxy settings do not change the
    address the lookup service sees.

    Collaborators:
        - httpx.AsyncClient: injected; must be kept alive externally
    """

    def __init__(self, http_client: httpx.AsyncClient) -> None:
        """
        Initialises the service with a shared HTTP client.

        Args:
            http_client: A long-lived httpx.AsyncClient instance created
                         during application startup.
        """
        self._client = http_client

    async def get_public_ip(self, url: str = DEFAULT_IP_URL) -> str:
        """
        Returns the current public IP address of the host machine.

        Args:
            url: The lookup URL; its response body must be the bare address.

        Returns:
            The public IP address as a plain string, e.g. "1.2.3.4".

        Raises:
            IpFetchError: If the lookup URL is unreachable, returns a non-2xx
                          response, or returns an empty body.
        """
        try:
            response = await self._client.get(url)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise IpFetchError(
                f"IP provider {url} returned status {exc.response.status_code}."
            ) from exc
        except httpx.RequestError as exc:
            raise IpFetchError(f"Could not reach IP provider ({url}): {exc}") from exc

        ip = response.text.strip()
        if not ip:
            raise IpFetchError(f"IP provider {url} returned an empty body.")

        logger.debug("Current public IP from %s: %s", url, ip)
        return ip

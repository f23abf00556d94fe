"""
providers/cloudflare_client.py

Responsibility: Implements the DNSProvider protocol using the Cloudflare REST API.
All Cloudflare HTTP calls are concentrated here — no other file may call the
Cloudflare API directly.
Does NOT: read configuration, decide whether an update is needed, or run hooks.
"""

from __future__ import annotations

import logging
from typing import Any, Generic, Optional, TypeVar

import httpx
from pydantic import BaseModel, ValidationError

from exceptions import MalformedResponse, NoZoneFound, OperationFailed, ProviderRejected
from providers.dns_provider import DnsRecord, record_type_for
from providers.zone_cache import ZoneResolutionCache, zone_cache

logger = logging.getLogger(__name__)

_CLOUDFLARE_BASE = "https://api.cloudflare.com/client/v4"

# 1 = automatic TTL on Cloudflare
_AUTO_TTL = 1

# Record types a DDNS record may currently have
_RECORD_TYPES = "CNAME,A,AAAA"


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------

ResultT = TypeVar("ResultT")


class _CloudflareError(BaseModel):
    code: int
    message: str


class _CloudflareRecord(BaseModel):
    id: str
    name: str
    type: str
    content: str
    ttl: int = _AUTO_TTL
    proxied: bool = False


class _CloudflareZone(BaseModel):
    id: str
    name: str


class _Envelope(BaseModel, Generic[ResultT]):
    # NOTE: Cloudflare wraps all responses in {"success", "errors", "result"};
    # result is null on most failures, so it must stay optional here.
    success: bool
    errors: list[_CloudflareError] = []
    result: Optional[ResultT] = None


class CloudflareClient:
    """
    Implements DNSProvider for a single record in a Cloudflare zone.

    The zone id is looked up from the record's root domain through the
    shared ZoneResolutionCache, so clients built with the same token never
    repeat the zone query.

    Collaborators:
        - httpx.AsyncClient: injected HTTP client; must be kept alive externally
        - ZoneResolutionCache: process-wide zone id cache
    """

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        api_token: str,
        record_name: str,
        cache: ZoneResolutionCache = zone_cache,
    ) -> None:
        """
        Initialises the client for one record.

        Args:
            http_client: A long-lived httpx.AsyncClient instance.
            api_token: A Cloudflare API token with DNS edit permissions.
            record_name: The fully-qualified record name, e.g. "home.example.com".
            cache: Zone id cache; defaults to the process-wide instance.
        """
        self._client = http_client
        self._api_token = api_token
        self._record_name = record_name
        self._cache = cache
        self._headers = {
            "Authorization": f"Bearer {api_token}",
            "Content-Type": "application/json",
        }

    @property
    def record_name(self) -> str:
        return self._record_name

    # ---------------------------------------------------------------------------
    # DNSProvider implementation
    # ---------------------------------------------------------------------------

    async def get_record(self) -> DnsRecord | None:
        """
        Fetches the A, AAAA or CNAME record matching the configured name.

        Returns:
            The first matching DnsRecord, or None if the zone has none.

        Raises:
            DnsProviderError: If the zone or the record cannot be fetched.
        """
        zone_id = await self._zone_id()
        url = f"{_CLOUDFLARE_BASE}/zones/{zone_id}/dns_records"
        params = {"name": self._record_name, "type": _RECORD_TYPES}

        logger.debug("GET %s params=%s", url, params)
        envelope = await self._request(
            "GET", url, _Envelope[list[_CloudflareRecord]], params=params
        )

        records = envelope.result or []
        if not records:
            return None

        record = records[0]
        logger.info("Current cloudflare record is %s", record)
        return DnsRecord(
            id=record.id,
            name=record.name,
            value=record.content,
            record_type=record.type,
        )

    async def modify_record(self, new_ip: str, record: DnsRecord) -> None:
        """
        Patches an existing record to point at new_ip.

        The record type is derived from new_ip, so an A record becomes AAAA
        when the address family changes.

        Raises:
            DnsProviderError: If the Cloudflare API call fails.
        """
        zone_id = await self._zone_id()
        url = f"{_CLOUDFLARE_BASE}/zones/{zone_id}/dns_records/{record.id}"
        payload = self._record_payload(new_ip)

        logger.debug("PATCH %s payload=%s", url, payload)
        await self._request("PATCH", url, _Envelope[_CloudflareRecord], json=payload)
        logger.debug("Cloudflare modify result: success")

    async def add_record(self, new_ip: str) -> None:
        """
        Creates the configured record pointing at new_ip.

        Raises:
            DnsProviderError: If the Cloudflare API call fails.
        """
        zone_id = await self._zone_id()
        url = f"{_CLOUDFLARE_BASE}/zones/{zone_id}/dns_records"
        payload = self._record_payload(new_ip)

        logger.debug("POST %s payload=%s", url, payload)
        await self._request("POST", url, _Envelope[_CloudflareRecord], json=payload)
        logger.debug("Cloudflare add result: success")

    # ---------------------------------------------------------------------------
    # Zone resolution
    # ---------------------------------------------------------------------------

    @staticmethod
    def extract_zone_name(record_name: str) -> str:
        """
        Returns the last two labels of a record name.

        Examples:
            "sub.example.com" -> "example.com"
            "example.com"     -> "example.com"
        """
        parts = record_name.split(".")
        if len(parts) >= 2:
            return ".".join(parts[-2:])
        return record_name

    async def _zone_id(self) -> str:
        zone_name = self.extract_zone_name(self._record_name)
        return await self._cache.resolve(
            self._api_token,
            zone_name,
            lambda: self._lookup_zone_id(zone_name),
        )

    async def _lookup_zone_id(self, zone_name: str) -> str:
        """
        Queries the zone list by name and returns the first zone's id.

        Raises:
            NoZoneFound: If the account has no zone with that name.
            DnsProviderError: If the zone list request fails.
        """
        url = f"{_CLOUDFLARE_BASE}/zones"
        params = {"name": zone_name}

        logger.debug("GET %s params=%s", url, params)
        envelope = await self._request(
            "GET", url, _Envelope[list[_CloudflareZone]], params=params
        )

        zones = envelope.result or []
        if not zones:
            raise NoZoneFound(f"No zone found for domain: {zone_name}")

        zone_id = zones[0].id
        logger.debug("Found zone_id for %s: %s", zone_name, zone_id)
        return zone_id

    # ---------------------------------------------------------------------------
    # Internal helpers
    # ---------------------------------------------------------------------------

    def _record_payload(self, new_ip: str) -> dict[str, Any]:
        return {
            "type": record_type_for(new_ip),
            "name": self._record_name,
            "content": new_ip,
            "ttl": _AUTO_TTL,
            "proxied": False,
        }

    async def _request(
        self,
        method: str,
        url: str,
        envelope_type: type[_Envelope[Any]],
        *,
        params: dict[str, Any] | None = None,
        json: dict[str, Any] | None = None,
    ) -> _Envelope[Any]:
        """
        Sends an authenticated request and parses the Cloudflare envelope.

        The HTTP status is not checked on its own: Cloudflare reports
        failures in the body, which is parsed for every status code.

        Args:
            method: HTTP verb ("GET", "PATCH", "POST").
            url: Full URL of the Cloudflare API endpoint.
            envelope_type: The parametrised envelope model to validate against.
            params: Optional query-string parameters.
            json: Optional JSON request body.

        Returns:
            The validated envelope, with success=True.

        Raises:
            OperationFailed: If the request cannot be sent or read.
            MalformedResponse: If the body does not match the envelope schema.
            ProviderRejected: If the envelope reports success=false.
        """
        try:
            response = await self._client.request(
                method, url, headers=self._headers, params=params, json=json
            )
        except httpx.RequestError as exc:
            raise OperationFailed(
                f"Network error calling Cloudflare API ({method} {url}): {exc}"
            ) from exc

        text = response.text
        try:
            envelope = envelope_type.model_validate_json(text)
        except ValidationError as exc:
            logger.warning("Error parsing cloudflare result: %s", text)
            raise MalformedResponse(
                f"Unexpected Cloudflare response for {method} {url} "
                f"(status {response.status_code})",
                body=text,
            ) from exc

        if not envelope.success:
            errors = [(error.code, error.message) for error in envelope.errors]
            details = ", ".join(f"{code}: {message}" for code, message in errors)
            raise ProviderRejected(f"Cloudflare API error: {details}", errors=errors)

        return envelope

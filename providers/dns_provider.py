"""
providers/dns_provider.py

Responsibility: Defines the DNSProvider Protocol, the DnsRecord value object,
the DnsUpdateResult outcomes, and the reconciliation algorithm shared by every
provider.
Does NOT: make HTTP calls or implement any provider-specific logic.
"""

from __future__ import annotations

import ipaddress
import logging
from dataclasses import dataclass
from typing import Protocol, Union, runtime_checkable

from exceptions import DnsProviderError

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Value object: stable shape returned by all DNSProvider implementations
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class DnsRecord:
    """
    Represents a single resolved DNS record as returned by a DNSProvider.

    Only valid for the reconciliation that fetched it: the id is scoped to
    one provider and one zone.
    """

    # Provider-assigned unique identifier for the record
    id: str

    # Record name as reported by the provider
    name: str

    # Current target stored in the record, e.g. "1.2.3.4"
    value: str

    # "A", "AAAA" or "CNAME", as returned by the provider
    record_type: str


# ---------------------------------------------------------------------------
# Reconciliation outcomes
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Changed:
    """A record existed with a different value and was updated."""

    old_ip: str


@dataclass(frozen=True)
class Created:
    """No record existed; one was created."""


@dataclass(frozen=True)
class Unchanged:
    """The record already held the requested value; nothing was sent."""


DnsUpdateResult = Union[Changed, Created, Unchanged]


# ---------------------------------------------------------------------------
# Abstract interface: all DNS providers must implement this contract
# ---------------------------------------------------------------------------


@runtime_checkable
class DNSProvider(Protocol):
    """
    Abstract protocol for managing the single record a provider instance is
    bound to.

    Implementations are constructed per domain (the record name and the
    credential are instance state), so none of the methods take a name.
    The reconciliation logic lives in update_dns_record() below and is
    written only against these three primitives.
    """

    async def get_record(self) -> DnsRecord | None:
        """
        Fetches the record for the configured domain.

        Returns:
            The first matching DnsRecord, or None if no record exists.

        Raises:
            DnsProviderError: If the API call fails.
        """
        ...

    async def modify_record(self, new_ip: str, record: DnsRecord) -> None:
        """
        Replaces the value of an existing record with new_ip.

        Args:
            new_ip: The address to write. The record type is derived from it.
            record: The record returned by get_record().

        Raises:
            DnsProviderError: If the API call fails.
        """
        ...

    async def add_record(self, new_ip: str) -> None:
        """
        Creates a record for the configured domain pointing at new_ip.

        Raises:
            DnsProviderError: If the API call fails.
        """
        ...


# ---------------------------------------------------------------------------
# Shared helpers
# ---------------------------------------------------------------------------


def record_type_for(ip: str) -> str:
    """
    Returns the record type matching an address literal.

    IPv4 → "A", IPv6 → "AAAA". Anything that does not parse as an IP
    address falls back to "A".
    """
    try:
        address = ipaddress.ip_address(ip)
    except ValueError:
        return "A"
    return "AAAA" if address.version == 6 else "A"


async def update_dns_record(provider: DNSProvider, new_ip: str) -> DnsUpdateResult:
    """
    Brings the provider's record in line with new_ip.

    Fetches the current record, then either leaves it alone, modifies it or
    creates it. A failing fetch propagates before any mutating call is made.

    Args:
        provider: Any DNSProvider implementation.
        new_ip: The address the record should point at.

    Returns:
        Changed(old_ip) if the record was updated, Created if it was added,
        Unchanged if it already held new_ip.

    Raises:
        DnsProviderError: If any provider call fails.
    """
    try:
        record = await provider.get_record()
    except DnsProviderError as exc:
        logger.warning("Error getting record: %s", exc)
        raise

    if record is None:
        logger.info("No such record, creating new one.")
        await provider.add_record(new_ip)
        return Created()

    if record.value != new_ip:
        logger.info("IP changed from %s to %s.", record.value, new_ip)
        await provider.modify_record(new_ip, record)
        return Changed(old_ip=record.value)

    logger.info("IP not changed.")
    return Unchanged()

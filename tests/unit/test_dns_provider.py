"""
tests/unit/test_dns_provider.py

Unit tests for the shared reconciliation algorithm and record-type helper in
providers/dns_provider.py. Providers are AsyncMocks — no HTTP involved.
"""

from __future__ import annotations

from unittest.mock import AsyncMock

import pytest

from exceptions import DnsProviderError
from providers.dns_provider import (
    Changed,
    Created,
    DnsRecord,
    Unchanged,
    record_type_for,
    update_dns_record,
)


def _record(value="1.2.3.4"):
    return DnsRecord(id="rec1", name="home.example.com", value=value, record_type="A")


# ---------------------------------------------------------------------------
# record_type_for
# ---------------------------------------------------------------------------


@pytest.mark.parametrize(
    "ip, expected",
    [
        ("1.2.3.4", "A"),
        ("2001:db8::1", "AAAA"),
        ("::1", "AAAA"),
        ("not-an-ip", "A"),
        ("", "A"),
    ],
)
def test_record_type_for(ip, expected):
    assert record_type_for(ip) == expected


# ---------------------------------------------------------------------------
# update_dns_record
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_missing_record_is_created():
    provider = AsyncMock()
    provider.get_record.return_value = None

    result = await update_dns_record(provider, "1.2.3.4")

    assert result == Created()
    provider.add_record.assert_awaited_once_with("1.2.3.4")
    provider.modify_record.assert_not_called()


@pytest.mark.asyncio
async def test_matching_record_is_left_alone():
    provider = AsyncMock()
    provider.get_record.return_value = _record("1.2.3.4")

    result = await update_dns_record(provider, "1.2.3.4")

    assert result == Unchanged()
    provider.add_record.assert_not_called()
    provider.modify_record.assert_not_called()


@pytest.mark.asyncio
async def test_stale_record_is_modified():
    provider = AsyncMock()
    record = _record("1.1.1.1")
    provider.get_record.return_value = record

    result = await update_dns_record(provider, "9.9.9.9")

    assert result == Changed(old_ip="1.1.1.1")
    provider.modify_record.assert_awaited_once_with("9.9.9.9", record)
    provider.add_record.assert_not_called()


@pytest.mark.asyncio
async def test_fetch_error_propagates_without_mutation():
    provider = AsyncMock()
    provider.get_record.side_effect = DnsProviderError("API down")

    with pytest.raises(DnsProviderError):
        await update_dns_record(provider, "9.9.9.9")

    provider.add_record.assert_not_called()
    provider.modify_record.assert_not_called()


@pytest.mark.asyncio
async def test_modify_error_propagates():
    provider = AsyncMock()
    provider.get_record.return_value = _record("1.1.1.1")
    provider.modify_record.side_effect = DnsProviderError("rejected")

    with pytest.raises(DnsProviderError):
        await update_dns_record(provider, "9.9.9.9")

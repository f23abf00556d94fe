"""
providers/factory.py

Responsibility: Builds the DNSProvider implementation configured for a domain.
Does NOT: cache providers or perform any network call.
"""

from __future__ import annotations

import httpx

from config import AppConfig, DomainConfig
from providers.cloudflare_client import CloudflareClient
from providers.dns_provider import DNSProvider
from providers.dnspod_client import DnspodClient
from providers.domain import APEX_LABEL, split_domain


def create_provider(
    domain_config: DomainConfig,
    config: AppConfig,
    http_client: httpx.AsyncClient,
) -> DNSProvider:
    """
    Returns a provider bound to domain_config's record.

    Args:
        domain_config: The managed domain entry.
        config: The full configuration, used for default provider and tokens.
        http_client: The shared client for provider API calls.

    Raises:
        MissingCredential: If no token is available for the domain.
        InvalidDomainFormat: If a DNSPod domain cannot be split.
    """
    token = config.token_for(domain_config)

    match config.provider_for(domain_config):
        case "dnspod":
            sub_domain, root = split_domain(domain_config.domain)
            return DnspodClient(http_client, token, root, sub_domain)
        case "cloudflare":
            # Cloudflare names the apex record after the zone itself
            record_name = domain_config.domain.removeprefix(APEX_LABEL + ".")
            return CloudflareClient(http_client, token, record_name)

    raise ValueError(f"Unsupported provider for {domain_config.domain}")

"""
services/dns_service.py

Responsibility: Orchestrates the DDNS check cycle — for each configured
domain, compares the host's public IP against the last applied one, asks the
domain's DNS provider to reconcile when needed, and fires the hook and
notification side effects after a change.
Does NOT: make HTTP calls directly, parse configuration files, or schedule
itself (see scheduler.py).
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Protocol

from config import AppConfig, DomainConfig
from exceptions import (
    ConfigLoadError,
    DnsProviderError,
    HookExecutionError,
    IpFetchError,
    NotificationError,
)
from providers.dns_provider import (
    Changed,
    Created,
    DNSProvider,
    DnsUpdateResult,
    Unchanged,
    update_dns_record,
)
from services.hook_service import HookService
from services.ip_service import IpService

logger = logging.getLogger(__name__)

ProviderFactory = Callable[[DomainConfig], DNSProvider]


class Notifier(Protocol):
    async def notify(self, domain: str, new_ip: str, old_ip: str) -> None: ...


class DnsService:
    """
    Runs check cycles over all configured domains.

    Domains are processed one after another; an error on one domain is logged
    and the cycle moves on. Every force_get_record_interval-th cycle (starting
    with the first) queries the provider even if the IP did not change, to
    undo edits made to the record outside this daemon.

    Collaborators:
        - ProviderFactory: builds the DNSProvider for a domain entry
        - IpService: provides the current public IP
        - HookService: runs the per-domain or default hook command
        - Notifier: optional chat notification (e.g. TelegramNotifier)
    """

    def __init__(
        self,
        config: AppConfig,
        provider_factory: ProviderFactory,
        ip_service: IpService,
        hook_service: HookService | None = None,
        notifier: Notifier | None = None,
    ) -> None:
        """
        Initialises the service with all required collaborators.

        Args:
            config: The validated application configuration.
            provider_factory: Returns a provider bound to one domain entry.
            ip_service: Provides the current public IP of the host machine.
            hook_service: Runs hook commands; hooks are skipped when None.
            notifier: Delivers change notifications; skipped when None.
        """
        self._config = config
        self._provider_factory = provider_factory
        self._ip_service = ip_service
        self._hook_service = hook_service
        self._notifier = notifier

        # domain -> last IP the provider confirmed or accepted
        self._last_known_ips: dict[str, str] = {}
        self._cycle = 0

    @property
    def cycle(self) -> int:
        """Index of the next cycle to run."""
        return self._cycle

    @property
    def last_known_ips(self) -> dict[str, str]:
        return dict(self._last_known_ips)

    # ---------------------------------------------------------------------------
    # Public API
    # ---------------------------------------------------------------------------

    async def run_check_cycle(self) -> None:
        """
        Runs a single check cycle for every configured domain, then advances
        the cycle counter.

        Returns:
            None
        """
        force = self._cycle % self._config.force_get_record_interval == 0
        logger.debug("Check cycle %d started (forced refresh: %s).", self._cycle, force)

        for domain_config in self._config.domains:
            await self._check_domain(domain_config, force)

        self._cycle += 1

    # ---------------------------------------------------------------------------
    # Internal helpers
    # ---------------------------------------------------------------------------

    async def _check_domain(
        self, domain_config: DomainConfig, force: bool
    ) -> DnsUpdateResult | None:
        """
        Checks one domain and reconciles its record if needed.

        Returns:
            The reconciliation outcome, Unchanged when the provider was not
            queried, or None if the check failed.
        """
        domain = domain_config.domain
        ip_url = self._config.ip_url_for(domain_config)

        try:
            current_ip = await self._ip_service.get_public_ip(ip_url)
        except IpFetchError as exc:
            logger.error("Error fetching current IP for %s from %s: %s", domain, ip_url, exc)
            return None

        logger.info("Current IP for %s from %s: %s", domain, ip_url, current_ip)
        last_ip = self._last_known_ips.get(domain, "")

        if current_ip == last_ip and not force:
            logger.info("IP for %s unchanged: %s", domain, current_ip)
            return Unchanged()

        try:
            provider = self._provider_factory(domain_config)
            result = await update_dns_record(provider, current_ip)
        except (DnsProviderError, ConfigLoadError) as exc:
            logger.error("Error updating domain %s: %s", domain, exc)
            return None

        match result:
            case Changed(old_ip=old_ip):
                self._last_known_ips[domain] = current_ip
                await self._dispatch(domain_config, current_ip, old_ip)
            case Created():
                self._last_known_ips[domain] = current_ip
                await self._dispatch(domain_config, current_ip, "")
            case Unchanged():
                # The provider confirmed the record already holds current_ip
                self._last_known_ips[domain] = current_ip

        return result

    async def _dispatch(self, domain_config: DomainConfig, new_ip: str, old_ip: str) -> None:
        """
        Fires the notification and hook for a changed record. Failures are
        logged and never raised.
        """
        domain = domain_config.domain

        if self._notifier is not None:
            try:
                await self._notifier.notify(domain, new_ip, old_ip)
            except NotificationError as exc:
                logger.error("Failed to send notification for %s: %s", domain, exc)

        hook_command = self._config.hook_command_for(domain_config)
        if hook_command and self._hook_service is not None:
            try:
                await self._hook_service.run(hook_command, domain, new_ip, old_ip)
            except HookExecutionError as exc:
                logger.error("Hook command execution failed for %s: %s", domain, exc)

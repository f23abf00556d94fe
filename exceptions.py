"""
exceptions.py

Responsibility: Defines all custom exception classes used across the application.
Does NOT: contain business logic, logging, or HTTP handling.
"""

from __future__ import annotations


# ---------------------------------------------------------------------------
# Configuration errors (fatal at startup)
# ---------------------------------------------------------------------------


class ConfigLoadError(Exception):
    """
    Raised when the configuration file is missing, cannot be parsed, or
    fails validation. The daemon refuses to start when this is raised.
    """


class InvalidDomainFormat(ConfigLoadError):
    """
    Raised when a domain cannot be split into (label, root), i.e. it has
    fewer than two dot-separated components.
    """


class MissingCredential(ConfigLoadError):
    """
    Raised when no API token can be resolved for a domain, neither from the
    domain entry itself nor from the provider's default token.
    """


# ---------------------------------------------------------------------------
# Per-cycle errors (logged and recovered per domain)
# ---------------------------------------------------------------------------


class IpFetchError(Exception):
    """
    Raised by IpService when the public IP address cannot be determined.

    This may occur due to network connectivity issues or an unexpected
    response from the configured IP lookup URL.
    """


class DnsProviderError(Exception):
    """
    Raised by any DNSProvider implementation when a DNS API call fails.

    Includes a human-readable message describing the failure. Callers
    (typically DnsService) must catch this and move on to the next domain.
    """


class NoZoneFound(DnsProviderError):
    """
    Raised when the provider's zone listing succeeds but contains no zone
    for the record's root domain.
    """


class ProviderRejected(DnsProviderError):
    """
    Raised when the provider answers with a falsy success flag.

    Attributes:
        errors: (code, message) pairs reported by the provider, in order.
    """

    def __init__(self, message: str, errors: list[tuple[int, str]] | None = None) -> None:
        super().__init__(message)
        self.errors = errors or []


class MalformedResponse(DnsProviderError):
    """
    Raised when a provider response body does not match the expected schema.

    Attributes:
        body: The raw response text, kept for diagnosis.
    """

    def __init__(self, message: str, body: str = "") -> None:
        super().__init__(message)
        self.body = body


class OperationFailed(DnsProviderError):
    """
    Raised for transport or I/O failures that carry no structured provider
    error detail.
    """


# ---------------------------------------------------------------------------
# Side-effect errors (never fail a reconciliation)
# ---------------------------------------------------------------------------


class HookExecutionError(Exception):
    """
    Raised by HookService when the hook command cannot be started or exits
    with a non-zero status.
    """


class NotificationError(Exception):
    """
    Raised by a notifier when a message cannot be delivered.
    """

"""
providers/domain.py

Responsibility: Splits fully-qualified domain names into (label, root) pairs
for providers that address records by domain + sub-domain.
Does NOT: consult the public suffix list or talk to any provider.
"""

from __future__ import annotations

from exceptions import InvalidDomainFormat

# Sub-domain label used by providers for the apex record
APEX_LABEL = "@"


def split_domain(full_domain: str) -> tuple[str, str]:
    """
    Splits a domain into (label, root), where root is the last two labels.

    Examples:
        "sub.example.com"    -> ("sub", "example.com")
        "api.v2.example.com" -> ("api.v2", "example.com")
        "@.example.com"      -> ("@", "example.com")
        "example.com"        -> ("@", "example.com")
        "test.co.uk"         -> ("test", "co.uk")

    The split is purely positional, so multi-label public suffixes such as
    "co.uk" end up as the root.

    Raises:
        InvalidDomainFormat: If the domain has fewer than two labels.
    """
    parts = full_domain.split(".")
    if len(parts) < 2:
        raise InvalidDomainFormat(f"Invalid domain format: {full_domain!r}")

    if full_domain.startswith(APEX_LABEL + "."):
        return APEX_LABEL, full_domain[len(APEX_LABEL) + 1:]

    if len(parts) == 2:
        return APEX_LABEL, full_domain

    return ".".join(parts[:-2]), ".".join(parts[-2:])

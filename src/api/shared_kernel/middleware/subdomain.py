"""Subdomain extraction from the Host header.

Maps a raw Host header value to the tenant subdomain it addresses, or None.
"No tenant" is always a safe, representable outcome, so nothing here raises.

Examples (base domain "ruffregistrar.com"):
    "acme.ruffregistrar.com"      -> "acme"
    "ACME.ruffregistrar.com:8443" -> "acme"
    "www.ruffregistrar.com"       -> None (reserved)
    "ruffregistrar.com"           -> None
    "localhost:3000"              -> None
"""

from __future__ import annotations

import re

MAX_SUBDOMAIN_LENGTH = 63

LOOPBACK_HOSTS = frozenset({"localhost", "127.0.0.1", "::1"})

RESERVED_SUBDOMAINS = frozenset(
    {
        "www",
        "api",
        "admin",
        "app",
        "portal",
        "billing",
        "docs",
        "help",
        "support",
        "status",
        "mail",
        "email",
        "smtp",
        "ftp",
        "ssh",
        "vpn",
        "cdn",
        "assets",
        "static",
        "media",
        "images",
        "img",
        "files",
        "download",
        "downloads",
        "blog",
        "news",
        "shop",
        "store",
        "auth",
        "login",
        "signin",
        "signup",
        "register",
        "account",
        "accounts",
        "dashboard",
        "console",
        "panel",
        "test",
        "dev",
        "staging",
        "demo",
        "sandbox",
    }
)

_SUBDOMAIN_PATTERN = re.compile(r"^[a-z0-9](?:[a-z0-9-]*[a-z0-9])?$")


def strip_port(host: str) -> str:
    """Remove a trailing :port, keeping bracketed IPv6 literals intact."""
    host = host.strip()
    if host.startswith("["):
        closing = host.find("]")
        if closing != -1:
            return host[1:closing]
        return host
    if host.count(":") == 1:
        return host.split(":", 1)[0]
    return host


def is_valid_subdomain(label: str) -> bool:
    """Check DNS label rules for a tenant subdomain.

    1-63 characters, lowercase ASCII letters, digits and hyphens only,
    not starting or ending with a hyphen.
    """
    if not 1 <= len(label) <= MAX_SUBDOMAIN_LENGTH:
        return False
    return _SUBDOMAIN_PATTERN.fullmatch(label) is not None


def is_reserved_subdomain(label: str) -> bool:
    return label.lower() in RESERVED_SUBDOMAINS


def extract_subdomain(host: str | None, base_domain: str) -> str | None:
    """Extract the tenant subdomain from a Host header value.

    Args:
        host: Raw Host header value, possibly with a port.
        base_domain: Configured base domain, e.g. "ruffregistrar.com".

    Returns:
        The lowercase tenant subdomain, or None when the host addresses no
        tenant (loopback, foreign domain, bare base domain, invalid or
        reserved label).
    """
    if not host or not base_domain:
        return None

    hostname = strip_port(host).lower().rstrip(".")
    if hostname in LOOPBACK_HOSTS:
        return None

    suffix = "." + base_domain.lower().strip(".")
    if not hostname.endswith(suffix):
        return None

    prefix = hostname[: -len(suffix)]
    if not prefix:
        return None

    candidate = prefix.split(".", 1)[0]
    if not is_valid_subdomain(candidate):
        return None
    if is_reserved_subdomain(candidate):
        return None

    return candidate

"""Decide whether a session target warrants keepalive."""

from collections.abc import Mapping
from typing import Final, TypedDict
from urllib.parse import urlsplit

# Platforms known to terminate idle sessions.
MANAGED_DOMAINS: Final[frozenset[str]] = frozenset(
    {
        "smithery.ai",
        "smithery.com",
        "api.smithery.ai",
        "server.smithery.ai",
        "registry.smithery.ai",
    }
)


class Credentials(TypedDict, total=False):
    """Credentials accompanying a session endpoint.

    Attributes:
        api_key: Access token for the managed platform.
        profile: Profile identifier on the managed platform.
    """

    api_key: str | None
    profile: str | None


def _endpoint_host(endpoint: object) -> str | None:
    if not isinstance(endpoint, str):
        return None
    try:
        parts = urlsplit(endpoint.strip())
        host = parts.hostname
    except ValueError:
        return None
    if not parts.scheme or not host:
        return None
    return host.lower().rstrip(".")


def is_managed_domain(host: str) -> bool:
    """Check whether host equals or is a subdomain of a managed domain.

    Args:
        host: Lowercase hostname.

    Returns:
        True for managed hosts.
    """
    return any(host == domain or host.endswith(f".{domain}") for domain in MANAGED_DOMAINS)


def is_managed_environment(endpoint: str, credentials: Credentials | None = None) -> bool:
    """Classify a session target.

    Self-hosted gateways in front of the managed platform are recognised by
    their credentials rather than their host. A malformed endpoint is never
    managed, whatever the credentials say.

    Args:
        endpoint: Session endpoint URL.
        credentials: Optional credentials for the endpoint.

    Returns:
        True when keepalive should be enabled for this target.
    """
    host = _endpoint_host(endpoint)
    if host is None:
        return False
    if is_managed_domain(host):
        return True
    if not isinstance(credentials, Mapping):
        return False
    return bool(credentials.get("api_key") or credentials.get("profile"))

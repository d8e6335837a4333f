"""
Egress guard - keeps caller-supplied provider endpoints off internal networks.

Users may point the AI client at their own OpenAI-compatible server. Without
a check, that URL could be aimed at the host itself, the LAN, or a cloud
metadata service (169.254.169.254). Before the first byte is sent we:

1. Accept only http/https URLs.
2. Skip the check for the well-known vendor hosts in ALLOWED_PROVIDER_HOSTS.
. Connect to the address that was checked (pin_to_address), not to a
   second lookup of the same name, so a DNS answer that changes between the
   check and the request cannot redirect it.

Every rejection is an AIProviderError with code NETWORK_ERROR.
"""

import asyncio
import ipaddress
import logging
import socket
from typing import Dict, List, Optional, Tuple

import httpx

from app.ai.providers.base import AIErrorCode, AIProviderError

logger = logging.getLogger("openbin.ai.egress")

ALLOWED_PROVIDER_HOSTS = frozenset({
    "api.openai.com",
    "api.anthropic.com",
    "generativelanguage.googleapis.com",
})

ALLOWED_SCHEMES = frozenset({"http", "https"})

# Ranges not covered by the ipaddress is_* properties
_EXTRA_BLOCKED_NETWORKS = (
    ipaddress.ip_network("100.64.0.0/10"),   # carrier-grade NAT
    ipaddress.ip_network("fc00::/7"),        # unique local
    ipaddress.ip_network("fe80::/10"),       # link local
)


def is_blocked_address(address: str) -> bool:
    """
    Return True if an IP address must never be contacted.

    Unparseable input counts as blocked.
    """
    try:
        ip = ipaddress.ip_address(address.split("%", 1)[0])
    except ValueError:
        return True

    if isinstance(ip, ipaddress.IPv6Address) and ip.ipv4_mapped is not None:
        # ::ffff:a.b.c.d reaches the IPv4 host a.b.c.d
        return True

    if (
        ip.is_private
        or ip.is_loopback
        or ip.is_link_local
        or ip.is_reserved
        or ip.is_multicast
        or ip.is_unspecified
    ):
        return True

    return any(ip in network for network in _EXTRA_BLOCKED_NETWORKS if ip.version == network.version)


async def _resolve_host(hostname: str, port: int) -> List[str]:
    """Resolve a hostname to every address the OS would try to connect to."""
    loop = asyncio.get_running_loop()
    infos = await loop.getaddrinfo(hostname, port, type=socket.SOCK_STREAM)
    return [info[4][0] for info in infos]


async def ensure_safe_endpoint(endpoint_url: str) -> Optional[str]:
    """
    Validate a caller-supplied endpoint URL before any request is sent.

    Returns:
        The checked address to connect to, or None for an allow-listed
        vendor host (those are reached by name)

    Raises:
        AIProviderError(NETWORK_ERROR): bad scheme, missing host, DNS
            failure, or a resolved address in a blocked range
    """
    try:
        url = httpx.URL(endpoint_url)
    except (httpx.InvalidURL, TypeError) as e:
        raise AIProviderError(AIErrorCode.NETWORK_ERROR, f"Invalid endpoint URL: {e}")

    if url.scheme not in ALLOWED_SCHEMES:
        raise AIProviderError(
            AIErrorCode.NETWORK_ERROR,
            f"Endpoint URL scheme must be http or https, got '{url.scheme}'",
        )

    hostname = (url.host or "").lower().rstrip(".")
    if not hostname:
        raise AIProviderError(AIErrorCode.NETWORK_ERROR, "Endpoint URL has no host")

    if hostname in ALLOWED_PROVIDER_HOSTS:
        return None

    # IP literals need no lookup
    try:
        ipaddress.ip_address(hostname)
        addresses = [hostname]
    except ValueError:
        port = url.port or (443 if url.scheme == "https" else 80)
        try:
            addresses = await _resolve_host(hostname, port)
        except OSError as e:
            raise AIProviderError(
                AIErrorCode.NETWORK_ERROR, f"Failed to resolve {hostname}: {e}"
            )

    if not addresses:
        raise AIProviderError(AIErrorCode.NETWORK_ERROR, f"Failed to resolve {hostname}")

    for address in addresses:
        if is_blocked_address(address):
            logger.warning(f"Blocked AI endpoint {hostname} resolving to {address}")
            raise AIProviderError(
                AIErrorCode.NETWORK_ERROR,
                f"Endpoint {hostname} resolves to a private or reserved address",
            )

    return addresses[0]


def pin_to_address(url: str, address: str) -> Tuple[str, Dict[str, str], Dict[str, str]]:
    """
    Rewrite a URL to connect to a checked IP address.

    Returns (url, extra headers, request extensions). The Host header keeps
    the original name, and for https the TLS SNI and certificate check use
    it too. A URL whose host already is the address is returned unchanged.
    """
    parsed = httpx.URL(url)
    if parsed.host == address:
        return url, {}, {}

    literal = f"[{address}]" if ":" in address else address
    port = f":{parsed.port}" if parsed.port else ""
    pinned = f"{parsed.scheme}://{literal}{port}{parsed.raw_path.decode('ascii')}"

    headers = {"Host": parsed.netloc.decode("ascii")}
    extensions = {"sni_hostname": parsed.host} if parsed.scheme == "https" else {}
    return pinned, headers, extensions

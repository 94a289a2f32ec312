"""Async reverse DNS lookups.

Lookups go through ``socket.gethostbyaddr()`` in the default executor, so the
system resolution order applies (typically /etc/hosts first, then DNS).
Results are not cached; every call performs a fresh lookup.
"""

import asyncio
import socket
from ipaddress import ip_address
from typing import Optional

from .logger import log_debug, log_warning


async def resolve_ptr(ip: str) -> Optional[str]:
    """Perform a reverse DNS lookup for an IP address.

    Args:
        ip: IP address to resolve

    Returns:
        The hostname (without trailing dot), or None when the address is
        invalid or has no PTR record
    """
    try:
        ip_address(ip)
    except ValueError:
        log_debug(f"Invalid IP address: {ip}", component="dns_resolver")
        return None

    loop = asyncio.get_running_loop()
    try:
        hostname, _aliases, _addresses = await loop.run_in_executor(None, socket.gethostbyaddr, ip)
    except (socket.herror, socket.gaierror, socket.timeout) as e:
        # Expected for addresses without PTR records
        log_debug(f"Reverse lookup failed for {ip}: {e}", component="dns_resolver")
        return None
    except OSError as e:
        log_warning(f"Unexpected error during reverse lookup for {ip}", component="dns_resolver", error=str(e))
        return None

    hostname = hostname.rstrip('.')
    log_debug(f"Resolved {ip} to {hostname}", component="dns_resolver")
    return hostname or None

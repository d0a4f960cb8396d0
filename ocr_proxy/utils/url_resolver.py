"""Resolve API paths against a configured base URL without reaching loopback hosts."""

import ipaddress
import logging
import socket
from typing import Callable, Optional
from urllib.parse import urljoin, urlsplit

logger = logging.getLogger(__name__)


def is_loopback_host(hostname: str) -> bool:
    """
    Check whether a hostname refers to the local machine.

    Matches localhost, *.localhost, IPv4 addresses in 127.0.0.0/8 and ::1
    (bracketed or not). IPv4 is read the way inet_aton reads it, so short
    and numeric forms such as "127.1", "2130706433" and "0x7f.0.0.1" count,
    as do IPv4-mapped IPv6 addresses. Names that merely start with "127."
    such as "127.example.com" are not loopback.
    """
    lower = hostname.strip().lower()
    if lower == "localhost" or lower.endswith(".localhost"):
        return True
    if lower.startswith("[") and lower.endswith("]"):
        lower = lower[1:-1]
    if not lower:
        return False

    try:
        address = ipaddress.ip_address(lower)
    except ValueError:
        address = _parse_legacy_ipv4(lower)
        if address is None:
            return False

    if isinstance(address, ipaddress.IPv6Address) and address.ipv4_mapped is not None:
        address = address.ipv4_mapped
    return address.is_loopback


def _parse_legacy_ipv4(host: str) -> Optional[ipaddress.IPv4Address]:
    """Parse 1-4 part decimal/octal/hex IPv4 forms without a DNS lookup."""
    try:
        packed = socket.inet_aton(host)
    except (OSError, ValueError):
        return None
    return ipaddress.IPv4Address(packed)


def _join(base: str, path: str) -> str:
    parts = urlsplit(base)
    if not parts.scheme or not parts.netloc:
        raise ValueError(f"Base URL must be absolute: {base!r}")
    url = urljoin(base, path)
    # Force port parsing so malformed authorities fail here.
    urlsplit(url).port
    return url


def make_resolver(
    configured_base: Optional[str] = None,
    hosting_hostname: Optional[str] = None,
) -> Callable[[str], str]:
    """
    Create a resolver that turns API paths into absolute URLs.

    Args:
        configured_base: Base URL for the API. Blank means paths are used
                         as-is.
        hosting_hostname: Hostname the caller is served from. When it is not
                          loopback, targets on a loopback host are refused.
                          None skips the loopback check entirely.

    Returns:
        Function mapping a path to a URL. It never raises; on refusal or
        any parsing failure the original path is returned.
    """
    trimmed_base = (configured_base or "").strip()

    def resolve(path: str) -> str:
        if not trimmed_base:
            return path

        try:
            url = _join(trimmed_base, path)
            target_host = urlsplit(url).hostname or ""
        except ValueError as e:
            logger.debug(f"Could not resolve {path!r} against {trimmed_base!r}: {e}")
            return path

        if (
            hosting_hostname is not None
            and not is_loopback_host(hosting_hostname)
            and is_loopback_host(target_host)
        ):
            logger.warning(
                f"Refusing loopback target {target_host!r} from host {hosting_hostname!r}"
            )
            return path

        return url

    return resolve

"""
Shared helpers: elapsed-time arithmetic and target validation.
"""

import math

from netaddr import AddrFormatError, IPAddress

from netdiag.errors import InputError

MIN_PORT = 1
MAX_PORT = 65535

# One day; readiness waits reject larger values
MAX_TIMEOUT = 86400


def elapsed_ms(start: float, end: float) -> int:
    """Whole milliseconds between two timestamps given in seconds (truncated)."""
    return int((end - start) * 1000)


def validate_address(address: str) -> str:
    """Validate a dotted-quad IPv4 address.

    Only the canonical form is accepted, so shorthand such as ``"10.1"``
    or zero-padded octets like ``"010.0.0.1"`` are rejected.

    Returns:
        The address, unchanged

    Raises:
        InputError: If the address is not a canonical IPv4 address
    """
    if not isinstance(address, str) or not address:
        raise InputError(f"Invalid IPv4 address: {address!r}")

    try:
        ip = IPAddress(address, version=4)
    except (AddrFormatError, ValueError, TypeError):
        raise InputError(f"Invalid IPv4 address: {address!r}") from None

    if str(ip) != address:
        raise InputError(f"Invalid IPv4 address: {address!r}")

    return address


def validate_port(port: int) -> int:
    """Validate a TCP port number (1-65535)."""
    if isinstance(port, bool) or not isinstance(port, int):
        raise InputError(f"Port must be an integer, got {port!r}")
    if port < MIN_PORT or port > MAX_PORT:
        raise InputError(f"Port {port} out of range ({MIN_PORT}-{MAX_PORT})")
    return port


def validate_timeout(timeout: float) -> float:
    """Validate a timeout in seconds; must be finite, positive and at most MAX_TIMEOUT."""
    if isinstance(timeout, bool) or not isinstance(timeout, (int, float)):
        raise InputError(f"Timeout must be a number, got {timeout!r}")
    if timeout <= 0 or timeout > MAX_TIMEOUT or not math.isfinite(timeout):
        raise InputError(f"Timeout must be between 0 and {MAX_TIMEOUT} seconds, got {timeout}")
    return timeout


def validate_count(count: int) -> int:
    """Validate a packet count; must be at least one."""
    if isinstance(count, bool) or not isinstance(count, int):
        raise InputError(f"Count must be an integer, got {count!r}")
    if count < 1:
        raise InputError(f"Count must be at least 1, got {count}")
    return count

"""
Exception types raised by the diagnostics engine.

Timeouts and refused connections are not exceptions; they are reported
as outcome values on the probe results.
"""


class NetDiagError(Exception):
    """Base class for netdiag errors."""


class InputError(NetDiagError, ValueError):
    """Malformed address, port, count or timeout. Raised before any I/O."""


class PrivilegeError(NetDiagError, PermissionError):
    """The raw ICMP channel could not be opened (root/CAP_NET_RAW required)."""

"""
NetDiag - Live Network Diagnostics

Raw-socket reachability probes for network engineers: TCP connect
checks, ICMP echo with statistics, common service discovery and a
combined diagnostics report.

Copyright (c) 2025 DNS Science.io, an After Dark Systems, LLC company.
All rights reserved.
"""

__version__ = "0.1.0"
__author__ = "DNS Science.io"
__copyright__ = "Copyright (c) 2025 DNS Science.io, an After Dark Systems, LLC company"

from netdiag.diag import (
    tcp_check,
    icmp_ping,
    discover_services,
    diagnose,
)

__all__ = [
    "tcp_check",
    "icmp_ping",
    "discover_services",
    "diagnose",
]

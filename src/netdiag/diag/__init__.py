"""
Diagnostics Module

Live connectivity probes: TCP connect checks, ICMP echo, common
service discovery and a combined diagnostics report.
"""

from netdiag.diag.models import (
    ProbeOutcome,
    TCPCheckResult,
    EchoAttempt,
    PingStatistics,
    PingResult,
    ServiceEntry,
    ServiceResult,
    DiagnosticsReport,
)
from netdiag.diag.tcp import tcp_check
from netdiag.diag.icmp import icmp_ping
from netdiag.diag.scanner import discover_services, SERVICE_CATALOG
from netdiag.diag.core import diagnose

__all__ = [
    "tcp_check",
    "icmp_ping",
    "discover_services",
    "diagnose",
    "SERVICE_CATALOG",
    "ProbeOutcome",
    "TCPCheckResult",
    "EchoAttempt",
    "PingStatistics",
    "PingResult",
    "ServiceEntry",
    "ServiceResult",
    "DiagnosticsReport",
]

"""
Comprehensive diagnostics: ping phase, then service scan, then verdict.
"""

import logging

from netdiag.config import DiagConfig
from netdiag.diag.icmp import icmp_ping
from netdiag.diag.models import DiagnosticsReport
from netdiag.diag.scanner import SERVICE_CATALOG, discover_services
from netdiag.errors import PrivilegeError
from netdiag.logging_config import track_error
from netdiag.utils import validate_address, validate_count, validate_timeout

logger = logging.getLogger(__name__)


def diagnose(address: str, config: DiagConfig | None = None) -> DiagnosticsReport:
    """
    Run the full diagnostics sequence against one host.

    The scan phase always runs, even when the ping phase fails. The
    overall verdict reflects only whether any echo reply arrived.

    Args:
        address: Target IPv4 address
        config: Probe settings (defaults: 3 pings / 5s, 3s scan)

    Returns:
        DiagnosticsReport

    Raises:
        InputError: bad address or diagnose settings, before any I/O
    """
    validate_address(address)
    config = config or DiagConfig()
    validate_count(config.diagnose_ping_count)
    validate_timeout(config.diagnose_ping_timeout)
    validate_timeout(config.diagnose_scan_timeout)

    report = DiagnosticsReport(host=address)

    logger.info(
        f"Ping phase: {address} ({config.diagnose_ping_count} packets, "
        f"{config.diagnose_ping_timeout}s timeout)"
    )
    try:
        report.ping_result = icmp_ping(
            address,
            config.diagnose_ping_count,
            config.diagnose_ping_timeout,
        )
    except PrivilegeError as e:
        report.ping_error = str(e)
    except OSError as e:
        track_error("icmp_channel_error", str(e), e, {"host": address})
        report.ping_error = f"ICMP unavailable: {e}"

    logger.info(
        f"Scan phase: {address} ({len(SERVICE_CATALOG)} services, "
        f"{config.diagnose_scan_timeout}s deadline)"
    )
    report.scan_result = discover_services(address, config.diagnose_scan_timeout)

    logger.info(
        f"Summary: {address} {'reachable' if report.overall_reachable else 'unreachable'}, "
        f"{len(report.open_services)} open services"
    )
    return report

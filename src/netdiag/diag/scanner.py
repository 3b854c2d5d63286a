"""
Common service discovery.

Starts a non-blocking connect to every catalog port at once and waits
on all of them with a single readiness wait, so a scan takes about `timeout`
seconds no matter how many ports are in the catalog.
"""

import logging
import socket

from netdiag.diag.models import ServiceEntry, ServiceResult
from netdiag.diag.tcp import (
    CONNECT_PENDING,
    describe_errno,
    pending_error,
    start_connect,
    wait_writable,
)
from netdiag.logging_config import track_error
from netdiag.utils import validate_address, validate_port, validate_timeout

logger = logging.getLogger(__name__)


SERVICE_CATALOG: tuple[ServiceEntry, ...] = (
    ServiceEntry("SSH", 22),
    ServiceEntry("Telnet", 23),
    ServiceEntry("SMTP", 25),
    ServiceEntry("DNS", 53),
    ServiceEntry("HTTP", 80),
    ServiceEntry("POP3", 110),
    ServiceEntry("IMAP", 143),
    ServiceEntry("HTTPS", 443),
    ServiceEntry("MySQL", 3306),
    ServiceEntry("PostgreSQL", 5432),
    ServiceEntry("Redis", 6379),
    ServiceEntry("RDP", 3389),
    ServiceEntry("MongoDB", 27017),
)


def discover_services(
    address: str,
    timeout: float = 3,
    catalog: tuple[ServiceEntry, ...] | list[ServiceEntry] = SERVICE_CATALOG,
) -> list[ServiceResult]:
    """
    Probe every catalog port on a host under one shared deadline.

    Args:
        address: Target IPv4 address
        timeout: Shared deadline in seconds for the whole scan
        catalog: Services to probe (defaults to the 13 well-known services)

    Returns:
        One ServiceResult per catalog entry, in catalog order
    """
    validate_address(address)
    validate_timeout(timeout)
    for entry in catalog:
        validate_port(entry.port)

    results: dict[int, ServiceResult] = {}
    pending: dict[socket.socket, tuple[int, ServiceEntry]] = {}

    try:
        for index, entry in enumerate(catalog):
            try:
                sock, err = start_connect(address, entry.port)
            except OSError as e:
                track_error("scan_socket_error", str(e), e, {"host": address, "port": entry.port})
                results[index] = ServiceResult(entry.name, entry.port, open=False, reason=str(e))
                continue

            if err in CONNECT_PENDING:
                pending[sock] = (index, entry)
            else:
                sock.close()
                results[index] = ServiceResult(
                    entry.name, entry.port, open=False, reason=describe_errno(err)
                )

        logger.debug(f"Scanning {len(pending)} pending connections on {address}, deadline {timeout}s")

        ready: set[socket.socket] = set()
        wait_failure = None
        if pending:
            try:
                ready = wait_writable(list(pending), timeout)
            except OSError as e:
                track_error("scan_wait_error", str(e), e, {"host": address})
                wait_failure = f"Readiness wait failed: {e}"

        for sock, (index, entry) in pending.items():
            if wait_failure:
                results[index] = ServiceResult(entry.name, entry.port, open=False, reason=wait_failure)
                continue
            err = pending_error(sock)
            if sock in ready and err == 0:
                results[index] = ServiceResult(entry.name, entry.port, open=True)
            elif err:
                results[index] = ServiceResult(
                    entry.name, entry.port, open=False, reason=describe_errno(err)
                )
            else:
                results[index] = ServiceResult(entry.name, entry.port, open=False, reason="filtered")

    finally:
        for sock in pending:
            sock.close()

    open_count = sum(1 for r in results.values() if r.open)
    logger.debug(f"{address}: {open_count}/{len(catalog)} services open")

    return [results[i] for i in range(len(catalog))]

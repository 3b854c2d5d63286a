"""
TCP reachability probe.

Uses a non-blocking connect followed by a single readiness wait on
write, so the handshake is bounded by the caller's timeout and
nothing is ever written to the peer.
"""

import errno
import logging
import os
import selectors
import socket
import time

from netdiag.diag.models import ProbeOutcome, TCPCheckResult
from netdiag.errors import InputError
from netdiag.logging_config import track_error
from netdiag.utils import elapsed_ms, validate_address, validate_port, validate_timeout

logger = logging.getLogger(__name__)

# connect_ex() results meaning "handshake under way"
CONNECT_PENDING = {0, errno.EINPROGRESS, errno.EWOULDBLOCK, errno.EALREADY}
if hasattr(errno, "WSAEWOULDBLOCK"):
    CONNECT_PENDING.add(errno.WSAEWOULDBLOCK)


def describe_errno(err: int) -> str:
    """OS description of an errno value, e.g. 'Connection refused'."""
    return os.strerror(err)


def start_connect(address: str, port: int) -> tuple[socket.socket, int]:
    """
    Open a non-blocking TCP socket and initiate a connect.

    Returns:
        (socket, errno) where errno is the connect_ex() result. The caller
        owns the socket and must close it.
    """
    sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    try:
        sock.setblocking(False)
        err = sock.connect_ex((address, port))
    except OSError:
        sock.close()
        raise
    return sock, err


def pending_error(sock: socket.socket) -> int:
    """Read and clear the socket's pending error (SO_ERROR)."""
    return sock.getsockopt(socket.SOL_SOCKET, socket.SO_ERROR)


def wait_writable(sockets: list[socket.socket], timeout: float) -> set[socket.socket]:
    """
    Block once until any socket is writable (or failed) or the timeout elapses.

    Returns:
        The sockets that reported readiness; empty on timeout
    """
    with selectors.DefaultSelector() as selector:
        for sock in sockets:
            selector.register(sock, selectors.EVENT_WRITE)
        return {key.fileobj for key, _ in selector.select(timeout)}


def tcp_check(address: str, port: int, timeout: float = 5) -> TCPCheckResult:
    """
    Check whether a TCP port accepts connections.

    Args:
        address: Target IPv4 address
        port: Target port (1-65535)
        timeout: Handshake timeout in seconds

    Returns:
        TCPCheckResult classified as open, closed, timeout or error
    """
    start = time.monotonic()

    try:
        validate_address(address)
        validate_port(port)
        validate_timeout(timeout)
    except InputError as e:
        return TCPCheckResult(host=address, port=port, outcome=ProbeOutcome.ERROR, reason=str(e))

    try:
        sock, err = start_connect(address, port)
    except OSError as e:
        track_error("tcp_socket_error", str(e), e, {"host": address, "port": port})
        return TCPCheckResult(host=address, port=port, outcome=ProbeOutcome.ERROR, reason=str(e))

    try:
        if err not in CONNECT_PENDING:
            reason = describe_errno(err)
            if err == errno.ECONNREFUSED:
                track_error("tcp_refused", reason, context={"host": address, "port": port})
                return TCPCheckResult(host=address, port=port, outcome=ProbeOutcome.CLOSED, reason=reason)
            track_error("tcp_connect_error", reason, context={"host": address, "port": port})
            return TCPCheckResult(host=address, port=port, outcome=ProbeOutcome.ERROR, reason=reason)

        logger.debug(f"Connect to {address}:{port} pending, waiting up to {timeout}s")

        try:
            ready = wait_writable([sock], timeout)
        except OSError as e:
            track_error("tcp_wait_error", str(e), e, {"host": address, "port": port})
            return TCPCheckResult(host=address, port=port, outcome=ProbeOutcome.ERROR, reason=str(e))

        if not ready:
            track_error("tcp_timeout", f"{address}:{port}")
            return TCPCheckResult(
                host=address,
                port=port,
                outcome=ProbeOutcome.TIMEOUT,
                reason=f"No response within {timeout}s",
            )

        err = pending_error(sock)
        if err == 0:
            latency = elapsed_ms(start, time.monotonic())
            logger.debug(f"{address}:{port} open ({latency} ms)")
            return TCPCheckResult(host=address, port=port, outcome=ProbeOutcome.OPEN, latency_ms=latency)

        reason = describe_errno(err)
        track_error("tcp_refused" if err == errno.ECONNREFUSED else "tcp_connect_error",
                    reason, context={"host": address, "port": port})
        return TCPCheckResult(host=address, port=port, outcome=ProbeOutcome.CLOSED, reason=reason)

    finally:
        sock.close()

"""
ICMP echo probe over a raw socket.

Requests are sent strictly one at a time. Each reply is matched to its
request by identifier and sequence number, and latency is measured
against the send time carried in the reply's own payload, so a late
reply is still timed correctly.
"""

import errno
import logging
import os
import selectors
import socket
import time

from netdiag.diag.models import EchoAttempt, PingResult
from netdiag.errors import PrivilegeError
from netdiag.logging_config import track_error
from netdiag.packet.icmp import MAX_DATAGRAM_SIZE, build_echo_request, parse_echo_reply
from netdiag.utils import elapsed_ms, validate_address, validate_count, validate_timeout

logger = logging.getLogger(__name__)


def echo_identifier() -> int:
    """16-bit echo identifier for this process."""
    return os.getpid() & 0xFFFF


def open_raw_channel() -> socket.socket:
    """
    Open a raw ICMP socket.

    Raises:
        PrivilegeError: If the process lacks root / CAP_NET_RAW
    """
    try:
        return socket.socket(socket.AF_INET, socket.SOCK_RAW, socket.IPPROTO_ICMP)
    except PermissionError as e:
        raise PrivilegeError("Raw ICMP socket requires root privileges (or CAP_NET_RAW)") from e
    except OSError as e:
        if e.errno in (errno.EPERM, errno.EACCES):
            raise PrivilegeError("Raw ICMP socket requires root privileges (or CAP_NET_RAW)") from e
        raise


def wait_readable(sock: socket.socket, timeout: float) -> bool:
    """Block until the socket has a datagram or the timeout elapses."""
    with selectors.DefaultSelector() as selector:
        selector.register(sock, selectors.EVENT_READ)
        return bool(selector.select(timeout))


def icmp_ping(address: str, count: int = 4, timeout: float = 5) -> PingResult:
    """
    Send `count` echo requests and collect loss/latency statistics.

    Args:
        address: Target IPv4 address
        count: Number of echo requests to send
        timeout: Seconds to wait for each reply

    Returns:
        PingResult; reachable is True if at least one reply arrived

    Raises:
        InputError: On a malformed address, count or timeout
        PrivilegeError: If the raw socket cannot be opened
    """
    validate_address(address)
    validate_count(count)
    validate_timeout(timeout)

    try:
        sock = open_raw_channel()
    except PrivilegeError as e:
        logger.warning(str(e))
        track_error("icmp_privilege", str(e), context={"host": address})
        raise

    identifier = echo_identifier()
    attempts = [EchoAttempt(sequence=seq) for seq in range(count)]
    in_flight: dict[int, EchoAttempt] = {}

    try:
        for attempt in attempts:
            if not _send_echo(sock, address, identifier, attempt):
                continue
            in_flight[attempt.sequence & 0xFFFF] = attempt
            _await_reply(sock, address, identifier, attempt, in_flight, timeout)
    finally:
        sock.close()

    result = PingResult(host=address, attempts=attempts)
    logger.debug(
        f"Ping {address}: {result.received}/{result.sent} replies, "
        f"{result.loss_percent:.1f}% loss"
    )
    return result


def _send_echo(sock: socket.socket, address: str, identifier: int, attempt: EchoAttempt) -> bool:
    sent_at = time.monotonic()
    packet = build_echo_request(identifier, attempt.sequence, sent_at)

    try:
        sock.sendto(packet, (address, 0))
    except OSError as e:
        attempt.error = str(e)
        track_error("icmp_send_failed", str(e), e, {"host": address, "seq": attempt.sequence})
        return False

    attempt.sent_at = sent_at
    logger.debug(f"Echo request seq={attempt.sequence} id={identifier} -> {address}")
    return True


def _await_reply(
    sock: socket.socket,
    address: str,
    identifier: int,
    attempt: EchoAttempt,
    in_flight: dict[int, EchoAttempt],
    timeout: float,
) -> None:
    """Wait until `attempt` is answered or its deadline passes, crediting late replies on the way."""
    deadline = time.monotonic() + timeout

    while True:
        remaining = deadline - time.monotonic()
        if remaining <= 0:
            break

        try:
            if not wait_readable(sock, remaining):
                break
            data, source = sock.recvfrom(MAX_DATAGRAM_SIZE)
        except OSError as e:
            attempt.error = str(e)
            track_error("icmp_recv_failed", str(e), e, {"host": address, "seq": attempt.sequence})
            return

        received_at = time.monotonic()

        # Raw sockets see every ICMP message on the host
        if source[0] != address:
            continue
        reply = parse_echo_reply(data)
        if reply is None or reply.identifier != identifier or not reply.checksum_ok:
            continue

        owner = in_flight.get(reply.sequence)
        if owner is None or owner.received:
            continue

        sent_at = reply.timestamp
        if sent_at is None or sent_at > received_at or sent_at < owner.sent_at:
            sent_at = owner.sent_at

        owner.received_at = received_at
        owner.latency_ms = elapsed_ms(sent_at, received_at)
        owner.error = None

        if owner is not attempt:
            logger.debug(f"Late reply seq={owner.sequence} from {address} ({owner.latency_ms} ms)")
            continue

        logger.debug(f"Echo reply seq={attempt.sequence} from {address} ({attempt.latency_ms} ms)")
        return

    attempt.error = "timeout"
    track_error("icmp_timeout", f"seq={attempt.sequence}", context={"host": address})
